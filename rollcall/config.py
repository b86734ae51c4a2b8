import os
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    remote_url: Optional[str] = Field(None, alias="ROLLCALL_REMOTE_URL")
    remote_api_key: Optional[str] = Field(None, alias="ROLLCALL_REMOTE_API_KEY")
    remote_access_token: Optional[str] = Field(None, alias="ROLLCALL_REMOTE_ACCESS_TOKEN")
    remote_timeout_seconds: float = Field(15.0, alias="ROLLCALL_REMOTE_TIMEOUT", gt=0)
    execution_context: Literal["client", "server"] = Field("client", alias="ROLLCALL_EXECUTION_CONTEXT")
    member_cache_ttl_seconds: int = Field(180, alias="ROLLCALL_MEMBER_CACHE_TTL", ge=0)
    session_cache_ttl_seconds: int = Field(300, alias="ROLLCALL_SESSION_CACHE_TTL", ge=0)
    history_cache_ttl_seconds: int = Field(300, alias="ROLLCALL_HISTORY_CACHE_TTL", ge=0)
    checkin_score: int = Field(100, alias="ROLLCALL_CHECKIN_SCORE")
    cache_database_url: Optional[str] = Field(None, alias="ROLLCALL_CACHE_DATABASE_URL")
    cache_database_echo: bool = Field(False, alias="ROLLCALL_CACHE_DATABASE_ECHO")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid rollcall configuration: {exc}") from exc
