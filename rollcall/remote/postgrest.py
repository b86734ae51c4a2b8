"""Remote source speaking to a hosted PostgREST endpoint over httpx."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from ..config import Settings
from ..errors import (
    NotFound,
    PermissionDenied,
    RemoteFailure,
    RollcallError,
    Unauthenticated,
    ValidationFailed,
)
from ..models import PARTITION_COLUMNS, PARTITION_ORDERS, EntityClass, RemoteOrder
from .base import Filters, FilterValue, Row

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
AUTH_USER_PATH = "/auth/v1/user"
SINGLE_OBJECT = "application/vnd.pgrst.object+json"

_PROFILE_SUMMARY = "id,username,full_name"

# Embedded profile summaries for the classes that display who did what.
SELECTS: Dict[EntityClass, str] = {
    EntityClass.MEMBER: f"id,profile_id,group_id,role,joined_at,profile:profiles!inner({_PROFILE_SUMMARY})",
    EntityClass.HISTORY: (
        "*,"
        f"member_profile:profiles!member_id({_PROFILE_SUMMARY}),"
        f"by_profile:profiles!by_profile_id({_PROFILE_SUMMARY})"
    ),
}


def _select_for(entity: EntityClass) -> str:
    return SELECTS.get(entity, "*")


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _filter_param(value: FilterValue) -> str:
    if isinstance(value, str):
        return f"eq.{value}"
    return "in.(" + ",".join(_quote(str(item)) for item in value) + ")"


def _order_param(order: RemoteOrder) -> str:
    return f"{order.column}.{'desc' if order.descending else 'asc'}"


def _error_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text}
    return body if isinstance(body, dict) else {"message": str(body)}


def classify_error(response: httpx.Response, context: str) -> RollcallError:
    """Map a PostgREST/GoTrue error response onto the error taxonomy."""
    body = _error_body(response)
    code = body.get("code")
    message = body.get("message") or body.get("msg") or body.get("error_description") or response.reason_phrase
    detail = f"{context}: {message}"
    status_code = response.status_code
    if status_code == 401:
        return Unauthenticated(detail)
    if status_code == 403:
        return PermissionDenied(detail)
    if status_code == 404 or code == "PGRST116":
        return NotFound(detail)
    if status_code in (400, 409, 422):
        return ValidationFailed(detail)
    return RemoteFailure(f"{detail} (status {status_code})")


class PostgrestSource:
    """Remote source backed by the hosted store's REST and auth endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._access_token = access_token
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings: Settings, *, client: Optional[httpx.AsyncClient] = None) -> "PostgrestSource":
        if not settings.remote_url:
            raise RuntimeError("ROLLCALL_REMOTE_URL must be configured before using the remote source.")
        return cls(
            settings.remote_url,
            api_key=settings.remote_api_key,
            access_token=settings.remote_access_token,
            timeout=settings.remote_timeout_seconds,
            client=client,
        )

    def set_access_token(self, token: Optional[str]) -> None:
        self._access_token = token

    def _headers(self, extra: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if self._api_key:
            headers["apikey"] = self._api_key
        bearer = self._access_token or self._api_key
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        context: str,
        params: Optional[Mapping[str, str]] = None,
        json: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._headers(headers),
            )
        except httpx.HTTPError as exc:
            raise RemoteFailure(f"{context} failed: {exc}") from exc
        if response.is_error:
            error = classify_error(response, context)
            logger.debug("%s returned %s: %s", context, response.status_code, error)
            raise error
        return response

    @staticmethod
    def _json(response: httpx.Response, context: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteFailure(f"{context} returned invalid JSON: {exc}") from exc

    async def fetch_by_id(self, entity: EntityClass, entity_id: str) -> Row:
        context = f"fetch {entity.value} {entity_id}"
        response = await self._request(
            "GET",
            f"{REST_PREFIX}/{entity.table}",
            context=context,
            params={"select": _select_for(entity), "id": f"eq.{entity_id}"},
            headers={"Accept": SINGLE_OBJECT},
        )
        return self._json(response, context)

    async def fetch_by_parent(self, entity: EntityClass, parent_key: str) -> List[Row]:
        column = PARTITION_COLUMNS[entity]
        return await self.find(entity, {column: parent_key}, order=PARTITION_ORDERS[entity])

    async def find(
        self,
        entity: EntityClass,
        filters: Filters,
        *,
        order: Optional[RemoteOrder] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:
        context = f"query {entity.value}"
        params: Dict[str, str] = {"select": _select_for(entity)}
        for column, value in filters.items():
            params[column] = _filter_param(value)
        if order is not None:
            params["order"] = _order_param(order)
        if limit is not None:
            params["limit"] = str(limit)
        response = await self._request("GET", f"{REST_PREFIX}/{entity.table}", context=context, params=params)
        data = self._json(response, context)
        if not isinstance(data, list):
            raise RemoteFailure(f"{context} returned {type(data).__name__}, expected a list")
        return data

    async def create(self, entity: EntityClass, payload: Mapping[str, Any]) -> Row:
        context = f"create {entity.value}"
        response = await self._request(
            "POST",
            f"{REST_PREFIX}/{entity.table}",
            context=context,
            params={"select": _select_for(entity)},
            json=dict(payload),
            headers={"Prefer": "return=representation", "Accept": SINGLE_OBJECT},
        )
        return self._json(response, context)

    async def update(self, entity: EntityClass, entity_id: str, payload: Mapping[str, Any]) -> Row:
        context = f"update {entity.value} {entity_id}"
        response = await self._request(
            "PATCH",
            f"{REST_PREFIX}/{entity.table}",
            context=context,
            params={"select": _select_for(entity), "id": f"eq.{entity_id}"},
            json=dict(payload),
            headers={"Prefer": "return=representation", "Accept": SINGLE_OBJECT},
        )
        return self._json(response, context)

    async def delete(self, entity: EntityClass, entity_id: str) -> None:
        context = f"delete {entity.value} {entity_id}"
        response = await self._request(
            "DELETE",
            f"{REST_PREFIX}/{entity.table}",
            context=context,
            params={"id": f"eq.{entity_id}", "select": "id"},
            headers={"Prefer": "return=representation"},
        )
        deleted = self._json(response, context)
        if isinstance(deleted, list) and not deleted:
            raise NotFound(f"{context}: no row matched")

    async def current_actor_id(self) -> str:
        if not self._access_token:
            raise Unauthenticated("User not authenticated")
        context = "resolve current user"
        response = await self._request("GET", AUTH_USER_PATH, context=context)
        user = self._json(response, context)
        actor_id = user.get("id") if isinstance(user, dict) else None
        if not actor_id:
            raise Unauthenticated("User not authenticated")
        return actor_id

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["PostgrestSource", "SELECTS", "classify_error"]
