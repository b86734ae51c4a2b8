"""ORM models for persisted cache snapshots."""

from __future__ import annotations

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from .base import Base, TimestampMixin

SLOT_ITEM = "item"
SLOT_MINE = "mine"


class CachedEntityModel(TimestampMixin, Base):
    __tablename__ = "cached_entities"
    __table_args__ = (Index("ix_cached_entities_entity", "entity_class", "entity_id", "slot", unique=True),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_class: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)
    slot: Mapped[str] = mapped_column(String(16), default=SLOT_ITEM, nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)


__all__ = ["CachedEntityModel", "SLOT_ITEM", "SLOT_MINE"]
