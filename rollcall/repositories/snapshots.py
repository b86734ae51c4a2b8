"""Database-backed snapshots of the durable cache stores."""

from __future__ import annotations

import logging

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ..cache.domain import DomainCache
from ..db.models import SLOT_ITEM, SLOT_MINE, CachedEntityModel
from ..models import ENTITY_MODELS, EntityClass

logger = logging.getLogger(__name__)


class CacheSnapshotRepository:
    """Saves and restores groups, organizations and profiles.

    Partition freshness is never persisted, so every partition starts stale
    after a restore.
    """

    def save(self, session: Session, cache: DomainCache) -> int:
        session.execute(delete(CachedEntityModel))
        saved = 0
        for entity, store in cache.durable().items():
            for value in store.items.values():
                session.add(
                    CachedEntityModel(
                        entity_class=entity.value,
                        entity_id=store.items.key_of(value),
                        slot=SLOT_ITEM,
                        payload=value.model_dump(mode="json"),
                    )
                )
                saved += 1
        mine = cache.profiles.mine
        if mine is not None:
            session.add(
                CachedEntityModel(
                    entity_class=EntityClass.PROFILE.value,
                    entity_id=mine.id,
                    slot=SLOT_MINE,
                    payload=mine.model_dump(mode="json"),
                )
            )
            saved += 1
        session.flush()
        return saved

    def load(self, session: Session, cache: DomainCache) -> int:
        durable = cache.durable()
        stmt = select(CachedEntityModel).order_by(CachedEntityModel.id)
        restored = 0
        for model in session.execute(stmt).scalars():
            try:
                entity = EntityClass(model.entity_class)
            except ValueError:
                logger.warning("Skipping snapshot row with unknown entity class %s", model.entity_class)
                continue
            if entity not in durable:
                continue
            try:
                value = ENTITY_MODELS[entity].model_validate(model.payload)
            except ValidationError as exc:
                logger.warning("Skipping unreadable %s snapshot %s: %s", entity.value, model.entity_id, exc)
                continue
            if model.slot == SLOT_MINE:
                cache.profiles.set_mine(value)
            else:
                durable[entity].put(value)
            restored += 1
        return restored


cache_snapshots = CacheSnapshotRepository()


__all__ = ["CacheSnapshotRepository", "cache_snapshots"]
