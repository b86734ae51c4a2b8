"""Shared plumbing for the per-entity repositories."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generic, Iterator, Optional, TypeVar

from pydantic import BaseModel

from ..cache.stores import DomainStore
from ..errors import RollcallError
from ..remote.base import RemoteSource

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=BaseModel)


class BaseRepository(Generic[V]):
    """Wraps each operation with the store's shared ``loading``/``error`` status.

    Reads swallow classified failures and fall back to an empty result;
    mutations record the message and re-raise.
    """

    def __init__(self, store: DomainStore[V], source: RemoteSource) -> None:
        self._store = store
        self._source = source

    @property
    def store(self) -> DomainStore[V]:
        return self._store

    @property
    def error(self) -> Optional[str]:
        return self._store.error

    @property
    def loading(self) -> bool:
        return self._store.loading

    @contextmanager
    def _reading(self, action: str) -> Iterator[None]:
        self._store.begin()
        try:
            yield
        except RollcallError as exc:
            self._store.set_error(str(exc))
            logger.warning("Failed to %s: %s", action, exc, exc_info=True)
        finally:
            self._store.finish()

    @contextmanager
    def _mutating(self, action: str) -> Iterator[None]:
        self._store.begin()
        try:
            yield
        except RollcallError as exc:
            self._store.set_error(str(exc))
            logger.error("Failed to %s: %s", action, exc)
            raise
        finally:
            self._store.finish()

    async def _actor_id(self, explicit: Optional[str] = None) -> str:
        if explicit:
            return explicit
        return await self._source.current_actor_id()


__all__ = ["BaseRepository"]
