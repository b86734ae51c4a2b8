"""Fresh-first partition reads shared by every partitioned entity class."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar

from pydantic import BaseModel

from ..cache.policy import ExecutionContext, decide
from ..cache.stores import PartitionedStore
from ..models import EntityClass
from ..remote.base import RemoteSource, parse_rows
from ..telemetry import emit_event

logger = logging.getLogger(__name__)

V = TypeVar("V", bound=BaseModel)

Loader = Callable[[str], Awaitable[List[V]]]


class FetchOrchestrator(Generic[V]):
    """Decides fresh vs cached for one entity class and writes fetches through.

    There is no in-flight deduplication: overlapping reads of one partition
    each hit the remote source, and whichever completes last wins the cache.
    """

    def __init__(
        self,
        entity: EntityClass,
        store: PartitionedStore[V],
        source: RemoteSource,
        context: ExecutionContext,
        *,
        load: Optional[Loader] = None,
    ) -> None:
        self._entity = entity
        self._store = store
        self._source = source
        self._context = context
        self._load: Loader = load or self._fetch_partition

    @property
    def context(self) -> ExecutionContext:
        return self._context

    async def read(self, parent_key: str, *, force: bool = False) -> List[V]:
        plan = decide(force=force, valid=self._store.is_valid(parent_key), context=self._context)
        if not plan.fetch_fresh:
            cached = self._store.list_partition(parent_key)
            emit_event(
                "cache_partition_served",
                entity=self._entity,
                partition=parent_key,
                count=len(cached),
            )
            return cached

        values = await self._load(parent_key)
        self._store.replace_partition(parent_key, values)
        emit_event(
            "cache_partition_fetched",
            entity=self._entity,
            partition=parent_key,
            count=len(values),
            reason=plan.reason,
        )
        logger.debug("Fetched %d %s rows for %s (%s)", len(values), self._entity.value, parent_key, plan.reason)
        return values

    async def _fetch_partition(self, parent_key: str) -> List[V]:
        rows = await self._source.fetch_by_parent(self._entity, parent_key)
        return parse_rows(self._entity, rows)


__all__ = ["FetchOrchestrator"]
