"""Local persistence for the durable cache stores."""

from .models import SLOT_ITEM, SLOT_MINE, CachedEntityModel
from .session import CacheDatabase

__all__ = ["CacheDatabase", "CachedEntityModel", "SLOT_ITEM", "SLOT_MINE"]
