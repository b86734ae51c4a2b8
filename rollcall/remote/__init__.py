"""Remote data sources the cache layer reads from and writes through."""

from .base import Filters, RemoteSource, Row, parse_row, parse_rows
from .postgrest import PostgrestSource

__all__ = [
    "Filters",
    "PostgrestSource",
    "RemoteSource",
    "Row",
    "parse_row",
    "parse_rows",
]
