"""Mapping store layer for URL shortener."""

import logging
from typing import Optional
from urllib.parse import urlparse

from .base import MappingStore
from .cache import RedisCache
from .instrumented import InstrumentedStore
from .memory import InMemoryStore
from .models import ShortLink
from .postgres import PostgresStore
from .sqlite import SQLiteStore


def create_store(
    store_url: str,
    create_tables: bool = True,
    logger: Optional[logging.Logger] = None,
) -> MappingStore:
    """Build a mapping store from its URL.

    Supported schemes: memory://, sqlite:///path, postgresql://...

    Raises:
        ValueError: If the scheme is not supported
    """
    scheme = urlparse(store_url).scheme.lower()

    if scheme == "memory":
        return InMemoryStore(store_url, logger=logger)
    if scheme == "sqlite":
        return SQLiteStore(store_url, create_tables=create_tables, logger=logger)
    if scheme in ("postgres", "postgresql"):
        return PostgresStore(store_url, create_tables=create_tables, logger=logger)

    raise ValueError(f"Unsupported store URL scheme: '{scheme}' ({store_url})")


__all__ = [
    "MappingStore",
    "InMemoryStore",
    "InstrumentedStore",
    "SQLiteStore",
    "PostgresStore",
    "RedisCache",
    "ShortLink",
    "create_store",
]
