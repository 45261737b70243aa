"""Document store adapters."""

from __future__ import annotations

from ..models import AppConfig
from .base import (Document, DocumentConflictError, DocumentNotFoundError,
                   DocumentStore, StoreError)


def create_store(config: AppConfig) -> DocumentStore:
    """Build the adapter selected by ``config.backend``; use it with ``async with``."""
    if config.backend == "wix":
        from .wix import WixDataStore

        return WixDataStore(config.wix)
    if config.backend == "sql":
        from .sql import SqlDocumentStore

        return SqlDocumentStore(config.database)
    raise ValueError(f"Unknown store backend: {config.backend}")


__all__ = [
    "Document",
    "DocumentConflictError",
    "DocumentNotFoundError",
    "DocumentStore",
    "StoreError",
    "create_store",
]
