"""Document store interface shared by the Wix and SQL adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from dateutil import parser as dtparse

Document = dict[str, Any]

DATE_KEY = "$date"


class StoreError(Exception):
    """Base exception for document store failures."""


class DocumentNotFoundError(StoreError):
    """Raised when a write targets a document that does not exist."""


class DocumentConflictError(StoreError):
    """Raised when an insert collides with an existing document id."""


def encode_value(value: Any) -> Any:
    """Convert ``datetime`` values (at any depth) into ``{"$date": iso}``."""
    if isinstance(value, datetime):
        return {DATE_KEY: value.isoformat()}
    if isinstance(value, Mapping):
        return {key: encode_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    return value


def decode_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        if len(value) == 1 and DATE_KEY in value:
            raw = value[DATE_KEY]
            try:
                return dtparse.isoparse(raw)
            except (TypeError, ValueError):
                return raw
        return {key: decode_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_value(item) for item in value]
    return value


class DocumentStore(ABC):
    """Async CRUD over named collections of schema-less documents.

    Documents are plain dicts keyed by field name with the id under ``_id``.
    """

    async def __aenter__(self) -> "DocumentStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        return None

    @abstractmethod
    async def get(self, collection: str, item_id: str) -> Optional[Document]:
        """Return the document or ``None`` when it does not exist."""

    @abstractmethod
    async def insert(self, collection: str, doc: Mapping[str, Any]) -> Document:
        """Create a document; raises ``DocumentConflictError`` on a taken id."""

    @abstractmethod
    async def update(self, collection: str, doc: Mapping[str, Any]) -> Document:
        """Replace an existing document; raises ``DocumentNotFoundError``."""

    @abstractmethod
    async def save(self, collection: str, doc: Mapping[str, Any]) -> Document:
        """Insert or replace a document by ``_id``."""

    @abstractmethod
    async def find_has_some(
        self, collection: str, field: str, values: Iterable[Any]
    ) -> list[Document]:
        """Return documents whose ``field`` matches any of ``values``."""
