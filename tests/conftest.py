"""Shared fixtures: an in-memory document store that records every call."""

from __future__ import annotations

import copy
from typing import Any, Iterable, Mapping, Optional

import pytest

from content_publisher.store.base import (Document, DocumentConflictError,
                                          DocumentNotFoundError, DocumentStore,
                                          StoreError)


class MemoryStore(DocumentStore):
    def __init__(self) -> None:
        self.collections: dict[str, dict[str, Document]] = {}
        self.calls: list[tuple[str, str, Optional[str]]] = []
        self.failures: set[tuple[str, str]] = set()

    def seed(self, collection: str, *docs: Mapping[str, Any]) -> None:
        bucket = self.collections.setdefault(collection, {})
        for doc in docs:
            bucket[doc["_id"]] = copy.deepcopy(dict(doc))

    def fail_on(self, op: str, collection: str) -> None:
        self.failures.add((op, collection))

    def doc(self, collection: str, item_id: str) -> Optional[Document]:
        return self.collections.get(collection, {}).get(item_id)

    def ops(self, op: Optional[str] = None) -> list[tuple[str, str, Optional[str]]]:
        return [call for call in self.calls if op is None or call[0] == op]

    def _record(self, op: str, collection: str, item_id: Optional[str]) -> None:
        self.calls.append((op, collection, item_id))
        if (op, collection) in self.failures:
            raise StoreError(f"{op} on {collection} failed")

    async def get(self, collection: str, item_id: str) -> Optional[Document]:
        self._record("get", collection, item_id)
        found = self.doc(collection, item_id)
        return copy.deepcopy(found) if found is not None else None

    async def insert(self, collection: str, doc: Mapping[str, Any]) -> Document:
        self._record("insert", collection, doc.get("_id"))
        bucket = self.collections.setdefault(collection, {})
        if doc["_id"] in bucket:
            raise DocumentConflictError(doc["_id"])
        bucket[doc["_id"]] = copy.deepcopy(dict(doc))
        return copy.deepcopy(dict(doc))

    async def update(self, collection: str, doc: Mapping[str, Any]) -> Document:
        self._record("update", collection, doc.get("_id"))
        bucket = self.collections.setdefault(collection, {})
        if doc.get("_id") not in bucket:
            raise DocumentNotFoundError(doc.get("_id"))
        bucket[doc["_id"]] = copy.deepcopy(dict(doc))
        return copy.deepcopy(dict(doc))

    async def save(self, collection: str, doc: Mapping[str, Any]) -> Document:
        self._record("save", collection, doc.get("_id"))
        self.collections.setdefault(collection, {})[doc["_id"]] = copy.deepcopy(dict(doc))
        return copy.deepcopy(dict(doc))

    async def find_has_some(
        self, collection: str, field: str, values: Iterable[Any]
    ) -> list[Document]:
        self._record("find", collection, None)
        wanted = list(values)
        return [
            copy.deepcopy(doc)
            for doc in self.collections.get(collection, {}).values()
            if doc.get(field) in wanted
        ]


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def staging_item() -> dict[str, Any]:
    return {
        "_id": "stage-1",
        "title": "Hybrid Events in 2025",
        "author": "author-7",
        "mainCategory": "cat-1",
        "contentType": {"_id": "ctype-1", "label": "Article"},
        "timeToRead": "6",
        "coverImage": "wix:image://cover.jpg",
        "featuredImage": "wix:image://featured.jpg",
        "ogImage": "wix:image://og.jpg",
        "excerpt": "What changed this year.",
        "meta": "Meta description",
        "lede": "Lede paragraph",
        "body": {"nodes": []},
        "postContentLower": "lower body",
        "slug": "hybrid-events-2025",
        "catSlug": "event-tech",
        "furtherReadingBlock": "<p>More</p>",
        "featured": True,
    }
