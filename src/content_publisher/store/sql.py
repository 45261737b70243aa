from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import (JSON, Column, MetaData, String, Table, delete, insert,
                        select, text, update)
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ..models import DatabaseConfig
from .base import (Document, DocumentConflictError, DocumentNotFoundError,
                   DocumentStore, StoreError, decode_value, encode_value)

LOGGER = logging.getLogger("content_publisher.store.sql")

metadata = MetaData()

documents = Table(
    "documents",
    metadata,
    Column("collection", String(255), primary_key=True),
    Column("id", String(255), primary_key=True),
    Column("data", JSON, nullable=False),
)


def _matches(value: Any, wanted: list[Any]) -> bool:
    if isinstance(value, list):
        return any(item in wanted for item in value)
    return value in wanted


class SqlDocumentStore(DocumentStore):
    """Documents kept as JSON rows keyed by ``(collection, id)``."""

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: Optional[AsyncEngine] = None

    async def __aenter__(self) -> "SqlDocumentStore":
        await self.open()
        if self._config.apply_schema:
            LOGGER.info("Applying document table schema as requested by configuration")
            await self.ensure_schema()
        return self

    async def open(self) -> AsyncEngine:
        if self._engine is not None:
            return self._engine

        deadline = time.time() + self._config.connect_timeout
        attempts = 0
        while True:
            attempts += 1
            try:
                LOGGER.info("Creating SQLAlchemy engine (attempt %s)", attempts)
                async_engine = create_async_engine(self._config.url)
                async with async_engine.connect() as connection:
                    await connection.execute(text("SELECT 1"))
                self._engine = async_engine
                LOGGER.info("Connected to database")
                return self._engine
            except OperationalError as exc:
                if time.time() >= deadline:
                    raise StoreError("Database connection timed out") from exc
                LOGGER.warning("Database not ready yet (%s), retrying...", exc)
                await asyncio.sleep(min(2 * attempts, 10))

    async def ensure_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Engine not initialised; call open()")
        return self._engine

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None

    async def get(self, collection: str, item_id: str) -> Optional[Document]:
        async with self.engine.connect() as conn:
            result = await conn.execute(
                select(documents.c.data).where(
                    documents.c.collection == collection, documents.c.id == item_id
                )
            )
            data = result.scalar_one_or_none()
        return decode_value(data) if data is not None else None

    async def insert(self, collection: str, doc: Mapping[str, Any]) -> Document:
        row = dict(doc)
        row["_id"] = row.get("_id") or uuid.uuid4().hex
        try:
            async with self.engine.begin() as conn:
                await conn.execute(
                    insert(documents).values(
                        collection=collection, id=row["_id"], data=encode_value(row)
                    )
                )
        except IntegrityError as exc:
            raise DocumentConflictError(
                f"Document {row['_id']} already exists in {collection}"
            ) from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"Insert into {collection} failed: {exc}") from exc
        return row

    async def update(self, collection: str, doc: Mapping[str, Any]) -> Document:
        row = dict(doc)
        item_id = row.get("_id")
        if not item_id:
            raise StoreError(f"Cannot update a document without _id in {collection}")
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(
                    update(documents)
                    .where(documents.c.collection == collection, documents.c.id == item_id)
                    .values(data=encode_value(row))
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"Update in {collection} failed: {exc}") from exc
        if result.rowcount == 0:
            raise DocumentNotFoundError(f"Document {item_id} not found in {collection}")
        return row

    async def save(self, collection: str, doc: Mapping[str, Any]) -> Document:
        row = dict(doc)
        row["_id"] = row.get("_id") or uuid.uuid4().hex
        try:
            async with self.engine.begin() as conn:
                await conn.execute(
                    delete(documents).where(
                        documents.c.collection == collection,
                        documents.c.id == row["_id"],
                    )
                )
                await conn.execute(
                    insert(documents).values(
                        collection=collection, id=row["_id"], data=encode_value(row)
                    )
                )
        except SQLAlchemyError as exc:
            raise StoreError(f"Save into {collection} failed: {exc}") from exc
        return row

    async def find_has_some(
        self, collection: str, field: str, values: Iterable[Any]
    ) -> list[Document]:
        wanted = list(values)
        if not wanted:
            return []

        stmt = select(documents.c.data).where(documents.c.collection == collection)
        if field == "_id":
            stmt = stmt.where(documents.c.id.in_(wanted))
        async with self.engine.connect() as conn:
            result = await conn.execute(stmt)
            rows = [decode_value(data) for data in result.scalars()]

        # Non-id fields are matched in Python to stay dialect independent.
        return [row for row in rows if _matches(row.get(field), wanted)]
