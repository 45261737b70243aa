from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Optional

import httpx

from ..models import WixConfig
from .base import (Document, DocumentConflictError, DocumentNotFoundError,
                   DocumentStore, StoreError, decode_value, encode_value)

LOGGER = logging.getLogger("content_publisher.store.wix")

QUERY_PAGE_SIZE = 100


class WixDataStore(DocumentStore):
    """Async client for the Wix Data Items REST API with retry and backoff.

    Only idempotent requests are retried; inserts are sent once.
    """

    def __init__(
        self,
        config: WixConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": config.api_key,
            "wix-site-id": config.site_id,
        }

    async def __aenter__(self) -> "WixDataStore":
        self._client = httpx.AsyncClient(
            timeout=self._config.timeout, transport=self._transport
        )
        return self

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, collection: str, item_id: str) -> Optional[Document]:
        try:
            payload = await self._request_json(
                "GET", f"items/{item_id}", params={"dataCollectionId": collection}
            )
        except DocumentNotFoundError:
            return None
        return self._unwrap(payload.get("dataItem"))

    async def insert(self, collection: str, doc: Mapping[str, Any]) -> Document:
        payload = await self._request_json(
            "POST",
            "items",
            body={"dataCollectionId": collection, "dataItem": self._wrap(doc)},
            retry=False,
        )
        return self._unwrap(payload.get("dataItem"))

    async def update(self, collection: str, doc: Mapping[str, Any]) -> Document:
        item_id = doc.get("_id")
        if not item_id:
            raise StoreError(f"Cannot update a document without _id in {collection}")
        payload = await self._request_json(
            "PUT",
            f"items/{item_id}",
            body={"dataCollectionId": collection, "dataItem": self._wrap(doc)},
        )
        return self._unwrap(payload.get("dataItem"))

    async def save(self, collection: str, doc: Mapping[str, Any]) -> Document:
        payload = await self._request_json(
            "POST",
            "items/save",
            body={"dataCollectionId": collection, "dataItem": self._wrap(doc)},
        )
        return self._unwrap(payload.get("dataItem"))

    async def find_has_some(
        self, collection: str, field: str, values: Iterable[Any]
    ) -> list[Document]:
        wanted = list(values)
        if not wanted:
            return []

        items: list[Document] = []
        offset = 0
        while True:
            payload = await self._request_json(
                "POST",
                "items/query",
                body={
                    "dataCollectionId": collection,
                    "query": {
                        "filter": {field: {"$hasSome": wanted}},
                        "paging": {"limit": QUERY_PAGE_SIZE, "offset": offset},
                    },
                },
            )
            batch = payload.get("dataItems") or []
            items.extend(self._unwrap(item) for item in batch if isinstance(item, Mapping))
            if len(batch) < QUERY_PAGE_SIZE:
                break
            offset += len(batch)
        return items

    @staticmethod
    def _wrap(doc: Mapping[str, Any]) -> dict[str, Any]:
        item: dict[str, Any] = {"data": encode_value(dict(doc))}
        if doc.get("_id"):
            item["id"] = doc["_id"]
        return item

    @staticmethod
    def _unwrap(item: Any) -> Document:
        if not isinstance(item, Mapping):
            raise StoreError(f"Wix Data returned unexpected item payload: {item!r}")
        data = decode_value(item.get("data") or {})
        if item.get("id") and not data.get("_id"):
            data["_id"] = item["id"]
        return data

    async def _request_json(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        body: Optional[Mapping[str, Any]] = None,
        retry: bool = True,
    ) -> Mapping[str, Any]:
        if self._client is None:
            raise RuntimeError("HTTP client is not ready")

        url = f"{self._config.url.rstrip('/')}/{path.lstrip('/')}"
        max_attempts = max(1, self._config.max_retries + 1) if retry else 1
        base_backoff = max(self._config.backoff_factor, 0.0) or 1.0
        backoff_ceiling = (
            self._config.backoff_max
            if self._config.backoff_max and self._config.backoff_max > 0
            else float("inf")
        )
        sleep_time = base_backoff

        attempt = 0
        while attempt < max_attempts:
            attempt += 1
            try:
                LOGGER.debug(
                    "%s %s (attempt %s/%s)", method, url, attempt, max_attempts
                )
                response = await self._client.request(
                    method,
                    url,
                    headers=self._headers,
                    params=dict(params or {}),
                    json=dict(body) if body is not None else None,
                )
                response.raise_for_status()
                payload = response.json()
                if not isinstance(payload, Mapping):
                    raise StoreError(f"{method} {url} returned unexpected payload")
                return payload
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                if status_code == 404:
                    raise DocumentNotFoundError(f"{method} {url}: not found") from exc
                if status_code == 409:
                    raise DocumentConflictError(
                        f"{method} {url}: {exc.response.text[:500]}"
                    ) from exc

                retryable_status = status_code >= 500 or status_code in {408, 429}
                if not self._should_retry(attempt, max_attempts, retryable_status):
                    LOGGER.error(
                        "HTTP %s for %s %s; response preview: %s",
                        status_code,
                        method,
                        url,
                        exc.response.text[:500],
                    )
                    raise StoreError(
                        f"Wix Data request {method} {url} failed with HTTP {status_code}"
                    ) from exc
                wait_time = min(sleep_time, backoff_ceiling)
                LOGGER.warning(
                    "HTTP %s for %s (attempt %s/%s). Retrying in %.1fs",
                    status_code,
                    url,
                    attempt,
                    max_attempts,
                    wait_time,
                )
                await asyncio.sleep(wait_time)
                sleep_time = self._next_backoff(
                    sleep_time, base_backoff, backoff_ceiling
                )
            except httpx.RequestError as exc:
                if not self._should_retry(attempt, max_attempts, True):
                    raise StoreError(
                        f"Wix Data request {method} {url} failed: {exc}"
                    ) from exc
                wait_time = min(sleep_time, backoff_ceiling)
                LOGGER.warning(
                    "Network error for %s (attempt %s/%s): %s. Retrying in %.1fs",
                    url,
                    attempt,
                    max_attempts,
                    exc,
                    wait_time,
                )
                await asyncio.sleep(wait_time)
                sleep_time = self._next_backoff(
                    sleep_time, base_backoff, backoff_ceiling
                )

        raise StoreError(f"Failed to {method} {url} after {max_attempts} attempts")

    @staticmethod
    def _should_retry(attempt: int, max_attempts: int, retryable: bool) -> bool:
        return retryable and attempt < max_attempts

    @staticmethod
    def _next_backoff(current: float, base: float, ceiling: float) -> float:
        next_value = max(current, base) * 2
        if ceiling > 0:
            next_value = min(next_value, ceiling)
        return max(next_value, base)
