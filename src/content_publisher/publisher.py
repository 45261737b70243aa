"""Publish staging items into their production collections.

The publisher copies a staging item into the production collection chosen
by its content type, writes publish metadata back onto the staging item and
rebuilds the item's entry in the lite content index.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

from .mappings.registry import ContentTypeConfig, resolve_content_type
from .models import PublisherSettings
from .side_effects import (FRONT_END_URL, IMPACT_AREAS, LITE_CONTENT,
                           backfill_front_end_url, inject_impact_areas,
                           sync_lite_content)
from .store import DocumentStore

LOGGER = logging.getLogger("content_publisher.publisher")

INSERTED = "inserted"
UPDATED = "updated"
RECONCILED = "reconciled"


class PublishError(Exception):
    """Raised when a publish or reconcile call fails as a whole."""


class StagingItemNotFoundError(LookupError):
    """Raised when the staging item to publish does not exist."""


class ProductionItemNotFoundError(LookupError):
    """Raised when a linked production item is missing on update."""


class SyncStatus(str, enum.Enum):
    FULLY_SYNCED = "fully_synced"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class PublishResult:
    content_type: str
    action: str
    staging_item_id: str
    production_item_id: str
    degraded: Tuple[str, ...] = ()

    @property
    def status(self) -> SyncStatus:
        return SyncStatus.DEGRADED if self.degraded else SyncStatus.FULLY_SYNCED

    @property
    def message(self) -> str:
        return (
            f"{self.content_type} content successfully {self.action} "
            f"from staging item {self.staging_item_id}."
        )

    def __str__(self) -> str:
        return self.message


async def _load_staging_item(
    store: DocumentStore, config: ContentTypeConfig, staging_item_id: str
) -> dict[str, Any]:
    item = await store.get(config.staging_collection, staging_item_id)
    if not item:
        raise StagingItemNotFoundError(
            f"Staging item {staging_item_id} not found in {config.staging_collection}"
        )
    return item


async def _run_side_effects(
    store: DocumentStore,
    config: ContentTypeConfig,
    source_item: Mapping[str, Any],
    staging_item_id: str,
    production_item_id: str,
    settings: PublisherSettings,
) -> Tuple[str, ...]:
    """Run the post-publish helpers in order and return the ones that failed."""
    degraded = []

    impact_areas = source_item.get("impactAreasAi")
    if config.injects_impact_areas and isinstance(impact_areas, list):
        if not await inject_impact_areas(
            store, config, production_item_id, impact_areas, settings
        ):
            degraded.append(IMPACT_AREAS)

    if not await backfill_front_end_url(
        store, config, staging_item_id, production_item_id, settings
    ):
        degraded.append(FRONT_END_URL)

    # Re-read staging so the lite entry carries the backfilled URL.
    try:
        fresh_item = await store.get(config.staging_collection, staging_item_id)
    except Exception:
        LOGGER.exception("Failed to re-read staging item %s", staging_item_id)
        fresh_item = None
    if not await sync_lite_content(store, fresh_item or source_item, settings):
        degraded.append(LITE_CONTENT)

    return tuple(degraded)


async def _update_production(
    store: DocumentStore,
    config: ContentTypeConfig,
    source_item: Mapping[str, Any],
) -> str:
    linked_id = source_item[config.linked_id_field]
    production_item = await store.get(config.production_collection, linked_id)
    if production_item is None:
        raise ProductionItemNotFoundError(
            f"Production item {linked_id} not found in {config.production_collection}"
        )
    merged = config.mapper(production_item, source_item, None, None)
    await store.update(config.production_collection, merged)
    return linked_id


async def _insert_production(
    store: DocumentStore,
    config: ContentTypeConfig,
    source_item: Mapping[str, Any],
    staging_item_id: str,
) -> str:
    published_date = datetime.now(timezone.utc)
    new_item = config.mapper({}, source_item, source_item["_id"], published_date)
    inserted = await store.insert(config.production_collection, new_item)
    inserted_id = inserted.get("_id") or new_item["_id"]

    await store.update(
        config.staging_collection,
        {
            **source_item,
            "_id": staging_item_id,
            "isLive": True,
            config.linked_id_field: inserted_id,
            "publishDate": published_date,
        },
    )
    return inserted_id


async def publish_or_update_content(
    store: DocumentStore,
    staging_item_id: str,
    content_type_id: str,
    settings: Optional[PublisherSettings] = None,
) -> PublishResult:
    """Publish a staging item, inserting on first publish and updating after.

    Side-effect failures do not fail the call; they are listed in
    ``PublishResult.degraded``. Any other failure is logged and raised as
    ``PublishError``.
    """
    settings = settings or PublisherSettings()
    try:
        config = resolve_content_type(content_type_id)
        source_item = await _load_staging_item(store, config, staging_item_id)

        if source_item.get(config.linked_id_field):
            production_item_id = await _update_production(store, config, source_item)
            action = UPDATED
        else:
            production_item_id = await _insert_production(
                store, config, source_item, staging_item_id
            )
            action = INSERTED

        degraded = await _run_side_effects(
            store, config, source_item, staging_item_id, production_item_id, settings
        )
    except Exception as exc:
        LOGGER.exception("Content publish error for staging item %s", staging_item_id)
        raise PublishError(f"Failed to publish or update content: {exc}") from exc

    result = PublishResult(
        content_type=config.name,
        action=action,
        staging_item_id=staging_item_id,
        production_item_id=production_item_id,
        degraded=degraded,
    )
    if degraded:
        LOGGER.warning("%s Degraded side effects: %s", result.message, ", ".join(degraded))
    else:
        LOGGER.info("%s", result.message)
    return result


async def reconcile_content(
    store: DocumentStore,
    staging_item_id: str,
    content_type_id: str,
    settings: Optional[PublisherSettings] = None,
) -> PublishResult:
    """Re-run the post-publish side effects for an already published item.

    Production fields are left untouched.
    """
    settings = settings or PublisherSettings()
    try:
        config = resolve_content_type(content_type_id)
        source_item = await _load_staging_item(store, config, staging_item_id)
        production_item_id = source_item.get(config.linked_id_field)
        if not production_item_id:
            raise LookupError(f"Staging item {staging_item_id} has not been published yet")

        degraded = await _run_side_effects(
            store, config, source_item, staging_item_id, production_item_id, settings
        )
    except Exception as exc:
        LOGGER.exception("Content reconcile error for staging item %s", staging_item_id)
        raise PublishError(f"Failed to reconcile content: {exc}") from exc

    result = PublishResult(
        content_type=config.name,
        action=RECONCILED,
        staging_item_id=staging_item_id,
        production_item_id=production_item_id,
        degraded=degraded,
    )
    LOGGER.info("%s Status: %s", result.message, result.status.value)
    return result
