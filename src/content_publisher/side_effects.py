"""Best-effort writes that follow a production publish.

Each helper logs its own failures and reports success as a boolean so the
publisher can flag the run as degraded instead of failing it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from html import escape
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .mappings.registry import ContentTypeConfig
from .models import PublisherSettings
from .store import DocumentStore

LOGGER = logging.getLogger("content_publisher.side_effects")

IMPACT_AREAS = "impact_areas"
FRONT_END_URL = "front_end_url"
LITE_CONTENT = "lite_content"


class LiteContentItem(BaseModel):
    """Card/list summary of a staging item, stored under the same ``_id``."""

    item_id: str = Field(alias="_id")
    title: Optional[Any] = None
    excerpt: Optional[Any] = None
    main_category_label: Optional[str] = Field(default=None, alias="mainCategoryLabel")
    main_category_id: Optional[str] = Field(default=None, alias="mainCategoryId")
    cat_slug: Optional[Any] = Field(default=None, alias="catSlug")
    content_type_label: Optional[str] = Field(default=None, alias="contentTypeLabel")
    content_type_id: Optional[str] = Field(default=None, alias="contentTypeId")
    featured: bool = False
    live_rel_url: Optional[str] = Field(default=None, alias="liveRelUrl")
    featured_image: Optional[Any] = Field(default=None, alias="featuredImage")

    model_config = ConfigDict(populate_by_name=True)


def reference_id(value: Any) -> Optional[str]:
    """Return the id of a reference held either as a plain id or an embedded item."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return value.get("_id") or None
    return None


def render_impact_area_block(labels: Sequence[str]) -> str:
    items = "\n".join(f"<li>{escape(label)}</li>" for label in labels)
    return f"<ul>\n{items}\n</ul>"


async def inject_impact_areas(
    store: DocumentStore,
    config: ContentTypeConfig,
    production_item_id: str,
    impact_area_ids: Optional[Sequence[str]],
    settings: PublisherSettings = PublisherSettings(),
) -> bool:
    if not impact_area_ids:
        LOGGER.info("No impact areas to update for %s", production_item_id)
        return True

    try:
        areas = await store.find_has_some(
            settings.impact_area_collection, "_id", impact_area_ids
        )
        labels = [str(area["title"]) for area in areas if area.get("title")]

        existing = await store.get(config.production_collection, production_item_id)
        if existing is None:
            LOGGER.warning(
                "Production item %s not found in %s; impact areas not injected",
                production_item_id,
                config.production_collection,
            )
            return False

        existing["impactAreaBlock"] = render_impact_area_block(labels)
        await store.update(config.production_collection, existing)
        LOGGER.info("Injected impact area block into %s", production_item_id)
        return True
    except Exception:
        LOGGER.exception("Error generating impact area block for %s", production_item_id)
        return False


async def backfill_front_end_url(
    store: DocumentStore,
    config: ContentTypeConfig,
    staging_item_id: str,
    production_item_id: str,
    settings: PublisherSettings = PublisherSettings(),
) -> bool:
    try:
        live_item = await store.get(config.production_collection, production_item_id)
        staging_item = await store.get(config.staging_collection, staging_item_id)
        if live_item is None or staging_item is None:
            LOGGER.warning(
                "Cannot write front-end URL: production %s or staging %s missing",
                production_item_id,
                staging_item_id,
            )
            return False

        url = live_item.get(config.url_field_key)
        if not url:
            LOGGER.warning(
                'URL field "%s" not found on live item %s',
                config.url_field_key,
                production_item_id,
            )
            return True

        front_end_url = f"{settings.site_origin}{url}"
        await store.update(
            config.staging_collection,
            {
                **staging_item,
                "_id": staging_item_id,
                "lastPushLive": datetime.now(timezone.utc),
                config.linked_id_field: live_item.get("_id", production_item_id),
                "frontEndUrl": front_end_url,
            },
        )
        LOGGER.info(
            "Front-end URL written back to staging item %s: %s",
            staging_item_id,
            front_end_url,
        )
        return True
    except Exception:
        LOGGER.exception("Failed to write front-end URL to staging item %s", staging_item_id)
        return False


async def _lookup_label(
    store: DocumentStore, collection: str, item_id: Optional[str]
) -> Optional[str]:
    if not item_id:
        return None
    try:
        ref = await store.get(collection, item_id)
    except Exception:
        LOGGER.warning("Error fetching %s from %s", item_id, collection, exc_info=True)
        return None
    if ref and ref.get("label"):
        return str(ref["label"])
    return None


def build_lite_item(
    source_item: Mapping[str, Any],
    main_category_label: Optional[str],
    content_type_label: Optional[str],
    settings: PublisherSettings = PublisherSettings(),
) -> LiteContentItem:
    front_end_url = source_item.get("frontEndUrl")
    live_rel_url = (
        front_end_url.replace(settings.site_origin, "", 1) if front_end_url else None
    )
    return LiteContentItem(
        item_id=source_item["_id"],
        title=source_item.get("title"),
        excerpt=source_item.get("excerpt"),
        main_category_label=main_category_label,
        main_category_id=reference_id(source_item.get("mainCategory")),
        cat_slug=source_item.get("catSlug"),
        content_type_label=content_type_label,
        content_type_id=reference_id(source_item.get("contentType")),
        featured=bool(source_item.get("featured")),
        live_rel_url=live_rel_url,
        featured_image=source_item.get("featuredImage") or None,
    )


async def sync_lite_content(
    store: DocumentStore,
    source_item: Optional[Mapping[str, Any]],
    settings: PublisherSettings = PublisherSettings(),
) -> bool:
    if not source_item or not source_item.get("_id"):
        LOGGER.warning("sync_lite_content: invalid source item")
        return False

    try:
        main_category_label = await _lookup_label(
            store,
            settings.category_collection,
            reference_id(source_item.get("mainCategory")),
        )
        content_type_label = await _lookup_label(
            store,
            settings.content_type_collection,
            reference_id(source_item.get("contentType")),
        )
        lite_item = build_lite_item(
            source_item, main_category_label, content_type_label, settings
        )
        await store.save(settings.lite_collection, lite_item.model_dump(by_alias=True))
        LOGGER.info("Lite content synced: %s", lite_item.item_id)
        return True
    except Exception:
        LOGGER.exception("Error syncing %s to lite content", source_item.get("_id"))
        return False
