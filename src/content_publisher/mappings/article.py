"""Mapping for the Article production collection."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .common import COMMON_FIELDS, build_record

ARTICLE_FIELDS = COMMON_FIELDS + (
    ("metaDescription", "meta"),
    ("richContent", "body"),
)


def map_article_fields(
    production_item: Optional[Mapping[str, Any]],
    source_item: Mapping[str, Any],
    target_id: Optional[str] = None,
    published_date: Any = None,
) -> dict[str, Any]:
    return build_record(
        production_item, source_item, ARTICLE_FIELDS, target_id, published_date
    )
