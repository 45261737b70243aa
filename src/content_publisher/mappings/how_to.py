"""Mapping for the How To production collection."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .common import COMMON_FIELDS, build_record

HOW_TO_FIELDS = COMMON_FIELDS + (
    ("meta", "meta"),
    ("bodyUpper", "body"),
)


def map_how_to_fields(
    production_item: Optional[Mapping[str, Any]],
    source_item: Mapping[str, Any],
    target_id: Optional[str] = None,
    published_date: Any = None,
) -> dict[str, Any]:
    return build_record(
        production_item, source_item, HOW_TO_FIELDS, target_id, published_date
    )
