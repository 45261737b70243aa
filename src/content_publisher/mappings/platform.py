"""Mapping for the Platform Tools Tech production collection."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from .common import COMMON_FIELDS, build_record

PLATFORM_FIELDS = COMMON_FIELDS + (
    ("bodyUpper", "body"),
    # product metadata
    ("tried", "tried"),
    ("productWebsite", "productWebsite"),
    ("productName", "prodName"),
    ("affiliateLink", "affiliateLink"),
)


def map_platform_fields(
    production_item: Optional[Mapping[str, Any]],
    source_item: Mapping[str, Any],
    target_id: Optional[str] = None,
    published_date: Any = None,
) -> dict[str, Any]:
    """Map a staging item onto the ``ToolsOrTechnology`` shape.

    ``impactAreasAi`` is not copied; the publisher renders it into
    ``impactAreaBlock`` after the production write.
    """
    return build_record(
        production_item, source_item, PLATFORM_FIELDS, target_id, published_date
    )
