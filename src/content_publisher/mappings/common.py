"""Shared utilities for mapping staging documents onto production shapes."""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any, Mapping, Optional, Sequence, Tuple

from dateutil import parser as dtparse

FieldMap = Sequence[Tuple[str, str]]

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")

# Fields every production variant takes from staging under the same name.
COMMON_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("title", "title"),
    ("author", "author"),
    ("mainCategory", "mainCategory"),
    ("coverImage", "coverImage"),
    ("featuredImage", "featuredImage"),
    ("ogImage", "ogImage"),
    ("excerpt", "excerpt"),
    ("lede", "lede"),
    ("postContentLower", "postContentLower"),
    ("catSlug", "catSlug"),
    ("slug", "slug"),
    ("furtherReadingBlock", "furtherReadingBlock"),
)


def to_int(value: Any) -> int:
    """Parse the leading integer of ``value``; anything unparseable is 0."""
    if value is None or isinstance(value, bool):
        return 0
    match = _LEADING_INT.match(str(value))
    if not match:
        return 0
    return int(match.group(1))


def as_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    try:
        return dtparse.parse(str(value))
    except (ValueError, OverflowError):
        return None


def build_record(
    production_item: Optional[Mapping[str, Any]],
    source_item: Mapping[str, Any],
    fields: FieldMap,
    target_id: Optional[str] = None,
    published_date: Any = None,
) -> dict[str, Any]:
    """Overlay ``fields`` read from ``source_item`` on a copy of ``production_item``.

    ``fields`` pairs are ``(target, source)``. ``_id``, ``timeToRead`` and
    ``publishedDate`` are handled here for every content type.
    """
    record: dict[str, Any] = dict(production_item or {})
    record["_id"] = target_id or source_item.get("linkedBlogId")
    record["timeToRead"] = to_int(source_item.get("timeToRead"))
    for target, source in fields:
        record[target] = source_item.get(source)
    record["publishedDate"] = (
        as_datetime(published_date)
        if published_date
        else source_item.get("publishDate")
    )
    return record
