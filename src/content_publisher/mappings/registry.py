"""Registry of content types and their production mappers."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

from .article import map_article_fields
from .how_to import map_how_to_fields
from .platform import map_platform_fields

Mapper = Callable[
    [Optional[Mapping[str, Any]], Mapping[str, Any], Optional[str], Any],
    Dict[str, Any],
]

STAGING_COLLECTION = "blogStaging"
LINKED_ID_FIELD = "linkedBlogId"


class UnknownContentTypeError(LookupError):
    """Raised when a content-type id has no registered configuration."""


class ContentKind(str, enum.Enum):
    ARTICLE = "6351213f-8fd6-4a00-9f90-e7c40b6e3236"
    HOW_TO = "5cd80feb-c4b9-463a-893e-1e4f0030864f"
    PLATFORM_TOOLS_TECH = "fbe8ff20-1f74-4da7-ad7e-fb0da7051d5b"


@dataclass(frozen=True)
class ContentTypeConfig:
    kind: ContentKind
    name: str
    staging_collection: str
    production_collection: str
    linked_id_field: str
    url_field_key: str
    mapper: Mapper
    injects_impact_areas: bool = False


CONTENT_TYPES: Dict[ContentKind, ContentTypeConfig] = {
    ContentKind.ARTICLE: ContentTypeConfig(
        kind=ContentKind.ARTICLE,
        name="Article",
        staging_collection=STAGING_COLLECTION,
        # legacy collection name kept from the blog app import
        production_collection="Import703",
        linked_id_field=LINKED_ID_FIELD,
        url_field_key="link-betterblog-title",
        mapper=map_article_fields,
    ),
    ContentKind.HOW_TO: ContentTypeConfig(
        kind=ContentKind.HOW_TO,
        name="How To",
        staging_collection=STAGING_COLLECTION,
        production_collection="HowTos",
        linked_id_field=LINKED_ID_FIELD,
        url_field_key="link-how-tos-title",
        mapper=map_how_to_fields,
    ),
    ContentKind.PLATFORM_TOOLS_TECH: ContentTypeConfig(
        kind=ContentKind.PLATFORM_TOOLS_TECH,
        name="Platform Tools Tech",
        staging_collection=STAGING_COLLECTION,
        production_collection="ToolsOrTechnology",
        linked_id_field=LINKED_ID_FIELD,
        url_field_key="link-platforms-tools-tech-title",
        mapper=map_platform_fields,
        injects_impact_areas=True,
    ),
}


def resolve_content_type(content_type_id: str) -> ContentTypeConfig:
    try:
        kind = ContentKind(content_type_id)
    except ValueError:
        raise UnknownContentTypeError(
            f"No config found for content type ID: {content_type_id}"
        ) from None
    return CONTENT_TYPES[kind]


def iter_content_types() -> Iterator[ContentTypeConfig]:
    for kind in ContentKind:
        yield CONTENT_TYPES[kind]
