import pytest

from content_publisher.mappings.article import map_article_fields
from content_publisher.mappings.platform import map_platform_fields
from content_publisher.mappings.registry import (CONTENT_TYPES, ContentKind,
                                                 UnknownContentTypeError,
                                                 iter_content_types,
                                                 resolve_content_type)


def test_every_kind_is_registered():
    assert set(CONTENT_TYPES) == set(ContentKind)
    assert [c.kind for c in iter_content_types()] == list(ContentKind)


def test_resolve_article():
    config = resolve_content_type("6351213f-8fd6-4a00-9f90-e7c40b6e3236")
    assert config.name == "Article"
    assert config.production_collection == "Import703"
    assert config.staging_collection == "blogStaging"
    assert config.url_field_key == "link-betterblog-title"
    assert config.mapper is map_article_fields
    assert not config.injects_impact_areas


def test_resolve_platform():
    config = resolve_content_type(ContentKind.PLATFORM_TOOLS_TECH.value)
    assert config.name == "Platform Tools Tech"
    assert config.production_collection == "ToolsOrTechnology"
    assert config.mapper is map_platform_fields
    assert config.injects_impact_areas


def test_unknown_id_is_rejected():
    with pytest.raises(UnknownContentTypeError, match="No config found for content type ID: nope"):
        resolve_content_type("nope")
