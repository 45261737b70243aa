"""Tests for the per-content-type field mappers."""

from datetime import date, datetime, timezone

import pytest

from content_publisher.mappings.article import map_article_fields
from content_publisher.mappings.common import as_datetime, to_int
from content_publisher.mappings.how_to import map_how_to_fields
from content_publisher.mappings.platform import map_platform_fields

ALL_MAPPERS = [map_article_fields, map_how_to_fields, map_platform_fields]


@pytest.mark.parametrize("mapper", ALL_MAPPERS)
def test_id_falls_back_to_linked_id(mapper, staging_item):
    staging_item["linkedBlogId"] = "prod-9"
    result = mapper({}, staging_item, None, None)
    assert result["_id"] == "prod-9"


@pytest.mark.parametrize("mapper", ALL_MAPPERS)
def test_target_id_wins(mapper, staging_item):
    staging_item["linkedBlogId"] = "prod-9"
    result = mapper({}, staging_item, "stage-1", None)
    assert result["_id"] == "stage-1"


@pytest.mark.parametrize(
    "raw, expected",
    [("12", 12), ("abc", 0), (None, 0), ("7 minutes", 7), (" 3", 3), (4.8, 4), (True, 0),
     ("\u0663", 0), ("1\u0663", 1)],
)
def test_time_to_read_parsing(raw, expected):
    assert to_int(raw) == expected


@pytest.mark.parametrize("mapper", ALL_MAPPERS)
def test_missing_time_to_read_is_zero(mapper, staging_item):
    del staging_item["timeToRead"]
    assert mapper({}, staging_item, "x", None)["timeToRead"] == 0


@pytest.mark.parametrize("mapper", ALL_MAPPERS)
def test_published_date_argument_is_used(mapper, staging_item):
    when = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)
    staging_item["publishDate"] = datetime(2020, 1, 1)
    assert mapper({}, staging_item, "x", when)["publishedDate"] == when


@pytest.mark.parametrize("mapper", ALL_MAPPERS)
def test_source_publish_date_passes_through(mapper, staging_item):
    staging_item["publishDate"] = "2024-05-01T10:00:00Z"
    assert mapper({}, staging_item, "x", None)["publishedDate"] == "2024-05-01T10:00:00Z"


def test_never_published_item_has_no_published_date(staging_item):
    assert map_article_fields({}, staging_item, "x", None)["publishedDate"] is None


def test_as_datetime_coerces_strings_and_dates():
    assert as_datetime("2025-03-01T09:30:00+00:00") == datetime(
        2025, 3, 1, 9, 30, tzinfo=timezone.utc
    )
    assert as_datetime(date(2025, 3, 1)) == datetime(2025, 3, 1)
    assert as_datetime("not a date") is None


def test_article_field_names(staging_item):
    result = map_article_fields({}, staging_item, "x", None)
    assert result["metaDescription"] == "Meta description"
    assert result["richContent"] == {"nodes": []}
    assert "bodyUpper" not in result
    assert "meta" not in result


def test_how_to_field_names(staging_item):
    result = map_how_to_fields({}, staging_item, "x", None)
    assert result["meta"] == "Meta description"
    assert result["bodyUpper"] == {"nodes": []}
    assert "richContent" not in result


def test_platform_product_fields(staging_item):
    staging_item.update(
        tried=True,
        productWebsite="https://example.com",
        prodName="Eventify",
        affiliateLink="https://example.com/?ref=de",
        impactAreasAi=["ia-1"],
    )
    result = map_platform_fields({}, staging_item, "x", None)
    assert result["productName"] == "Eventify"
    assert result["tried"] is True
    assert result["affiliateLink"] == "https://example.com/?ref=de"
    assert result["bodyUpper"] == {"nodes": []}
    assert "impactAreasAi" not in result
    assert "metaDescription" not in result


def test_production_only_fields_survive(staging_item):
    existing = {
        "_id": "prod-9",
        "link-betterblog-title": "/post/hybrid-events-2025",
        "title": "Old title",
    }
    result = map_article_fields(existing, staging_item, None, None)
    assert result["link-betterblog-title"] == "/post/hybrid-events-2025"
    assert result["title"] == "Hybrid Events in 2025"
    assert existing["title"] == "Old title"


def test_absent_fields_propagate_as_none():
    result = map_article_fields(None, {"_id": "s"}, "s", None)
    assert result["_id"] == "s"
    assert result["title"] is None
    assert result["slug"] is None
