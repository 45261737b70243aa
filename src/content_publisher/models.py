from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_WIX_API_URL = "https://www.wixapis.com/wix-data/v2"
DEFAULT_WIX_API_TIMEOUT = 30.0
DEFAULT_WIX_API_MAX_RETRIES = 3
DEFAULT_WIX_API_BACKOFF_FACTOR = 1.0
DEFAULT_WIX_API_BACKOFF_MAX = 30.0
DEFAULT_DB_CONNECT_TIMEOUT = 60.0
DEFAULT_SITE_ORIGIN = "https://www.digitisingevents.com"

STORE_BACKENDS = ("wix", "sql")

# Reference collections shared by every content type.
LITE_CONTENT_COLLECTION = "liteContentList"
CATEGORY_COLLECTION = "Import957"
CONTENT_TYPE_COLLECTION = "ContentType"
IMPACT_AREA_COLLECTION = "impactArea"


@dataclass(frozen=True)
class WixConfig:
    url: str
    api_key: str
    site_id: str
    timeout: float = DEFAULT_WIX_API_TIMEOUT
    max_retries: int = DEFAULT_WIX_API_MAX_RETRIES
    backoff_factor: float = DEFAULT_WIX_API_BACKOFF_FACTOR
    backoff_max: float = DEFAULT_WIX_API_BACKOFF_MAX


@dataclass(frozen=True)
class DatabaseConfig:
    url: str
    connect_timeout: float = DEFAULT_DB_CONNECT_TIMEOUT
    apply_schema: bool = False


@dataclass(frozen=True)
class PublisherSettings:
    site_origin: str = DEFAULT_SITE_ORIGIN
    lite_collection: str = LITE_CONTENT_COLLECTION
    category_collection: str = CATEGORY_COLLECTION
    content_type_collection: str = CONTENT_TYPE_COLLECTION
    impact_area_collection: str = IMPACT_AREA_COLLECTION


@dataclass(frozen=True)
class AppConfig:
    backend: str
    publisher: PublisherSettings = field(default_factory=PublisherSettings)
    wix: Optional[WixConfig] = None
    database: Optional[DatabaseConfig] = None
