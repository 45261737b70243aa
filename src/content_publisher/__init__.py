"""Publish staging content into production collections and the lite index."""

from .mappings.registry import (CONTENT_TYPES, ContentKind, ContentTypeConfig,
                                UnknownContentTypeError, resolve_content_type)
from .publisher import (ProductionItemNotFoundError, PublishError,
                        PublishResult, StagingItemNotFoundError, SyncStatus,
                        publish_or_update_content, reconcile_content)

__all__ = [
    "CONTENT_TYPES",
    "ContentKind",
    "ContentTypeConfig",
    "ProductionItemNotFoundError",
    "PublishError",
    "PublishResult",
    "StagingItemNotFoundError",
    "SyncStatus",
    "UnknownContentTypeError",
    "publish_or_update_content",
    "reconcile_content",
    "resolve_content_type",
]
