"""Per-content-type field mappers and their registry."""

from . import article, common, how_to, platform, registry

__all__ = [
    "article",
    "common",
    "how_to",
    "platform",
    "registry",
]
