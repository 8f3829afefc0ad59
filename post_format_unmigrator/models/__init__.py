"""
Data models shared by the selector, the transformer and the stores.
"""

from .post_record import (
    FORMAT_META_KEYS,
    MIGRATED_META_KEY,
    SUPPORTED_FORMATS,
    PostQuery,
    PostRecord,
    UnmigrationOutcome,
    UnmigrationSummary,
)

__all__ = [
    "FORMAT_META_KEYS",
    "MIGRATED_META_KEY",
    "SUPPORTED_FORMATS",
    "PostQuery",
    "PostRecord",
    "UnmigrationOutcome",
    "UnmigrationSummary",
]
