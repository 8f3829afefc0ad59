from __future__ import annotations

from typing import List, Optional

from post_format_unmigrator.models import (
    FORMAT_META_KEYS,
    MIGRATED_META_KEY,
    SUPPORTED_FORMATS,
    PostQuery,
    PostRecord,
)

DEFAULT_BATCH_SIZE = 25


class PendingPostSelector:
    """
    Fetches posts that still need their post format meta moved into the
    content, oldest first.

    A post is pending when it has one of the supported formats, carries at
    least one current or legacy meta key of that format, and has not been
    flagged as migrated yet.
    """

    def __init__(self, store, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        self.store = store
        self.batch_size = max(1, int(batch_size))

    def build_query(self, limit: Optional[int] = None) -> PostQuery:
        return PostQuery(
            formats=list(SUPPORTED_FORMATS),
            meta_exists={fmt: list(FORMAT_META_KEYS[fmt]) for fmt in SUPPORTED_FORMATS},
            meta_not_exists=[MIGRATED_META_KEY],
            order_by="id",
            ascending=True,
            limit=limit,
        )

    def select(self, limit: Optional[int] = None) -> List[PostRecord]:
        """Returns the next batch of pending posts; empty once all are done."""
        return self.store.query_posts(self.build_query(self.batch_size if limit is None else limit))

    def count_pending(self) -> int:
        return self.store.count_posts(self.build_query())
