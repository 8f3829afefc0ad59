"""
Selection of posts awaiting unmigration.

The selector never touches the store directly with SQL; it describes the
posts it wants as a :class:`~post_format_unmigrator.models.PostQuery` and
lets the store compile it.
"""

from .pending_posts import DEFAULT_BATCH_SIZE, PendingPostSelector

__all__ = ["DEFAULT_BATCH_SIZE", "PendingPostSelector"]
