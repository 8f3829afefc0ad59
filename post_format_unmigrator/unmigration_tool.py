"""
High-level orchestration of the post format unmigration.

This module defines a :class:`PostFormatUnmigrationTool` class that ties
together the store, the attachment renderer, the selector and the
transformer.  It runs the batch loop (select a batch of pending posts,
transform each of them, repeat until no pending posts remain), writes a log
file and can preview the first batch without touching the database.

Configuration is supplied via a JSON file path or directly as a dictionary.
The ``database`` section names the DuckDB file.  When ``wordpress.base_url``
is set, legacy image attachment ids are resolved through the WordPress REST
API; otherwise they are looked up in the database's ``attachments`` table.
Batch settings live under the ``unmigration`` key.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, List, Optional, Tuple

from post_format_unmigrator.models import PostRecord, UnmigrationSummary
from post_format_unmigrator.renderers import DuckDBAttachmentRenderer, WordPressMediaRenderer
from post_format_unmigrator.selectors import DEFAULT_BATCH_SIZE, PendingPostSelector
from post_format_unmigrator.stores import DuckDBPostStore
from post_format_unmigrator.transformers import PostFormatTransformer

LOG_DIR = os.path.join("reports", "unmigration")


class PostFormatUnmigrationTool:
    """
    Encapsulates the state required to unmigrate every pending post of a
    store.  The tool itself keeps no memory of previous runs: progress lives
    in the migrated flag the transformer writes on each post.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        config_file: Optional[str] = None,
        store: Optional[DuckDBPostStore] = None,
        attachment_renderer=None,
    ) -> None:
        if config_file and os.path.exists(config_file):
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        elif config is None:
            config = {}

        # Ensure essential keys exist to prevent KeyErrors
        config.setdefault("database", {})
        config["database"].setdefault("path", os.getenv("UNMIGRATOR_DB_PATH", "data/wordpress.duckdb"))

        config.setdefault("wordpress", {})
        config["wordpress"].setdefault("base_url", os.getenv("WP_BASE_URL", ""))
        config["wordpress"].setdefault("username", os.getenv("WP_USERNAME", ""))
        config["wordpress"].setdefault("app_password", os.getenv("WP_APP_PASSWORD", ""))

        config.setdefault("unmigration", {})
        config["unmigration"].setdefault("batch_size", DEFAULT_BATCH_SIZE)
        config["unmigration"].setdefault("limit", None)
        config["unmigration"].setdefault("dry_run", False)
        config["unmigration"].setdefault("image_size", "large")

        self.config = config

        if store is None:
            store = DuckDBPostStore(config["database"]["path"])
            store.create_schema()
        self.store = store

        if attachment_renderer is None:
            if config["wordpress"]["base_url"]:
                attachment_renderer = WordPressMediaRenderer(config["wordpress"])
            else:
                attachment_renderer = DuckDBAttachmentRenderer(self.store)
        self.attachment_renderer = attachment_renderer

        self.selector = PendingPostSelector(self.store, batch_size=config["unmigration"]["batch_size"])
        self.transformer = PostFormatTransformer(
            self.store,
            attachment_renderer=self.attachment_renderer,
            image_size=config["unmigration"]["image_size"],
        )

    def log_message(self, message: str, level: str = "INFO") -> None:
        print(f"[{level}] {message}")
        os.makedirs(LOG_DIR, exist_ok=True)
        with open(os.path.join(LOG_DIR, "unmigration.log"), "a", encoding="utf-8") as f:
            f.write(f"{level}: {message}\n")

    def count_pending(self) -> int:
        return self.selector.count_pending()

    def run(self) -> UnmigrationSummary:
        """
        Unmigrate pending posts batch by batch until none are left (or the
        configured ``limit`` of processed posts is reached).

        Each post is attempted exactly once.  Posts that come back with
        ``changed=False`` are reported as "No action taken" and are not
        retried, because the transformer has already flagged them.

        :return: Totals for the run.
        """
        limit: Optional[int] = self.config["unmigration"].get("limit")
        summary = UnmigrationSummary()

        pending = self.count_pending()
        if not pending:
            self.log_message("No posts needing unmigration could be found.")
            return summary
        self.log_message(f"{pending} posts were found that need to be unmigrated.")

        while limit is None or summary.processed < limit:
            batch_size = self.selector.batch_size
            if limit is not None:
                batch_size = min(batch_size, limit - summary.processed)

            batch = self.selector.select(batch_size)
            if not batch:
                break
            summary.batches += 1

            for post in batch:
                outcome = self.transformer.transform(post)
                summary.processed += 1
                if outcome.changed:
                    summary.changed += 1
                status = "Processed" if outcome.changed else "No action taken"
                level = "INFO" if outcome.changed else "WARNING"
                self.log_message(f"{summary.processed}. {post.title or post.id} - {status}", level=level)

        self.log_message(
            f"Finished processing {summary.processed} posts "
            f"({summary.changed} changed, {summary.batches} batches)."
        )
        return summary

    def preview(self, limit: Optional[int] = None) -> List[Tuple[PostRecord, Optional[str]]]:
        """
        Dry run: build the new content for the next batch of pending posts
        without saving content or migrated flags.
        """
        results: List[Tuple[PostRecord, Optional[str]]] = []
        for post in self.selector.select(limit):
            content = self.transformer.render_content(post)
            if content is None:
                self.log_message(f"Dry-run: no action would be taken for post {post.id}")
            else:
                self.log_message(f"Dry-run: would update post {post.id} ({post.format})")
            results.append((post, content))
        return results

    def close(self) -> None:
        self.store.close()
