"""
DuckDB-backed post store.

The store mirrors the three WordPress tables the unmigrator cares about:

``posts``
    ``id``, ``title``, ``content`` and ``format`` (the post format slug, e.g.
    ``image``; NULL for standard posts).
``postmeta``
    ``post_id``, ``meta_key``, ``meta_value`` with at most one value per key.
``attachments``
    ``id``, ``url``, ``alt`` for media referenced by legacy image meta.

Use ``":memory:"`` as the database path for a throwaway store.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Tuple

import duckdb

from post_format_unmigrator.models import PostQuery, PostRecord

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS posts (
        id BIGINT PRIMARY KEY,
        title VARCHAR,
        content VARCHAR,
        format VARCHAR
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS postmeta (
        post_id BIGINT NOT NULL,
        meta_key VARCHAR NOT NULL,
        meta_value VARCHAR,
        PRIMARY KEY (post_id, meta_key)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS attachments (
        id BIGINT PRIMARY KEY,
        url VARCHAR NOT NULL,
        alt VARCHAR
    )
    """,
)

_POST_COLUMNS = "p.id, p.title, p.content, p.format"


def _placeholders(values: List[Any]) -> str:
    return ", ".join("?" for _ in values)


class DuckDBPostStore:
    """
    Record store over a DuckDB database file.

    All reads and writes are synchronous; one store instance wraps one
    connection.
    """

    def __init__(self, database: str = ":memory:", *, read_only: bool = False) -> None:
        if database != ":memory:":
            os.makedirs(os.path.dirname(database) or ".", exist_ok=True)
        self.database = database
        self.con = duckdb.connect(database=database, read_only=read_only)

    def __enter__(self) -> "DuckDBPostStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.con.close()

    def create_schema(self) -> None:
        for statement in _SCHEMA:
            self.con.execute(statement)

    # ------------------------------------------------------------------
    # Query interface
    # ------------------------------------------------------------------

    def _compile_where(self, query: PostQuery) -> Tuple[str, List[Any]]:
        params: List[Any] = list(query.formats)
        clauses = [f"p.format IN ({_placeholders(query.formats)})"]

        if query.meta_exists:
            per_format = []
            for fmt, keys in query.meta_exists.items():
                per_format.append(f"(p.format = ? AND m.meta_key IN ({_placeholders(keys)}))")
                params.append(fmt)
                params.extend(keys)
            clauses.append(
                "EXISTS (SELECT 1 FROM postmeta m WHERE m.post_id = p.id AND ("
                + " OR ".join(per_format)
                + "))"
            )

        if query.meta_not_exists:
            clauses.append(
                "NOT EXISTS (SELECT 1 FROM postmeta m WHERE m.post_id = p.id "
                f"AND m.meta_key IN ({_placeholders(query.meta_not_exists)}))"
            )
            params.extend(query.meta_not_exists)

        return " AND ".join(clauses), params

    def query_posts(self, query: PostQuery) -> List[PostRecord]:
        if not query.formats:
            return []
        where, params = self._compile_where(query)
        sql = (
            f"SELECT {_POST_COLUMNS} FROM posts p WHERE {where} "
            f"ORDER BY p.{query.order_by} {'ASC' if query.ascending else 'DESC'}"
        )
        if query.limit is not None:
            sql += f" LIMIT {int(query.limit)}"
        rows = self.con.execute(sql, params).fetchall()
        return [self._row_to_post(row) for row in rows]

    def count_posts(self, query: PostQuery) -> int:
        if not query.formats:
            return 0
        where, params = self._compile_where(query)
        row = self.con.execute(f"SELECT COUNT(*) FROM posts p WHERE {where}", params).fetchone()
        return int(row[0]) if row else 0

    def get_post(self, post_id: int) -> Optional[PostRecord]:
        row = self.con.execute(
            f"SELECT {_POST_COLUMNS} FROM posts p WHERE p.id = ?", [post_id]
        ).fetchone()
        return self._row_to_post(row) if row else None

    @staticmethod
    def _row_to_post(row: Tuple[Any, ...]) -> PostRecord:
        return PostRecord(id=row[0], title=row[1], content=row[2], format=row[3])

    # ------------------------------------------------------------------
    # Side-car (post meta) access
    # ------------------------------------------------------------------

    def get_meta(self, post_id: int, key: str) -> Optional[str]:
        row = self.con.execute(
            "SELECT meta_value FROM postmeta WHERE post_id = ? AND meta_key = ?",
            [post_id, key],
        ).fetchone()
        return row[0] if row else None

    def set_meta(self, post_id: int, key: str, value: Any) -> None:
        self.con.execute(
            "INSERT OR REPLACE INTO postmeta (post_id, meta_key, meta_value) VALUES (?, ?, ?)",
            [post_id, key, None if value is None else str(value)],
        )

    # ------------------------------------------------------------------
    # Content writes
    # ------------------------------------------------------------------

    def update_content(self, post_id: int, content: str) -> bool:
        """Persist ``content`` for ``post_id``; ``False`` when nothing was written."""
        try:
            row = self.con.execute(
                "UPDATE posts SET content = ? WHERE id = ?", [content, post_id]
            ).fetchone()
        except duckdb.Error as e:
            print(f"[ERROR] Failed to update content of post {post_id}: {e}")
            return False
        return bool(row and row[0])

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def get_attachment(self, attachment_id: int) -> Optional[Dict[str, str]]:
        row = self.con.execute(
            "SELECT id, url, alt FROM attachments WHERE id = ?", [attachment_id]
        ).fetchone()
        if not row:
            return None
        return {"id": row[0], "url": row[1], "alt": row[2] or ""}
