import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from post_format_unmigrator.models import PostRecord
from post_format_unmigrator.stores import DuckDBPostStore


@pytest.fixture(autouse=True)
def isolated_reports(tmp_path, monkeypatch):
    """Reports and logs are written relative to the cwd; keep them in tmp."""
    monkeypatch.chdir(tmp_path)
    return tmp_path / "reports" / "unmigration"


@pytest.fixture
def store():
    s = DuckDBPostStore(":memory:")
    s.create_schema()
    yield s
    s.close()


def insert_post(store, post_id, title="", content="", fmt=None):
    post = PostRecord(id=post_id, title=title, content=content, format=fmt)
    store.con.execute(
        "INSERT INTO posts (id, title, content, format) VALUES (?, ?, ?, ?)",
        [post.id, post.title, post.content, post.format],
    )
    return post


def add_post(store, post_id, fmt, content="Body", title="Title", **meta):
    insert_post(store, post_id, title=title, content=content, fmt=fmt)
    for key, value in meta.items():
        store.set_meta(post_id, key, value)


def add_attachment(store, attachment_id, url, alt=""):
    store.con.execute(
        "INSERT INTO attachments (id, url, alt) VALUES (?, ?, ?)",
        [attachment_id, url, alt],
    )


def all_meta(store, post_id):
    rows = store.con.execute(
        "SELECT meta_key, meta_value FROM postmeta WHERE post_id = ? ORDER BY meta_key",
        [post_id],
    ).fetchall()
    return dict(rows)
