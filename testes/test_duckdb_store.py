import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
from pydantic import ValidationError

from post_format_unmigrator.models import PostQuery, PostRecord
from post_format_unmigrator.stores import DuckDBPostStore
from conftest import add_attachment, add_post, all_meta, insert_post


def test_post_record_normalizes_format_slugs():
    assert PostRecord(id=1, format="post-format-image").format == "image"
    assert PostRecord(id=1, format=" Quote ").format == "quote"
    assert PostRecord(id=1, format="standard").format is None
    assert PostRecord(id=1, format="").format is None
    assert PostRecord(id=1, title=None, content=None).content == ""


def test_post_query_rejects_unknown_order_column():
    with pytest.raises(ValidationError):
        PostQuery(formats=["image"], order_by="content; DROP TABLE posts")


def test_get_post_round_trip(store):
    insert_post(store, 7, title="Hello", content="<p>Hi</p>", fmt="post-format-link")
    post = store.get_post(7)
    assert post == PostRecord(id=7, title="Hello", content="<p>Hi</p>", format="link")
    assert store.get_post(8) is None


def test_meta_is_single_valued_and_replaced(store):
    add_post(store, 1, "image")
    assert store.get_meta(1, "image_html") is None
    store.set_meta(1, "image_html", "<img src='a.png'>")
    store.set_meta(1, "image_html", "<img src='b.png'>")
    store.set_meta(1, "migrated", 1)
    assert store.get_meta(1, "image_html") == "<img src='b.png'>"
    assert all_meta(store, 1) == {"image_html": "<img src='b.png'>", "migrated": "1"}


def test_update_content_reports_success_and_missing_rows(store):
    add_post(store, 1, "link", content="old")
    assert store.update_content(1, "new") is True
    assert store.get_post(1).content == "new"
    assert store.update_content(99, "nothing") is False


def test_update_content_swallows_database_errors(store):
    add_post(store, 1, "link")
    store.con.execute("DROP TABLE posts")
    assert store.update_content(1, "new") is False


def test_query_posts_filters_on_meta_existence(store):
    add_post(store, 3, "image", image_html="<img src='a.png'>")
    add_post(store, 1, "image", legacy_image_ref="12")
    add_post(store, 2, "image", image_html="<img src='b.png'>", migrated="1")
    add_post(store, 4, "link", video_embed_html="<iframe></iframe>")
    add_post(store, 5, None, image_html="<img src='c.png'>")

    query = PostQuery(
        formats=["image", "link"],
        meta_exists={"image": ["image_html", "legacy_image_ref"], "link": ["link_target_url"]},
        meta_not_exists=["migrated"],
    )
    assert [p.id for p in store.query_posts(query)] == [1, 3]
    assert store.count_posts(query) == 2

    query.limit = 1
    assert [p.id for p in store.query_posts(query)] == [1]

    query.ascending = False
    query.limit = None
    assert [p.id for p in store.query_posts(query)] == [3, 1]


def test_query_with_no_formats_returns_nothing(store):
    add_post(store, 1, "image", image_html="x")
    assert store.query_posts(PostQuery(formats=[])) == []
    assert store.count_posts(PostQuery(formats=[])) == 0


def test_attachments(store):
    add_attachment(store, 42, "http://cdn.example/a.jpg", alt="A cat")
    assert store.get_attachment(42) == {"id": 42, "url": "http://cdn.example/a.jpg", "alt": "A cat"}
    assert store.get_attachment(43) is None


def test_file_backed_store_persists_between_connections(tmp_path):
    db_path = str(tmp_path / "data" / "wp.duckdb")
    with DuckDBPostStore(db_path) as s:
        s.create_schema()
        add_post(s, 1, "video", video_embed_html="<iframe></iframe>")

    with DuckDBPostStore(db_path) as s:
        assert s.get_meta(1, "video_embed_html") == "<iframe></iframe>"


def test_store_exposes_no_seeding_helpers():
    for name in ("insert_post", "insert_attachment", "get_all_meta"):
        assert not hasattr(DuckDBPostStore, name)
