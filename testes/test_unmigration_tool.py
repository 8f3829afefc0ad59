import json
import math
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

import main
from post_format_unmigrator.renderers import DuckDBAttachmentRenderer, WordPressMediaRenderer
from post_format_unmigrator.stores import DuckDBPostStore
from post_format_unmigrator.unmigration_tool import PostFormatUnmigrationTool
from conftest import add_attachment, add_post


def make_tool(store, **unmigration):
    config = {"wordpress": {"base_url": ""}, "unmigration": unmigration}
    return PostFormatUnmigrationTool(config=config, store=store)


def count_selections(monkeypatch, tool):
    sizes = []
    original = tool.selector.select

    def counting_select(limit=None):
        batch = original(limit)
        sizes.append(len(batch))
        return batch

    monkeypatch.setattr(tool.selector, "select", counting_select)
    return sizes


@pytest.mark.parametrize("total,batch_size", [(7, 3), (6, 3), (1, 25), (25, 25)])
def test_run_terminates_after_one_empty_selection(store, monkeypatch, total, batch_size):
    for post_id in range(1, total + 1):
        add_post(store, post_id, "link", link_target_url=f"http://x.example/{post_id}")
    tool = make_tool(store, batch_size=batch_size)
    sizes = count_selections(monkeypatch, tool)

    summary = tool.run()

    batches = math.ceil(total / batch_size)
    assert sizes[-1] == 0
    assert len([s for s in sizes if s]) == batches
    assert len(sizes) == batches + 1
    assert summary.processed == total
    assert summary.changed == total
    assert summary.batches == batches
    assert tool.count_pending() == 0


def test_run_counts_no_action_posts_and_still_terminates(store):
    add_post(store, 1, "image", image_html="")
    add_post(store, 2, "link", link_target_url="http://x.example")
    add_post(store, 3, "video", legacy_media_embed=" ")
    summary = make_tool(store, batch_size=2).run()
    assert summary.processed == 3
    assert summary.changed == 1
    assert store.get_post(1).content == "Body"


def test_run_respects_limit(store, monkeypatch):
    for post_id in range(1, 11):
        add_post(store, post_id, "audio", audio_embed_html="<audio></audio>")
    tool = make_tool(store, batch_size=3, limit=5)
    sizes = count_selections(monkeypatch, tool)

    summary = tool.run()

    assert summary.processed == 5
    assert sizes == [3, 2]
    assert tool.count_pending() == 5


def test_run_with_nothing_pending(store, isolated_reports):
    summary = make_tool(store).run()
    assert summary.processed == 0
    assert summary.batches == 0
    log = (isolated_reports / "unmigration.log").read_text(encoding="utf-8")
    assert "No posts needing unmigration could be found." in log


def test_run_logs_each_post(store, isolated_reports):
    add_post(store, 1, "link", title="First", link_target_url="http://x.example")
    add_post(store, 2, "image", title="Second", image_html="")
    make_tool(store).run()
    log = (isolated_reports / "unmigration.log").read_text(encoding="utf-8")
    assert "INFO: 1. First - Processed" in log
    assert "WARNING: 2. Second - No action taken" in log
    assert "Finished processing 2 posts" in log


def test_preview_writes_nothing(store):
    add_post(store, 1, "quote", quote_source_name="Jane")
    add_post(store, 2, "image", image_html="")
    tool = make_tool(store)

    results = tool.preview()

    assert [(post.id, content is not None) for post, content in results] == [(1, True), (2, False)]
    assert store.get_post(1).content == "Body"
    assert tool.count_pending() == 2


def test_config_defaults(store, monkeypatch):
    monkeypatch.delenv("WP_BASE_URL", raising=False)
    tool = PostFormatUnmigrationTool(store=store)
    assert tool.config["unmigration"] == {"batch_size": 25, "limit": None, "dry_run": False, "image_size": "large"}
    assert tool.selector.batch_size == 25
    assert isinstance(tool.attachment_renderer, DuckDBAttachmentRenderer)


def test_wordpress_base_url_selects_rest_renderer(store, monkeypatch):
    monkeypatch.setenv("WP_BASE_URL", "https://blog.example/")
    tool = PostFormatUnmigrationTool(store=store)
    assert isinstance(tool.attachment_renderer, WordPressMediaRenderer)
    assert tool.attachment_renderer.base_url == "https://blog.example"


def test_config_file_and_database_path(tmp_path):
    db_path = tmp_path / "data" / "wp.duckdb"
    config_file = tmp_path / "config.json"
    config_file.write_text(
        json.dumps({"database": {"path": str(db_path)}, "unmigration": {"batch_size": 2, "image_size": "medium"}}),
        encoding="utf-8",
    )
    tool = PostFormatUnmigrationTool(config_file=str(config_file))
    try:
        assert tool.selector.batch_size == 2
        assert tool.transformer.image_size == "medium"
        assert tool.config["unmigration"]["limit"] is None
        add_post(tool.store, 1, "link", link_target_url="http://x.example")
        assert tool.count_pending() == 1
    finally:
        tool.close()
    assert db_path.exists()


def test_legacy_attachment_resolved_from_database(store):
    add_attachment(store, 42, "http://cdn.example/cat.jpg", alt="Cat")
    add_post(store, 1, "image", legacy_image_ref="42")
    make_tool(store).run()
    assert store.get_post(1).content == (
        '<img src="http://cdn.example/cat.jpg" class="attachment-large" alt="Cat" />\n\nBody'
    )


def test_main_status_and_run(tmp_path, capsys, monkeypatch):
    monkeypatch.delenv("WP_BASE_URL", raising=False)
    db_path = str(tmp_path / "wp.duckdb")
    with DuckDBPostStore(db_path) as s:
        s.create_schema()
        add_post(s, 1, "video", video_embed_html="<iframe></iframe>")
        add_post(s, 2, "link", link_target_url="http://x.example")

    assert main.main(["--database", db_path, "--status"]) == 0
    assert "2 posts need to be unmigrated." in capsys.readouterr().out

    assert main.main(["--database", db_path, "--dry-run"]) == 0
    assert "--- post 1 (video) ---" in capsys.readouterr().out

    assert main.main(["--database", db_path, "--batch-size", "1"]) == 0
    with DuckDBPostStore(db_path) as s:
        assert s.get_post(1).content == "<iframe></iframe>\n\nBody"
        assert s.get_meta(2, "migrated") == "1"
