"""
Outcome journal of an unmigration run.

Each post handed to the transformer leaves one JSON object on its own line
below ``reports/unmigration``.  Posts that were skipped or could not be
rewritten land in ``errors.jsonl`` with the reason code from ``ERRORS``;
posts whose content was rewritten land in ``success.jsonl``.

An unknown code is written with the code itself as its message, so new
codes never break a run.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional, Union

from post_format_unmigrator.models import PostRecord

ERRORS: Dict[str, str] = {
    "POST_NOT_FOUND": "Post could not be found",
    "NO_FORMAT": "Post has no post format",
    "UNSUPPORTED_FORMAT": "Post format is not supported",
    "NO_SIDECAR_DATA": "No usable post format meta found",
    "CONTENT_UNCHANGED": "Post content already up to date",
    "CONTENT_WRITE_FAILED": "Failed to save post content",
    "ALREADY_MIGRATED": "Post was already unmigrated",
    "POST_UNMIGRATED": "Post format data moved into post content",
}

_REPORT_DIR = os.path.join("reports", "unmigration")
_ERROR_LOG = "errors.jsonl"
_OK_LOG = "success.jsonl"

PostLike = Union[PostRecord, Dict[str, Any], int, None]


def _write_jsonl(name: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``name``."""
    os.makedirs(_REPORT_DIR, exist_ok=True)
    with open(os.path.join(_REPORT_DIR, name), "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def _post_fields(post: PostLike) -> Dict[str, Any]:
    if isinstance(post, PostRecord):
        return {"post_id": post.id, "title": post.title, "format": post.format}
    if isinstance(post, dict):
        return {"post_id": post.get("id"), "title": post.get("title"), "format": post.get("format")}
    return {"post_id": post, "title": None, "format": None}


def report_error(code: str, post: PostLike, exc: Optional[Exception] = None) -> None:
    """Log a no-action event for ``post``.

    Parameters
    ----------
    code:
        A key identifying the cause.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    post:
        The post record (or bare id when the post could not be resolved).
    exc:
        Optional exception instance that triggered the error.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {"code": code, "message": message}
    entry.update(_post_fields(post))
    if exc is not None:
        entry["error"] = str(exc)
    print(f"[ERROR] {message} - {entry['post_id']}")
    _write_jsonl(_ERROR_LOG, entry)


def report_ok(code: str, post: PostLike, extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for ``post``.

    Parameters
    ----------
    code:
        A key identifying the type of event.
    post:
        The post record associated with the event.
    extra:
        Optional dictionary of additional fields to merge into the log entry.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {"code": code, "message": message}
    entry.update(_post_fields(post))
    if extra:
        entry.update(extra)
    print(f"[OK] {message} - {entry['post_id']}")
    _write_jsonl(_OK_LOG, entry)
