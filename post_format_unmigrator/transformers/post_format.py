"""
Moves post format meta back into post content.

Each supported format has a builder that reads the format's meta (current
key first, legacy key when the current one is missing or blank) and returns
the new post content, or ``None`` when there was nothing usable to move.

image
    The image markup (or a bare URL, or a legacy attachment id rendered
    through the attachment renderer) is prepended to the content.  When a
    link URL is present the first ``<img>`` tag is wrapped in an anchor.
link
    ``<a href="URL">TITLE</a>`` is prepended to the content.
video / audio
    The embed code is prepended verbatim.
quote
    The content is wrapped in a ``<blockquote>``; when a source name or URL
    is known the blockquote sits in a ``<figure>`` with a caption.

Prepended fragments are separated from the original content by a blank
line.  The migrated flag is written for every post that reaches a builder,
whether or not its content changes, so that the selector never returns it
again.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, Optional, Union

from post_format_unmigrator.models import MIGRATED_META_KEY, PostRecord, UnmigrationOutcome
from post_format_unmigrator.utils.errors import report_error, report_ok
from post_format_unmigrator.utils.html import anchor, image_tag, is_bare_url, wrap_first_img_in_link

PostRef = Union[PostRecord, int]

_ATTACHMENT_ID = re.compile(r"[0-9]+")


class PostFormatTransformer:
    def __init__(self, store, *, attachment_renderer=None, image_size: str = "large") -> None:
        self.store = store
        self.attachment_renderer = attachment_renderer
        self.image_size = image_size
        self._builders: Dict[str, Callable[[PostRecord], Optional[str]]] = {
            "image": self._image_content,
            "link": self._link_content,
            "video": self._video_content,
            "audio": self._audio_content,
            "quote": self._quote_content,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def transform(self, post: PostRef) -> UnmigrationOutcome:
        """
        Unmigrates a single post and flags it as migrated.

        Returns an outcome with ``changed=True`` only when new content was
        saved.  Missing posts, posts without usable meta and failed writes
        all come back as ``changed=False``.
        """
        post_id = post.id if isinstance(post, PostRecord) else post
        record = self.store.get_post(post_id)

        if record is None:
            report_error("POST_NOT_FOUND", post)
            return UnmigrationOutcome(post_id=post_id, changed=False)

        if self.is_migrated(record.id):
            report_error("ALREADY_MIGRATED", record)
            return UnmigrationOutcome(post_id=record.id, changed=False)

        if not record.format:
            self._mark_migrated(record)
            report_error("NO_FORMAT", record)
            return UnmigrationOutcome(post_id=record.id, changed=False)

        builder = self._builders.get(record.format)
        if builder is None:
            report_error("UNSUPPORTED_FORMAT", record)
            return UnmigrationOutcome(post_id=record.id, changed=False)

        content = builder(record)
        self._mark_migrated(record)

        if content is None:
            report_error("NO_SIDECAR_DATA", record)
            return UnmigrationOutcome(post_id=record.id, changed=False)

        if content == record.content:
            report_error("CONTENT_UNCHANGED", record)
            return UnmigrationOutcome(post_id=record.id, changed=False)

        if not self.store.update_content(record.id, content):
            report_error("CONTENT_WRITE_FAILED", record)
            return UnmigrationOutcome(post_id=record.id, changed=False)

        report_ok("POST_UNMIGRATED", record, {"length_before": len(record.content), "length_after": len(content)})
        return UnmigrationOutcome(post_id=record.id, changed=True)

    def render_content(self, post: PostRef) -> Optional[str]:
        """
        Builds the content ``transform`` would save, without writing anything.

        Returns ``None`` when ``transform`` would leave the content as is.
        """
        post_id = post.id if isinstance(post, PostRecord) else post
        record = self.store.get_post(post_id)
        if record is None or not record.format or self.is_migrated(record.id):
            return None
        builder = self._builders.get(record.format)
        if builder is None:
            return None
        content = builder(record)
        if content is None or content == record.content:
            return None
        return content

    def is_migrated(self, post_id: int) -> bool:
        return self.store.get_meta(post_id, MIGRATED_META_KEY) is not None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _mark_migrated(self, post: PostRecord) -> None:
        self.store.set_meta(post.id, MIGRATED_META_KEY, "1")

    def _first_meta(self, post_id: int, *keys: str, strip: bool = True) -> Optional[str]:
        """
        Value of the first key in ``keys`` holding a non-blank value.  With
        ``strip=False`` the value comes back exactly as stored.
        """
        for key in keys:
            value = self.store.get_meta(post_id, key)
            if value and value.strip():
                return value.strip() if strip else value
        return None

    # ------------------------------------------------------------------
    # Format builders
    # ------------------------------------------------------------------

    def _image_content(self, post: PostRecord) -> Optional[str]:
        image = self._first_meta(post.id, "image_html")
        if not image:
            image = self._legacy_image(post)
        if not image:
            return None

        # Is it just a URL?
        if is_bare_url(image):
            image = image_tag(image)

        url = self._first_meta(post.id, "link_url", "legacy_link_url")
        if url:
            image = wrap_first_img_in_link(image, url)

        return f"{image}\n\n{post.content}"

    def _legacy_image(self, post: PostRecord) -> Optional[str]:
        ref = self._first_meta(post.id, "legacy_image_ref")
        # Only plain ASCII digits are an attachment id; anything else is markup
        if not ref or not _ATTACHMENT_ID.fullmatch(ref):
            return ref
        if self.attachment_renderer is None:
            print(f"[ERROR] No attachment renderer configured for attachment {ref} of post {post.id}")
            return None
        try:
            markup = self.attachment_renderer.render_as_markup(int(ref), self.image_size)
        except Exception as e:
            print(f"[ERROR] Failed to render attachment {ref} of post {post.id}: {e}")
            return None
        return markup or None

    def _link_content(self, post: PostRecord) -> Optional[str]:
        url = self._first_meta(post.id, "link_target_url", "legacy_link_url")
        if not url:
            return None
        return f"{anchor(url, post.title)}\n\n{post.content}"

    def _video_content(self, post: PostRecord) -> Optional[str]:
        embed = self._first_meta(post.id, "video_embed_html", "legacy_media_embed", strip=False)
        if not embed:
            return None
        return f"{embed}\n\n{post.content}"

    def _audio_content(self, post: PostRecord) -> Optional[str]:
        embed = self._first_meta(post.id, "audio_embed_html", "legacy_media_embed", strip=False)
        if not embed:
            return None
        return f"{embed}\n\n{post.content}"

    def _quote_content(self, post: PostRecord) -> Optional[str]:
        name = self._first_meta(post.id, "quote_source_name", "legacy_quote_source_name")
        url = self._first_meta(post.id, "quote_source_url", "legacy_link_url")

        # No source name but there is a URL, then use the URL as the name
        if not name and url:
            name = url

        if name and url:
            name = anchor(url, name)

        if name:
            return (
                f"<figure>\n<blockquote>{post.content}</blockquote>\n"
                f"<figcaption>&mdash; {name}</figcaption>\n</figure>"
            )
        # Blockquote the whole content so it doesn't read as a standard post
        return f"<blockquote>{post.content}</blockquote>"
