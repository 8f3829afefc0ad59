"""
Attachment renderers used by the image branch of the transformer.

Both renderers expose ``render_as_markup(attachment_id, size)`` and return an
empty string when the attachment cannot be resolved.
"""

from .wordpress_media import DuckDBAttachmentRenderer, RateLimiter, WordPressMediaRenderer, with_retries

__all__ = ["DuckDBAttachmentRenderer", "RateLimiter", "WordPressMediaRenderer", "with_retries"]
