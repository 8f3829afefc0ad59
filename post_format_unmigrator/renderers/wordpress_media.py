"""
WordPress REST API helpers for resolving legacy image attachments.

Legacy image meta sometimes holds nothing but an attachment id.  This module
turns that id into ``<img>`` markup by asking the WordPress site for the
media item (``GET /wp-json/wp/v2/media/<id>``) and picking the requested
image size.  A simple rate limiter keeps request bursts polite and a generic
retry wrapper handles transient network errors as well as 429/5xx
responses.

Usage example::

    renderer = WordPressMediaRenderer({"base_url": "https://blog.example"})
    renderer.render_as_markup(42, "large")
"""

from __future__ import annotations

import html
import time
from typing import Any, Callable, Dict, Optional

import requests

from post_format_unmigrator.utils.html import esc_url

###############################################################################
# Rate limiting and retry utilities
###############################################################################

class RateLimiter:
    """Spaces requests at least ``60 / rpm`` seconds apart."""

    def __init__(self, rpm: int = 120) -> None:
        self.min_interval = 60.0 / max(1, rpm)
        self._next_slot = 0.0

    def wait(self, time_fn: Callable[[], float] = time.monotonic, sleep_fn: Callable[[float], None] = time.sleep) -> None:
        delay = self._next_slot - time_fn()
        if delay > 0:
            sleep_fn(delay)
        self._next_slot = time_fn() + self.min_interval


def with_retries(
    fn: Callable[[], requests.Response],
    *,
    max_attempts: int = 4,
    base_delay: float = 0.7,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> requests.Response:
    """
    Execute a function returning a ``requests.Response``, retrying on
    transient HTTP errors (429 and 5xx) with exponential backoff.

    :param fn: A zero-argument callable that performs the HTTP request.
    :param max_attempts: Maximum number of attempts before giving up.
    :param base_delay: Base delay in seconds for exponential backoff.
    :return: The successful ``requests.Response``.
    :raises requests.HTTPError: if all attempts fail.
    """
    attempt = 0
    while True:
        try:
            resp = fn()
            resp.raise_for_status()
            return resp
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status not in (429, 500, 502, 503, 504) or attempt >= max_attempts - 1:
                raise
            retry_after = e.response.headers.get("Retry-After")
            if retry_after:
                wait = float(retry_after)
            else:
                wait = base_delay * (2 ** attempt)
            sleep_fn(wait)
            attempt += 1
        except requests.RequestException:
            if attempt >= max_attempts - 1:
                raise
            sleep_fn(base_delay * (2 ** attempt))
            attempt += 1


###############################################################################
# Media rendering
###############################################################################

class WordPressMediaRenderer:
    """
    Render attachment ids as ``<img>`` markup using the WordPress REST API.

    ``cfg`` is the ``wordpress`` configuration section: ``base_url`` plus the
    optional ``username``/``app_password`` pair for application-password
    authentication (needed when media items are private).
    """

    def __init__(
        self,
        cfg: Dict[str, Any],
        *,
        session: Optional[requests.Session] = None,
        limiter: Optional[RateLimiter] = None,
        timeout: float = 15.0,
    ) -> None:
        self.base_url = (cfg.get("base_url") or "").rstrip("/")
        self.session = session or requests.Session()
        if cfg.get("username") and cfg.get("app_password"):
            self.session.auth = (cfg["username"], cfg["app_password"])
        self.limiter = limiter or RateLimiter()
        self.timeout = timeout

    def fetch_media(self, attachment_id: int) -> Dict[str, Any]:
        self.limiter.wait()

        def do_request() -> requests.Response:
            return self.session.get(
                f"{self.base_url}/wp-json/wp/v2/media/{attachment_id}",
                params={"_fields": "id,source_url,alt_text,media_details"},
                timeout=self.timeout,
            )

        return with_retries(do_request).json()

    def render_as_markup(self, attachment_id: int, size: str = "large") -> str:
        """
        Returns the ``<img>`` markup for ``attachment_id`` at ``size``, or an
        empty string if the media item cannot be fetched.
        """
        try:
            media = self.fetch_media(attachment_id)
        except (requests.RequestException, ValueError) as e:
            print(f"[ERROR] Failed to fetch media {attachment_id}: {e}")
            return ""

        sizes = (media.get("media_details") or {}).get("sizes") or {}
        url = (sizes.get(size) or {}).get("source_url") or media.get("source_url")
        if not url:
            return ""
        alt = media.get("alt_text") or ""
        return f'<img src="{esc_url(url)}" class="attachment-{size}" alt="{html.escape(alt)}" />'


class DuckDBAttachmentRenderer:
    """Render attachment ids from the ``attachments`` table of a post store."""

    def __init__(self, store) -> None:
        self.store = store

    def render_as_markup(self, attachment_id: int, size: str = "large") -> str:
        attachment = self.store.get_attachment(attachment_id)
        if not attachment:
            return ""
        return (
            f'<img src="{esc_url(attachment["url"])}" class="attachment-{size}" '
            f'alt="{html.escape(attachment["alt"])}" />'
        )
