from __future__ import annotations

import re

# Schemes WordPress' esc_url() lets through; anything else is dropped.
ALLOWED_PROTOCOLS = (
    "http", "https", "ftp", "ftps", "mailto", "news", "irc", "irc6", "ircs",
    "gopher", "nntp", "feed", "telnet", "mms", "rtsp", "sms", "svn", "tel",
    "fax", "xmpp", "webcal", "urn",
)

_INVALID_URL_CHARS = re.compile(r"[^a-z0-9\-~+_.?#=!&;,/:%@$|*'()\[\]\x80-\U0010ffff]", re.IGNORECASE)
_SCHEME = re.compile(r"^([a-z][a-z0-9+.\-]*):", re.IGNORECASE)
_FIRST_IMG = re.compile(r"^(.*?)(<img [^>]+>)(.*)$", re.IGNORECASE | re.DOTALL)


def esc_url(url: str) -> str:
    """
    Clean a URL for use inside an HTML attribute.

    - Trims whitespace and drops characters that are never valid in a URL
      (quotes, angle brackets, spaces)
    - Returns an empty string for schemes outside :data:`ALLOWED_PROTOCOLS`
    - Prefixes ``http://`` to scheme-less host names
    - Encodes ``&`` and ``'`` as numeric entities
    """
    if not url:
        return ""
    text = _INVALID_URL_CHARS.sub("", url.strip().replace(" ", "%20"))
    if not text:
        return ""

    match = _SCHEME.match(text)
    if match:
        if match.group(1).lower() not in ALLOWED_PROTOCOLS:
            return ""
    elif not text.startswith(("/", "#", "?")) and not text.endswith(".php"):
        text = "http://" + text

    text = re.sub(r"&(?!#?\w+;)", "&#038;", text)
    return text.replace("'", "&#039;")


def is_bare_url(markup: str) -> bool:
    """True when ``markup`` carries no tags at all."""
    return "<" not in markup


def image_tag(src: str) -> str:
    return f'<img src="{esc_url(src)}" alt="" />'


def anchor(url: str, text: str) -> str:
    return f'<a href="{esc_url(url)}">{text}</a>'


def wrap_first_img_in_link(markup: str, url: str) -> str:
    """
    Wrap the first ``<img ...>`` tag of ``markup`` in an anchor to ``url``.

    Matching is case-insensitive and spans newlines.  Markup without an image
    tag is returned as is.
    """
    match = _FIRST_IMG.match(markup)
    if not match:
        return markup
    before, tag, after = match.groups()
    return f"{before}{anchor(url, tag)}{after}"
