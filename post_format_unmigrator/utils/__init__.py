"""
Utility helpers used by the unmigration tool.

This subpackage exposes the structured report helpers and the small set of
HTML builders the transformer relies on.
"""

from .errors import ERRORS, report_error, report_ok
from .html import anchor, esc_url, image_tag, is_bare_url, wrap_first_img_in_link

__all__ = [
    "ERRORS",
    "report_error",
    "report_ok",
    "anchor",
    "esc_url",
    "image_tag",
    "is_bare_url",
    "wrap_first_img_in_link",
]
