"""
Content transformers.

Currently this subpackage exposes :class:`PostFormatTransformer` from
:mod:`post_format_unmigrator.transformers.post_format`.
"""

from .post_format import PostFormatTransformer

__all__ = ["PostFormatTransformer"]
