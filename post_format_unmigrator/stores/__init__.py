"""
Record stores.

A store exposes the narrow interface the selector and transformer need:
``query_posts``/``count_posts`` for structured queries, ``get_post``,
``get_meta``/``set_meta`` for side-car values and ``update_content`` for the
post body.  :class:`DuckDBPostStore` is the bundled implementation.
"""

from .duckdb_store import DuckDBPostStore

__all__ = ["DuckDBPostStore"]
