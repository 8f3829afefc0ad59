"""
Top-level package for the post format unmigration utility.

WordPress 3.6 development builds stored image, link, video, audio and quote
post format data in post meta.  When that UI was pulled from core, the meta
became invisible on the front end.  This package moves the data back into
the post content and flags each post so it is never processed twice.
Modules are split into subpackages:

* :mod:`post_format_unmigrator.models` – post records, queries and outcomes
* :mod:`post_format_unmigrator.stores` – the DuckDB post store
* :mod:`post_format_unmigrator.selectors` – which posts are still pending
* :mod:`post_format_unmigrator.transformers` – per-format content rewriting
* :mod:`post_format_unmigrator.renderers` – legacy image attachment markup
* :mod:`post_format_unmigrator.utils` – structured reports and HTML helpers

Each layer receives its collaborators explicitly; orchestration is handled
in :mod:`post_format_unmigrator.unmigration_tool`.
"""

__version__ = "0.1.0"
