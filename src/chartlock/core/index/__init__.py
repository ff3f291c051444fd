"""Repository indexes: models, the read-only cache, and version lookup.

Public API::

    from chartlock.core.index import IndexCache, IndexFile, ChartVersion
    from chartlock.core.index import find_version, select_version
"""

from __future__ import annotations

from chartlock.core.index.cache import IndexCache, cache_index_file
from chartlock.core.index.lookup import find_version, select_version
from chartlock.core.index.models import ChartVersion, IndexFile

__all__ = [
    "ChartVersion",
    "IndexCache",
    "IndexFile",
    "cache_index_file",
    "find_version",
    "select_version",
]
