"""Read-only access to cached repository indexes.

Repository indexes are downloaded by a separate update step and stored as
``<cache>/<alias>-index.yaml``. This module only reads them; refreshing the
cache is not its concern.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from chartlock.core.index.models import IndexFile
from chartlock.exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)


def cache_index_file(alias: str) -> str:
    """Return the cache file name for a repository alias."""
    return f"{alias}-index.yaml"


class IndexCache:
    """Loads cached repository indexes by alias.

    Args:
        cache_path: Directory holding ``<alias>-index.yaml`` files.
    """

    def __init__(self, cache_path: str | Path) -> None:
        self._cache_path = Path(cache_path)

    @property
    def cache_path(self) -> Path:
        return self._cache_path

    def path_for(self, alias: str) -> Path:
        return self._cache_path / cache_index_file(alias)

    def load(self, alias: str) -> IndexFile:
        """Load the cached index for *alias*.

        Raises:
            CacheUnavailableError: If the index is missing or unreadable.
        """
        path = self.path_for(alias)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CacheUnavailableError(
                f"no cached repository index for {alias} found at {path} "
                f"(update the repository cache): {exc.strerror or exc}"
            ) from exc
        except UnicodeDecodeError as exc:
            raise CacheUnavailableError(
                f"cached repository index for {alias} is not valid UTF-8: {exc}"
            ) from exc

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise CacheUnavailableError(
                f"cached repository index for {alias} is not valid YAML: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise CacheUnavailableError(
                f"cached repository index for {alias} is empty or malformed"
            )
        if not isinstance(data.get("entries") or {}, dict):
            raise CacheUnavailableError(
                f"cached repository index for {alias} has malformed entries"
            )

        index = IndexFile.from_dict(data)
        logger.debug("Loaded index %s with %d charts", path, len(index.entries))
        return index
