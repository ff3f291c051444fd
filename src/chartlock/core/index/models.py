"""Repository index data models: ``IndexFile`` and ``ChartVersion``.

A repository index lists, per chart name, every version the repository
serves. These are pure data holders (dataclasses) with no lookup logic,
which lives in ``chartlock.core.index.lookup``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartVersion:
    """A single chart version entry in a repository index.

    Attributes:
        name: Chart name.
        version: Version string as published (e.g. "0.2.0").
        urls: Download URLs for the packaged chart. An index entry with no
            URL cannot be fetched and is never selected.
        deprecated: True if the publisher marked this version deprecated.
        digest: Archive digest published by the repository, if any.
        created: Publication timestamp as written in the index.
        app_version: Version of the packaged application, if any.
    """

    name: str
    version: str
    urls: tuple[str, ...] = field(default_factory=tuple)
    deprecated: bool = False
    digest: str = ""
    created: str = ""
    app_version: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any], name: str = "") -> ChartVersion:
        return cls(
            name=str(data.get("name") or name),
            version=str(data.get("version", "")),
            urls=tuple(str(u) for u in data.get("urls") or ()),
            deprecated=bool(data.get("deprecated", False)),
            digest=str(data.get("digest") or ""),
            created=str(data.get("created") or ""),
            app_version=str(data.get("appVersion") or ""),
        )


@dataclass
class IndexFile:
    """A repository index: chart name -> published versions.

    Attributes:
        entries: Mapping of chart name to its versions, in file order.
        api_version: Index format version, "v1" for current repositories.
        generated: Generation timestamp as written in the index.
    """

    entries: dict[str, list[ChartVersion]] = field(default_factory=dict)
    api_version: str = "v1"
    generated: str = ""

    def versions(self, name: str) -> list[ChartVersion]:
        return list(self.entries.get(name, ()))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndexFile:
        """Build an index from a parsed ``index.yaml`` mapping.

        Entries that are not mappings, and charts whose versions are not a
        list, are skipped with a warning so one bad record does not hide the
        rest of the repository.
        """
        entries: dict[str, list[ChartVersion]] = {}
        for name, versions in (data.get("entries") or {}).items():
            if versions is not None and not isinstance(versions, list):
                logger.warning("Skipping malformed index versions for %s: %r", name, versions)
                continue
            parsed: list[ChartVersion] = []
            for raw in versions or ():
                if not isinstance(raw, dict):
                    logger.warning("Skipping malformed index entry for %s: %r", name, raw)
                    continue
                parsed.append(ChartVersion.from_dict(raw, name=str(name)))
            entries[str(name)] = parsed
        return cls(
            entries=entries,
            api_version=str(data.get("apiVersion", "v1")),
            generated=str(data.get("generated") or ""),
        )
