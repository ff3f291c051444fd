"""Read ``Chart.yaml`` from a chart directory or packaged ``.tgz`` archive.

Only the metadata needed for dependency resolution is extracted: the
chart's own name and version and its declared dependency list. Templates,
values, and the rest of the archive are never read.
"""

from __future__ import annotations

import logging
import tarfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from chartlock.core.dependency.models import Dependency
from chartlock.exceptions import ChartLoadError

logger = logging.getLogger(__name__)

CHART_FILE = "Chart.yaml"


@dataclass(frozen=True)
class ChartMetadata:
    """The parts of ``Chart.yaml`` the resolver uses.

    Attributes:
        name: Chart name.
        version: The chart's own version.
        api_version: Chart API version ("v1" or "v2").
        dependencies: Declared dependencies, in file order.
    """

    name: str
    version: str
    api_version: str = "v2"
    dependencies: tuple[Dependency, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any, source: str = "") -> ChartMetadata:
        """Build metadata from a parsed ``Chart.yaml`` mapping.

        Raises:
            ChartLoadError: If required fields are missing or malformed.
        """
        if not isinstance(data, dict):
            raise ChartLoadError(f"{source or CHART_FILE}: expected a mapping")
        name = data.get("name")
        version = data.get("version")
        if not name or version is None:
            raise ChartLoadError(
                f"{source or CHART_FILE}: chart metadata must define name and version"
            )
        raw_deps = data.get("dependencies") or []
        if not isinstance(raw_deps, list):
            raise ChartLoadError(f"{source or CHART_FILE}: dependencies must be a list")
        try:
            deps = tuple(Dependency.from_dict(d) for d in raw_deps)
        except (TypeError, AttributeError, ValueError) as exc:
            raise ChartLoadError(f"{source or CHART_FILE}: {exc}") from exc
        return cls(
            name=str(name),
            version=str(version),
            api_version=str(data.get("apiVersion", "v2")),
            dependencies=deps,
        )


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ChartLoadError(f"{path}: cannot read chart metadata: {exc}") from exc


def _parse(text: str, source: str) -> ChartMetadata:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ChartLoadError(f"{source}: invalid YAML: {exc}") from exc
    return ChartMetadata.from_dict(data, source)


def _read_archive(path: Path) -> ChartMetadata:
    try:
        with tarfile.open(path, "r:*") as tar:
            for member in tar.getmembers():
                parts = member.name.split("/")
                if member.isfile() and len(parts) == 2 and parts[1] == CHART_FILE:
                    fh = tar.extractfile(member)
                    if fh is None:
                        break
                    with fh:
                        text = fh.read().decode("utf-8")
                    return _parse(text, f"{path}:{member.name}")
    except (tarfile.TarError, OSError, UnicodeDecodeError) as exc:
        raise ChartLoadError(f"{path}: cannot read chart archive: {exc}") from exc
    raise ChartLoadError(f"{path}: archive has no {CHART_FILE}")


def load_chart_metadata(path: str | Path) -> ChartMetadata:
    """Load chart metadata from a directory or an archive file.

    Args:
        path: A chart directory containing ``Chart.yaml``, the ``Chart.yaml``
            file itself, or a packaged chart archive.

    Returns:
        The parsed ``ChartMetadata``.

    Raises:
        ChartLoadError: If no metadata can be read from *path*.
    """
    path = Path(path)
    if path.is_dir():
        chart_file = path / CHART_FILE
        if not chart_file.is_file():
            raise ChartLoadError(f"{path}: no {CHART_FILE} found")
        logger.debug("Loading chart metadata from %s", chart_file)
        return _parse(_read_text(chart_file), str(chart_file))
    if path.is_file():
        if path.name == CHART_FILE:
            return _parse(_read_text(path), str(path))
        logger.debug("Loading chart metadata from archive %s", path)
        return _read_archive(path)
    raise ChartLoadError(f"{path}: no such chart")
