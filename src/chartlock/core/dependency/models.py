"""Dependency records and source classification.

A chart declares its dependencies as an ordered list of ``Dependency``
records. The same type carries resolved dependencies: after resolution the
``version`` field holds one concrete version instead of a constraint.

Where a dependency comes from is decided by its ``repository`` locator and
modelled as the ``SourceKind`` tagged variant, so the resolver dispatches on
one value instead of sniffing string prefixes in several places.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

FILE_SCHEME = "file://"
OCI_SCHEME = "oci://"


def dependency_key(name: str, index: int) -> str:
    """Return the per-dependency alias key ``<name>-<index>``.

    The index is the dependency's position in the declared list, which keeps
    two dependencies with the same name but different sources apart. Callers
    building a Source Alias Map must use this same convention.
    """
    return f"{name}-{index}"


def is_oci(repository: str) -> bool:
    """Return True if the locator points at an OCI registry."""
    return repository.startswith(OCI_SCHEME)


class SourceKind(Enum):
    """Where a dependency is resolved from."""

    LOCAL_SUBCHART = "local-subchart"
    LOCAL_PATH = "local-path"
    REMOTE = "remote"

    @classmethod
    def of(cls, dependency: Dependency) -> SourceKind:
        """Classify a dependency by its repository locator.

        - ``""``: a subchart vendored under the parent chart's ``charts/``.
        - ``file://...``: a chart elsewhere on the local filesystem.
        - anything else: a remote repository or OCI registry.
        """
        if dependency.repository == "":
            return cls.LOCAL_SUBCHART
        if dependency.repository.startswith(FILE_SCHEME):
            return cls.LOCAL_PATH
        return cls.REMOTE


@dataclass(frozen=True)
class Dependency:
    """A dependency entry from ``Chart.yaml`` or ``Chart.lock``.

    Attributes:
        name: Chart name of the dependency.
        repository: Source locator. Empty for a vendored subchart,
            ``file://`` for a local path, a URL, ``@alias`` or ``oci://``
            reference for a remote source.
        version: Declared constraint (e.g. ">=0.1.0"), or the concrete
            version once resolved.
        condition: Values path that toggles the dependency. Not resolved.
        tags: Group tags that toggle the dependency. Not resolved.
        alias: Name the dependency is installed under. Not resolved.
    """

    name: str
    repository: str = ""
    version: str = ""
    condition: str = ""
    tags: tuple[str, ...] = field(default_factory=tuple)
    alias: str = ""

    @property
    def kind(self) -> SourceKind:
        return SourceKind.of(self)

    def resolved(self, version: str) -> Dependency:
        """Return the lock record for this dependency at *version*."""
        return Dependency(name=self.name, repository=self.repository, version=version)

    def to_dict(self) -> dict[str, Any]:
        """Serialize in ``Chart.yaml`` key order, omitting empty optionals."""
        data: dict[str, Any] = {"name": self.name}
        if self.version:
            data["version"] = self.version
        data["repository"] = self.repository
        if self.condition:
            data["condition"] = self.condition
        if self.tags:
            data["tags"] = list(self.tags)
        if self.alias:
            data["alias"] = self.alias
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dependency:
        """Build a dependency from a parsed YAML mapping.

        Raises:
            ValueError: If the mapping has no ``name``.
        """
        name = data.get("name")
        if not name:
            raise ValueError(f"dependency entry has no name: {data!r}")
        return cls(
            name=str(name),
            repository=str(data.get("repository") or ""),
            version=str(data.get("version") or ""),
            condition=str(data.get("condition") or ""),
            tags=tuple(str(t) for t in data.get("tags") or ()),
            alias=str(data.get("alias") or ""),
        )
