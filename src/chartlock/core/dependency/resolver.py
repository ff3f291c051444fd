"""Dependency resolution: declared requirements to a concrete ``Lock``.

The resolver walks a chart's declared dependencies in order and resolves
each to exactly one version:

- **Vendored subcharts** (empty repository) must exist under the chart's
  ``charts/`` directory and are locked at their declared version.
- **Local paths** (``file://``) must point at a chart whose own version
  satisfies the declared constraint; that version is locked.
- **Remote repositories** are resolved against the cached index for the
  repository alias the caller assigned to the dependency's positional key,
  selecting the highest satisfying published version.
- **OCI registries** lock an exact declared version directly, or match a
  range against the registry's tag list.

Resolution is fail-fast: the first dependency that cannot be resolved
aborts the call and no lock is produced.

Example::

    resolver = Resolver("mychart", "~/.cache/chartlock/repository")
    lock = resolver.resolve(chart.dependencies, {"alpine-0": "stable"})
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path

from chartlock.core.chart import load_chart_metadata
from chartlock.core.dependency.constraints import Version, VersionConstraint
from chartlock.core.dependency.models import (
    OCI_SCHEME,
    Dependency,
    SourceKind,
    dependency_key,
    is_oci,
)
from chartlock.core.dependency.paths import get_local_path
from chartlock.core.index import ChartVersion, IndexCache, IndexFile, find_version, select_version
from chartlock.core.lockfile import Lock, hash_req
from chartlock.exceptions import (
    ChartLoadError,
    ConstraintUnsatisfiedError,
    LocalPathNotFoundError,
    RegistryError,
    ResolutionError,
)
from chartlock.registry import RegistryClient

logger = logging.getLogger(__name__)

SUBCHARTS_DIR = "charts"


class _Pass:
    """Per-call state shared by the handlers of one ``resolve`` run."""

    def __init__(self, aliases: Mapping[str, str]) -> None:
        self.aliases = aliases
        self.indexes: dict[str, IndexFile] = {}


class Resolver:
    """Resolves a chart's declared dependencies to a ``Lock``.

    A resolver holds only read-only configuration, so one instance can serve
    any number of ``resolve`` calls, including concurrent ones.

    Args:
        chart_path: Directory of the chart whose dependencies are resolved.
            Vendored subcharts and relative ``file://`` paths are looked up
            from here.
        cache_path: Directory of cached repository indexes.
        registry_client: Lists tags for ``oci://`` dependencies declared
            with a range. Not needed for exact OCI versions.
        index_cache: Index loader to use instead of one over *cache_path*.
    """

    def __init__(
        self,
        chart_path: str | os.PathLike[str],
        cache_path: str | os.PathLike[str],
        registry_client: RegistryClient | None = None,
        index_cache: IndexCache | None = None,
    ) -> None:
        self._chart_path = os.fspath(chart_path)
        self._index_cache = index_cache or IndexCache(cache_path)
        self._registry_client = registry_client
        self._handlers: dict[
            SourceKind, Callable[[Dependency, str, VersionConstraint, _Pass], str]
        ] = {
            SourceKind.LOCAL_SUBCHART: self._resolve_subchart,
            SourceKind.LOCAL_PATH: self._resolve_local_path,
            SourceKind.REMOTE: self._resolve_remote,
        }

    def resolve(
        self,
        requirements: Sequence[Dependency],
        aliases: Mapping[str, str] | None = None,
    ) -> Lock:
        """Resolve *requirements* to a lock.

        Args:
            requirements: Declared dependencies, in chart order.
            aliases: Source Alias Map, ``"<name>-<index>"`` -> repository
                alias of the cached index to consult.

        Returns:
            A ``Lock`` with one resolved dependency per requirement, in the
            same order, and the requirements digest.

        Raises:
            InvalidConstraintError: A declared version is not parseable.
            CacheUnavailableError: No cached index for a dependency's alias.
            ChartNotFoundError: The index has no entries for the chart.
            ConstraintUnsatisfiedError: No available version satisfies.
            LocalPathNotFoundError: A local source does not exist.
            RegistryError: An OCI registry could not be queried.
        """
        run = _Pass(aliases or {})
        locked: list[Dependency] = []

        for i, dep in enumerate(requirements):
            key = dependency_key(dep.name, i)
            try:
                constraint = VersionConstraint(dep.version)
                kind = SourceKind.of(dep)
                logger.debug("Resolving %s as %s", key, kind.value)
                version = self._handlers[kind](dep, key, constraint, run)
            except ResolutionError as exc:
                if not exc.dependency:
                    exc.dependency = dep.name
                raise
            logger.debug("Resolved %s to %s", key, version)
            locked.append(dep.resolved(version))

        resolved = tuple(locked)
        return Lock(
            dependencies=resolved,
            digest=hash_req(requirements, resolved),
            generated=datetime.now(timezone.utc),
        )

    # -- Source handlers ----------------------------------------------------

    def _resolve_subchart(
        self, dep: Dependency, key: str, constraint: VersionConstraint, run: _Pass
    ) -> str:
        try:
            get_local_path(os.path.join(SUBCHARTS_DIR, dep.name), self._chart_path)
        except LocalPathNotFoundError:
            if not VersionConstraint.is_exact(dep.version):
                raise
            # A packaged subchart is stored as charts/<name>-<version>.tgz.
            archive = os.path.join(SUBCHARTS_DIR, f"{dep.name}-{dep.version}.tgz")
            get_local_path(archive, self._chart_path)
        return dep.version

    def _resolve_local_path(
        self, dep: Dependency, key: str, constraint: VersionConstraint, run: _Pass
    ) -> str:
        path = get_local_path(dep.repository, self._chart_path)
        try:
            metadata = load_chart_metadata(path)
        except ChartLoadError as exc:
            raise LocalPathNotFoundError(
                f"{path} is not a usable chart: {exc}", dependency=dep.name, path=path
            ) from exc

        try:
            satisfied = constraint.check(Version.parse(metadata.version))
        except ValueError:
            satisfied = False
        if not satisfied:
            raise ConstraintUnsatisfiedError(
                f"dependency {dep.name!r} at {path} has version "
                f"{metadata.version!r}, which does not satisfy {dep.version!r}",
                dependency=dep.name,
            )
        return metadata.version

    def _resolve_remote(
        self, dep: Dependency, key: str, constraint: VersionConstraint, run: _Pass
    ) -> str:
        if is_oci(dep.repository):
            return self._resolve_oci(dep, constraint)

        alias = run.aliases.get(key)
        if not alias:
            logger.debug("No repository alias for %s; locking declared version", key)
            return dep.version

        index = run.indexes.get(alias)
        if index is None:
            index = self._index_cache.load(alias)
            run.indexes[alias] = index
        return find_version(index, dep.name, constraint)

    def _resolve_oci(self, dep: Dependency, constraint: VersionConstraint) -> str:
        if VersionConstraint.is_exact(dep.version):
            return dep.version
        if self._registry_client is None:
            raise RegistryError(
                f"dependency {dep.name!r} needs a registry client to resolve "
                f"range {dep.version!r} against {dep.repository}"
            )
        ref = f"{dep.repository.removeprefix(OCI_SCHEME).rstrip('/')}/{dep.name}"
        tags = self._registry_client.tags(ref)
        candidates = [ChartVersion(name=dep.name, version=t) for t in tags]
        try:
            return select_version(candidates, constraint, require_urls=False)
        except ConstraintUnsatisfiedError as exc:
            raise ConstraintUnsatisfiedError(
                f"{dep.name}: no tag in {dep.repository} satisfies {dep.version!r}",
                dependency=dep.name,
            ) from exc


def resolve(
    requirements: Sequence[Dependency],
    aliases: Mapping[str, str] | None,
    chart_path: str | Path,
    cache_path: str | Path,
    registry_client: RegistryClient | None = None,
) -> Lock:
    """One-shot convenience wrapper around ``Resolver.resolve``."""
    return Resolver(chart_path, cache_path, registry_client).resolve(requirements, aliases)
