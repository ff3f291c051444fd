"""Tests for Resolver: source dispatch, version selection, errors, and digests.

The table below mirrors the behaviour expected of each source kind against
the fixture chart (``testdata/chartpath``) and the cached
``kubernetes-charts`` index (``testdata/repository``).
"""

from __future__ import annotations

import pathlib
from dataclasses import dataclass

import pytest

from chartlock.core.dependency import Dependency, dependency_key
from chartlock.core.dependency.resolver import Resolver, resolve
from chartlock.core.lockfile import Lock, hash_req
from chartlock.exceptions import (
    CacheUnavailableError,
    ChartNotFoundError,
    ConstraintUnsatisfiedError,
    InvalidConstraintError,
    LocalPathNotFoundError,
    RegistryError,
    ResolutionError,
)


def _aliases_for(requirements: list[Dependency]) -> dict[str, str]:
    """Route alpine and redis to the cached kubernetes-charts index."""
    return {
        dependency_key(d.name, i): "kubernetes-charts"
        for i, d in enumerate(requirements)
        if d.name in ("alpine", "redis", "mariadb")
    }


@dataclass
class StubRegistry:
    """Registry client double returning fixed tags."""

    tag_list: list[str]

    def __post_init__(self) -> None:
        self.refs: list[str] = []

    def tags(self, ref: str) -> list[str]:
        self.refs.append(ref)
        return list(self.tag_list)


# ===========================================================================
# Successful resolution
# ===========================================================================

RESOLVES = [
    pytest.param(
        Dependency(name="oedipus-rex", repository="http://example.com", version="1.0.0"),
        Dependency(name="oedipus-rex", repository="http://example.com", version="1.0.0"),
        id="remote without alias locks declared version",
    ),
    pytest.param(
        Dependency(name="alpine", repository="http://example.com", version=">=0.1.0"),
        Dependency(name="alpine", repository="http://example.com", version="0.2.0"),
        id="valid lock",
    ),
    pytest.param(
        Dependency(name="alpine", repository="http://example.com", version="^0.1.0"),
        Dependency(name="alpine", repository="http://example.com", version="0.1.0"),
        id="caret stays on minor line",
    ),
    pytest.param(
        Dependency(name="alpine", repository="http://example.com", version="0.1.0"),
        Dependency(name="alpine", repository="http://example.com", version="0.1.0"),
        id="exact available version",
    ),
    pytest.param(
        Dependency(name="base", repository="file://base", version="0.1.0"),
        Dependency(name="base", repository="file://base", version="0.1.0"),
        id="repo from valid local path",
    ),
    pytest.param(
        Dependency(name="base", repository="file://base", version="^0.1.0"),
        Dependency(name="base", repository="file://base", version="0.1.0"),
        id="repo from valid local path with range resolution",
    ),
    pytest.param(
        Dependency(name="localdependency", repository="", version="0.1.0"),
        Dependency(name="localdependency", repository="", version="0.1.0"),
        id="repo from valid path under charts path",
    ),
]


class TestResolveSuccess:
    """Each source kind resolves to the expected lock entry."""

    @pytest.mark.parametrize(("requirement", "expected"), RESOLVES)
    def test_resolves(
        self, resolver: Resolver, requirement: Dependency, expected: Dependency
    ) -> None:
        reqs = [requirement]
        lock = resolver.resolve(reqs, _aliases_for(reqs))
        assert lock.dependencies == (expected,)
        assert lock.digest == hash_req(reqs, [expected])

    def test_end_to_end_alpine(self, resolver: Resolver, alpine_requirement: Dependency) -> None:
        lock = resolver.resolve([alpine_requirement], {"alpine-0": "kubernetes-charts"})
        assert lock.versions() == [("alpine", "0.2.0")]
        assert lock.dependencies[0].repository == "http://example.com"
        assert lock.digest == hash_req(
            [alpine_requirement],
            [Dependency(name="alpine", repository="http://example.com", version="0.2.0")],
        )

    def test_skips_urlless_entries(self, resolver: Resolver) -> None:
        """mariadb 0.4.0 has no download URL, so 0.3.0 is selected."""
        reqs = [Dependency(name="mariadb", repository="http://example.com", version=">=0.1.0")]
        lock = resolver.resolve(reqs, _aliases_for(reqs))
        assert lock.versions() == [("mariadb", "0.3.0")]

    def test_empty_requirements(self, resolver: Resolver) -> None:
        lock = resolver.resolve([], {})
        assert lock.dependencies == ()
        assert lock.digest == hash_req([], [])

    def test_generated_timestamp_set(self, resolver: Resolver, alpine_requirement: Dependency) -> None:
        lock = resolver.resolve([alpine_requirement], {"alpine-0": "kubernetes-charts"})
        assert lock.generated is not None
        assert lock.generated.tzinfo is not None

    def test_module_level_resolve(
        self, chart_path: pathlib.Path, cache_path: pathlib.Path, alpine_requirement: Dependency
    ) -> None:
        lock = resolve([alpine_requirement], {"alpine-0": "kubernetes-charts"}, chart_path, cache_path)
        assert lock.versions() == [("alpine", "0.2.0")]


# ===========================================================================
# Failures
# ===========================================================================

FAILURES = [
    pytest.param(
        Dependency(name="base", repository="file://base", version="1.1.0"),
        ConstraintUnsatisfiedError,
        id="repo from invalid version",
    ),
    pytest.param(
        Dependency(name="oedipus-rex", repository="http://example.com", version=">a1"),
        InvalidConstraintError,
        id="version failure",
    ),
    pytest.param(
        Dependency(name="redis", repository="http://example.com", version="1.0.0"),
        ChartNotFoundError,
        id="chart not found failure",
    ),
    pytest.param(
        Dependency(name="alpine", repository="http://example.com", version=">=1.0.0"),
        ConstraintUnsatisfiedError,
        id="constraint not satisfied failure",
    ),
    pytest.param(
        Dependency(name="nonexistent", repository="file://testdata/nonexistent", version="0.1.0"),
        LocalPathNotFoundError,
        id="repo from invalid local path",
    ),
    pytest.param(
        Dependency(name="nonexistentdependency", repository="", version="0.1.0"),
        LocalPathNotFoundError,
        id="repo from invalid path under charts path",
    ),
    pytest.param(
        Dependency(name="localdependency", repository="", version=""),
        InvalidConstraintError,
        id="missing version",
    ),
]


class TestResolveFailures:
    """Each failure mode raises its own error and returns no lock."""

    @pytest.mark.parametrize(("requirement", "error"), FAILURES)
    def test_fails(
        self, resolver: Resolver, requirement: Dependency, error: type[ResolutionError]
    ) -> None:
        reqs = [requirement]
        with pytest.raises(error) as excinfo:
            resolver.resolve(reqs, _aliases_for(reqs))
        assert excinfo.value.dependency == requirement.name

    def test_missing_cache_for_alias(self, resolver: Resolver) -> None:
        reqs = [Dependency(name="alpine", repository="http://example.com", version="0.1.0")]
        with pytest.raises(CacheUnavailableError, match="no cached repository index"):
            resolver.resolve(reqs, {"alpine-0": "not-cached"})

    @pytest.mark.parametrize(
        "content",
        [b"apiVersion: v1\nentries: {}\n# \xff\n", b"entries:\n  - a\n"],
        ids=["not utf-8", "entries not a mapping"],
    )
    def test_unusable_cache_for_alias(self, tmp_path: pathlib.Path, content: bytes) -> None:
        (tmp_path / "stable-index.yaml").write_bytes(content)
        r = Resolver(tmp_path, tmp_path)
        reqs = [Dependency(name="alpine", repository="http://example.com", version="0.1.0")]
        with pytest.raises(CacheUnavailableError) as excinfo:
            r.resolve(reqs, {"alpine-0": "stable"})
        assert excinfo.value.dependency == "alpine"

    def test_fail_fast_on_first_error(self, resolver: Resolver) -> None:
        """A failing entry aborts the call even when later entries are valid."""
        reqs = [
            Dependency(name="alpine", repository="http://example.com", version=">=1.0.0"),
            Dependency(name="base", repository="file://base", version="0.1.0"),
        ]
        with pytest.raises(ConstraintUnsatisfiedError) as excinfo:
            resolver.resolve(reqs, _aliases_for(reqs))
        assert excinfo.value.dependency == "alpine"

    def test_error_message_names_available_versions(self, resolver: Resolver) -> None:
        reqs = [Dependency(name="alpine", repository="http://example.com", version=">=1.0.0")]
        with pytest.raises(ConstraintUnsatisfiedError, match="0.2.0"):
            resolver.resolve(reqs, _aliases_for(reqs))

    def test_local_path_without_chart_metadata(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "empty").mkdir()
        r = Resolver(tmp_path, tmp_path)
        reqs = [Dependency(name="empty", repository="file://empty", version="0.1.0")]
        with pytest.raises(LocalPathNotFoundError, match="not a usable chart"):
            r.resolve(reqs, {})

    def test_local_path_with_undecodable_metadata(self, tmp_path: pathlib.Path) -> None:
        base = tmp_path / "base"
        base.mkdir()
        (base / "Chart.yaml").write_bytes(b"name: base\nversion: 0.1.0\n# \xff\xfe\n")
        r = Resolver(tmp_path, tmp_path)
        reqs = [Dependency(name="base", repository="file://base", version="0.1.0")]
        with pytest.raises(LocalPathNotFoundError, match="not a usable chart") as excinfo:
            r.resolve(reqs, {})
        assert excinfo.value.dependency == "base"


# ===========================================================================
# Same-name dependencies and positional keys
# ===========================================================================


class TestSameNameDependencies:
    """Two dependencies sharing a name resolve independently by position."""

    def test_multiple_same_name_deps(self, resolver: Resolver) -> None:
        reqs = [
            Dependency(name="alpine", repository="http://example.com", version=">=0.1.0"),
            Dependency(name="alpine", repository="http://example.com", version=">=0.2.0"),
        ]
        lock = resolver.resolve(reqs, {"alpine-0": "kubernetes-charts", "alpine-1": "kubernetes-charts"})
        assert len(lock.dependencies) == 2
        assert [d.version for d in lock.dependencies] == ["0.2.0", "0.2.0"]
        assert all(d.repository == "http://example.com" for d in lock.dependencies)

    def test_positions_route_to_different_outcomes(self, resolver: Resolver) -> None:
        """Only the aliased position consults the index."""
        reqs = [
            Dependency(name="alpine", repository="http://example.com/repo1", version="^0.1.0"),
            Dependency(name="alpine", repository="http://example.com/repo2", version="0.9.9"),
        ]
        lock = resolver.resolve(reqs, {"alpine-0": "kubernetes-charts"})
        assert [d.version for d in lock.dependencies] == ["0.1.0", "0.9.9"]
        assert [d.repository for d in lock.dependencies] == [
            "http://example.com/repo1",
            "http://example.com/repo2",
        ]

    def test_alias_keyed_by_name_alone_is_not_used(self, resolver: Resolver) -> None:
        reqs = [Dependency(name="alpine", repository="http://example.com", version=">=0.1.0")]
        lock = resolver.resolve(reqs, {"alpine": "kubernetes-charts"})
        assert lock.versions() == [("alpine", ">=0.1.0")]


# ===========================================================================
# Subchart archives and OCI registries
# ===========================================================================


class TestArchivesAndRegistries:
    """Packaged subcharts and OCI-hosted dependencies."""

    def test_packaged_subchart(self, tmp_path: pathlib.Path, make_chart_archive) -> None:
        make_chart_archive("packaged", "0.3.0", tmp_path / "charts")
        r = Resolver(tmp_path, tmp_path)
        lock = r.resolve([Dependency(name="packaged", version="0.3.0")], {})
        assert lock.versions() == [("packaged", "0.3.0")]

    def test_local_path_archive_uses_archive_version(
        self, tmp_path: pathlib.Path, make_chart_archive
    ) -> None:
        make_chart_archive("pkg", "1.4.0", tmp_path / "vendor")
        r = Resolver(tmp_path / "chart", tmp_path)
        reqs = [Dependency(name="pkg", repository="file://../vendor/pkg-1.4.0.tgz", version="^1.0.0")]
        lock = r.resolve(reqs, {})
        assert lock.versions() == [("pkg", "1.4.0")]

    def test_oci_exact_version_needs_no_registry(self, resolver: Resolver) -> None:
        reqs = [Dependency(name="nginx", repository="oci://registry.example.com/charts", version="15.1.0")]
        lock = resolver.resolve(reqs, {})
        assert lock.versions() == [("nginx", "15.1.0")]

    def test_oci_range_uses_registry_tags(self, chart_path: pathlib.Path, cache_path: pathlib.Path) -> None:
        registry = StubRegistry(["15.0.0", "15.1.0", "16.0.0", "latest"])
        r = Resolver(chart_path, cache_path, registry_client=registry)
        reqs = [Dependency(name="nginx", repository="oci://registry.example.com/charts/", version="^15.0.0")]
        lock = r.resolve(reqs, {"nginx-0": "ignored"})
        assert lock.versions() == [("nginx", "15.1.0")]
        assert registry.refs == ["registry.example.com/charts/nginx"]

    def test_oci_range_unsatisfied(self, chart_path: pathlib.Path, cache_path: pathlib.Path) -> None:
        r = Resolver(chart_path, cache_path, registry_client=StubRegistry(["1.0.0"]))
        reqs = [Dependency(name="nginx", repository="oci://registry.example.com/charts", version=">=2.0.0")]
        with pytest.raises(ConstraintUnsatisfiedError):
            r.resolve(reqs, {})

    def test_oci_range_without_registry_client(self, resolver: Resolver) -> None:
        reqs = [Dependency(name="nginx", repository="oci://registry.example.com/charts", version="^15.0.0")]
        with pytest.raises(RegistryError, match="registry client"):
            resolver.resolve(reqs, {})


# ===========================================================================
# Determinism and input handling
# ===========================================================================


class TestDeterminism:
    """Resolution is a pure function of requirements, aliases, and sources."""

    def test_resolving_twice_yields_equal_locks(self, resolver: Resolver) -> None:
        reqs = [
            Dependency(name="alpine", repository="http://example.com", version=">=0.1.0"),
            Dependency(name="base", repository="file://base", version="^0.1.0"),
            Dependency(name="localdependency", repository="", version="0.1.0"),
        ]
        aliases = _aliases_for(reqs)
        first = resolver.resolve(reqs, aliases)
        second = resolver.resolve(reqs, aliases)
        assert first == second
        assert first.digest == second.digest

    def test_inputs_not_mutated(self, resolver: Resolver) -> None:
        reqs = [Dependency(name="alpine", repository="http://example.com", version=">=0.1.0")]
        aliases = {"alpine-0": "kubernetes-charts"}
        snapshot = (list(reqs), dict(aliases))
        resolver.resolve(reqs, aliases)
        assert (reqs, aliases) == snapshot

    def test_lock_is_a_value(self, resolver: Resolver, alpine_requirement: Dependency) -> None:
        lock = resolver.resolve([alpine_requirement], {"alpine-0": "kubernetes-charts"})
        assert isinstance(lock, Lock)
        with pytest.raises(AttributeError):
            lock.digest = "sha256:0"  # type: ignore[misc]

    def test_changed_constraint_changes_digest_not_version(self, resolver: Resolver) -> None:
        a = [Dependency(name="alpine", repository="http://example.com", version=">=0.1.0")]
        b = [Dependency(name="alpine", repository="http://example.com", version=">=0.2.0")]
        lock_a = resolver.resolve(a, _aliases_for(a))
        lock_b = resolver.resolve(b, _aliases_for(b))
        assert lock_a.dependencies == lock_b.dependencies
        assert lock_a.digest != lock_b.digest
