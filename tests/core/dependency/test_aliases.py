"""Tests for building the Source Alias Map from configured repositories."""

from __future__ import annotations

import pytest

from chartlock.core.dependency import Dependency, alias_name, build_alias_map

REPOS = {
    "stable": "https://charts.example.com/stable/",
    "bitnami": "https://charts.bitnami.com/bitnami",
}


class TestAliasName:
    """Alias locators name a repository directly."""

    @pytest.mark.parametrize(
        ("repository", "expected"),
        [
            ("@stable", "stable"),
            ("alias:bitnami", "bitnami"),
            ("https://charts.example.com", None),
            ("", None),
        ],
    )
    def test_alias_name(self, repository: str, expected: str | None) -> None:
        assert alias_name(repository) == expected


class TestBuildAliasMap:
    """Each remote dependency is keyed by its position in the list."""

    def test_matches_url_ignoring_trailing_slash(self) -> None:
        deps = [Dependency(name="redis", repository="https://charts.example.com/stable", version="1.0.0")]
        assert build_alias_map(deps, REPOS) == {"redis-0": "stable"}

    def test_alias_locators(self) -> None:
        deps = [
            Dependency(name="redis", repository="@stable", version="1.0.0"),
            Dependency(name="mysql", repository="alias:bitnami", version="9.0.0"),
        ]
        assert build_alias_map(deps, REPOS) == {"redis-0": "stable", "mysql-1": "bitnami"}

    def test_local_and_oci_dependencies_skipped(self) -> None:
        deps = [
            Dependency(name="sub", version="0.1.0"),
            Dependency(name="base", repository="file://base", version="0.1.0"),
            Dependency(name="nginx", repository="oci://registry.example.com/charts", version="15.0.0"),
            Dependency(name="mysql", repository="https://charts.bitnami.com/bitnami", version="9.0.0"),
        ]
        assert build_alias_map(deps, REPOS) == {"mysql-3": "bitnami"}

    def test_unknown_url_has_no_entry(self) -> None:
        deps = [Dependency(name="redis", repository="https://unknown.example.com", version="1.0.0")]
        assert build_alias_map(deps, REPOS) == {}

    def test_same_name_keys_are_distinct(self) -> None:
        deps = [
            Dependency(name="redis", repository="@stable", version="1.0.0"),
            Dependency(name="redis", repository="@bitnami", version="2.0.0"),
        ]
        assert build_alias_map(deps, REPOS) == {"redis-0": "stable", "redis-1": "bitnami"}

    def test_no_repositories_configured(self) -> None:
        deps = [Dependency(name="redis", repository="https://charts.example.com/stable", version="1.0.0")]
        assert build_alias_map(deps, {}) == {}
