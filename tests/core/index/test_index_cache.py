"""Tests for reading cached repository indexes."""

from __future__ import annotations

import pathlib

import pytest

from chartlock.core.index import IndexCache, cache_index_file
from chartlock.exceptions import CacheUnavailableError


class TestIndexCache:
    """Indexes are read from ``<cache>/<alias>-index.yaml``."""

    def test_file_name(self) -> None:
        assert cache_index_file("stable") == "stable-index.yaml"

    def test_load_fixture(self, cache_path: pathlib.Path) -> None:
        index = IndexCache(cache_path).load("kubernetes-charts")
        assert [cv.version for cv in index.versions("alpine")] == ["0.3.0-rc.1", "0.2.5", "0.2.0", "0.1.0"]
        assert index.versions("alpine")[1].deprecated
        assert index.versions("mariadb")[1].urls == ()
        assert index.api_version == "v1"

    def test_missing_alias(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(CacheUnavailableError, match="no cached repository index for stable"):
            IndexCache(tmp_path).load("stable")

    def test_invalid_yaml(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "bad-index.yaml").write_text("entries: [unclosed\n")
        with pytest.raises(CacheUnavailableError, match="not valid YAML"):
            IndexCache(tmp_path).load("bad")

    def test_empty_file(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "empty-index.yaml").write_text("")
        with pytest.raises(CacheUnavailableError, match="empty or malformed"):
            IndexCache(tmp_path).load("empty")

    def test_non_utf8_index(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "stable-index.yaml").write_bytes(b"apiVersion: v1\nentries: {}\n# \xff\n")
        with pytest.raises(CacheUnavailableError, match="not valid UTF-8"):
            IndexCache(tmp_path).load("stable")

    def test_entries_not_a_mapping(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "stable-index.yaml").write_text("entries:\n  - a\n")
        with pytest.raises(CacheUnavailableError, match="stable has malformed entries"):
            IndexCache(tmp_path).load("stable")

    def test_path_for(self, tmp_path: pathlib.Path) -> None:
        assert IndexCache(tmp_path).path_for("x") == tmp_path / "x-index.yaml"
