"""Shared fixtures for chartlock tests."""

from __future__ import annotations

import io
import pathlib
import tarfile

import pytest

from chartlock.core.dependency import Dependency
from chartlock.core.dependency.resolver import Resolver

TESTDATA = pathlib.Path(__file__).parent / "testdata"


@pytest.fixture
def testdata() -> pathlib.Path:
    """Directory holding fixture charts and the cached index."""
    return TESTDATA


@pytest.fixture
def chart_path() -> pathlib.Path:
    """A chart with a vendored subchart and a sibling ``base`` chart."""
    return TESTDATA / "chartpath"


@pytest.fixture
def cache_path() -> pathlib.Path:
    """Repository cache holding ``kubernetes-charts-index.yaml``."""
    return TESTDATA / "repository"


@pytest.fixture
def resolver(chart_path: pathlib.Path, cache_path: pathlib.Path) -> Resolver:
    """A resolver over the fixture chart and index cache."""
    return Resolver(chart_path, cache_path)


@pytest.fixture
def alpine_requirement() -> Dependency:
    """The end-to-end alpine requirement against the fixture index."""
    return Dependency(name="alpine", repository="http://example.com", version=">=0.1.0")


@pytest.fixture
def make_chart_archive(tmp_path: pathlib.Path):
    """Factory writing a packaged chart ``<name>-<version>.tgz`` to a directory."""

    def _make(name: str, version: str, directory: pathlib.Path | None = None) -> pathlib.Path:
        target_dir = directory or tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        archive = target_dir / f"{name}-{version}.tgz"
        chart_yaml = f"apiVersion: v2\nname: {name}\nversion: {version}\n".encode()
        with tarfile.open(archive, "w:gz") as tar:
            info = tarfile.TarInfo(f"{name}/Chart.yaml")
            info.size = len(chart_yaml)
            tar.addfile(info, io.BytesIO(chart_yaml))
        return archive

    return _make
