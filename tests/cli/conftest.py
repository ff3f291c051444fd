"""Shared fixtures for CLI tests.

Provides chart directories copied from the test data into a temporary
location so commands can write ``Chart.lock`` without touching the
fixtures, plus a repositories file pointing at the cached index.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest


@pytest.fixture
def local_chart(tmp_path: Path, chart_path: Path) -> Path:
    """A copy of the fixture chart, whose dependencies are all local."""
    target = tmp_path / "chartpath"
    shutil.copytree(chart_path, target)
    return target


@pytest.fixture
def remote_chart(tmp_path: Path) -> Path:
    """A chart depending on alpine from a configured repository."""
    chart = tmp_path / "webapp"
    chart.mkdir()
    (chart / "Chart.yaml").write_text(
        "apiVersion: v2\n"
        "name: webapp\n"
        "version: 1.0.0\n"
        "dependencies:\n"
        "  - name: alpine\n"
        "    repository: http://example.com\n"
        "    version: \">=0.1.0\"\n"
    )
    return chart


@pytest.fixture
def repositories_file(tmp_path: Path) -> Path:
    """repositories.yaml mapping kubernetes-charts to http://example.com."""
    path = tmp_path / "repositories.yaml"
    path.write_text(
        "repositories:\n"
        "  - name: kubernetes-charts\n"
        "    url: http://example.com/\n"
    )
    return path


@pytest.fixture
def empty_chart(tmp_path: Path) -> Path:
    """A chart that declares no dependencies."""
    chart = tmp_path / "empty"
    chart.mkdir()
    (chart / "Chart.yaml").write_text("apiVersion: v2\nname: empty\nversion: 0.1.0\n")
    return chart
