"""Settings and repository configuration for chartlock.

Settings come from the environment with per-user defaults; the CLI lets
each one be overridden with an option. Repositories are read from a YAML
file in the same layout the chart tooling writes::

    repositories:
    - name: stable
      url: https://charts.example.com/stable
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

from chartlock.exceptions import ConfigError
from chartlock.registry.client import DEFAULT_TIMEOUT

ENV_REPOSITORY_CACHE = "CHARTLOCK_REPOSITORY_CACHE"
ENV_REPOSITORY_CONFIG = "CHARTLOCK_REPOSITORY_CONFIG"
ENV_REGISTRY_TIMEOUT = "CHARTLOCK_REGISTRY_TIMEOUT"


def _default_cache() -> Path:
    base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(base) / "chartlock" / "repository"


def _default_config() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "chartlock" / "repositories.yaml"


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings.

    Attributes:
        repository_cache: Directory holding ``<alias>-index.yaml`` files.
        repository_config: Path of ``repositories.yaml``.
        registry_timeout: HTTP timeout for OCI registry requests, seconds.
    """

    repository_cache: Path
    repository_config: Path
    registry_timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Raises:
            ConfigError: If ``CHARTLOCK_REGISTRY_TIMEOUT`` is not a number.
        """
        env = os.environ if environ is None else environ
        cache = env.get(ENV_REPOSITORY_CACHE)
        config = env.get(ENV_REPOSITORY_CONFIG)
        timeout_text = env.get(ENV_REGISTRY_TIMEOUT)
        try:
            timeout = float(timeout_text) if timeout_text else DEFAULT_TIMEOUT
        except ValueError as exc:
            raise ConfigError(
                f"{ENV_REGISTRY_TIMEOUT} must be a number, got {timeout_text!r}"
            ) from exc
        return cls(
            repository_cache=Path(cache) if cache else _default_cache(),
            repository_config=Path(config) if config else _default_config(),
            registry_timeout=timeout,
        )


def load_repositories(path: Path) -> dict[str, str]:
    """Load configured repositories as an alias -> URL mapping.

    A missing file means no repositories are configured.

    Raises:
        ConfigError: If the file is not valid YAML or not in the expected
            layout.
    """
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level.")

    repositories: dict[str, str] = {}
    for entry in data.get("repositories") or []:
        if not isinstance(entry, dict) or not entry.get("name") or not entry.get("url"):
            raise ConfigError(f"{path}: each repository needs a name and a url, got {entry!r}")
        repositories[str(entry["name"])] = str(entry["url"])
    return repositories
