"""Build the Source Alias Map for a dependency list.

The resolver finds the cached index for a remote dependency through a map
keyed by ``dependency_key(name, index)``. This module builds that map from
the configured repositories:

- ``@stable`` or ``alias:stable`` names the repository alias directly.
- A URL is matched against the configured repository URLs, ignoring a
  trailing ``/``.
- Local (``""``, ``file://``) and ``oci://`` dependencies get no entry; they
  never consult the index cache.

A remote URL that matches no configured repository also gets no entry, and
the resolver then locks its declared version without an index lookup.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from chartlock.core.dependency.models import Dependency, SourceKind, dependency_key, is_oci

logger = logging.getLogger(__name__)

_ALIAS_PREFIXES = ("@", "alias:")


def alias_name(repository: str) -> str | None:
    """Return the alias named by an ``@name``/``alias:name`` locator."""
    for prefix in _ALIAS_PREFIXES:
        if repository.startswith(prefix):
            return repository[len(prefix):]
    return None


def build_alias_map(
    dependencies: Sequence[Dependency],
    repositories: Mapping[str, str],
) -> dict[str, str]:
    """Map each remote dependency's positional key to a repository alias.

    Args:
        dependencies: Declared dependencies, in chart order.
        repositories: Configured repositories, alias -> URL.

    Returns:
        Mapping of ``"<name>-<index>"`` to repository alias.
    """
    by_url = {url.rstrip("/"): name for name, url in repositories.items()}
    aliases: dict[str, str] = {}
    for i, dep in enumerate(dependencies):
        if dep.kind is not SourceKind.REMOTE or is_oci(dep.repository):
            continue
        key = dependency_key(dep.name, i)
        named = alias_name(dep.repository)
        if named is not None:
            aliases[key] = named
            continue
        match = by_url.get(dep.repository.rstrip("/"))
        if match is not None:
            aliases[key] = match
        else:
            logger.debug("No configured repository for %s (%s)", key, dep.repository)
    return aliases
