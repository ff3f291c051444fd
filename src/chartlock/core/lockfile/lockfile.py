"""Lock persistence, validation, staleness checks, and diffing.

A lock is stored as ``Chart.lock`` next to ``Chart.yaml``::

    dependencies:
    - name: alpine
      repository: http://example.com/charts
      version: 0.2.0
    digest: sha256:...
    generated: '2026-01-01T00:00:00+00:00'

Serialization is deterministic apart from the ``generated`` timestamp:
dependency order is the lock's order and keys are always written in the
same order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from chartlock.core.dependency.models import Dependency
from chartlock.core.lockfile.digest import hash_req
from chartlock.core.lockfile.models import DIGEST_RE, Lock
from chartlock.exceptions import LockfileError

logger = logging.getLogger(__name__)

LOCK_FILE = "Chart.lock"


# -- Serialization ----------------------------------------------------------


def lock_to_dict(lock: Lock) -> dict[str, Any]:
    """Serialize a lock to a dict matching the ``Chart.lock`` layout."""
    data: dict[str, Any] = {
        "dependencies": [
            {"name": d.name, "repository": d.repository, "version": d.version}
            for d in lock.dependencies
        ],
        "digest": lock.digest,
    }
    if lock.generated is not None:
        data["generated"] = lock.generated.isoformat()
    return data


def lock_to_yaml(lock: Lock) -> str:
    return yaml.safe_dump(lock_to_dict(lock), sort_keys=False, default_flow_style=False)


def write_lock(lock: Lock, path: Path) -> None:
    """Write a lock to disk as YAML, creating parent directories.

    Args:
        lock: The lock to persist.
        path: Destination (e.g., ``Path("mychart/Chart.lock")``).

    Raises:
        LockfileError: If the file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(lock_to_yaml(lock), encoding="utf-8")
    except OSError as exc:
        raise LockfileError(f"{path}: cannot write lock: {exc.strerror or exc}") from exc
    logger.debug("Wrote lock with %d dependencies to %s", len(lock.dependencies), path)


# -- Deserialization --------------------------------------------------------


def _locked_dependency(data: dict[str, Any]) -> Dependency:
    dep = Dependency.from_dict(data)
    return dep.resolved(dep.version)


def lock_from_dict(data: Any) -> Lock:
    """Deserialize a lock from a parsed ``Chart.lock`` mapping.

    Raises:
        LockfileError: If the mapping does not have the lock layout.
    """
    if not isinstance(data, dict):
        raise LockfileError("lock file must contain a mapping")
    raw_deps = data.get("dependencies") or []
    if not isinstance(raw_deps, list):
        raise LockfileError("lock file dependencies must be a list")
    try:
        deps = tuple(_locked_dependency(d) for d in raw_deps)
    except (AttributeError, ValueError) as exc:
        raise LockfileError(f"invalid lock dependency: {exc}") from exc

    generated = data.get("generated")
    if isinstance(generated, str):
        try:
            generated = datetime.fromisoformat(generated)
        except ValueError:
            logger.debug("Ignoring unparseable lock timestamp %r", generated)
            generated = None
    elif not isinstance(generated, datetime):
        generated = None

    return Lock(dependencies=deps, digest=str(data.get("digest") or ""), generated=generated)


def read_lock(path: Path) -> Lock:
    """Read a lock from disk.

    Raises:
        FileNotFoundError: If the file does not exist.
        LockfileError: If the file is not a valid lock.
    """
    text = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise LockfileError(f"{path}: invalid YAML: {exc}") from exc
    return lock_from_dict(data)


# -- Validation and staleness -----------------------------------------------


def validate_lock(lock: Lock) -> list[str]:
    """Check a lock for internal consistency.

    Performs the following checks:

    1. **Digest format:** the digest matches ``sha256:<64-hex-chars>``.
    2. **Version non-empty:** every dependency has a concrete version.
    3. **Name non-empty:** every dependency is named.

    Returns:
        List of validation error messages. Empty means the lock is valid.
    """
    errors: list[str] = []
    if not DIGEST_RE.match(lock.digest):
        errors.append(f"Lock has invalid digest format: {lock.digest!r}")
    for i, dep in enumerate(lock.dependencies):
        if not dep.name:
            errors.append(f"Dependency at position {i} has no name")
        if not dep.version:
            errors.append(f"Dependency {dep.name!r} has empty version string")
    return errors


def is_stale(requirements: Sequence[Dependency], lock: Lock) -> bool:
    """Return True if *lock* no longer matches *requirements*.

    The digest is recomputed from the current requirements and the locked
    dependencies. A changed constraint, an added or removed dependency, or a
    changed source all make the lock stale.
    """
    if len(requirements) != len(lock.dependencies):
        return True
    return hash_req(requirements, lock.dependencies) != lock.digest


def diff_locks(old: Lock, new: Lock) -> dict[str, Any]:
    """Compare two locks and return differences.

    Dependencies are matched by ``(name, repository)``:

    - **added**: present in ``new`` but not in ``old``.
    - **removed**: present in ``old`` but not in ``new``.
    - **changed**: present in both with a different version.

    Returns:
        Dict with keys 'added', 'removed', 'changed'.
    """
    old_map = {(d.name, d.repository): d.version for d in old.dependencies}
    new_map = {(d.name, d.repository): d.version for d in new.dependencies}

    added = sorted(f"{n} ({r})" if r else n for n, r in new_map.keys() - old_map.keys())
    removed = sorted(f"{n} ({r})" if r else n for n, r in old_map.keys() - new_map.keys())

    changes: list[dict[str, Any]] = []
    for key in sorted(old_map.keys() & new_map.keys()):
        if old_map[key] != new_map[key]:
            changes.append({
                "name": key[0],
                "repository": key[1],
                "old": old_map[key],
                "new": new_map[key],
            })

    return {
        "added": added,
        "removed": removed,
        "changed": changes,
    }
