"""Lock digest: a hash binding declared requirements to resolved versions.

The digest is computed over both lists, so it changes when a declared
constraint changes even if the resolved version stays the same. Callers
detect a stale lock by recomputing the digest from the current
requirements and the locked dependencies and comparing it with the digest
stored in the lock.

The canonical form is the compact JSON array ``[requirements, resolved]``
with each dependency rendered as ``{"name", "version", "repository"}``,
escaped the way Go's ``encoding/json`` escapes HTML-sensitive characters.
Digests match those in ``Chart.lock`` files written by Helm when the
dependencies set only name, version and repository. Helm also hashes
``condition``, ``tags`` and ``alias``; those fields are left out here, so
a Helm lock for a chart that sets them reads as stale.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Sequence
from typing import Any

from chartlock.core.dependency.models import Dependency
from chartlock.exceptions import DigestInputMismatchError

DIGEST_ALGORITHM = "sha256"

_GO_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _digest_record(dep: Dependency) -> dict[str, Any]:
    record: dict[str, Any] = {"name": dep.name}
    if dep.version:
        record["version"] = dep.version
    record["repository"] = dep.repository
    return record


def canonical_form(
    requirements: Sequence[Dependency], resolved: Sequence[Dependency]
) -> bytes:
    """Return the exact bytes that ``hash_req`` hashes."""
    payload = [
        [_digest_record(d) for d in requirements],
        [_digest_record(d) for d in resolved],
    ]
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _GO_HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


def hash_req(
    requirements: Sequence[Dependency], resolved: Sequence[Dependency]
) -> str:
    """Compute the lock digest for declared and resolved dependencies.

    Args:
        requirements: Declared dependencies, constraints as authored.
        resolved: Resolved dependencies, position for position.

    Returns:
        Digest string in "sha256:<64-hex-chars>" format.

    Raises:
        DigestInputMismatchError: If the lists differ in length.
    """
    if len(requirements) != len(resolved):
        raise DigestInputMismatchError(
            f"cannot digest {len(requirements)} requirements against "
            f"{len(resolved)} resolved dependencies"
        )
    digest = hashlib.sha256(canonical_form(requirements, resolved)).hexdigest()
    return f"{DIGEST_ALGORITHM}:{digest}"
