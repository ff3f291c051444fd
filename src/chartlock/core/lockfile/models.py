"""Lock data model.

A ``Lock`` is the value produced by a successful resolution: the resolved
dependencies in declaration order plus the digest binding them to the
requirements they were resolved from. It is immutable; a new resolution
produces a new ``Lock``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

from chartlock.core.dependency.models import Dependency

# Digest format: "sha256:<64-hex-characters>"
DIGEST_RE = re.compile(r"^sha256:[0-9a-f]{64}$")


@dataclass(frozen=True)
class Lock:
    """Resolved dependencies and their requirements digest.

    Two locks compare equal when their dependencies and digest are equal;
    the generation timestamp is informational only.

    Attributes:
        dependencies: Resolved dependencies, one per requirement, same order.
        digest: "sha256:<hex>" digest from ``hash_req``.
        generated: When the lock was produced, if known.
    """

    dependencies: tuple[Dependency, ...]
    digest: str
    generated: datetime | None = field(default=None, compare=False)

    def versions(self) -> list[tuple[str, str]]:
        """Return ``(name, version)`` pairs in lock order."""
        return [(d.name, d.version) for d in self.dependencies]
