"""Chart locks: the resolved dependency set and its requirements digest.

The package is split into focused submodules:

- ``models``: The immutable ``Lock`` value and the digest format pattern.
- ``digest``: ``hash_req``, the digest binding requirements to a resolution.
- ``lockfile``: ``Chart.lock`` persistence, validation, staleness checks,
  and diffing.

All public names are re-exported here so callers can write
``from chartlock.core.lockfile import Lock, hash_req``.
"""

from chartlock.core.lockfile.digest import DIGEST_ALGORITHM, canonical_form, hash_req
from chartlock.core.lockfile.lockfile import (
    LOCK_FILE,
    diff_locks,
    is_stale,
    lock_from_dict,
    lock_to_dict,
    lock_to_yaml,
    read_lock,
    validate_lock,
    write_lock,
)
from chartlock.core.lockfile.models import DIGEST_RE, Lock

__all__ = [
    "DIGEST_ALGORITHM",
    "DIGEST_RE",
    "LOCK_FILE",
    "Lock",
    "canonical_form",
    "diff_locks",
    "hash_req",
    "is_stale",
    "lock_from_dict",
    "lock_to_dict",
    "lock_to_yaml",
    "read_lock",
    "validate_lock",
    "write_lock",
]
