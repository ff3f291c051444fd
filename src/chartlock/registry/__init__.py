"""OCI registry access for charts published by tag.

Public API::

    from chartlock.registry import OCIRegistryClient, RegistryClient
"""

from __future__ import annotations

from chartlock.registry.client import (
    OCIRegistryClient,
    RegistryClient,
    split_reference,
    tag_to_version,
)

__all__ = [
    "OCIRegistryClient",
    "RegistryClient",
    "split_reference",
    "tag_to_version",
]
