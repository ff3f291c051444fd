"""Chart dependencies: models, version constraints, and source handling.

This package holds the building blocks the resolver works with. All public
names are re-exported here so that imports of the form
``from chartlock.core.dependency import X`` work for everything except the
resolver itself, which lives in ``chartlock.core.dependency.resolver``
because it depends on the chart and index packages.
"""

from chartlock.core.dependency.aliases import alias_name, build_alias_map
from chartlock.core.dependency.constraints import (
    Version,
    VersionConstraint,
    parse_version,
)
from chartlock.core.dependency.models import (
    FILE_SCHEME,
    OCI_SCHEME,
    Dependency,
    SourceKind,
    dependency_key,
    is_oci,
)
from chartlock.core.dependency.paths import get_local_path

__all__ = [
    "FILE_SCHEME",
    "OCI_SCHEME",
    "Dependency",
    "SourceKind",
    "Version",
    "VersionConstraint",
    "alias_name",
    "build_alias_map",
    "dependency_key",
    "get_local_path",
    "is_oci",
    "parse_version",
]
