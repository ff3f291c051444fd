"""Local path resolution for ``file://`` and vendored dependencies."""

from __future__ import annotations

import logging
import os

from chartlock.core.dependency.models import FILE_SCHEME
from chartlock.exceptions import LocalPathNotFoundError

logger = logging.getLogger(__name__)


def get_local_path(repository: str, chart_path: str | os.PathLike[str]) -> str:
    """Resolve a local dependency locator to a filesystem path.

    A leading ``file://`` is stripped. An absolute remainder is used as is;
    anything else is joined onto *chart_path*, the directory of the chart
    that declared the dependency. The result is normalized and uses the
    host's path separators.

    Args:
        repository: The dependency locator (``file://../base``, ``charts/x``).
        chart_path: Directory of the declaring chart.

    Returns:
        The resolved path.

    Raises:
        LocalPathNotFoundError: If nothing usable exists at the path. A
            usable target is a chart directory or an archive file.
    """
    p = repository[len(FILE_SCHEME):] if repository.startswith(FILE_SCHEME) else repository

    if p.startswith("/"):
        # "file:////" leaves "//", which must still resolve to the root.
        dep_path = os.path.normpath(os.sep + p.lstrip("/"))
    elif os.path.isabs(p):
        dep_path = os.path.normpath(p)
    else:
        dep_path = os.path.normpath(os.path.join(os.fspath(chart_path), p))

    if not (os.path.isdir(dep_path) or os.path.isfile(dep_path)):
        raise LocalPathNotFoundError(
            f"directory {dep_path} not found", path=dep_path
        )

    logger.debug("Resolved local path %r to %s", repository, dep_path)
    return dep_path
