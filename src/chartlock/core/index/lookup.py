"""Select the best published version of a chart for a constraint."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from chartlock.core.dependency.constraints import Version, VersionConstraint
from chartlock.core.index.models import ChartVersion, IndexFile
from chartlock.exceptions import ChartNotFoundError, ConstraintUnsatisfiedError

logger = logging.getLogger(__name__)


def _as_constraint(constraint: str | VersionConstraint) -> VersionConstraint:
    if isinstance(constraint, VersionConstraint):
        return constraint
    return VersionConstraint(constraint)


def select_version(
    candidates: Iterable[ChartVersion],
    constraint: str | VersionConstraint,
    *,
    require_urls: bool = True,
) -> str:
    """Return the highest candidate version satisfying *constraint*.

    Candidates with an unparseable version, marked deprecated, or (when
    *require_urls* is set) without download URLs are skipped. The version is
    returned exactly as the candidate spells it.

    Raises:
        InvalidConstraintError: If *constraint* is malformed.
        ConstraintUnsatisfiedError: If no candidate satisfies it.
    """
    vc = _as_constraint(constraint)
    best: Version | None = None
    best_text = ""
    name = ""
    for cv in candidates:
        name = name or cv.name
        if cv.deprecated or (require_urls and not cv.urls):
            continue
        try:
            v = Version.parse(cv.version)
        except ValueError:
            logger.debug("Skipping %s: unparseable version %r", cv.name, cv.version)
            continue
        if vc.check(v) and (best is None or v > best):
            best, best_text = v, cv.version

    if best is None:
        raise ConstraintUnsatisfiedError(
            f"no version of {name or 'chart'} satisfies constraint {vc.raw!r}",
            dependency=name,
        )
    return best_text


def find_version(
    index: IndexFile, name: str, constraint: str | VersionConstraint
) -> str:
    """Find the highest version of *name* in *index* satisfying *constraint*.

    Args:
        index: A loaded repository index.
        name: Chart name to look up.
        constraint: Exact version or range expression.

    Returns:
        The selected version string.

    Raises:
        ChartNotFoundError: If the index has no entries for *name*.
        InvalidConstraintError: If *constraint* is malformed.
        ConstraintUnsatisfiedError: If entries exist but none satisfies.
    """
    entries = index.versions(name)
    if not entries:
        raise ChartNotFoundError(f"{name} chart not found in repository index", dependency=name)
    vc = _as_constraint(constraint)
    try:
        version = select_version(entries, vc)
    except ConstraintUnsatisfiedError as exc:
        raise ConstraintUnsatisfiedError(
            f"{name}: no published version satisfies {vc.raw!r} "
            f"(available: {', '.join(cv.version for cv in entries)})",
            dependency=name,
        ) from exc
    logger.debug("Selected %s %s for constraint %r", name, version, vc.raw)
    return version
