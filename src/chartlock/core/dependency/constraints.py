"""Semantic versions and version-range constraints for chart dependencies.

This module provides the version arithmetic the resolver needs: parsing
chart versions, ordering them by SemVer precedence, and checking them
against the range expressions authors write in ``Chart.yaml``.

Constraint syntax:

- Exact match: ``1.2.3``, ``=1.2.3``, ``==1.2.3``
- Not-equal: ``!=1.2.3``
- Comparisons: ``>1.2.3``, ``>=1.2.3``, ``<1.2.3``, ``<=1.2.3``
  (``=>`` and ``=<`` are accepted spellings)
- Tilde: ``~1.2.3`` (patch-level changes), ``~>`` is an alias
- Caret: ``^1.2.3`` (changes that do not modify the left-most non-zero part)
- Wildcards: ``1.2.x``, ``1.*``, ``*``; missing parts act as wildcards
- Hyphen ranges: ``1.2 - 1.4.5``
- Conjunction with commas or spaces: ``>=1.0.0, <2.0.0``
- Alternatives with ``||``: ``^1.0.0 || ^2.0.0``

A pre-release version only satisfies a constraint atom whose own version
carries a pre-release, so ``>=1.0.0`` never selects ``1.1.0-rc.1``.

References
----------
.. [SemVer] Preston-Werner, T. (2013). "Semantic Versioning 2.0.0."
   https://semver.org/
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, field

from chartlock.exceptions import InvalidConstraintError


# ---------------------------------------------------------------------------
# Version: a parsed semantic version
# ---------------------------------------------------------------------------

_IDENT = r"[0-9A-Za-z\-]+(?:\.[0-9A-Za-z\-]+)*"

_VERSION_RE = re.compile(
    r"^v?(?P<major>\d+)(?:\.(?P<minor>\d+))?(?:\.(?P<patch>\d+))?"
    rf"(?:-(?P<pre>{_IDENT}))?"
    rf"(?:\+(?P<build>{_IDENT}))?$"
)


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version, compared by SemVer 2.0.0 precedence.

    Parsing is lenient in the way chart tooling is: a leading ``v`` is
    accepted and a missing minor or patch component defaults to 0. Build
    metadata is kept but ignored for ordering and equality.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        prerelease: Dot-separated pre-release identifiers, empty for a release.
        build: Build metadata, "" if absent.
        original: The text the version was parsed from.
    """

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: str = ""
    original: str = field(default="", compare=False)

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a version string.

        Raises:
            ValueError: If *text* is not a semantic version.
        """
        m = _VERSION_RE.match(text.strip())
        if not m:
            raise ValueError(f"Invalid semantic version: {text!r}")
        pre = m.group("pre")
        return cls(
            major=int(m.group("major")),
            minor=int(m.group("minor") or 0),
            patch=int(m.group("patch") or 0),
            prerelease=tuple(pre.split(".")) if pre else (),
            build=m.group("build") or "",
            original=text.strip(),
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def _precedence(self) -> tuple:
        if not self.prerelease:
            pre_key: tuple = (1,)
        else:
            pre_key = (0, tuple(
                (0, int(part), "") if part.isdigit() else (1, 0, part)
                for part in self.prerelease
            ))
        return (self.major, self.minor, self.patch, pre_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence() == other._precedence()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._precedence() < other._precedence()

    def __hash__(self) -> int:
        return hash(self._precedence())

    def __str__(self) -> str:
        if self.original:
            return self.original
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


def parse_version(text: str) -> Version:
    """Module-level shorthand for ``Version.parse``."""
    return Version.parse(text)


# ---------------------------------------------------------------------------
# Constraint atoms
# ---------------------------------------------------------------------------

_OPERATORS = ("==", "!=", ">=", "=>", "<=", "=<", "~>", ">", "<", "=", "~", "^")
_OP_ALIASES = {"==": "=", "=>": ">=", "=<": "<=", "~>": "~"}

_ATOM_RE = re.compile(
    r"^(?P<op>" + "|".join(re.escape(op) for op in _OPERATORS) + r")?"
    r"(?P<ver>\S+)$"
)

_WILD = r"(?:\d+|[xX*])"
_RANGE_VERSION_RE = re.compile(
    rf"^v?(?P<major>{_WILD})(?:\.(?P<minor>{_WILD}))?(?:\.(?P<patch>{_WILD}))?"
    rf"(?:-(?P<pre>{_IDENT}))?"
    rf"(?:\+(?P<build>{_IDENT}))?$"
)

_HYPHEN_RANGE_RE = re.compile(r"(\S+)\s+-\s+(\S+)")
_OP_SPACE_RE = re.compile(
    r"(" + "|".join(re.escape(op) for op in _OPERATORS) + r")\s+"
)
_ATOM_SPLIT_RE = re.compile(r"[,\s]+")


def _is_wild(part: str | None) -> bool:
    return part is None or part in ("x", "X", "*")


@dataclass(frozen=True)
class _Atom:
    """One comparison in a constraint, e.g. ``>=1.2.x``."""

    op: str
    version: Version
    any_major: bool = False
    minor_dirty: bool = False
    patch_dirty: bool = False

    @property
    def dirty(self) -> bool:
        return self.any_major or self.minor_dirty or self.patch_dirty

    def _upper(self) -> Version:
        """Exclusive upper bound of the wildcard range this atom names."""
        v = self.version
        if self.minor_dirty:
            return Version(v.major + 1, 0, 0, ("0",))
        return Version(v.major, v.minor + 1, 0, ("0",))

    def _in_range(self, v: Version) -> bool:
        if self.any_major:
            return True
        if not self.dirty:
            return v == self.version
        return self.version <= v < self._upper()

    def check(self, v: Version) -> bool:
        con = self.version
        if v.prerelease and not con.prerelease:
            return False

        op = self.op
        if op == "=":
            return self._in_range(v)
        if op == "!=":
            return not self._in_range(v)
        if self.any_major:
            return op not in ("<", ">")
        if op == ">":
            if self.minor_dirty:
                return v.major > con.major
            if self.patch_dirty:
                return (v.major, v.minor) > (con.major, con.minor)
            return v > con
        if op == ">=":
            return v >= con
        if op == "<":
            return v < con
        if op == "<=":
            if self.dirty:
                return v < self._upper()
            return v <= con
        if op == "~":
            return con <= v < self._upper()
        if op == "^":
            if v < con:
                return False
            if con.major > 0 or self.minor_dirty:
                return v.major == con.major
            if v.major > 0:
                return False
            if con.minor > 0 or self.patch_dirty:
                return v.minor == con.minor
            if v.minor > 0:
                return False
            return v.patch == con.patch
        raise ValueError(f"Unknown operator: {op!r}")  # pragma: no cover


def _parse_atom(text: str) -> _Atom:
    m = _ATOM_RE.match(text)
    if not m:
        raise ValueError(f"Invalid constraint atom: {text!r}")
    op = m.group("op") or "="
    op = _OP_ALIASES.get(op, op)

    vm = _RANGE_VERSION_RE.match(m.group("ver"))
    if not vm:
        raise ValueError(f"Invalid constraint atom: {text!r}")

    major, minor, patch = vm.group("major"), vm.group("minor"), vm.group("patch")
    any_major = _is_wild(major)
    minor_dirty = not any_major and _is_wild(minor)
    patch_dirty = not any_major and not minor_dirty and _is_wild(patch)
    pre = vm.group("pre")

    version = Version(
        major=0 if any_major else int(major),
        minor=0 if any_major or minor_dirty else int(minor),
        patch=0 if any_major or minor_dirty or patch_dirty else int(patch),
        prerelease=tuple(pre.split(".")) if pre else (),
        build=vm.group("build") or "",
    )
    return _Atom(op, version, any_major, minor_dirty, patch_dirty)


def _parse_groups(raw: str) -> tuple[tuple[_Atom, ...], ...]:
    text = raw.strip()
    if not text:
        raise ValueError("Empty version constraint")

    groups: list[tuple[_Atom, ...]] = []
    for alternative in text.split("||"):
        alternative = _HYPHEN_RANGE_RE.sub(r">=\1,<=\2", alternative.strip())
        alternative = _OP_SPACE_RE.sub(r"\1", alternative)
        atoms = [a for a in _ATOM_SPLIT_RE.split(alternative) if a]
        if not atoms:
            raise ValueError(f"Empty alternative in constraint: {raw!r}")
        groups.append(tuple(_parse_atom(a) for a in atoms))
    return tuple(groups)


# ---------------------------------------------------------------------------
# VersionConstraint: Declarative version requirement
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VersionConstraint:
    """A version constraint as written in a chart's dependency list.

    The constraint is parsed when constructed, so a malformed expression is
    reported at the point it is read rather than when it is first checked.

    Example::

        vc = VersionConstraint(">=0.1.0")
        vc.satisfies("0.2.0")            # True
        vc.best(["0.1.0", "0.2.0"])      # "0.2.0"

    Attributes:
        raw: The constraint string as authored (e.g., "^1.2.0").

    Raises:
        InvalidConstraintError: If *raw* is not a version or range expression.
    """

    raw: str
    _groups: tuple[tuple[_Atom, ...], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        try:
            groups = _parse_groups(self.raw)
        except ValueError as exc:
            raise InvalidConstraintError(
                f"invalid version/constraint format {self.raw!r}: {exc}"
            ) from exc
        object.__setattr__(self, "_groups", groups)

    @staticmethod
    def is_exact(text: str) -> bool:
        """Return True if *text* is a plain version rather than a range."""
        try:
            Version.parse(text)
        except ValueError:
            return False
        return True

    def check(self, version: Version) -> bool:
        """Check a parsed version: any alternative whose atoms all hold."""
        return any(
            all(atom.check(version) for atom in group) for group in self._groups
        )

    def satisfies(self, version: str) -> bool:
        """Check whether a version string satisfies this constraint.

        Raises:
            ValueError: If *version* is not a valid semantic version.
        """
        return self.check(Version.parse(version))

    def best(self, versions: list[str]) -> str | None:
        """Return the highest version in *versions* that satisfies, if any.

        Strings that do not parse as versions are ignored.
        """
        candidates: list[Version] = []
        for text in versions:
            try:
                v = Version.parse(text)
            except ValueError:
                continue
            if self.check(v):
                candidates.append(v)
        if not candidates:
            return None
        return str(max(candidates))

    def __str__(self) -> str:
        return self.raw

    def __repr__(self) -> str:
        return f"VersionConstraint({self.raw!r})"
