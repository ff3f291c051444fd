"""chartlock exception hierarchy.

All public exceptions inherit from ChartLockError, giving callers a single
base class to catch when they want to handle any chartlock-specific failure
without swallowing unrelated errors.

Resolution failures additionally share ``ResolutionError`` and carry the name
of the dependency that could not be resolved, so a caller can present an
actionable message without parsing the text.
"""

from __future__ import annotations


class ChartLockError(Exception):
    """Base exception for all chartlock errors."""


class ResolutionError(ChartLockError):
    """Raised when a declared dependency cannot be resolved.

    Any resolution error aborts the whole ``Resolver.resolve`` call; no
    partial lock is ever returned.

    Attributes:
        dependency: Name of the dependency being resolved, or "" when the
            failure is not tied to a single dependency.
    """

    def __init__(self, message: str, *, dependency: str = "") -> None:
        super().__init__(message)
        self.dependency = dependency


class InvalidConstraintError(ResolutionError, ValueError):
    """Raised when a version string is neither a version nor a valid range."""


class CacheUnavailableError(ResolutionError):
    """Raised when no cached repository index exists for a remote alias."""


class ChartNotFoundError(ResolutionError):
    """Raised when a repository index has no entries for the named chart."""


class ConstraintUnsatisfiedError(ResolutionError):
    """Raised when entries exist but none satisfies the declared constraint."""


class LocalPathNotFoundError(ResolutionError):
    """Raised when a local or ``file://`` source is not a usable chart location.

    Attributes:
        path: The filesystem path that was attempted.
    """

    def __init__(self, message: str, *, dependency: str = "", path: str = "") -> None:
        super().__init__(message, dependency=dependency)
        self.path = path


class LockfileError(ChartLockError):
    """Raised for lock generation, digest, or persistence failures."""


class DigestInputMismatchError(LockfileError):
    """Raised when requirement and resolved lists differ in length."""


class ChartLoadError(ChartLockError):
    """Raised when chart metadata (``Chart.yaml``) cannot be read."""


class RegistryError(ChartLockError):
    """Raised when an OCI registry cannot be queried for tags."""


class ConfigError(ChartLockError):
    """Raised when a configuration file cannot be parsed."""
