"""Error taxonomy for atp-explorer.

All exceptions raised by atp-explorer derive from ``AtpExplorerError`` so
that callers can catch the entire family with a single
``except AtpExplorerError`` clause while still being able to distinguish
individual failure modes.

Lookup misses are *not* exceptions: point lookups return
:class:`~atpexplorer.registry.snapshot.NotFound` or
:class:`~atpexplorer.registry.snapshot.PlatformUnknown` values instead.

Shipped in this module
----------------------
- ErrorSeverity      - ordered severity enum
- AtpExplorerError   - root exception with severity and context payload
- Domain subclasses  - ConfigurationError, RegistryError, InvalidQueryError
"""
from __future__ import annotations

from enum import Enum


class ErrorSeverity(str, Enum):
    """Ordered severity levels for ``AtpExplorerError`` instances.

    Severity is advisory metadata for log filtering; raising and handling
    are unaffected.
    """

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class AtpExplorerError(Exception):
    """Root exception for all atp-explorer failures.

    Parameters
    ----------
    message:
        Human-readable description of what went wrong.
    severity:
        Advisory ``ErrorSeverity`` level.  Defaults to ``HIGH``.
    context:
        Optional dict of structured metadata (paths, queries, etc.).

    Examples
    --------
    >>> try:
    ...     raise AtpExplorerError("something broke", ErrorSeverity.MEDIUM)
    ... except AtpExplorerError as exc:
    ...     print(exc.severity.value)
    medium
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.HIGH,
        context: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.severity: ErrorSeverity = severity
        self.context: dict[str, object] = context or {}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}("
            f"message={str(self)!r}, "
            f"severity={self.severity.value!r})"
        )


class ConfigurationError(AtpExplorerError):
    """Raised when configuration loading or validation fails.

    Examples: missing config file, bad YAML, non-positive refresh interval.
    """


class RegistryError(AtpExplorerError):
    """Raised when a registry snapshot cannot be built or published."""


class InvalidQueryError(AtpExplorerError):
    """Raised when a search query fails input validation.

    A query that is too short is rejected outright rather than answered
    with an empty result set.
    """

    def __init__(self, message: str, query: str | None = None) -> None:
        super().__init__(message, severity=ErrorSeverity.LOW, context={"query": query})
        self.query = query
