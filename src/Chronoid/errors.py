"""Error taxonomy for identifier generation and decoding.

Every failure is raised to the caller. Construction problems surface as
``ConfigurationError`` before a generator exists; per-call problems
(``TimestampExhausted``, ``RateExceeded``, ``DecodeError``) never leave the
generator in a partially-updated state.
"""

from __future__ import annotations

from typing import Any


class ChronoidError(Exception):
    """Base error carrying structured context for logs and diagnostics."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = dict(context or {})


class ConfigurationError(ChronoidError, ValueError):
    """Raised when a generator configuration cannot be resolved."""

    pass


class TimestampExhausted(ChronoidError):
    """Raised when the current time bucket is outside the timestamp field's range.

    Recoverable only by reconfiguring (longer timestamp field, coarser level or a
    later epoch start).
    """

    pass


class RateExceeded(ChronoidError):
    """Raised when chrono and suffix capacity for one time bucket is used up.

    Callers may wait for the next bucket or reconfigure for more capacity.
    """

    pass


class DecodeError(ChronoidError, ValueError):
    """Raised for malformed identifiers (wrong length or foreign symbols)."""

    pass


class EntropyUnavailable(ChronoidError):
    """Raised when the secure byte source fails and no fallback is allowed."""

    pass
