"""Conversions between aware datetimes and integer nanoseconds since 1970."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
MAX_INSTANT = datetime.max.replace(tzinfo=UTC)


def to_ns(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    delta = dt - UNIX_EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


def from_ns(ns: int) -> datetime:
    """Aware UTC datetime for ``ns``, truncated to microseconds.

    Raises OverflowError when outside the datetime range.
    """
    return UNIX_EPOCH + timedelta(microseconds=ns // 1_000)


def from_ns_clamped(ns: int) -> datetime:
    """Like :func:`from_ns` but saturates at ``datetime.max`` (UTC)."""
    if ns >= to_ns(MAX_INSTANT):
        return MAX_INSTANT
    return from_ns(ns)


def format_iso(dt: datetime) -> str:
    return dt.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
