# tests/conftest.py

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest
import structlog

from Chronoid.metrics import reset_counters
from Chronoid.timeutils import to_ns


class FakeClock:
    """Manually driven clock returning integer nanoseconds since 1970."""

    def __init__(self, start: datetime) -> None:
        self.ns = to_ns(start)
        self.calls = 0

    def __call__(self) -> int:
        self.calls += 1
        return self.ns

    def advance(self, ns: int) -> None:
        self.ns += ns

    def set(self, dt: datetime) -> None:
        self.ns = to_ns(dt)


class FixedBytes:
    """Deterministic byte source cycling over a fixed pattern."""

    def __init__(self, pattern: bytes = b"\x00") -> None:
        self.pattern = pattern
        self.requests: list[int] = []

    def __call__(self, n: int) -> bytes:
        self.requests.append(n)
        reps = n // len(self.pattern) + 1
        return (self.pattern * reps)[:n]


@pytest.fixture(autouse=True)
def _clean_slate() -> Iterator[None]:
    # Counters and structlog config are process globals.
    reset_counters()
    yield None
    structlog.reset_defaults()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def zero_bytes() -> FixedBytes:
    return FixedBytes(b"\x00")
