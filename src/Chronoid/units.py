"""Time-bucket granularities, issuance rates and their conversion tables.

The two tables below are the only place where levels and rates are turned into
numbers. Everything is integer or ``Fraction`` arithmetic so sizing never
depends on floating point precision.
"""

from __future__ import annotations

import enum
from fractions import Fraction

NANOS_PER_SECOND = 1_000_000_000


class TimestampLevel(str, enum.Enum):
    nanosecond = "nanosecond"
    microsecond = "microsecond"
    millisecond = "millisecond"
    second = "second"
    minute = "minute"
    hour = "hour"
    day = "day"
    month = "month"
    year = "year"


class MaxSortableRate(str, enum.Enum):
    nano10 = "10_per_nanosecond"
    micro100 = "100_per_microsecond"
    micro1 = "1_per_microsecond"
    milli10 = "10_per_millisecond"
    second100 = "100_per_second"
    second1 = "1_per_second"


# Month and year are fixed approximations (30 and 365 days).
LEVEL_NANOSECONDS: dict[TimestampLevel, int] = {
    TimestampLevel.nanosecond: 1,
    TimestampLevel.microsecond: 1_000,
    TimestampLevel.millisecond: 1_000_000,
    TimestampLevel.second: NANOS_PER_SECOND,
    TimestampLevel.minute: 60 * NANOS_PER_SECOND,
    TimestampLevel.hour: 3_600 * NANOS_PER_SECOND,
    TimestampLevel.day: 86_400 * NANOS_PER_SECOND,
    TimestampLevel.month: 30 * 86_400 * NANOS_PER_SECOND,
    TimestampLevel.year: 365 * 86_400 * NANOS_PER_SECOND,
}

RATE_PER_SECOND: dict[MaxSortableRate, int] = {
    MaxSortableRate.nano10: 10 * NANOS_PER_SECOND,
    MaxSortableRate.micro100: 100 * 1_000_000,
    MaxSortableRate.micro1: 1_000_000,
    MaxSortableRate.milli10: 10 * 1_000,
    MaxSortableRate.second100: 100,
    MaxSortableRate.second1: 1,
}


def level_duration_ns(level: TimestampLevel | str) -> int:
    """Return the length of one time bucket in nanoseconds."""
    return LEVEL_NANOSECONDS[TimestampLevel(level)]


def expected_per_bucket(rate: MaxSortableRate | str, level: TimestampLevel | str) -> Fraction:
    """Expected maximum issuances inside a single bucket.

    May be below one: 100 per second at millisecond granularity is 1/10.
    """
    per_second = RATE_PER_SECOND[MaxSortableRate(rate)]
    return Fraction(per_second * level_duration_ns(level), NANOS_PER_SECOND)
