"""Turn a raw :class:`GeneratorConfig` into validated field widths and bounds.

Resolution either returns a complete :class:`ResolvedConfig` or raises
``ConfigurationError``; nothing is partially built.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime

import structlog

from Chronoid.codec import BaseNCodec
from Chronoid.errors import ConfigurationError
from Chronoid.schemas import GeneratorConfig
from Chronoid.timeutils import from_ns_clamped, to_ns
from Chronoid.units import (
    LEVEL_NANOSECONDS,
    MaxSortableRate,
    TimestampLevel,
    expected_per_bucket,
    level_duration_ns,
)

log = structlog.get_logger()

# Horizon used for sizing when no end date is configured.
DEFAULT_HORIZON_YEARS = 10_000


@dataclass(frozen=True)
class ResolvedConfig:
    alphabet: str
    base: int
    total_length: int
    timestamp_length: int
    chrono_length: int
    suffix_length: int
    epoch_start: datetime
    start_ns: int
    end_ns: int
    timestamp_level: TimestampLevel
    bucket_ns: int
    max_sortable_rate: MaxSortableRate
    max_timestamp: int
    pool_size: int
    allow_insecure_fallback: bool
    exhaustion_retries: int
    exhaustion_wait_seconds: float

    @property
    def chrono_slice(self) -> slice:
        return slice(self.timestamp_length, self.timestamp_length + self.chrono_length)

    @property
    def suffix_slice(self) -> slice:
        return slice(self.timestamp_length + self.chrono_length, self.total_length)

    @property
    def max_supported_ns(self) -> int:
        return self.start_ns + self.max_timestamp * self.bucket_ns

    @property
    def max_supported_instant(self) -> datetime:
        return from_ns_clamped(self.max_supported_ns)


def timestamp_length_for(codec: BaseNCodec, start_ns: int, end_ns: int, bucket_ns: int) -> int:
    """Digits needed so every bucket between start and end is representable."""
    return codec.min_width_exceeding((end_ns - start_ns) // bucket_ns)


def chrono_length_for(
    codec: BaseNCodec, rate: MaxSortableRate, level: TimestampLevel
) -> int:
    """Digits needed to count the expected issuances inside one bucket."""
    return codec.min_width_exceeding(expected_per_bucket(rate, level))


def resolve(config: GeneratorConfig, *, now_ns: int | None = None) -> ResolvedConfig:
    codec = BaseNCodec(config.alphabet)

    if config.total_length < 2:
        raise ConfigurationError(
            "Total length must be at least 2",
            context={"total_length": config.total_length},
        )

    level = TimestampLevel(config.timestamp_level)
    rate = MaxSortableRate(config.max_sortable_rate)
    bucket_ns = level_duration_ns(level)
    start_ns = to_ns(config.epoch_start)

    if config.epoch_end is not None:
        end_ns = to_ns(config.epoch_end)
        if end_ns < start_ns:
            raise ConfigurationError(
                "End date cannot be before start date",
                context={
                    "epoch_start": config.epoch_start.isoformat(),
                    "epoch_end": config.epoch_end.isoformat(),
                },
            )
    else:
        end_ns = start_ns + DEFAULT_HORIZON_YEARS * LEVEL_NANOSECONDS[TimestampLevel.year]

    if config.timestamp_length is not None:
        if config.timestamp_length < 1:
            raise ConfigurationError(
                "Timestamp length must be at least 1",
                context={"timestamp_length": config.timestamp_length},
            )
        timestamp_length = config.timestamp_length
    else:
        timestamp_length = timestamp_length_for(codec, start_ns, end_ns, bucket_ns)

    chrono_length = chrono_length_for(codec, rate, level)

    required = timestamp_length + chrono_length + 1
    if config.total_length < required:
        raise ConfigurationError(
            f"Total length must be at least {required} "
            f"(timestamp: {timestamp_length}, chrono: {chrono_length}, minimum random: 1)",
            context={
                "total_length": config.total_length,
                "timestamp_length": timestamp_length,
                "chrono_length": chrono_length,
            },
        )

    resolved = ResolvedConfig(
        alphabet=codec.alphabet,
        base=codec.base,
        total_length=config.total_length,
        timestamp_length=timestamp_length,
        chrono_length=chrono_length,
        suffix_length=config.total_length - timestamp_length - chrono_length,
        epoch_start=config.epoch_start,
        start_ns=start_ns,
        end_ns=end_ns,
        timestamp_level=level,
        bucket_ns=bucket_ns,
        max_sortable_rate=rate,
        max_timestamp=codec.capacity(timestamp_length),
        pool_size=config.pool_size,
        allow_insecure_fallback=config.allow_insecure_fallback,
        exhaustion_retries=config.exhaustion_retries,
        exhaustion_wait_seconds=config.exhaustion_wait_seconds,
    )

    if resolved.suffix_length < resolved.timestamp_length:
        log.warning(
            "resolver.short_suffix",
            suffix_length=resolved.suffix_length,
            timestamp_length=resolved.timestamp_length,
            hint="increase total_length for more cross-issuer uniqueness",
        )
    current = time.time_ns() if now_ns is None else now_ns
    if resolved.max_supported_ns <= current:
        log.warning(
            "resolver.max_instant_in_past",
            max_supported_instant=resolved.max_supported_instant.isoformat(),
            timestamp_length=timestamp_length,
            timestamp_level=level.value,
        )
    return resolved
