# schemas.py

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from Chronoid.codec import DEFAULT_ALPHABET
from Chronoid.random_pool import DEFAULT_POOL_SIZE
from Chronoid.units import MaxSortableRate, TimestampLevel

DEFAULT_EPOCH_START = datetime(2024, 1, 1, tzinfo=UTC)


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class GeneratorConfig(BaseModel):
    """Construction input for :class:`Chronoid.generator.SortableIDGenerator`.

    Only shape and type are checked here; semantic validation (alphabet rules,
    length budget, date range) belongs to the resolver and raises
    ``ConfigurationError``.
    """

    alphabet: str = DEFAULT_ALPHABET
    total_length: int = 32
    epoch_start: datetime = DEFAULT_EPOCH_START
    epoch_end: datetime | None = None
    # Explicit timestamp width; when set, epoch_end is not used for sizing.
    timestamp_length: int | None = None
    timestamp_level: TimestampLevel = TimestampLevel.microsecond
    max_sortable_rate: MaxSortableRate = MaxSortableRate.micro100
    pool_size: int = Field(default=DEFAULT_POOL_SIZE, ge=1)
    allow_insecure_fallback: bool = False
    # 0 disables waiting: RateExceeded is raised on the first exhausted bucket.
    exhaustion_retries: int = Field(default=0, ge=0)
    exhaustion_wait_seconds: float = Field(default=0.001, gt=0)

    model_config = dict(extra="forbid", frozen=True)

    @field_validator("epoch_start")
    @classmethod
    def _start_utc(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @field_validator("epoch_end")
    @classmethod
    def _end_utc(cls, v: datetime | None) -> datetime | None:
        return None if v is None else _as_utc(v)


class DecodedID(BaseModel):
    instant: datetime
    timestamp_ns: int
    bucket: int
    timestamp_part: str
    chrono_part: str
    suffix_part: str

    model_config = dict(frozen=True)


class GeneratorInfo(BaseModel):
    """Diagnostic snapshot of a resolved generator configuration."""

    alphabet: str
    alphabet_size: int
    total_length: int
    timestamp_length: int
    chrono_length: int
    suffix_length: int
    timestamp_level: TimestampLevel
    max_sortable_rate: MaxSortableRate
    start_date: datetime
    end_date: datetime
    degraded_entropy: bool = False

    model_config = dict(frozen=True)

    def to_log_fields(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
