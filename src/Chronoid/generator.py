"""Sortable identifier generator.

An identifier is ``[timestamp][chrono][suffix]``:

- timestamp: time buckets elapsed since the epoch start, base-N encoded
- chrono: counter that orders identifiers issued inside the same bucket
- suffix: random symbols, also used as overflow room once chrono is maxed out

Within one generator, identifiers returned by completed ``generate()`` calls
never decrease under plain string comparison. The whole read-modify-write of
the last issued identifier happens under a single per-instance lock.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable
from datetime import datetime

import structlog

from Chronoid.cascade import advance_chrono_then_suffix
from Chronoid.codec import BaseNCodec
from Chronoid.errors import DecodeError, RateExceeded, TimestampExhausted
from Chronoid.metrics import inc_counter, observe_histogram
from Chronoid.random_pool import ByteSource, RandomSuffixPool
from Chronoid.resolver import ResolvedConfig, resolve
from Chronoid.schemas import DecodedID, GeneratorConfig, GeneratorInfo
from Chronoid.timeutils import from_ns

Clock = Callable[[], int]

log = structlog.get_logger()


class _IssueState:
    """Mutable issuance state; only touched while holding the generator lock."""

    __slots__ = ("bucket", "last_id")

    def __init__(self) -> None:
        self.bucket: int | None = None
        self.last_id = ""


class SortableIDGenerator:
    def __init__(
        self,
        config: GeneratorConfig | None = None,
        *,
        clock: Clock | None = None,
        random_source: ByteSource | None = None,
    ) -> None:
        self._clock: Clock = clock or time.time_ns
        self.config: ResolvedConfig = resolve(config or GeneratorConfig(), now_ns=self._clock())
        self._codec = BaseNCodec(self.config.alphabet)
        self._pool = RandomSuffixPool(
            self.config.alphabet,
            pool_size=self.config.pool_size,
            source=random_source,
            allow_insecure_fallback=self.config.allow_insecure_fallback,
        )
        self._lock = threading.Lock()
        self._state = _IssueState()
        log.info("generator.created", **self.describe().to_log_fields())

    @property
    def alphabet(self) -> str:
        return self.config.alphabet

    @property
    def timestamp_length(self) -> int:
        return self.config.timestamp_length

    @property
    def chrono_length(self) -> int:
        return self.config.chrono_length

    @property
    def suffix_length(self) -> int:
        return self.config.suffix_length

    # -- generation -----------------------------------------------------

    def _current_bucket(self) -> int:
        cfg = self.config
        bucket = (self._clock() - cfg.start_ns) // cfg.bucket_ns
        if bucket < 0 or bucket >= cfg.max_timestamp:
            inc_counter("ids.timestamp_exhausted")
            raise TimestampExhausted(
                "Current time is outside the range of the timestamp field; "
                "increase the timestamp length or use a coarser timestamp level",
                context={
                    "bucket": bucket,
                    "max_timestamp": cfg.max_timestamp,
                    "timestamp_length": cfg.timestamp_length,
                    "timestamp_level": cfg.timestamp_level.value,
                },
            )
        return bucket

    def _issue(self) -> str:
        cfg = self.config
        with self._lock:
            bucket = self._current_bucket()
            state = self._state
            if state.bucket is None or bucket > state.bucket:
                chrono = self._codec.min_symbol * cfg.chrono_length
                new_id = (
                    self._codec.encode(bucket, cfg.timestamp_length)
                    + chrono
                    + self._pool.symbols(cfg.suffix_length)
                )
                state.bucket = bucket
                inc_counter("ids.new_bucket")
            else:
                # Same bucket, or the clock stepped back: keep counting on the
                # last issued bucket so output never decreases.
                last = state.last_id
                step = advance_chrono_then_suffix(
                    last[cfg.chrono_slice], last[cfg.suffix_slice], cfg.alphabet
                )
                if step is None:
                    inc_counter("ids.rate_exceeded")
                    raise RateExceeded(
                        "Too many ids generated within one time bucket; slow down, "
                        "use a finer timestamp level or increase the total length",
                        context={
                            "bucket": state.bucket,
                            "timestamp_level": cfg.timestamp_level.value,
                            "total_length": cfg.total_length,
                        },
                    )
                chrono, suffix, stage = step
                new_id = last[: cfg.timestamp_length] + chrono + suffix
                inc_counter(f"ids.{stage}_cascade")
            state.last_id = new_id
        inc_counter("ids.generated")
        return new_id

    def _retry_allowed(self, attempt: int, exc: RateExceeded) -> bool:
        if attempt >= self.config.exhaustion_retries:
            log.warning("generator.rate_exceeded", attempts=attempt + 1, **exc.context)
            return False
        inc_counter("ids.exhaustion_retry")
        return True

    @staticmethod
    def _observe_wait(started_ns: int) -> None:
        observe_histogram("ids.exhaustion_wait_ms", (time.monotonic_ns() - started_ns) // 1_000_000)

    def generate(self) -> str:
        """Issue the next identifier.

        Raises:
            TimestampExhausted: the clock is outside the timestamp field's range
            RateExceeded: the current bucket has no capacity left (after the
                configured number of waits, if any)
            EntropyUnavailable: the secure byte source failed
        """
        attempt = 0
        while True:
            try:
                return self._issue()
            except RateExceeded as exc:
                if not self._retry_allowed(attempt, exc):
                    raise
            attempt += 1
            started = time.monotonic_ns()
            time.sleep(self.config.exhaustion_wait_seconds)
            self._observe_wait(started)

    async def agenerate(self) -> str:
        """Async variant of :meth:`generate`.

        Only the bucket-exhaustion wait is awaited, so callers can bound it with
        ``asyncio.wait_for`` or ``asyncio.timeout``.
        """
        attempt = 0
        while True:
            try:
                return self._issue()
            except RateExceeded as exc:
                if not self._retry_allowed(attempt, exc):
                    raise
            attempt += 1
            started = time.monotonic_ns()
            await asyncio.sleep(self.config.exhaustion_wait_seconds)
            self._observe_wait(started)

    def generate_batch(self, count: int) -> list[str]:
        return [self.generate() for _ in range(count)]

    # -- inspection -----------------------------------------------------

    def decode(self, identifier: str) -> DecodedID:
        """Split an identifier and recover its time bucket.

        Pure: does not read or modify issuance state.
        """
        cfg = self.config
        if len(identifier) != cfg.total_length:
            raise DecodeError(
                f"ID must be exactly {cfg.total_length} characters long",
                context={"expected": cfg.total_length, "actual": len(identifier)},
            )
        if not self._codec.contains(identifier):
            bad = "".join(sorted({ch for ch in identifier if not self._codec.contains(ch)}))
            raise DecodeError("ID contains invalid characters", context={"invalid": bad})

        timestamp_part = identifier[: cfg.timestamp_length]
        bucket = self._codec.decode(timestamp_part, cfg.timestamp_length)
        timestamp_ns = cfg.start_ns + bucket * cfg.bucket_ns
        try:
            instant = from_ns(timestamp_ns)
        except OverflowError:
            raise DecodeError(
                "ID timestamp is outside the representable date range",
                context={"bucket": bucket},
            ) from None
        return DecodedID(
            instant=instant,
            timestamp_ns=timestamp_ns,
            bucket=bucket,
            timestamp_part=timestamp_part,
            chrono_part=identifier[cfg.chrono_slice],
            suffix_part=identifier[cfg.suffix_slice],
        )

    def max_supported_instant(self) -> datetime:
        """Last instant the timestamp field can represent (saturates at datetime.max)."""
        return self.config.max_supported_instant

    def describe(self) -> GeneratorInfo:
        cfg = self.config
        return GeneratorInfo(
            alphabet=cfg.alphabet,
            alphabet_size=cfg.base,
            total_length=cfg.total_length,
            timestamp_length=cfg.timestamp_length,
            chrono_length=cfg.chrono_length,
            suffix_length=cfg.suffix_length,
            timestamp_level=cfg.timestamp_level,
            max_sortable_rate=cfg.max_sortable_rate,
            start_date=cfg.epoch_start,
            end_date=cfg.max_supported_instant,
            degraded_entropy=self._pool.degraded,
        )
