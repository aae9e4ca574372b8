"""Buffered secure-random symbol source for identifier suffixes."""

from __future__ import annotations

import random
import secrets
import time
from collections.abc import Callable

import structlog

from Chronoid.errors import EntropyUnavailable
from Chronoid.metrics import inc_counter

ByteSource = Callable[[int], bytes]

DEFAULT_POOL_SIZE = 1024

log = structlog.get_logger()


def symbol_mask(alphabet_size: int) -> int:
    """Smallest ``2**k - 1`` covering every index below ``alphabet_size``.

    An alphabet of 6 symbols (max index 5 = 0b101) uses mask 0b111.
    """
    return (1 << (alphabet_size - 1).bit_length()) - 1


class RandomSuffixPool:
    """Draws uniformly distributed alphabet symbols from a byte buffer.

    Bytes are fetched ``pool_size`` at a time from ``source`` and mapped to
    symbols by masking and rejection sampling. Not thread safe: a generator owns
    one pool and only touches it while holding its own lock.
    """

    def __init__(
        self,
        alphabet: str,
        *,
        pool_size: int = DEFAULT_POOL_SIZE,
        source: ByteSource | None = None,
        allow_insecure_fallback: bool = False,
    ) -> None:
        if pool_size < 1:
            raise ValueError("pool_size must be positive")
        self.alphabet = alphabet
        self.pool_size = pool_size
        self.mask = symbol_mask(len(alphabet))
        self.allow_insecure_fallback = allow_insecure_fallback
        self.degraded = False
        self.refills = 0
        self.rejected = 0
        self._source: ByteSource = source or secrets.token_bytes
        self._buffer = b""
        self._offset = 0
        self._fallback_rng: random.Random | None = None

    def _fill(self) -> None:
        try:
            data = self._source(self.pool_size)
            if len(data) != self.pool_size:
                raise OSError(f"short read: wanted {self.pool_size} bytes, got {len(data)}")
        except (OSError, NotImplementedError) as exc:
            if not self.allow_insecure_fallback:
                raise EntropyUnavailable(
                    "Secure random source failed",
                    context={"pool_size": self.pool_size, "cause": str(exc)},
                ) from exc
            if not self.degraded:
                log.warning("random_pool.insecure_fallback", error=str(exc))
            self.degraded = True
            inc_counter("random_pool.insecure_fallback")
            if self._fallback_rng is None:
                self._fallback_rng = random.Random(time.time_ns())
            data = self._fallback_rng.randbytes(self.pool_size)
        self._buffer = data
        self._offset = 0
        self.refills += 1
        inc_counter("random_pool.refill")

    def _next_byte(self) -> int:
        if self._offset >= len(self._buffer):
            self._fill()
        b = self._buffer[self._offset]
        self._offset += 1
        return b

    def next_symbol(self) -> str:
        size = len(self.alphabet)
        while True:
            idx = self._next_byte() & self.mask
            if idx < size:
                return self.alphabet[idx]
            self.rejected += 1
            inc_counter("random_pool.rejected")

    def symbols(self, count: int) -> str:
        return "".join(self.next_symbol() for _ in range(count))
