"""Fixed-width base-N codec over a canonical (codepoint-sorted) alphabet.

Digit values follow symbol order, so comparing two encoded strings of the same
width gives the same answer as comparing the integers they encode.
"""

from __future__ import annotations

from fractions import Fraction
from typing import Final

from Chronoid.errors import ConfigurationError, DecodeError

DEFAULT_ALPHABET: Final[str] = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ-_"
MIN_ALPHABET_SIZE: Final[int] = 2
MAX_ALPHABET_SIZE: Final[int] = 255


def normalize_alphabet(raw: str) -> str:
    """Validate an alphabet and return it sorted by codepoint.

    Raises:
        ConfigurationError: fewer than 2 symbols, more than 255, or duplicates
    """
    if len(raw) < MIN_ALPHABET_SIZE:
        raise ConfigurationError(
            "Alphabet must contain at least 2 characters",
            context={"alphabet": raw},
        )
    if len(raw) > MAX_ALPHABET_SIZE:
        raise ConfigurationError(
            f"Alphabet must contain no more than {MAX_ALPHABET_SIZE} characters",
            context={"alphabet_size": len(raw)},
        )
    if len(set(raw)) != len(raw):
        dupes = sorted({ch for ch in raw if raw.count(ch) > 1})
        raise ConfigurationError(
            "Alphabet must contain unique characters",
            context={"duplicates": "".join(dupes)},
        )
    return "".join(sorted(raw))


class BaseNCodec:
    def __init__(self, alphabet: str) -> None:
        self.alphabet = normalize_alphabet(alphabet)
        self.base = len(self.alphabet)
        self._index: dict[str, int] = {ch: i for i, ch in enumerate(self.alphabet)}

    @property
    def min_symbol(self) -> str:
        return self.alphabet[0]

    @property
    def max_symbol(self) -> str:
        return self.alphabet[-1]

    def index_of(self, symbol: str) -> int:
        try:
            return self._index[symbol]
        except KeyError:
            raise DecodeError(
                f"Symbol {symbol!r} is not part of the alphabet",
                context={"symbol": symbol},
            ) from None

    def contains(self, text: str) -> bool:
        return all(ch in self._index for ch in text)

    def capacity(self, width: int) -> int:
        """Number of distinct values a field of ``width`` symbols can hold."""
        return self.base**width

    def min_width_exceeding(self, count: int | Fraction) -> int:
        """Smallest width ``w >= 1`` with ``base ** w > count``."""
        width = 1
        cap = self.base
        while cap <= count:
            cap *= self.base
            width += 1
        return width

    def encode(self, value: int, width: int) -> str:
        """Encode ``value`` big-endian, left padded with the minimum symbol."""
        if value < 0:
            raise ValueError(f"Cannot encode negative value {value}")
        if value >= self.capacity(width):
            raise ValueError(f"Value {value} does not fit in {width} symbols of base {self.base}")
        if value == 0:
            return self.min_symbol * width
        chars: list[str] = []
        for _ in range(width):
            value, rem = divmod(value, self.base)
            chars.append(self.alphabet[rem])
        chars.reverse()
        return "".join(chars)

    def decode(self, symbols: str, width: int | None = None) -> int:
        """Strict inverse of :meth:`encode`.

        Raises:
            DecodeError: length differs from ``width`` or a symbol is foreign
        """
        if width is not None and len(symbols) != width:
            raise DecodeError(
                f"Expected {width} symbols, got {len(symbols)}",
                context={"expected": width, "actual": len(symbols)},
            )
        total = 0
        for ch in symbols:
            total = total * self.base + self.index_of(ch)
        return total
