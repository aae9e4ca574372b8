"""Odometer increment over alphabet symbols.

Incrementing works symbol by symbol from the right, so fields of any width are
advanced without converting them to a native integer.
"""

from __future__ import annotations

from typing import Literal

CascadeStage = Literal["chrono", "suffix"]


def advance(symbols: str, alphabet: str) -> str | None:
    """Return ``symbols`` incremented by one unit, or ``None`` on overflow.

    >>> advance("0111", "01")
    '1000'
    >>> advance("1111", "01") is None
    True
    """
    chars = list(symbols)
    top = len(alphabet) - 1
    for i in range(len(chars) - 1, -1, -1):
        idx = alphabet.index(chars[i])
        if idx < top:
            chars[i] = alphabet[idx + 1]
            return "".join(chars)
        chars[i] = alphabet[0]
    return None


def advance_chrono_then_suffix(
    chrono: str, suffix: str, alphabet: str
) -> tuple[str, str, CascadeStage] | None:
    """Advance the chrono field, falling back to chrono+suffix as one number.

    Returns the new ``(chrono, suffix, stage)`` or ``None`` when both cascades
    overflow. The suffix is left untouched whenever the chrono field alone can
    absorb the increment.
    """
    bumped = advance(chrono, alphabet)
    if bumped is not None:
        return bumped, suffix, "chrono"
    combined = advance(chrono + suffix, alphabet)
    if combined is None:
        return None
    width = len(chrono)
    return combined[:width], combined[width:], "suffix"
