"""Minimal in-process metrics shim for counters and histograms.

Generators are called from many threads, so every mutation happens under one
module lock. Histograms are exported as flattened counters to keep consumers
on a single ``dict[str, int]`` shape.
"""

from __future__ import annotations

import threading
from collections import defaultdict

_lock = threading.Lock()
_counters: dict[str, int] = defaultdict(int)
_histograms: dict[str, dict[str, int]] = {}
_hist_sums: dict[str, int] = defaultdict(int)
_hist_counts: dict[str, int] = defaultdict(int)

DEFAULT_BUCKETS = [1, 2, 5, 10, 20, 50, 100, 250, 500, 1000]


def inc_counter(name: str, value: int = 1) -> None:
    with _lock:
        _counters[name] += int(value)


def get_counter(name: str) -> int:
    with _lock:
        return _counters.get(name, 0)


def reset_counters() -> None:
    with _lock:
        _counters.clear()
        _histograms.clear()
        _hist_sums.clear()
        _hist_counts.clear()


def get_counters() -> dict[str, int]:
    """Return a shallow copy of all counters for diagnostics."""
    with _lock:
        out = dict(_counters)
        for name, buckets in _histograms.items():
            for b_lbl, cnt in buckets.items():
                out[f"histo.{name}.{b_lbl}"] = cnt
            out[f"histo.{name}.sum"] = _hist_sums.get(name, 0)
            out[f"histo.{name}.count"] = _hist_counts.get(name, 0)
        return out


def observe_histogram(name: str, value: int, *, buckets: list[int] | None = None) -> None:
    """Record a value in a histogram with <=-style buckets.

    Values above the last bound land in an overflow bucket labeled 'gt_{last}'.
    """
    if buckets is None:
        buckets = DEFAULT_BUCKETS
    with _lock:
        h = _histograms.setdefault(name, {})
        for ub in buckets:
            if value <= ub:
                key = f"le_{ub}"
                break
        else:
            key = f"gt_{buckets[-1]}"
        h[key] = h.get(key, 0) + 1
        _hist_sums[name] += int(value)
        _hist_counts[name] += 1
