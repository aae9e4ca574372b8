"""Lexicographically sortable identifiers: timestamp, chrono counter, random suffix."""  # noqa: N999

from .errors import (
    ChronoidError,
    ConfigurationError,
    DecodeError,
    EntropyUnavailable,
    RateExceeded,
    TimestampExhausted,
)
from .generator import SortableIDGenerator
from .schemas import DecodedID, GeneratorConfig, GeneratorInfo
from .units import MaxSortableRate, TimestampLevel

__all__ = [
    "ChronoidError",
    "ConfigurationError",
    "DecodeError",
    "EntropyUnavailable",
    "RateExceeded",
    "TimestampExhausted",
    "SortableIDGenerator",
    "DecodedID",
    "GeneratorConfig",
    "GeneratorInfo",
    "MaxSortableRate",
    "TimestampLevel",
]
