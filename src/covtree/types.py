"""Shared type aliases and enumerations used across covtree."""

from __future__ import annotations

from enum import StrEnum
from typing import Final, Literal, TypeAlias

# ---------------------------------------------------------------------------
# Common type aliases
# ---------------------------------------------------------------------------

UNKNOWN_PCT: Final = "Unknown"
"""Percentage sentinel for a metric with nothing to measure."""

Percent: TypeAlias = float | Literal["Unknown"]
"""Coverage percentage in ``0..100`` or the :data:`UNKNOWN_PCT` sentinel."""

Watermark: TypeAlias = tuple[float, float]
"""``(low, high)`` percentage cut points for one metric."""


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Metric(StrEnum):
    """Coverage metrics tracked per file and per summary."""

    STATEMENTS = "statements"
    BRANCHES = "branches"
    FUNCTIONS = "functions"
    LINES = "lines"


class WatermarkStatus(StrEnum):
    """Classification of a percentage against a metric's watermarks."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"


class SummarizerName(StrEnum):
    """Tree construction strategies."""

    FLAT = "flat"
    NESTED = "nested"
    PKG = "pkg"


FULL_COVERAGE: int = 100


__all__ = [
    "FULL_COVERAGE",
    "UNKNOWN_PCT",
    "Metric",
    "Percent",
    "SummarizerName",
    "Watermark",
    "WatermarkStatus",
]
