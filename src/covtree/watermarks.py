"""Low/high watermark defaults and percentage classification."""

from __future__ import annotations

from numbers import Real
from types import MappingProxyType
from typing import TYPE_CHECKING

from covtree._meta import logger
from covtree.types import FULL_COVERAGE, Metric, WatermarkStatus

if TYPE_CHECKING:
    from collections.abc import Mapping

    from covtree.types import Percent, Watermark

DEFAULT_WATERMARKS: Mapping[Metric, Watermark] = MappingProxyType({
    Metric.STATEMENTS: (50.0, 80.0),
    Metric.FUNCTIONS: (50.0, 80.0),
    Metric.BRANCHES: (50.0, 80.0),
    Metric.LINES: (50.0, 80.0),
})


def get_default() -> dict[str, Watermark]:
    """Return a fresh copy of the default watermarks keyed by metric name."""
    return {metric.value: marks for metric, marks in DEFAULT_WATERMARKS.items()}


def _as_watermark(value: object) -> Watermark | None:
    if isinstance(value, str) or not isinstance(value, (list, tuple)) or len(value) != 2:  # noqa: PLR2004
        return None
    low, high = value
    if not isinstance(low, Real) or not isinstance(high, Real) or isinstance(low, bool) or isinstance(high, bool):
        return None
    if not 0 <= low <= high <= FULL_COVERAGE:
        return None
    return float(low), float(high)


def normalize_watermarks(overrides: Mapping[str, object] | None = None) -> dict[str, Watermark]:
    """Merge ``overrides`` over the defaults.

    Invalid pairs fall back to the default for that metric and unknown metric
    names are ignored; both are logged as warnings.
    """
    merged = get_default()
    for key, value in (overrides or {}).items():
        metric = str(key)
        if metric not in merged:
            logger.warning("ignoring watermarks for unknown metric %r", metric)
            continue
        marks = _as_watermark(value)
        if marks is None:
            logger.warning("invalid watermarks for %s: %r; using %r", metric, value, merged[metric])
            continue
        merged[metric] = marks
    return merged


def classify(watermarks: Mapping[str, Watermark], metric: Metric | str, pct: Percent) -> WatermarkStatus:
    """Return ``low``, ``medium`` or ``high`` for ``pct`` against ``metric``'s watermarks."""
    marks = watermarks.get(str(metric))
    if marks is None:
        return WatermarkStatus.UNKNOWN
    if isinstance(pct, str):  # the "Unknown" sentinel
        return WatermarkStatus.MEDIUM
    low, high = marks
    if pct < low:
        return WatermarkStatus.LOW
    if pct >= high:
        return WatermarkStatus.HIGH
    return WatermarkStatus.MEDIUM


__all__ = ["DEFAULT_WATERMARKS", "classify", "get_default", "normalize_watermarks"]
