"""Linear rescale (scl_slope / scl_inter) and unit-interval normalization."""

from __future__ import annotations

import numpy as np

from .stats import RawStats


def rescale_active(slope: float) -> bool:
    """Slopes of exactly 0 or 1 mean the stored values are already final."""

    return slope != 0.0 and slope != 1.0


def rescale_bounds(stats: RawStats, slope: float, intercept: float) -> tuple[float, float]:
    if not rescale_active(slope):
        return stats.min, stats.max
    return stats.min * slope + intercept, stats.max * slope + intercept


def normalize_samples(samples: np.ndarray, stats: RawStats, slope: float = 1.0, intercept: float = 0.0) -> np.ndarray:
    """Map ``samples`` onto ``[0, 1]`` using bounds from ``stats``.

    ``stats`` must come from the same ``samples``; bounds are never
    recomputed here. A non-positive or non-finite range (float64 overflow)
    maps every sample to 0.0, as do NaN and infinite samples.
    """

    low, high = rescale_bounds(stats, slope, intercept)
    span = high - low
    if not span > 0.0 or not np.isfinite(span):
        return np.zeros(samples.shape, dtype=np.float64)

    values = samples.astype(np.float64)
    if rescale_active(slope):
        values *= slope
        values += intercept

    values -= low
    values /= span
    if stats.non_finite_count:
        values[~np.isfinite(values)] = 0.0
    # Guards the last ulp; bounds and samples share the same float64 ops.
    np.clip(values, 0.0, 1.0, out=values)
    return values
