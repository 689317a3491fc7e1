"""Single-pass sample statistics in stored (pre-rescale) units."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class RawStats:
    min: float
    max: float
    non_zero_count: int
    total: int
    non_finite_count: int = 0


def compute_stats(samples: np.ndarray) -> RawStats:
    """Compute min, max and the non-zero count over ``samples``.

    This is a handful of vectorized numpy reductions (``count_nonzero``,
    ``isfinite``, ``min``, ``max``) run once per decode; the result is handed
    to normalization and never recomputed. NaN and infinite samples never
    take part in min/max. A buffer with no finite samples reports
    ``min == max == 0.0`` so normalization sees a degenerate range.
    """

    total = int(samples.size)
    non_zero = int(np.count_nonzero(samples))

    if np.issubdtype(samples.dtype, np.floating):
        finite = np.isfinite(samples)
        non_finite = total - int(np.count_nonzero(finite))
        if non_finite:
            samples = samples[finite]
    else:
        non_finite = 0

    if samples.size == 0:
        return RawStats(min=0.0, max=0.0, non_zero_count=non_zero, total=total, non_finite_count=non_finite)

    return RawStats(
        min=float(samples.min()),
        max=float(samples.max()),
        non_zero_count=non_zero,
        total=total,
        non_finite_count=non_finite,
    )
