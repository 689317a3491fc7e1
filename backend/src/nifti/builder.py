"""Reconstruct the flat sample buffer into an (x, y, z) grid."""

from __future__ import annotations

import math

import numpy as np

from .errors import SampleCountMismatchError


def build_volume_grid(samples: np.ndarray, dims: tuple[int, int, int]) -> np.ndarray:
    """Return a float64 grid indexed as ``grid[x, y, z]``.

    NIfTI stores X fastest, so the source index of ``(x, y, z)`` is
    ``x + y*dimX + z*dimX*dimY``; a Fortran-order reshape reproduces that.
    """

    expected = math.prod(dims)
    if samples.size != expected:
        raise SampleCountMismatchError(expected, int(samples.size))

    grid = np.empty(dims, dtype=np.float64)
    grid[...] = samples.reshape(dims, order="F")
    return grid
