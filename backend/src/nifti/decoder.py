"""Decode NIfTI buffers into normalized volumes."""

from __future__ import annotations

import logging
import math
import os
from pathlib import Path
from typing import Optional

from .builder import build_volume_grid
from .compression import decompress_if_needed
from .datatypes import resolve_datatype, typed_samples
from .diagnostics import (
    NEGATIVE_RESCALE_SLOPE,
    NON_FINITE_SAMPLES,
    RANGE_OVERFLOW,
    UNKNOWN_DATATYPE,
    DiagnosticsCollector,
)
from .errors import SampleCountMismatchError
from .header import read_header
from .models import Volume, VolumeStats
from .normalize import normalize_samples, rescale_bounds
from .stats import compute_stats

logger = logging.getLogger(__name__)


def parse_nifti(buffer: bytes | bytearray | memoryview, filename: Optional[str] = None) -> Volume:
    """Decode a (possibly gzipped) single-file NIfTI buffer.

    Runs synchronously and may take a while for large volumes; async callers
    should push it to a worker thread.
    """

    diagnostics = DiagnosticsCollector(logger, source=filename)
    data = decompress_if_needed(buffer)
    header = read_header(data)

    resolution = resolve_datatype(header.datatype_code)
    if resolution.fallback:
        diagnostics.warning(
            UNKNOWN_DATATYPE,
            f"Unknown NIfTI datatype {header.datatype_code}, reading samples as {resolution.datatype.name}",
            datatype_code=header.datatype_code,
            fallback=resolution.datatype.name,
        )

    itemsize = resolution.datatype.dtype().itemsize
    payload = memoryview(data)[header.vox_offset :]
    expected = header.declared_samples
    if len(payload) != expected * itemsize:
        raise SampleCountMismatchError(
            expected,
            len(payload) // itemsize,
            f"Header declares {expected} samples of {itemsize} bytes "
            f"({expected * itemsize} bytes), buffer holds {len(payload)} bytes",
        )

    samples = typed_samples(payload, resolution, header.byte_order)
    raw_stats = compute_stats(samples)
    if raw_stats.non_finite_count:
        diagnostics.warning(
            NON_FINITE_SAMPLES,
            f"{raw_stats.non_finite_count} NaN/inf samples mapped to 0.0",
            non_finite_count=raw_stats.non_finite_count,
        )
    if header.rescale_slope < 0:
        diagnostics.warning(
            NEGATIVE_RESCALE_SLOPE,
            "Negative scl_slope inverts the intensity range; volume normalized to 0.0",
            rescale_slope=header.rescale_slope,
        )

    low, high = rescale_bounds(raw_stats, header.rescale_slope, header.rescale_intercept)
    if not math.isfinite(high - low):
        diagnostics.warning(
            RANGE_OVERFLOW,
            "Intensity range overflows float64; volume normalized to 0.0",
            min=low,
            max=high,
        )
    normalized = normalize_samples(samples, raw_stats, header.rescale_slope, header.rescale_intercept)
    grid = build_volume_grid(normalized, header.dims)
    grid.setflags(write=False)

    dim_x, dim_y, dim_z = header.dims
    logger.debug(
        "[NIfTI] File: %s, Dims: %dx%dx%d, Range: %s-%s, NonZero: %d/%d",
        filename or "<buffer>",
        dim_x,
        dim_y,
        dim_z,
        raw_stats.min,
        raw_stats.max,
        raw_stats.non_zero_count,
        raw_stats.total,
    )

    return Volume(
        data=grid,
        dimensions=header.dims,
        voxel_spacing=header.voxel_spacing,
        datatype_code=header.datatype_code,
        datatype=resolution.datatype,
        description=header.description,
        stats=VolumeStats(
            min=low,
            max=high,
            raw_min=raw_stats.min,
            raw_max=raw_stats.max,
            non_zero_count=raw_stats.non_zero_count,
            total_voxels=raw_stats.total,
        ),
        diagnostics=diagnostics.events,
        source=filename,
    )


def decode_file(path: str | os.PathLike[str]) -> Volume:
    file_path = Path(path)
    return parse_nifti(file_path.read_bytes(), filename=file_path.name)
