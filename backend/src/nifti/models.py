from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .datatypes import NiftiDatatype
from .diagnostics import Diagnostic, Severity


@dataclass(frozen=True)
class VolumeStats:
    # min/max are in rescaled units; raw_* keep the stored values.
    min: float
    max: float
    raw_min: float
    raw_max: float
    non_zero_count: int
    total_voxels: int


@dataclass(frozen=True)
class Volume:
    """Decoded volume handed to visualization.

    ``data`` is indexed ``data[x, y, z]`` with every entry in ``[0, 1]``.
    ``voxel_spacing`` stays ``None`` when the file does not specify it; the
    consumer picks its own fallback.
    """

    data: np.ndarray
    dimensions: tuple[int, int, int]
    voxel_spacing: Optional[tuple[float, float, float]]
    datatype_code: int
    datatype: NiftiDatatype
    description: Optional[str]
    stats: VolumeStats
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)
    source: Optional[str] = None

    @property
    def has_warnings(self) -> bool:
        return any(event.severity is Severity.WARNING for event in self.diagnostics)

    def diagnostic_codes(self) -> set[str]:
        return {event.code for event in self.diagnostics}
