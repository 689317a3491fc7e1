"""NIfTI datatype codes and their numpy interpretation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np


class NiftiDatatype(IntEnum):
    UINT8 = 2
    INT16 = 4
    INT32 = 8
    FLOAT32 = 16
    FLOAT64 = 64
    INT8 = 256
    UINT16 = 512
    UINT32 = 768

    @property
    def numpy_type(self) -> type[np.generic]:
        return _NUMPY_TYPES[self]

    @property
    def bits(self) -> int:
        return np.dtype(self.numpy_type).itemsize * 8

    @property
    def signed(self) -> bool:
        return np.issubdtype(self.numpy_type, np.signedinteger) or self.is_float

    @property
    def is_float(self) -> bool:
        return np.issubdtype(self.numpy_type, np.floating)

    def dtype(self, byte_order: str = "<") -> np.dtype:
        base = np.dtype(self.numpy_type)
        if base.itemsize == 1:
            return base
        return base.newbyteorder(byte_order)


_NUMPY_TYPES: dict[NiftiDatatype, type[np.generic]] = {
    NiftiDatatype.UINT8: np.uint8,
    NiftiDatatype.INT16: np.int16,
    NiftiDatatype.INT32: np.int32,
    NiftiDatatype.FLOAT32: np.float32,
    NiftiDatatype.FLOAT64: np.float64,
    NiftiDatatype.INT8: np.int8,
    NiftiDatatype.UINT16: np.uint16,
    NiftiDatatype.UINT32: np.uint32,
}

FALLBACK_DATATYPE = NiftiDatatype.FLOAT32


@dataclass(frozen=True)
class DatatypeResolution:
    """Outcome of mapping a header code to a sample interpretation.

    ``fallback`` is True when ``code`` is outside the supported set and the
    samples are being read as ``FALLBACK_DATATYPE`` instead.
    """

    code: int
    datatype: NiftiDatatype
    fallback: bool = False


def resolve_datatype(code: int) -> DatatypeResolution:
    try:
        return DatatypeResolution(code=code, datatype=NiftiDatatype(code))
    except ValueError:
        return DatatypeResolution(code=code, datatype=FALLBACK_DATATYPE, fallback=True)


def typed_samples(payload: bytes | memoryview, resolution: DatatypeResolution, byte_order: str = "<") -> np.ndarray:
    """Reinterpret ``payload`` as a flat array of the resolved sample type.

    The payload length must be a whole number of samples; callers validate
    the count against the header before calling this.
    """

    dtype = resolution.datatype.dtype(byte_order)
    return np.frombuffer(payload, dtype=dtype)
