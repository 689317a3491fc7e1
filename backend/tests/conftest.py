from __future__ import annotations

import gzip
from typing import Callable, Optional, Sequence

import nibabel as nib
import numpy as np
import pytest

_HEADER_CLASSES = {
    "nifti1": nib.Nifti1Header,
    "nifti2": nib.Nifti2Header,
}


def build_nifti(
    samples: np.ndarray,
    dims: Optional[Sequence[int]] = None,
    *,
    datatype_code: Optional[int] = None,
    variant: str = "nifti1",
    byte_order: str = "<",
    slope: Optional[float] = None,
    intercept: Optional[float] = None,
    spacing: Optional[Sequence[float]] = (1.0, 1.0, 1.0),
    description: Optional[str] = None,
    compress: bool = False,
) -> bytes:
    """Assemble a single-file NIfTI buffer with exact raw sample bytes.

    ``samples`` is either an (x, y, z) array, written X-fastest, or a flat
    array written as-is against ``dims``.
    """

    array = np.asarray(samples)
    shape = tuple(dims) if dims is not None else array.shape
    header = _HEADER_CLASSES[variant](endianness=byte_order)
    header.set_data_shape(shape)
    header["datatype"] = datatype_code if datatype_code is not None else _code_for(array.dtype)
    header["bitpix"] = array.dtype.itemsize * 8

    pixdim = header["pixdim"].copy()
    pixdim[1:4] = spacing if spacing is not None else (0.0, 0.0, 0.0)
    header["pixdim"] = pixdim
    if slope is not None:
        header["scl_slope"] = slope
    if intercept is not None:
        header["scl_inter"] = intercept
    if description is not None:
        header["descrip"] = description.encode("utf-8")

    block = header.binaryblock
    header["vox_offset"] = len(block) + 4
    block = header.binaryblock

    stored = array.astype(array.dtype.newbyteorder(byte_order)) if array.dtype.itemsize > 1 else array
    payload = stored.tobytes(order="F")
    body = block + b"\x00\x00\x00\x00" + payload
    return gzip.compress(body) if compress else body


def _code_for(dtype: np.dtype) -> int:
    codes = {
        "uint8": 2,
        "int16": 4,
        "int32": 8,
        "float32": 16,
        "float64": 64,
        "int8": 256,
        "uint16": 512,
        "uint32": 768,
    }
    return codes[np.dtype(dtype).name]


@pytest.fixture
def nifti_bytes() -> Callable[..., bytes]:
    return build_nifti
