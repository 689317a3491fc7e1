"""NIfTI-1 / NIfTI-2 header reading.

Both header layouts start with a 32-bit ``sizeof_hdr`` field (348 for NIfTI-1,
540 for NIfTI-2) whose byte order also tells us the endianness of the whole
file. The signature lives at offset 344 for NIfTI-1 and at offset 4 for
NIfTI-2. Field offsets themselves come from nibabel's header structs, which
we build without nibabel's validity checks so reserved or odd fields never
reject an otherwise readable file.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import nibabel as nib

from .errors import HeaderTooShortError, InvalidDimensionsError, NotRecognizedError


class HeaderVariant(str, Enum):
    NIFTI1 = "nifti1"
    NIFTI2 = "nifti2"


@dataclass(frozen=True)
class _Layout:
    size: int
    magic_offset: int
    magics: tuple[bytes, ...]
    header_class: type


_LAYOUTS: dict[HeaderVariant, _Layout] = {
    HeaderVariant.NIFTI1: _Layout(
        size=348,
        magic_offset=344,
        magics=(b"n+1\x00", b"ni1\x00"),
        header_class=nib.Nifti1Header,
    ),
    HeaderVariant.NIFTI2: _Layout(
        size=540,
        magic_offset=4,
        magics=(b"n+2\x00", b"ni2\x00"),
        header_class=nib.Nifti2Header,
    ),
}

MIN_HEADER_SIZE = _LAYOUTS[HeaderVariant.NIFTI1].size
# Extension flag block that follows the fixed header in single-file images.
EXTENSION_FLAG_SIZE = 4
_MAX_NDIM = 7


@dataclass(frozen=True)
class NiftiHeader:
    variant: HeaderVariant
    byte_order: str
    dims: tuple[int, int, int]
    extra_dims: tuple[int, ...]
    voxel_spacing: Optional[tuple[float, float, float]]
    datatype_code: int
    rescale_slope: float
    rescale_intercept: float
    description: Optional[str]
    vox_offset: int

    @property
    def voxel_count(self) -> int:
        return math.prod(self.dims)

    @property
    def declared_samples(self) -> int:
        return self.voxel_count * math.prod(self.extra_dims)


def detect_variant(buffer: bytes | bytearray | memoryview) -> tuple[HeaderVariant, str]:
    """Return the header variant and byte order for ``buffer``."""

    if len(buffer) < MIN_HEADER_SIZE:
        raise HeaderTooShortError(len(buffer), MIN_HEADER_SIZE)

    for byte_order in ("<", ">"):
        (sizeof_hdr,) = struct.unpack_from(f"{byte_order}i", buffer, 0)
        for variant, layout in _LAYOUTS.items():
            if sizeof_hdr != layout.size:
                continue
            if len(buffer) < layout.size:
                raise HeaderTooShortError(len(buffer), layout.size)
            magic = bytes(buffer[layout.magic_offset : layout.magic_offset + 4])
            if magic not in layout.magics:
                raise NotRecognizedError(f"Invalid NIfTI signature {magic!r} for {variant.value}")
            return variant, byte_order

    raise NotRecognizedError()


def read_header(buffer: bytes | bytearray | memoryview) -> NiftiHeader:
    variant, byte_order = detect_variant(buffer)
    layout = _LAYOUTS[variant]
    raw = layout.header_class(
        binaryblock=bytes(buffer[: layout.size]),
        endianness=byte_order,
        check=False,
    )

    dims, extra_dims = _parse_dims([int(value) for value in raw["dim"]])
    return NiftiHeader(
        variant=variant,
        byte_order=byte_order,
        dims=dims,
        extra_dims=extra_dims,
        voxel_spacing=_parse_spacing([float(value) for value in raw["pixdim"][1:4]]),
        datatype_code=int(raw["datatype"]),
        rescale_slope=_finite_or(float(raw["scl_slope"]), 1.0),
        rescale_intercept=_finite_or(float(raw["scl_inter"]), 0.0),
        description=_parse_description(raw["descrip"].item()),
        vox_offset=max(
            int(_finite_or(float(raw["vox_offset"]), 0.0)),
            layout.size + EXTENSION_FLAG_SIZE,
        ),
    )


def _parse_dims(dim: list[int]) -> tuple[tuple[int, int, int], tuple[int, ...]]:
    ndim = dim[0]
    if not 1 <= ndim <= _MAX_NDIM:
        raise InvalidDimensionsError(f"NIfTI dim[0] must be within 1..{_MAX_NDIM}, got {ndim}")

    spatial = tuple(dim[axis] if axis <= ndim else 1 for axis in (1, 2, 3))
    if any(value < 1 for value in spatial):
        raise InvalidDimensionsError(f"NIfTI spatial dimensions must be >= 1, got {spatial}")

    extra = tuple(dim[4 : ndim + 1])
    if any(value < 1 for value in extra):
        raise InvalidDimensionsError(f"NIfTI dimensions beyond Z must be >= 1, got {extra}")
    return (spatial[0], spatial[1], spatial[2]), extra


def _parse_spacing(pixdim: list[float]) -> Optional[tuple[float, float, float]]:
    # Zero or non-finite pixdim means the writer left spacing unspecified.
    if all(value == 0.0 or not math.isfinite(value) for value in pixdim):
        return None
    return (pixdim[0], pixdim[1], pixdim[2])


def _parse_description(raw: bytes) -> Optional[str]:
    text = raw.split(b"\x00", 1)[0].decode("utf-8", errors="replace").strip()
    return text or None


def _finite_or(value: float, default: float) -> float:
    return value if math.isfinite(value) else default
