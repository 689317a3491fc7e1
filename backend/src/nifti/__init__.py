"""NIfTI volume decoding package."""

from .datatypes import NiftiDatatype, resolve_datatype
from .decoder import decode_file, parse_nifti
from .diagnostics import Diagnostic, Severity
from .errors import (
    DecompressionFailedError,
    FormatError,
    HeaderTooShortError,
    InvalidDimensionsError,
    NotRecognizedError,
    SampleCountMismatchError,
)
from .header import HeaderVariant, NiftiHeader, read_header
from .models import Volume, VolumeStats

__all__ = [
    "DecompressionFailedError",
    "Diagnostic",
    "FormatError",
    "HeaderTooShortError",
    "HeaderVariant",
    "InvalidDimensionsError",
    "NiftiDatatype",
    "NiftiHeader",
    "NotRecognizedError",
    "SampleCountMismatchError",
    "Severity",
    "Volume",
    "VolumeStats",
    "decode_file",
    "parse_nifti",
    "read_header",
    "resolve_datatype",
]
