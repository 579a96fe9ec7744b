"""
ImageDisk reader - decoder for ImageDisk (.IMD) floppy disk images.

Decodes the IMD container (signature line, comment, track records with
raw, compressed, deleted and data-error sector records) into an immutable
model of tracks and sectors, with logical C/H/S lookup, content statistics
and raw sector image export.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from imagedisk.imaging import (
    Image,
    Track,
    Sector,
    SectorType,
    ImageError,
    ImageReadError,
    ImageGeometryError,
    SectorNotFoundError,
    FormatError,
    FormatErrorKind,
    InvalidHeaderError,
    UnterminatedCommentError,
    InvalidSectorSizeCodeError,
    InvalidSectorFormatError,
    UnexpectedEndOfStreamError,
    decode_image,
    load_imd,
    to_raw_image,
)

from imagedisk.analysis import (
    ImageStatistics,
    compute_statistics,
)

__all__ = [
    "__version__",

    # Model
    "Image",
    "Track",
    "Sector",
    "SectorType",

    # Errors
    "ImageError",
    "ImageReadError",
    "ImageGeometryError",
    "SectorNotFoundError",
    "FormatError",
    "FormatErrorKind",
    "InvalidHeaderError",
    "UnterminatedCommentError",
    "InvalidSectorSizeCodeError",
    "InvalidSectorFormatError",
    "UnexpectedEndOfStreamError",

    # Decoding and export
    "decode_image",
    "load_imd",
    "to_raw_image",

    # Analysis
    "ImageStatistics",
    "compute_statistics",
]
