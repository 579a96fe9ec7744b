"""
ImageDisk (IMD) image reading module.

This module decodes ImageDisk floppy images into an immutable model of
tracks and sectors, and flattens them into raw sector images.

Key Features:
    - Single-pass stream decoder with offset/context error reporting
    - All sector record variants (raw, compressed, deleted, data error)
    - Optional per-sector cylinder and head maps
    - Logical C/H/S sector lookup
    - Raw (IMG-style) export

Example Usage:
    # Decode from a file
    from imagedisk.imaging import load_imd
    image = load_imd("disk.imd")
    data = image.read_sector(0, 0, 1)

    # Decode from bytes or an open stream
    from imagedisk.imaging import decode_image
    image = decode_image(payload)

    # Flatten to a raw image
    from imagedisk.imaging import to_raw_image
    raw = to_raw_image(image)
"""

from .imd_format import (
    # Exceptions
    ImageError,
    ImageReadError,
    ImageGeometryError,
    SectorNotFoundError,
    FormatError,
    InvalidHeaderError,
    UnterminatedCommentError,
    InvalidSectorSizeCodeError,
    InvalidSectorFormatError,
    UnexpectedEndOfStreamError,
    # Error context
    FormatErrorKind,
    DecodeSection,
    DecodeContext,
    # Enums and constants
    SectorType,
    SECTOR_FORMATS,
    SECTOR_SIZES,
    MAX_SECTOR_SIZE_CODE,
    COMMENT_SENTINEL,
    HEAD_MASK,
    HEAD_MAP_FLAG,
    CYLINDER_MAP_FLAG,
    # Functions
    sector_size_for_code,
    is_valid_header,
)

from .imd_image import (
    Image,
    Track,
    Sector,
)

from .imd_stream import ByteReader

from .imd_decoder import (
    HeaderParser,
    SectorDecoder,
    TrackDecoder,
    ImageDecoder,
    decode_image,
)

from .imd_file import load_imd

from .raw_export import (
    DEFAULT_FILL_BYTE,
    RawGeometry,
    detect_raw_geometry,
    to_raw_image,
)

__all__ = [
    # Exceptions
    "ImageError",
    "ImageReadError",
    "ImageGeometryError",
    "SectorNotFoundError",
    "FormatError",
    "InvalidHeaderError",
    "UnterminatedCommentError",
    "InvalidSectorSizeCodeError",
    "InvalidSectorFormatError",
    "UnexpectedEndOfStreamError",
    "FormatErrorKind",
    "DecodeSection",
    "DecodeContext",

    # Enums and constants
    "SectorType",
    "SECTOR_FORMATS",
    "SECTOR_SIZES",
    "MAX_SECTOR_SIZE_CODE",
    "COMMENT_SENTINEL",
    "HEAD_MASK",
    "HEAD_MAP_FLAG",
    "CYLINDER_MAP_FLAG",
    "sector_size_for_code",
    "is_valid_header",

    # Model
    "Image",
    "Track",
    "Sector",

    # Decoding
    "ByteReader",
    "HeaderParser",
    "SectorDecoder",
    "TrackDecoder",
    "ImageDecoder",
    "decode_image",
    "load_imd",

    # Raw export
    "DEFAULT_FILL_BYTE",
    "RawGeometry",
    "detect_raw_geometry",
    "to_raw_image",
]
