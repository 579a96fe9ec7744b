"""
ImageDisk (IMD) format constants, sector types and decode errors.

This module holds the fixed facts of the IMD container layout shared by the
decoder and the image model:

    - Header signature layout ("IMD v.vv: ...")
    - Comment sentinel byte
    - Head/flags byte masks
    - Sector size codes (128 << code)
    - Sector record format table (type and compression per format byte)

It also defines the exception hierarchy raised while decoding.
"""

import string
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple


# =============================================================================
# Custom Exceptions
# =============================================================================

class ImageError(Exception):
    """Base exception for image-related errors."""

    def __init__(self, message: str, filepath: Optional[str] = None):
        self.message = message
        self.filepath = filepath
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.filepath:
            return f"{self.message} [File: {self.filepath}]"
        return self.message

    def with_filepath(self, filepath: str) -> "ImageError":
        """Attach the source file path and rebuild the message."""
        self.filepath = filepath
        self.args = (self._format_message(),)
        return self


class ImageReadError(ImageError):
    """Raised when reading an image file fails."""
    pass


class ImageGeometryError(ImageError):
    """Raised when image geometry is invalid or mismatched."""

    def __init__(self, message: str, filepath: Optional[str] = None,
                 cylinders: Optional[int] = None,
                 heads: Optional[int] = None,
                 sectors: Optional[int] = None):
        self.cylinders = cylinders
        self.heads = heads
        self.sectors = sectors
        super().__init__(message, filepath)

    def _format_message(self) -> str:
        base = super()._format_message()
        if self.cylinders is not None:
            return f"{base} [C:{self.cylinders} H:{self.heads} S:{self.sectors}]"
        return base


class SectorNotFoundError(ImageError, LookupError):
    """Raised when no sector in the image carries the requested C/H/S."""

    def __init__(self, cylinder: int, head: int, sector: int,
                 filepath: Optional[str] = None):
        self.cylinder = cylinder
        self.head = head
        self.sector = sector
        super().__init__(
            f"Sector C{cylinder}:H{head}:S{sector} not found", filepath
        )


class FormatErrorKind(Enum):
    """Discriminant for structural decode failures."""
    INVALID_HEADER = "invalid_header"
    UNTERMINATED_COMMENT = "unterminated_comment"
    INVALID_SECTOR_SIZE_CODE = "invalid_sector_size_code"
    INVALID_SECTOR_FORMAT = "invalid_sector_format"
    UNEXPECTED_END_OF_STREAM = "unexpected_end_of_stream"


class DecodeSection(Enum):
    """Part of the file being decoded when an error occurred."""
    HEADER = "header"
    COMMENT = "comment"
    TRACK = "track"


@dataclass(frozen=True)
class DecodeContext:
    """
    Structural location of a decode step.

    Attributes:
        section: Header, comment or track area
        track_index: Zero-based index of the track record (track section)
        sector_index: Zero-based position of the sector record in its track
        field: Name of the field being read (e.g. "sector numbering map")
    """
    section: DecodeSection
    track_index: Optional[int] = None
    sector_index: Optional[int] = None
    field: Optional[str] = None

    def at_sector(self, sector_index: int) -> "DecodeContext":
        return DecodeContext(self.section, self.track_index, sector_index, self.field)

    def reading(self, field: str) -> "DecodeContext":
        return DecodeContext(self.section, self.track_index, self.sector_index, field)

    def describe(self) -> str:
        parts = [self.section.value]
        if self.track_index is not None:
            parts.append(f"track #{self.track_index}")
        if self.sector_index is not None:
            parts.append(f"sector #{self.sector_index}")
        if self.field:
            parts.append(self.field)
        return ", ".join(parts)


HEADER_CONTEXT = DecodeContext(DecodeSection.HEADER, field="signature line")
COMMENT_CONTEXT = DecodeContext(DecodeSection.COMMENT, field="comment")


class FormatError(ImageError):
    """
    Raised when the byte stream does not follow the IMD layout.

    Attributes:
        kind: FormatErrorKind discriminant, None on the generic base class
        offset: Byte offset where the failing structure or read began
        context: DecodeContext naming the section/track/sector/field
    """

    kind: Optional[FormatErrorKind] = None

    def __init__(self, message: str, offset: int,
                 context: Optional[DecodeContext] = None,
                 filepath: Optional[str] = None):
        self.offset = offset
        self.context = context
        super().__init__(message, filepath)

    def _format_message(self) -> str:
        base = f"{self.message} at offset {self.offset} (0x{self.offset:X})"
        if self.context is not None:
            base = f"{base} [{self.context.describe()}]"
        if self.filepath:
            base = f"{base} [File: {self.filepath}]"
        return base


class InvalidHeaderError(FormatError):
    """Signature line fails the fixed-position checks."""
    kind = FormatErrorKind.INVALID_HEADER


class UnterminatedCommentError(FormatError):
    """Stream ends before the comment sentinel."""
    kind = FormatErrorKind.UNTERMINATED_COMMENT


class InvalidSectorSizeCodeError(FormatError):
    """Sector size code outside 0..6."""
    kind = FormatErrorKind.INVALID_SECTOR_SIZE_CODE

    def __init__(self, value: int, offset: int,
                 context: Optional[DecodeContext] = None,
                 filepath: Optional[str] = None):
        self.value = value
        super().__init__(
            f"Invalid sector size code {value}", offset, context, filepath
        )


class InvalidSectorFormatError(FormatError):
    """Sector record format byte outside 0x00..0x08."""
    kind = FormatErrorKind.INVALID_SECTOR_FORMAT

    def __init__(self, value: int, offset: int,
                 context: Optional[DecodeContext] = None,
                 filepath: Optional[str] = None):
        self.value = value
        super().__init__(
            f"Invalid sector format byte 0x{value:02X}", offset, context, filepath
        )


class UnexpectedEndOfStreamError(FormatError):
    """A required read could not be satisfied mid-structure."""
    kind = FormatErrorKind.UNEXPECTED_END_OF_STREAM

    def __init__(self, expected: int, actual: int, offset: int,
                 context: Optional[DecodeContext] = None,
                 filepath: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Unexpected end of stream (needed {expected} bytes, got {actual})",
            offset, context, filepath
        )


# =============================================================================
# Enums and Constants
# =============================================================================

class SectorType(Enum):
    """Sector record types."""
    NONE = 0                # Data unavailable, could not be read
    NORMAL = 1              # Normal data
    DELETED = 2             # Deleted-data address mark
    NORMAL_WITH_ERROR = 3   # Normal data read with a data error
    DELETED_WITH_ERROR = 4  # Deleted data read with a data error

    @property
    def has_data(self) -> bool:
        return self is not SectorType.NONE

    @property
    def is_deleted(self) -> bool:
        return self in (SectorType.DELETED, SectorType.DELETED_WITH_ERROR)

    @property
    def has_error(self) -> bool:
        return self in (SectorType.NORMAL_WITH_ERROR, SectorType.DELETED_WITH_ERROR)


# Header signature "IMD v.vv: "
HEADER_SIGNATURE = "IMD "
HEADER_MIN_LENGTH = 10
HEADER_TEXT_ENCODING = "latin-1"

# Comment terminator
COMMENT_SENTINEL = 0x1A

# Head/flags byte of the track header
HEAD_MASK = 0x01           # Physical head number (0 or 1)
HEAD_MAP_FLAG = 0x40       # Sector head map follows
CYLINDER_MAP_FLAG = 0x80   # Sector cylinder map follows

# Track header: mode, cylinder, head/flags, sector count, size code
TRACK_HEADER_SIZE = 5

# Sector size codes 0..6 -> 128..8192 bytes
MAX_SECTOR_SIZE_CODE = 6
SECTOR_SIZES = tuple(128 << code for code in range(MAX_SECTOR_SIZE_CODE + 1))

# Format byte -> (sector type, compressed)
SECTOR_FORMATS: Dict[int, Tuple[SectorType, bool]] = {
    0x00: (SectorType.NONE, False),
    0x01: (SectorType.NORMAL, False),
    0x02: (SectorType.NORMAL, True),
    0x03: (SectorType.DELETED, False),
    0x04: (SectorType.DELETED, True),
    0x05: (SectorType.NORMAL_WITH_ERROR, False),
    0x06: (SectorType.NORMAL_WITH_ERROR, True),
    0x07: (SectorType.DELETED_WITH_ERROR, False),
    0x08: (SectorType.DELETED_WITH_ERROR, True),
}


def sector_size_for_code(code: int) -> int:
    """
    Convert a sector size code to a byte count.

    Args:
        code: Size code from the track header

    Returns:
        128 << code

    Raises:
        ValueError: If code is outside 0..6
    """
    if not 0 <= code <= MAX_SECTOR_SIZE_CODE:
        raise ValueError(f"Sector size code out of range: {code}")
    return SECTOR_SIZES[code]


def is_valid_header(header: str) -> bool:
    """
    Check the fixed-position signature of an IMD header line.

    The line must start with "IMD d.dd: " where d is a decimal digit.
    The remainder of the line is free text and is not checked.
    """
    if len(header) < HEADER_MIN_LENGTH:
        return False
    return (
        header[0:4] == HEADER_SIGNATURE and
        header[4] in string.digits and
        header[5] == '.' and
        header[6] in string.digits and
        header[7] in string.digits and
        header[8] == ':' and
        header[9] == ' '
    )
