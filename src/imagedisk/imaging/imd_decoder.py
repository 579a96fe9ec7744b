"""
ImageDisk (IMD) stream decoder.

Decodes an IMD byte stream in a single forward pass:

    HeaderParser   - signature line and 0x1A-terminated comment
    TrackDecoder   - track header, optional maps, then one record per sector
    SectorDecoder  - format byte and raw/compressed payload
    ImageDecoder   - header once, then tracks until the input is exhausted

Every structural problem raises a FormatError subclass carrying the byte
offset and the section/track/sector where it occurred. A decode either
returns a complete Image or raises; partial images are never returned.
"""

import logging
from typing import List, Optional

from .imd_format import (
    COMMENT_CONTEXT,
    COMMENT_SENTINEL,
    CYLINDER_MAP_FLAG,
    HEAD_MAP_FLAG,
    HEAD_MASK,
    HEADER_CONTEXT,
    HEADER_TEXT_ENCODING,
    MAX_SECTOR_SIZE_CODE,
    SECTOR_FORMATS,
    DecodeContext,
    DecodeSection,
    InvalidHeaderError,
    InvalidSectorFormatError,
    InvalidSectorSizeCodeError,
    SectorType,
    UnterminatedCommentError,
    is_valid_header,
)
from .imd_image import Image, Sector, Track
from .imd_stream import ByteReader, ByteSource

logger = logging.getLogger(__name__)


# =============================================================================
# Header
# =============================================================================

class HeaderParser:
    """Reads and validates the signature line and the comment block."""

    def __init__(self, reader: ByteReader):
        self._reader = reader

    def parse_header(self) -> str:
        """
        Read the LF-terminated signature line.

        Returns:
            Header text without LF (and without a trailing CR)

        Raises:
            InvalidHeaderError: If the line is missing or malformed
        """
        offset = self._reader.position
        raw = self._reader.read_line()
        if raw is None:
            raise InvalidHeaderError("Header line is not terminated", offset,
                                     HEADER_CONTEXT)

        header = raw.decode(HEADER_TEXT_ENCODING)
        if header.endswith('\r'):
            header = header[:-1]

        if not is_valid_header(header):
            raise InvalidHeaderError(f"Invalid IMD signature {header[:10]!r}",
                                     offset, HEADER_CONTEXT)

        logger.debug("IMD header accepted: %s", header)
        return header

    def parse_comment(self) -> str:
        """
        Read the comment up to the 0x1A sentinel.

        Raises:
            UnterminatedCommentError: If input ends before the sentinel
        """
        offset = self._reader.position
        raw = self._reader.read_until(COMMENT_SENTINEL)
        if raw is None:
            raise UnterminatedCommentError("Comment is not terminated by 0x1A",
                                           offset, COMMENT_CONTEXT)

        comment = raw.decode(HEADER_TEXT_ENCODING)
        logger.debug("IMD comment: %d bytes", len(raw))
        return comment


# =============================================================================
# Sector
# =============================================================================

class SectorDecoder:
    """Decodes one sector record: format byte plus payload."""

    def __init__(self, reader: ByteReader):
        self._reader = reader

    def decode(self, cylinder: int, head: int, sector: int,
               sector_bytes: int, context: DecodeContext) -> Sector:
        """
        Decode a sector record at the current position.

        Args:
            cylinder: Logical cylinder for the result
            head: Logical head for the result
            sector: Logical sector number for the result
            sector_bytes: Payload size of this track
            context: Track/sector location for error reports

        Returns:
            Decoded Sector

        Raises:
            InvalidSectorFormatError: For a format byte above 0x08
            UnexpectedEndOfStreamError: If the payload is cut short
        """
        offset = self._reader.position
        code = self._reader.read_byte(context.reading("sector format byte"))

        try:
            sector_type, compressed = SECTOR_FORMATS[code]
        except KeyError:
            raise InvalidSectorFormatError(
                code, offset, context.reading("sector format byte")
            ) from None

        if sector_type is SectorType.NONE:
            return Sector(cylinder, head, sector, sector_type)

        if compressed:
            fill = self._reader.read_byte(context.reading("fill byte"))
            data = bytes([fill]) * sector_bytes
        else:
            data = self._reader.read_exact(sector_bytes,
                                           context.reading("sector data"))

        return Sector(cylinder, head, sector, sector_type, data, compressed)


# =============================================================================
# Track
# =============================================================================

class TrackDecoder:
    """Decodes one track record and all of its sector records."""

    def __init__(self, reader: ByteReader):
        self._reader = reader
        self._sectors = SectorDecoder(reader)

    def decode(self, track_index: int) -> Track:
        """
        Decode a track record at the current position.

        Args:
            track_index: Zero-based index of this track in the file

        Returns:
            Decoded Track

        Raises:
            InvalidSectorSizeCodeError: For a size code above 6
            InvalidSectorFormatError: From a sector record
            UnexpectedEndOfStreamError: If the record is cut short
        """
        reader = self._reader
        context = DecodeContext(DecodeSection.TRACK, track_index=track_index)
        start = reader.position

        mode = reader.read_byte(context.reading("mode"))
        cylinder = reader.read_byte(context.reading("cylinder"))

        head_flags = reader.read_byte(context.reading("head"))
        head = head_flags & HEAD_MASK
        has_cylinder_map = bool(head_flags & CYLINDER_MAP_FLAG)
        has_head_map = bool(head_flags & HEAD_MAP_FLAG)

        num_sectors = reader.read_byte(context.reading("sector count"))

        size_offset = reader.position
        size_code = reader.read_byte(context.reading("sector size code"))
        if size_code > MAX_SECTOR_SIZE_CODE:
            raise InvalidSectorSizeCodeError(
                size_code, size_offset, context.reading("sector size code")
            )
        sector_bytes = 128 << size_code

        numbering_map = reader.read_exact(
            num_sectors, context.reading("sector numbering map")
        )
        cylinder_map: Optional[bytes] = None
        if has_cylinder_map:
            cylinder_map = reader.read_exact(
                num_sectors, context.reading("sector cylinder map")
            )
        head_map: Optional[bytes] = None
        if has_head_map:
            head_map = reader.read_exact(
                num_sectors, context.reading("sector head map")
            )

        logger.debug(
            "Track #%d at offset %d: mode=%d C%d:H%d, %d sectors x %d bytes%s%s",
            track_index, start, mode, cylinder, head, num_sectors, sector_bytes,
            ", cylinder map" if has_cylinder_map else "",
            ", head map" if has_head_map else "",
        )

        sectors: List[Sector] = []
        for index in range(num_sectors):
            sectors.append(self._sectors.decode(
                cylinder_map[index] if cylinder_map is not None else cylinder,
                head_map[index] if head_map is not None else head,
                numbering_map[index],
                sector_bytes,
                context.at_sector(index),
            ))

        return Track(
            mode=mode,
            cylinder=cylinder,
            head=head,
            sector_size_code=size_code,
            sectors=tuple(sectors),
            has_cylinder_map=has_cylinder_map,
            has_head_map=has_head_map,
        )


# =============================================================================
# Image
# =============================================================================

class ImageDecoder:
    """
    Decodes a complete IMD image.

    Runs the header parser once, then decodes track records until the
    input is exhausted. End of input is only accepted between track
    records; anywhere else it is an UnexpectedEndOfStreamError.

    Example:
        >>> with open("disk.imd", "rb") as f:
        ...     image = ImageDecoder(f).decode()
        >>> print(image.track_count)
    """

    def __init__(self, source: ByteSource, total_length: Optional[int] = None):
        self._reader = ByteReader(source, total_length)

    def decode(self) -> Image:
        reader = self._reader
        header_parser = HeaderParser(reader)
        header = header_parser.parse_header()
        comment = header_parser.parse_comment()

        track_decoder = TrackDecoder(reader)
        tracks: List[Track] = []
        while not reader.at_end():
            tracks.append(track_decoder.decode(len(tracks)))

        image = Image(header=header, comment=comment, tracks=tuple(tracks))
        logger.info("Decoded IMD image: version %s, %d tracks, %d sectors, %d bytes",
                    image.version, image.track_count, image.sector_count,
                    reader.position)
        return image


def decode_image(source: ByteSource, total_length: Optional[int] = None) -> Image:
    """
    Decode an IMD image from bytes or a readable binary stream.

    Args:
        source: bytes/bytearray/memoryview, or a binary stream positioned
            at the start of the image
        total_length: Image length in bytes from the stream position;
            measured automatically for bytes and seekable streams

    Returns:
        The decoded Image

    Raises:
        FormatError: If the data is not a well-formed IMD image
    """
    return ImageDecoder(source, total_length).decode()
