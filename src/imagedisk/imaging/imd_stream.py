"""
Position-tracking byte reader used by the IMD decoder.

ByteReader wraps a readable binary stream and keeps its own byte offset so
decode errors can report where they happened. End of input is detected by
comparing the offset with a captured total length when one is known, and
otherwise with a one-byte peek that is held back for the next read.
"""

import io
import logging
import os
from typing import BinaryIO, Optional, Union

from .imd_format import DecodeContext, UnexpectedEndOfStreamError

logger = logging.getLogger(__name__)

ByteSource = Union[bytes, bytearray, memoryview, BinaryIO]


class ByteReader:
    """
    Sequential reader over a binary stream.

    Attributes:
        position: Number of bytes consumed so far (relative to the start)
        length: Total number of bytes available, or None if unknown

    Example:
        >>> reader = ByteReader(b"IMD 1.18: x\\n\\x1a")
        >>> reader.read_line()
        b'IMD 1.18: x'
        >>> reader.read_until(0x1A)
        b''
        >>> reader.at_end()
        True
    """

    def __init__(self, source: ByteSource, total_length: Optional[int] = None):
        """
        Initialize the reader.

        Args:
            source: Bytes-like object or readable binary stream
            total_length: Number of bytes from the current stream position to
                the end of the image; measured when omitted and the stream
                is seekable
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            data = bytes(source)
            self._stream: BinaryIO = io.BytesIO(data)
            if total_length is None:
                total_length = len(data)
        else:
            self._stream = source
            if total_length is None:
                total_length = self._measure_remaining(source)

        self._position = 0
        self._length = total_length
        self._pending = b''

    @staticmethod
    def _measure_remaining(stream: BinaryIO) -> Optional[int]:
        """Return the bytes left in a seekable stream, or None."""
        try:
            if not stream.seekable():
                return None
            start = stream.tell()
            end = stream.seek(0, os.SEEK_END)
            stream.seek(start, os.SEEK_SET)
        except (AttributeError, OSError, io.UnsupportedOperation):
            return None
        return end - start

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def position(self) -> int:
        """Number of bytes consumed so far."""
        return self._position

    @property
    def length(self) -> Optional[int]:
        """Total bytes available, if known."""
        return self._length

    # =========================================================================
    # Reading
    # =========================================================================

    def _read_raw(self, count: int) -> bytes:
        """Read up to count bytes, serving a held-back peek byte first."""
        # Never read past a known end
        if self._length is not None:
            count = min(count, self.remaining())
        if count <= 0:
            return b''

        chunks = []
        if self._pending:
            chunks.append(self._pending)
            count -= len(self._pending)
            self._pending = b''

        # Raw streams may return short reads before EOF
        while count > 0:
            chunk = self._stream.read(count)
            if not chunk:
                break
            chunks.append(chunk)
            count -= len(chunk)

        data = b''.join(chunks)
        self._position += len(data)
        return data

    def read_exact(self, count: int, context: DecodeContext) -> bytes:
        """
        Read exactly count bytes.

        Args:
            count: Number of bytes required
            context: Structural location, reported on failure

        Returns:
            The bytes read

        Raises:
            UnexpectedEndOfStreamError: If fewer than count bytes remain
        """
        offset = self._position
        data = self._read_raw(count)
        if len(data) != count:
            raise UnexpectedEndOfStreamError(count, len(data), offset, context)
        return data

    def read_byte(self, context: DecodeContext) -> int:
        """Read one unsigned byte."""
        return self.read_exact(1, context)[0]

    def read_line(self) -> Optional[bytes]:
        """
        Read bytes up to a line feed.

        Returns:
            The line without the LF, or None if input ends first
        """
        return self.read_until(0x0A)

    def read_until(self, sentinel: int) -> Optional[bytes]:
        """
        Read bytes up to and including a sentinel byte.

        Returns:
            The bytes before the sentinel, or None if input ends first
        """
        buffer = bytearray()
        while True:
            byte = self._read_raw(1)
            if not byte:
                return None
            if byte[0] == sentinel:
                return bytes(buffer)
            buffer += byte

    # =========================================================================
    # End of input
    # =========================================================================

    def at_end(self) -> bool:
        """
        Check whether the input is exhausted.

        With a known length this compares the position against it.
        Otherwise one byte is peeked and kept for the next read, so no
        structural byte is lost.
        """
        if self._length is not None:
            return self._position >= self._length

        if self._pending:
            return False

        peeked = self._stream.read(1)
        if not peeked:
            return True
        self._pending = peeked
        return False

    def remaining(self) -> Optional[int]:
        """Bytes left before the known end, or None if length is unknown."""
        if self._length is None:
            return None
        return max(self._length - self._position, 0)
