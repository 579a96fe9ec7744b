"""
Integration tests for complete image decodes.

Tests decoding from bytes, seekable files and non-seekable streams,
end-of-image handling between and inside track records, and loading
from disk.
"""

import io

import pytest

from imagedisk import (
    FormatError,
    FormatErrorKind,
    ImageReadError,
    InvalidHeaderError,
    InvalidSectorFormatError,
    SectorType,
    UnexpectedEndOfStreamError,
    UnterminatedCommentError,
    decode_image,
    load_imd,
)
from imagedisk.imaging import ImageDecoder
from tests.fixtures import (
    NonSeekableStream,
    TrackSpec,
    build_imd,
    fill_sector,
    filled_track,
    header_block,
    missing_sector,
    raw_sector,
)


@pytest.fixture
def disk_bytes():
    """A small double-sided image with one interleaved, damaged track."""
    damaged = TrackSpec(mode=2, cylinder=1, head=1, size_code=1,
                        numbering=[1, 3, 2],
                        cylinder_map=[1, 1, 1], head_map=[1, 1, 0],
                        records=[raw_sector(b"\x10" * 256, code=0x05),
                                 missing_sector(),
                                 fill_sector(0x00, code=0x04)])
    return build_imd(
        filled_track(0, 0, sectors=3, size_code=1),
        filled_track(0, 1, sectors=3, size_code=1),
        filled_track(1, 0, sectors=3, size_code=1),
        damaged,
    )


class TestDecodeSources:
    """Test the supported input kinds."""

    def test_decode_bytes(self, disk_bytes):
        image = decode_image(disk_bytes)

        assert image.header == "IMD 1.18: 01/01/2015 00:00:00"
        assert image.comment == "Test image\r\n"
        assert image.track_count == 4
        assert [len(t.sectors) for t in image.tracks] == [3, 3, 3, 3]

    def test_decode_seekable_stream(self, disk_bytes):
        image = decode_image(io.BytesIO(disk_bytes))

        assert image == decode_image(disk_bytes)

    def test_decode_non_seekable_stream(self, disk_bytes):
        """Test end detection by peeking when the length is unknown."""
        image = decode_image(NonSeekableStream(disk_bytes, chunk=5))

        assert image == decode_image(disk_bytes)

    def test_decode_bytearray_and_memoryview(self, disk_bytes):
        expected = decode_image(disk_bytes)

        assert decode_image(bytearray(disk_bytes)) == expected
        assert decode_image(memoryview(disk_bytes)) == expected

    def test_explicit_length_stops_early(self, disk_bytes):
        """Test that trailing bytes beyond total_length are not decoded."""
        stream = io.BytesIO(disk_bytes + b"\xff\xff\xff")

        image = ImageDecoder(stream, total_length=len(disk_bytes)).decode()

        assert image.track_count == 4

    def test_explicit_length_inside_track(self, disk_bytes):
        """Test that a length ending mid-track fails even with bytes beyond it."""
        stream = io.BytesIO(disk_bytes + b"\x00" * 16)

        with pytest.raises(UnexpectedEndOfStreamError) as excinfo:
            ImageDecoder(stream, total_length=len(disk_bytes) - 1).decode()

        assert excinfo.value.context.track_index == 3

    def test_idempotent(self, disk_bytes):
        """Test that decoding twice gives identical models."""
        first = decode_image(disk_bytes)
        second = decode_image(disk_bytes)

        assert first == second
        assert [t.sectors for t in first.tracks] == [t.sectors for t in second.tracks]


class TestDecodedContent:
    """Test the decoded model of the fixture image."""

    def test_damaged_track(self, disk_bytes):
        track = decode_image(disk_bytes).tracks[3]

        assert track.mode == 2
        assert (track.cylinder, track.head) == (1, 1)
        assert [s.type for s in track.sectors] == [
            SectorType.NORMAL_WITH_ERROR, SectorType.NONE, SectorType.DELETED,
        ]
        assert [s.chs for s in track.sectors] == [(1, 1, 1), (1, 1, 3), (1, 0, 2)]

    def test_lookup(self, disk_bytes):
        image = decode_image(disk_bytes)

        assert image.read_sector(0, 1, 2) == bytes([3]) * 256
        assert image.read_sector(1, 1, 3) is None
        assert image.read_sector(1, 1, 1) == b"\x10" * 256
        # Head map places this record on head 0; first match is track 2
        assert image.find_sector(1, 0, 2).type is SectorType.NORMAL

    def test_header_only_image(self):
        """Test that an image with no tracks is valid."""
        image = decode_image(header_block())

        assert image.track_count == 0


class TestEndOfImage:
    """Test truncation at and inside track records."""

    def test_every_truncation_point(self, disk_bytes):
        """Test that every cut inside the track area is an error."""
        body_start = len(header_block())
        track_ends = set()
        offset = body_start
        for spec_len in _track_lengths(disk_bytes):
            offset += spec_len
            track_ends.add(offset)

        for cut in range(body_start + 1, len(disk_bytes)):
            if cut in track_ends:
                assert decode_image(disk_bytes[:cut]).track_count >= 1
            else:
                with pytest.raises(UnexpectedEndOfStreamError):
                    decode_image(disk_bytes[:cut])

    def test_truncated_numbering_map(self):
        data = header_block() + bytes([0x05, 0x00, 0x00, 0x09, 0x02, 0x01, 0x02])

        with pytest.raises(UnexpectedEndOfStreamError) as excinfo:
            decode_image(data)

        error = excinfo.value
        assert error.kind is FormatErrorKind.UNEXPECTED_END_OF_STREAM
        assert error.offset == len(header_block()) + 5
        assert error.context.track_index == 0

    def test_truncation_on_non_seekable_stream(self, disk_bytes):
        with pytest.raises(UnexpectedEndOfStreamError):
            decode_image(NonSeekableStream(disk_bytes[:-1]))

    def test_second_track_index_reported(self, disk_bytes):
        body = len(header_block())
        data = disk_bytes[:body] + filled_track(0, 0, sectors=1, size_code=0).to_bytes() + b"\x05\x01"

        with pytest.raises(UnexpectedEndOfStreamError) as excinfo:
            decode_image(data)

        assert excinfo.value.context.track_index == 1


class TestErrors:
    """Test whole-image failures."""

    def test_invalid_header(self):
        with pytest.raises(InvalidHeaderError):
            decode_image(b"XMD 1.18: 2015/01/01 00:00:00\n\x1a")

    def test_unterminated_comment(self):
        with pytest.raises(UnterminatedCommentError):
            decode_image(b"IMD 1.18: 2015/01/01 00:00:00\r\ncomment")

    def test_invalid_sector_anywhere_aborts(self, disk_bytes):
        bad = TrackSpec(size_code=0, numbering=[1], records=[b"\x0a"])

        with pytest.raises(InvalidSectorFormatError) as excinfo:
            decode_image(disk_bytes + bad.to_bytes())

        assert excinfo.value.context.track_index == 4

    def test_all_format_errors_share_base(self):
        with pytest.raises(FormatError):
            decode_image(b"")

    def test_error_kinds(self):
        """Test that each error class reports its kind."""
        assert FormatError("Bad layout", 0).kind is None
        assert InvalidHeaderError("Bad header", 0).kind is FormatErrorKind.INVALID_HEADER
        assert (UnexpectedEndOfStreamError(4, 1, 10).kind
                is FormatErrorKind.UNEXPECTED_END_OF_STREAM)


class TestLoadImd:
    """Test loading from the filesystem."""

    def test_load(self, tmp_path, disk_bytes):
        path = tmp_path / "disk.imd"
        path.write_bytes(disk_bytes)

        image = load_imd(path)

        assert image == decode_image(disk_bytes)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageReadError) as excinfo:
            load_imd(tmp_path / "absent.imd")

        assert "absent.imd" in str(excinfo.value)

    def test_directory(self, tmp_path):
        with pytest.raises(ImageReadError):
            load_imd(tmp_path)

    def test_format_error_carries_path(self, tmp_path):
        path = tmp_path / "bad.imd"
        path.write_bytes(b"not an image\n")

        with pytest.raises(InvalidHeaderError) as excinfo:
            load_imd(path)

        assert excinfo.value.filepath == str(path)
        assert "bad.imd" in str(excinfo.value)


def _track_lengths(data: bytes):
    """Walk the track records of a well-formed image and yield their lengths."""
    pos = len(header_block())
    while pos < len(data):
        start = pos
        _, _, flags, count, code = data[pos:pos + 5]
        pos += 5 + count
        if flags & 0x80:
            pos += count
        if flags & 0x40:
            pos += count
        for _ in range(count):
            record = data[pos]
            pos += 1
            if record == 0:
                continue
            pos += 1 if record % 2 == 0 else 128 << code
        yield pos - start
