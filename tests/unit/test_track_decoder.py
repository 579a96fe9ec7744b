"""
Unit tests for track record decoding.

Tests track header fields, optional maps, sector size codes and the
logical C/H/S assigned to each sector.
"""

import pytest

from imagedisk.imaging import (
    ByteReader,
    FormatErrorKind,
    InvalidSectorFormatError,
    InvalidSectorSizeCodeError,
    SectorType,
    TrackDecoder,
    UnexpectedEndOfStreamError,
)
from tests.fixtures import TrackSpec, fill_sector, missing_sector, raw_sector


def decode_track(data: bytes, track_index: int = 0):
    reader = ByteReader(data)
    track = TrackDecoder(reader).decode(track_index)
    return track, reader


class TestTrackHeader:
    """Test the five header bytes."""

    def test_compressed_fill_scenario(self):
        """Test a 2-sector 512-byte track with a raw and a compressed sector."""
        raw = bytes(range(256)) * 2
        data = (bytes([0x00, 0x00, 0x00, 0x02, 0x02]) +
                bytes([0x00, 0x01]) +
                b"\x01" + raw +
                b"\x02\xe5")

        track, reader = decode_track(data)

        assert track.mode == 0
        assert track.cylinder == 0
        assert track.head == 0
        assert track.sector_size_code == 2
        assert track.sector_size == 512
        assert track.sector_count == 2
        assert track.sectors[0].data == raw
        second = track.sectors[1]
        assert second.data == b"\xe5" * 512
        assert second.compressed
        assert (second.cylinder, second.head) == (0, 0)
        assert reader.at_end()

    def test_empty_track(self):
        """Test that zero sectors is valid and reads no map bytes."""
        data = bytes([0x05, 0x27, 0x01, 0x00, 0x03])

        track, reader = decode_track(data + b"\xaa")

        assert track.sector_count == 0
        assert track.sectors == ()
        assert track.sector_numbering_map == ()
        assert track.cylinder == 0x27
        assert track.head == 1
        assert reader.position == 5

    def test_mode_stored_verbatim(self):
        """Test that unknown mode values are kept without interpretation."""
        track, _ = decode_track(bytes([0xC3, 0x00, 0x00, 0x00, 0x00]))

        assert track.mode == 0xC3

    def test_reserved_head_bits_ignored(self):
        """Test that bits 1-5 of the head byte do not affect decoding."""
        track, _ = decode_track(bytes([0x05, 0x02, 0x3F, 0x00, 0x01]))

        assert track.head == 1
        assert not track.has_cylinder_map
        assert not track.has_head_map


class TestSectorSizeCodes:
    """Test sector size code handling."""

    @pytest.mark.parametrize("code", range(7))
    def test_valid_codes(self, code):
        """Test that codes 0-6 give 128 << code byte sectors."""
        size = 128 << code
        spec = TrackSpec(size_code=code, numbering=[1],
                         records=[raw_sector(b"\x11" * size)])

        track, _ = decode_track(spec.to_bytes())

        assert track.sector_size == size
        assert len(track.sectors[0].data) == size

    @pytest.mark.parametrize("code", [7, 8, 0x80, 0xFF])
    def test_invalid_codes(self, code):
        """Test that codes above 6 are rejected."""
        data = bytes([0x05, 0x00, 0x00, 0x01, code, 0x01, 0x02, 0x00])

        with pytest.raises(InvalidSectorSizeCodeError) as excinfo:
            decode_track(data, track_index=4)

        error = excinfo.value
        assert error.kind is FormatErrorKind.INVALID_SECTOR_SIZE_CODE
        assert error.value == code
        assert error.offset == 4
        assert error.context.track_index == 4


class TestOptionalMaps:
    """Test the sector cylinder and head maps."""

    def test_cylinder_map_flag(self):
        """Test head byte 0x81: head 1 plus a cylinder map byte."""
        data = (bytes([0x05, 0x10, 0x81, 0x01, 0x00]) +
                b"\x07" +     # numbering map
                b"\x2a" +     # cylinder map
                b"\x02\x00")  # compressed sector

        track, reader = decode_track(data)

        assert track.head == 1
        assert track.has_cylinder_map
        assert not track.has_head_map
        sector = track.sectors[0]
        assert sector.chs == (0x2A, 1, 7)
        assert track.cylinder_map == (0x2A,)
        assert track.head_map is None
        assert reader.at_end()

    def test_head_map_flag(self):
        """Test head byte 0x40: head map without cylinder map."""
        spec = TrackSpec(cylinder=3, head=0, size_code=0, numbering=[1, 2],
                         head_map=[1, 0],
                         records=[fill_sector(0x00), fill_sector(0x01)])

        track, _ = decode_track(spec.to_bytes())

        assert [s.chs for s in track.sectors] == [(3, 1, 1), (3, 0, 2)]
        assert track.head_map == (1, 0)
        assert track.cylinder_map is None

    def test_both_maps(self):
        """Test that cylinder map precedes head map."""
        spec = TrackSpec(cylinder=1, head=1, size_code=0, numbering=[5, 6],
                         cylinder_map=[40, 41], head_map=[0, 1],
                         records=[missing_sector(), fill_sector(0x33)])

        track, reader = decode_track(spec.to_bytes())

        assert [s.chs for s in track.sectors] == [(40, 0, 5), (41, 1, 6)]
        assert track.sectors[0].type is SectorType.NONE
        assert reader.at_end()

    def test_defaults_without_maps(self):
        """Test logical C/H default to the physical values."""
        spec = TrackSpec(cylinder=9, head=1, size_code=0, numbering=[3, 1, 2],
                         records=[fill_sector(0)] * 3)

        track, _ = decode_track(spec.to_bytes())

        assert [s.chs for s in track.sectors] == [(9, 1, 3), (9, 1, 1), (9, 1, 2)]


class TestSectorOrder:
    """Test record order and logical order."""

    def test_record_order_kept(self):
        """Test that sectors stay in sector-map order."""
        spec = TrackSpec(size_code=0, numbering=[1, 4, 2, 5, 3],
                         records=[fill_sector(n) for n in (1, 4, 2, 5, 3)])

        track, _ = decode_track(spec.to_bytes())

        assert track.sector_numbering_map == (1, 4, 2, 5, 3)
        assert [s.sector for s in track.sectors_in_order()] == [1, 2, 3, 4, 5]
        assert [s.fill_byte for s in track.sectors_in_order()] == [1, 2, 3, 4, 5]


class TestTrackTruncation:
    """Test short and malformed track records."""

    def test_truncated_numbering_map(self):
        """Test that a short sector numbering map is an error."""
        data = bytes([0x05, 0x00, 0x00, 0x09, 0x02, 0x01, 0x02, 0x03])

        with pytest.raises(UnexpectedEndOfStreamError) as excinfo:
            decode_track(data, track_index=2)

        error = excinfo.value
        assert error.expected == 9
        assert error.actual == 3
        assert error.offset == 5
        assert error.context.field == "sector numbering map"
        assert error.context.track_index == 2

    def test_truncated_header(self):
        """Test that a partial track header is an error."""
        with pytest.raises(UnexpectedEndOfStreamError) as excinfo:
            decode_track(bytes([0x05, 0x00, 0x00]))

        assert excinfo.value.context.field == "sector count"
        assert excinfo.value.offset == 3

    def test_missing_cylinder_map(self):
        """Test that a flagged but absent cylinder map is an error."""
        data = bytes([0x05, 0x00, 0x80, 0x02, 0x00, 0x01, 0x02])

        with pytest.raises(UnexpectedEndOfStreamError) as excinfo:
            decode_track(data)

        assert excinfo.value.context.field == "sector cylinder map"

    def test_bad_sector_reports_index(self):
        """Test that a bad sector record reports its position."""
        spec = TrackSpec(size_code=0, numbering=[1, 2, 3],
                         records=[fill_sector(0), fill_sector(0), b"\x09"])

        with pytest.raises(InvalidSectorFormatError) as excinfo:
            decode_track(spec.to_bytes(), track_index=6)

        error = excinfo.value
        assert error.context.track_index == 6
        assert error.context.sector_index == 2
        assert error.offset == 5 + 3 + 2 + 2
        assert "track #6" in str(error)
        assert "sector #2" in str(error)
