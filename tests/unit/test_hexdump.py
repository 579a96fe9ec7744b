"""
Unit tests for hex dump formatting.
"""

from imagedisk.utils import hexdump_lines


class TestHexdump:
    """Test hexdump_lines()."""

    def test_line_count(self):
        assert len(list(hexdump_lines(bytes(128)))) == 8
        assert len(list(hexdump_lines(bytes(17)))) == 2
        assert list(hexdump_lines(b"")) == []

    def test_full_line(self):
        line = next(hexdump_lines(bytes(range(0x41, 0x51))))

        assert line.startswith("0000  41 42 43 44 45 46 47 48  49 4a")
        assert line.endswith("|ABCDEFGHIJKLMNOP|")

    def test_partial_line_aligned(self):
        """Test that a short last line keeps the ASCII column aligned."""
        lines = list(hexdump_lines(b"A" * 20))

        assert lines[1].startswith("0010  41 41 41 41")
        assert lines[0].index("|") == lines[1].index("|")
        assert lines[1].endswith("|AAAA|")

    def test_unprintable_bytes(self):
        line = next(hexdump_lines(b"\x00\x1a\x7f\xe5a"))

        assert line.endswith("|....a|")
