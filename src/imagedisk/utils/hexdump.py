"""
Hex dump formatting for sector contents.
"""

from typing import Iterator


def hexdump_lines(data: bytes, width: int = 16) -> Iterator[str]:
    """
    Yield lines of a hex dump of data.

    Each line shows the offset, the bytes in hex (with an extra gap after
    the first half) and the printable ASCII characters.

    Example:
        >>> for line in hexdump_lines(sector.data):
        ...     print(line)
    """
    half = width // 2
    for offs in range(0, len(data), width):
        cur = data[offs:offs + width]
        hex_part = ""
        for i, c in enumerate(cur):
            if i == half:
                hex_part += " "
            hex_part += f" {c:02x}"
        hex_part = hex_part.ljust(width * 3 + 1)
        text = "".join(chr(c) if 0x20 <= c < 0x7F else "." for c in cur)
        yield f"{offs:04x} {hex_part}  |{text}|"
