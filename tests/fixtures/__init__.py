"""
Test fixtures for the ImageDisk reader.

Provides builders for synthetic IMD images so tests can run without
real disk captures.
"""

from tests.fixtures.imd_builders import (
    DEFAULT_HEADER,
    DEFAULT_COMMENT,
    TrackSpec,
    NonSeekableStream,
    header_block,
    raw_sector,
    fill_sector,
    missing_sector,
    filled_track,
    build_imd,
)

__all__ = [
    "DEFAULT_HEADER",
    "DEFAULT_COMMENT",
    "TrackSpec",
    "NonSeekableStream",
    "header_block",
    "raw_sector",
    "fill_sector",
    "missing_sector",
    "filled_track",
    "build_imd",
]
