"""
Raw sector image export.

Flattens a decoded IMD image into a headerless IMG-style image: tracks in
cylinder/head order, sectors in logical order, every sector at a fixed
offset derived from the image geometry. Sectors whose data is unavailable,
and gaps in the sector numbering, keep the fill byte.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .imd_format import ImageGeometryError
from .imd_image import Image

logger = logging.getLogger(__name__)

# Default fill byte for formatted sectors
DEFAULT_FILL_BYTE = 0xE5


@dataclass(frozen=True)
class RawGeometry:
    """
    Geometry used to lay out a raw image.

    Attributes:
        cylinders: Number of cylinders (highest physical cylinder + 1)
        heads: Number of heads (highest physical head + 1)
        sectors_per_track: Largest sector count of any track
        sector_size: Sector size in bytes, shared by all tracks
        first_sector: Lowest logical sector number (usually 0 or 1)
    """
    cylinders: int
    heads: int
    sectors_per_track: int
    sector_size: int
    first_sector: int

    @property
    def total_bytes(self) -> int:
        return self.cylinders * self.heads * self.sectors_per_track * self.sector_size

    def offset_of(self, cylinder: int, head: int, sector: int) -> int:
        index = sector - self.first_sector
        return ((cylinder * self.heads + head) * self.sectors_per_track + index) * self.sector_size


def detect_raw_geometry(image: Image) -> Optional[RawGeometry]:
    """
    Derive a uniform geometry from the image's tracks.

    Tracks without sectors are ignored.

    Returns:
        RawGeometry, or None if the image has no sectors

    Raises:
        ImageGeometryError: If tracks use different sector sizes
    """
    populated = [t for t in image.tracks if t.sector_count]
    if not populated:
        return None

    sizes = {t.sector_size for t in populated}
    if len(sizes) != 1:
        raise ImageGeometryError(
            f"Mixed sector sizes {sorted(sizes)} cannot be flattened"
        )

    return RawGeometry(
        cylinders=image.cylinders,
        heads=image.heads,
        sectors_per_track=max(t.sector_count for t in populated),
        sector_size=sizes.pop(),
        first_sector=min(s.sector for t in populated for s in t.sectors),
    )


def to_raw_image(image: Image, fill_byte: int = DEFAULT_FILL_BYTE) -> bytes:
    """
    Convert an image to a raw sector image.

    Each sector is placed by its track's physical cylinder/head and its
    logical sector number. Sector numbers that fall outside the detected
    geometry are skipped with a warning.

    Args:
        image: Decoded IMD image
        fill_byte: Value for unavailable or missing sectors

    Returns:
        Raw image bytes (empty if the image has no sectors)

    Raises:
        ImageGeometryError: If tracks use different sector sizes
        ValueError: If fill_byte is not 0..255
    """
    if not 0 <= fill_byte <= 0xFF:
        raise ValueError(f"Fill byte out of range: {fill_byte}")

    geometry = detect_raw_geometry(image)
    if geometry is None:
        return b''

    logger.debug("Raw geometry: %dC/%dH/%dS x %d bytes, first sector %d",
                 geometry.cylinders, geometry.heads, geometry.sectors_per_track,
                 geometry.sector_size, geometry.first_sector)

    buffer = np.full(geometry.total_bytes, fill_byte, dtype=np.uint8)
    written = 0
    skipped = 0

    for track in sorted(image.tracks, key=lambda t: (t.cylinder, t.head)):
        for sector in track.sectors_in_order():
            index = sector.sector - geometry.first_sector
            if index >= geometry.sectors_per_track:
                logger.warning("Skipping C%d:H%d:S%d outside raw geometry",
                               track.cylinder, track.head, sector.sector)
                skipped += 1
                continue
            if sector.data is None:
                continue
            offset = geometry.offset_of(track.cylinder, track.head, sector.sector)
            buffer[offset:offset + geometry.sector_size] = np.frombuffer(
                sector.data, dtype=np.uint8
            )
            written += 1

    logger.info("Raw image: %d sectors written, %d skipped, %d bytes",
                written, skipped, geometry.total_bytes)
    return buffer.tobytes()
