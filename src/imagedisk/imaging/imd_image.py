"""
In-memory model of a decoded ImageDisk image.

An Image owns its Tracks and each Track owns its Sectors. All three are
frozen dataclasses holding tuples and bytes, so a decoded image cannot be
changed after the decode pass that built it.

Sectors keep the on-disk record order of their track. Use
Track.sectors_in_order() for logical sector order.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .imd_format import (
    SectorType,
    SectorNotFoundError,
    sector_size_for_code,
)


# =============================================================================
# Sector
# =============================================================================

@dataclass(frozen=True)
class Sector:
    """
    One decoded sector record.

    Attributes:
        cylinder: Logical cylinder (from the cylinder map or the track)
        head: Logical head (from the head map or the track)
        sector: Logical sector number from the sector numbering map
        type: SectorType of the record
        data: Sector contents, None when type is NONE
        compressed: True if stored as a single fill byte
    """
    cylinder: int
    head: int
    sector: int
    type: SectorType
    data: Optional[bytes] = None
    compressed: bool = False

    @property
    def has_data(self) -> bool:
        return self.data is not None

    @property
    def is_deleted(self) -> bool:
        return self.type.is_deleted

    @property
    def has_error(self) -> bool:
        return self.type.has_error

    @property
    def size(self) -> int:
        """Length of the data buffer (0 for NONE records)."""
        return len(self.data) if self.data is not None else 0

    @property
    def fill_byte(self) -> Optional[int]:
        """Fill value of a compressed record, None otherwise."""
        if self.compressed and self.data:
            return self.data[0]
        return None

    @property
    def chs(self) -> Tuple[int, int, int]:
        return (self.cylinder, self.head, self.sector)

    def __repr__(self) -> str:
        return (
            f"Sector(C{self.cylinder}:H{self.head}:S{self.sector}, "
            f"{self.type.name}, {self.size} bytes"
            f"{', compressed' if self.compressed else ''})"
        )


# =============================================================================
# Track
# =============================================================================

@dataclass(frozen=True)
class Track:
    """
    One decoded track record.

    Attributes:
        mode: Mode byte, stored verbatim
        cylinder: Physical cylinder
        head: Physical head (0 or 1)
        sector_size_code: Size code, sector size is 128 << code
        sectors: Sectors in on-disk record order
        has_cylinder_map: Cylinder map was present in the record
        has_head_map: Head map was present in the record
    """
    mode: int
    cylinder: int
    head: int
    sector_size_code: int
    sectors: Tuple[Sector, ...] = ()
    has_cylinder_map: bool = False
    has_head_map: bool = False

    @property
    def sector_size(self) -> int:
        """Sector payload size in bytes."""
        return sector_size_for_code(self.sector_size_code)

    @property
    def sector_count(self) -> int:
        return len(self.sectors)

    @property
    def sector_numbering_map(self) -> Tuple[int, ...]:
        """Logical sector number at each record position."""
        return tuple(s.sector for s in self.sectors)

    @property
    def cylinder_map(self) -> Optional[Tuple[int, ...]]:
        if not self.has_cylinder_map:
            return None
        return tuple(s.cylinder for s in self.sectors)

    @property
    def head_map(self) -> Optional[Tuple[int, ...]]:
        if not self.has_head_map:
            return None
        return tuple(s.head for s in self.sectors)

    def sectors_in_order(self) -> List[Sector]:
        """
        Return the sectors sorted by logical sector number.

        Tracks are often interleaved, so record order and logical order
        differ. The sort is stable for duplicate sector numbers.
        """
        return sorted(self.sectors, key=lambda s: s.sector)

    def find_sector(self, cylinder: int, head: int, sector: int) -> Optional[Sector]:
        """First sector in record order with the given logical C/H/S."""
        for candidate in self.sectors:
            if (candidate.cylinder == cylinder and
                    candidate.head == head and
                    candidate.sector == sector):
                return candidate
        return None

    def __repr__(self) -> str:
        return (
            f"Track(mode={self.mode}, C{self.cylinder}:H{self.head}, "
            f"{self.sector_count}x{self.sector_size} bytes)"
        )


# =============================================================================
# Image
# =============================================================================

@dataclass(frozen=True)
class Image:
    """
    A decoded ImageDisk image.

    Attributes:
        header: Signature line without the line terminator
        comment: Free-text comment without the 0x1A sentinel
        tracks: Tracks in file order

    Example:
        >>> image = decode_image(data)
        >>> image.track_count
        160
        >>> image.read_sector(0, 0, 1)[:3]
        b'\\xeb<\\x90'
    """
    header: str
    comment: str
    tracks: Tuple[Track, ...] = field(default_factory=tuple)

    @property
    def track_count(self) -> int:
        return len(self.tracks)

    @property
    def version(self) -> str:
        """Version text from the header, e.g. "1.18"."""
        return self.header[4:8]

    @property
    def cylinders(self) -> int:
        """Number of physical cylinders (highest cylinder + 1)."""
        if not self.tracks:
            return 0
        return max(t.cylinder for t in self.tracks) + 1

    @property
    def heads(self) -> int:
        """Number of physical heads used (1 or 2)."""
        if not self.tracks:
            return 0
        return max(t.head for t in self.tracks) + 1

    @property
    def sector_count(self) -> int:
        return sum(t.sector_count for t in self.tracks)

    def iter_sectors(self) -> Iterator[Tuple[Track, Sector]]:
        """Yield (track, sector) pairs in file order."""
        for track in self.tracks:
            for sector in track.sectors:
                yield track, sector

    def get_track(self, cylinder: int, head: int) -> Optional[Track]:
        """First track with the given physical cylinder and head."""
        for track in self.tracks:
            if track.cylinder == cylinder and track.head == head:
                return track
        return None

    def find_sector(self, cylinder: int, head: int, sector: int) -> Optional[Sector]:
        """
        Look up a sector by logical C/H/S.

        Tracks are searched in file order and the first match wins.

        Returns:
            The Sector, or None if no record carries that address
        """
        for track in self.tracks:
            found = track.find_sector(cylinder, head, sector)
            if found is not None:
                return found
        return None

    def read_sector(self, cylinder: int, head: int, sector: int) -> Optional[bytes]:
        """
        Get the raw bytes of a sector.

        Args:
            cylinder: Logical cylinder
            head: Logical head
            sector: Logical sector number

        Returns:
            Sector data, or None for a record whose data is unavailable

        Raises:
            SectorNotFoundError: If no sector has that address
        """
        found = self.find_sector(cylinder, head, sector)
        if found is None:
            raise SectorNotFoundError(cylinder, head, sector)
        return found.data

    def __repr__(self) -> str:
        return f"Image(version={self.version!r}, tracks={self.track_count})"
