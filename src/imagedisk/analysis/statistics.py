"""
Statistical analysis for decoded IMD images.

This module summarises an image's content:
- Sector counts by record type
- Compressed (fill byte) record counts
- Sectors read with data errors, deleted sectors, unavailable sectors
- Geometry and track mode overview
- Overall image condition assessment
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

import numpy as np

from imagedisk.imaging.imd_format import SectorType
from imagedisk.imaging.imd_image import Image


# Logical C/H/S address
SectorAddress = Tuple[int, int, int]


# =============================================================================
# Enums
# =============================================================================


class ImageCondition(Enum):
    """
    Overall condition of the captured disk.
    """
    PERFECT = "Perfect"
    """Every sector was read without error."""

    GOOD = "Good"
    """Few problem sectors (<1%)."""

    DEGRADED = "Degraded"
    """Moderate problem sectors (1-5%)."""

    POOR = "Poor"
    """Many problem sectors (5-20%)."""

    UNUSABLE = "Unusable"
    """Too many problem sectors (>20%)."""

    EMPTY = "Empty"
    """Image holds no sectors."""


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ImageStatistics:
    """
    Content statistics for a decoded image.

    Attributes:
        track_count: Number of track records
        sector_count: Number of sector records
        type_counts: Sector count per SectorType
        compressed_sectors: Records stored as a single fill byte
        data_bytes: Total bytes of sector data after expansion
        cylinders: Number of physical cylinders
        heads: Number of physical heads
        sector_sizes: Distinct sector sizes in bytes
        modes: Distinct track mode bytes
        error_sectors: Addresses of sectors read with a data error
        deleted_sectors: Addresses of sectors with a deleted-data mark
        unavailable_sectors: Addresses of sectors without data
        condition: Overall assessment
    """
    track_count: int = 0
    sector_count: int = 0
    type_counts: Dict[SectorType, int] = field(default_factory=dict)
    compressed_sectors: int = 0
    data_bytes: int = 0
    cylinders: int = 0
    heads: int = 0
    sector_sizes: List[int] = field(default_factory=list)
    modes: List[int] = field(default_factory=list)
    error_sectors: List[SectorAddress] = field(default_factory=list)
    deleted_sectors: List[SectorAddress] = field(default_factory=list)
    unavailable_sectors: List[SectorAddress] = field(default_factory=list)
    condition: ImageCondition = ImageCondition.EMPTY

    @property
    def problem_sectors(self) -> int:
        """Sectors that are unavailable or carry a data error."""
        return len(self.error_sectors) + len(self.unavailable_sectors)

    @property
    def readable_percentage(self) -> float:
        """Percentage of sectors read cleanly."""
        if self.sector_count == 0:
            return 0.0
        return (self.sector_count - self.problem_sectors) / self.sector_count * 100.0

    @property
    def geometry_string(self) -> str:
        return f"{self.cylinders}/{self.heads}"


# =============================================================================
# Statistics Creation Functions
# =============================================================================


def assess_condition(problem_sectors: int, total_sectors: int) -> ImageCondition:
    """
    Classify an image by its share of problem sectors.

    Args:
        problem_sectors: Unavailable plus data-error sectors
        total_sectors: All sector records

    Returns:
        ImageCondition
    """
    if total_sectors == 0:
        return ImageCondition.EMPTY
    if problem_sectors == 0:
        return ImageCondition.PERFECT

    percentage = problem_sectors / total_sectors * 100.0
    if percentage < 1.0:
        return ImageCondition.GOOD
    elif percentage < 5.0:
        return ImageCondition.DEGRADED
    elif percentage < 20.0:
        return ImageCondition.POOR
    return ImageCondition.UNUSABLE


def compute_statistics(image: Image) -> ImageStatistics:
    """
    Compute content statistics for an image.

    Args:
        image: Decoded IMD image

    Returns:
        ImageStatistics

    Example:
        >>> stats = compute_statistics(load_imd("disk.imd"))
        >>> print(f"{stats.readable_percentage:.1f}% readable")
        >>> for c, h, s in stats.error_sectors:
        ...     print(f"Error in sector {c:02}.{h}.{s:02}")
    """
    stats = ImageStatistics(
        track_count=image.track_count,
        sector_count=image.sector_count,
        cylinders=image.cylinders,
        heads=image.heads,
        sector_sizes=sorted({t.sector_size for t in image.tracks}),
        modes=sorted({t.mode for t in image.tracks}),
    )

    type_codes = np.fromiter(
        (sector.type.value for _, sector in image.iter_sectors()),
        dtype=np.int64, count=image.sector_count,
    )
    counts = np.bincount(type_codes, minlength=len(SectorType))
    stats.type_counts = {t: int(counts[t.value]) for t in SectorType}

    for _, sector in image.iter_sectors():
        if sector.compressed:
            stats.compressed_sectors += 1
        stats.data_bytes += sector.size
        if not sector.has_data:
            stats.unavailable_sectors.append(sector.chs)
        if sector.has_error:
            stats.error_sectors.append(sector.chs)
        if sector.is_deleted:
            stats.deleted_sectors.append(sector.chs)

    stats.condition = assess_condition(stats.problem_sectors, stats.sector_count)
    return stats
