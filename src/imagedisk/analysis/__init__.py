"""
Analysis of decoded IMD images.

Provides content statistics and condition assessment.
"""

from imagedisk.analysis.statistics import (
    ImageCondition,
    ImageStatistics,
    assess_condition,
    compute_statistics,
)

__all__ = [
    "ImageCondition",
    "ImageStatistics",
    "assess_condition",
    "compute_statistics",
]
