# Application Reviews Package
from .distribution import SrsDistribution, srs_distribution
from .guru_time import (
    GuruTimeDistribution,
    GuruTimeEstimator,
    estimate_guru_time,
    percentile,
)
from .projection import (
    DueCounts,
    DueSummary,
    ReviewHistogram,
    ReviewProjection,
    fold_into_window,
    project_reviews,
)

__all__ = [
    "DueCounts",
    "DueSummary",
    "ReviewHistogram",
    "ReviewProjection",
    "fold_into_window",
    "project_reviews",
    "GuruTimeDistribution",
    "GuruTimeEstimator",
    "estimate_guru_time",
    "percentile",
    "SrsDistribution",
    "srs_distribution",
]
