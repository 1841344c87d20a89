"""Views derived from the canonical corporation tax result."""

from .ct600 import map_ct600_boxes
from .package import (
    build_ct_package,
    build_ct_packages_for_long_period,
    split_submission_periods,
)
from .tax_computation import map_tax_computation

__all__ = [
    "build_ct_package",
    "build_ct_packages_for_long_period",
    "map_ct600_boxes",
    "map_tax_computation",
    "split_submission_periods",
]
