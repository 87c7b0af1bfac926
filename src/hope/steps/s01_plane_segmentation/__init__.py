"""Step 01: horizontal plane segmentation.

The segmentation core (downsampling, horizontal filter, Z-growing, planarity
check) is usable without the step wrapper through :class:`PlaneSegmenter`.
"""

from ._results import PlaneCandidate, ResultSet
from ._segmenter import PlaneSegmenter, find_horizontal_planes
from .config import SegmentationConfig

__all__ = [
    "PlaneCandidate",
    "PlaneSegmenter",
    "ResultSet",
    "SegmentationConfig",
    "find_horizontal_planes",
]
