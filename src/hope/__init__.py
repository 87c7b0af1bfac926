"""HOPE: horizontal plane extraction from 3D point clouds."""

from hope.core.cloud import PointCloud
from hope.steps.s01_plane_segmentation import (
    PlaneCandidate,
    PlaneSegmenter,
    ResultSet,
    SegmentationConfig,
    find_horizontal_planes,
)

__version__ = "0.1.0"

__all__ = [
    "PlaneCandidate",
    "PlaneSegmenter",
    "PointCloud",
    "ResultSet",
    "SegmentationConfig",
    "find_horizontal_planes",
]
