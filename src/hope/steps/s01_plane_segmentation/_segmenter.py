"""Horizontal plane segmenter: runs stages 1-6 for one input cloud."""

from __future__ import annotations

import logging
import time

import numpy as np

from hope.core.cloud import PointCloud
from ._downsample import voxel_downsample
from ._normals import estimate_normals, filter_horizontal
from ._region_growing import ZGrowing
from ._results import ResultSet
from ._validation import cluster_mean_heights, validate_cluster
from .config import SegmentationConfig

logger = logging.getLogger(__name__)


class PlaneSegmenter:
    """Extract horizontal plane patches from a point cloud.

    The instance keeps the scratch state of its last run (downsampled cloud,
    normals, filtered indices, clusters, heights) for inspection; all of it is
    reset at the start of :meth:`find_all_planes`. One instance must not be
    used from several threads at once.
    """

    def __init__(self, config: SegmentationConfig | None = None):
        self.config = config or SegmentationConfig()
        self.results = ResultSet()
        self._reset()

    def _reset(self) -> None:
        self.results.clear()
        self.downsampled: PointCloud | None = None
        self.normals: np.ndarray | None = None
        self.horizontal_indices = np.empty(0, dtype=np.int64)
        self.horizontal_cloud: PointCloud | None = None
        self.clusters: list[np.ndarray] = []
        self.cluster_heights: list[float] = []
        self.elapsed_seconds = 0.0

    def find_all_planes(self, cloud: PointCloud) -> ResultSet:
        """Run the full segmentation on ``cloud`` and return the accepted planes."""
        self._reset()
        t0 = time.perf_counter()
        try:
            self._segment(cloud)
        finally:
            self.elapsed_seconds = time.perf_counter() - t0
        logger.info(
            f"Found {len(self.results)} horizontal planes from {len(self.clusters)} "
            f"clusters in {self.elapsed_seconds * 1000:.1f} ms"
        )
        return self.results

    def _segment(self, cloud: PointCloud) -> None:
        cfg = self.config
        if cloud.is_empty:
            logger.warning("Source cloud is empty, no planes extracted")
            return

        # 1. Downsampling
        self.downsampled = voxel_downsample(cloud, cfg.xy_resolution, cfg.z_resolution)
        logger.info(f"Downsampled {len(cloud)} -> {len(self.downsampled)} points")
        if self.downsampled.is_empty:
            logger.warning("No finite points left after downsampling")
            return

        # 2. Normals and the horizontal filter
        self.normals = estimate_normals(self.downsampled.points, cfg.normal_radius)
        self.horizontal_indices = filter_horizontal(self.normals, cfg.th_norm)
        if len(self.horizontal_indices) == 0:
            logger.info(f"No horizontal surface detected (th_norm={cfg.th_norm:.3f})")
            return
        self.horizontal_cloud = self.downsampled.select(self.horizontal_indices)
        logger.info(
            f"{len(self.horizontal_indices)}/{len(self.downsampled)} points "
            f"pass the horizontal filter"
        )

        # 3. Height-thresholded region growing
        grower = ZGrowing(
            z_threshold=cfg.z_resolution,
            neighbor_count=cfg.neighbor_count,
            min_cluster_size=cfg.min_cluster_size,
            max_cluster_size=cfg.max_cluster_size,
        )
        self.clusters = grower.extract(self.horizontal_cloud.points)
        if not self.clusters:
            logger.debug("Region growing found no cluster")
            return

        # 4. Representative heights
        self.cluster_heights = cluster_mean_heights(self.horizontal_cloud.points, self.clusters)
        logger.debug(f"Hypothetic plane number: {len(self.cluster_heights)}")

        # 5-6. Validation and aggregation
        self.extract_planes()

    def extract_planes(self) -> ResultSet:
        """Validate every cluster at its representative height."""
        points = self.horizontal_cloud.points
        for cluster_id, (cluster, height) in enumerate(zip(self.clusters, self.cluster_heights)):
            candidate = validate_cluster(
                candidate_id=cluster_id,
                cluster=cluster,
                points=points[cluster],
                height=height,
                th_theta=self.config.th_theta,
                frame_id=self.horizontal_cloud.frame_id,
            )
            if candidate is not None:
                self.results.add(candidate)
        return self.results


def find_horizontal_planes(
    cloud: PointCloud,
    config: SegmentationConfig | None = None,
) -> ResultSet:
    """One-shot helper: segment ``cloud`` with a fresh segmenter."""
    return PlaneSegmenter(config).find_all_planes(cloud)
