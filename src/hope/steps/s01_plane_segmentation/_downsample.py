"""Stage 1: voxel grid downsampling with separate xy and z leaf sizes."""

from __future__ import annotations

import logging

import numpy as np

from hope.core.cloud import PointCloud

logger = logging.getLogger(__name__)


def voxel_keys(points: np.ndarray, xy_resolution: float, z_resolution: float) -> np.ndarray:
    """Integer voxel coordinates (N, 3) of each point."""
    leaf = np.array([xy_resolution, xy_resolution, z_resolution], dtype=np.float64)
    return np.floor(points / leaf).astype(np.int64)


def voxel_downsample(
    cloud: PointCloud,
    xy_resolution: float,
    z_resolution: float,
) -> PointCloud:
    """Collapse all points of a voxel into their centroid.

    Voxels are emitted in lexicographic (ix, iy, iz) order, so the output is
    fully determined by the input positions. Colors, when present, are
    averaged the same way.
    """
    finite = np.isfinite(cloud.points).all(axis=1)
    if not finite.all():
        logger.debug(f"Dropping {int((~finite).sum())} non-finite points before voxelization")
        cloud = cloud.select(np.flatnonzero(finite))

    if cloud.is_empty:
        return PointCloud(
            points=np.empty((0, 3)),
            colors=None if cloud.colors is None else np.empty((0, 3), dtype=np.uint8),
            frame_id=cloud.frame_id,
        )

    keys = voxel_keys(cloud.points, xy_resolution, z_resolution)
    _, inverse, counts = np.unique(keys, axis=0, return_inverse=True, return_counts=True)
    inverse = inverse.reshape(-1)
    n_voxels = len(counts)

    sums = np.zeros((n_voxels, 3), dtype=np.float64)
    np.add.at(sums, inverse, cloud.points)
    centroids = sums / counts[:, None]

    colors = None
    if cloud.colors is not None:
        color_sums = np.zeros((n_voxels, 3), dtype=np.float64)
        np.add.at(color_sums, inverse, cloud.colors.astype(np.float64))
        colors = np.clip(np.rint(color_sums / counts[:, None]), 0, 255).astype(np.uint8)

    logger.debug(
        f"Voxel downsample (xy={xy_resolution}, z={z_resolution}): "
        f"{len(cloud)} -> {n_voxels} points"
    )
    return PointCloud(
        points=centroids,
        colors=colors,
        width=n_voxels,
        height=1,
        is_dense=True,
        frame_id=cloud.frame_id,
    )
