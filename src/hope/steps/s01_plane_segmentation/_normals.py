"""Stage 2: per-point normal estimation and the horizontal-surface filter.

Normals come from Open3D's radius-neighborhood PCA. Neighborhoods that cannot
define a plane (fewer than 3 points, all collinear) get a NaN normal, which
never passes the filter.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.spatial import cKDTree

logger = logging.getLogger(__name__)

# Second eigenvalue must exceed this fraction of the largest one
_RANK_EPS = 1e-6


def estimate_normals(points: np.ndarray, radius: float) -> np.ndarray:
    """Estimate unit normals (N, 3) from neighbors within ``radius``.

    Normals are oriented with ``n_z >= 0``.
    """
    import open3d as o3d

    points = np.asarray(points, dtype=np.float64)
    n = len(points)
    normals = np.full((n, 3), np.nan)
    if n < 3:
        return normals

    pcd = o3d.geometry.PointCloud()
    pcd.points = o3d.utility.Vector3dVector(points)
    search_param = o3d.geometry.KDTreeSearchParamRadius(radius=radius)
    pcd.estimate_covariances(search_param=search_param)
    pcd.estimate_normals(search_param=search_param)
    pcd.orient_normals_to_align_with_direction(np.array([0.0, 0.0, 1.0]))

    # Neighborhood size (self included) and rank of each covariance
    counts = cKDTree(points).query_ball_point(points, r=radius, return_length=True)
    eigvals = np.linalg.eigvalsh(np.asarray(pcd.covariances))
    valid = (
        (np.asarray(counts) >= 3)
        & (eigvals[:, 2] > 0)
        & (eigvals[:, 1] > _RANK_EPS * eigvals[:, 2])
    )

    estimated = np.asarray(pcd.normals)
    normals[valid] = estimated[valid]
    flip = valid & (normals[:, 2] < 0)
    normals[flip] *= -1.0

    logger.debug(f"Estimated {int(valid.sum())}/{n} normals (radius={radius:.4f})")
    return normals


def filter_horizontal(normals: np.ndarray, th_norm: float) -> np.ndarray:
    """Indices of points whose normal is close enough to vertical.

    A point passes iff ``|n_z| > th_norm``; NaN normals are dropped.
    """
    nz = np.abs(np.asarray(normals)[:, 2])
    with np.errstate(invalid="ignore"):
        mask = nz > th_norm
    return np.flatnonzero(mask).astype(np.int64)
