"""Stages 4-5: representative cluster heights and the planarity check.

A cluster becomes a plane candidate at its mean height. It is accepted when
its raw height span ``dz`` stays below what the sensor tilt tolerance allows
over the patch footprint:

    zmax = dxy_max * th_theta,   accept iff zmax > dz

where ``dxy_max`` is the extent of the patch along its dominant principal
axis in the xy plane.
"""

from __future__ import annotations

import logging

import numpy as np

from hope.core.cloud import PointCloud
from ._results import PlaneCandidate

logger = logging.getLogger(__name__)

# Minor/major eigenvalue ratio below which xy points count as collinear
_COLLINEAR_EPS = 1e-6
# Major eigenvalue (m^2) below which xy points count as coincident
_COINCIDENT_EPS = 1e-12


def cluster_mean_heights(points: np.ndarray, clusters: list[np.ndarray]) -> list[float]:
    """Mean z of each cluster, in cluster order."""
    z = np.asarray(points)[:, 2]
    return [float(z[idx].mean()) for idx in clusters]


def horizontal_plane_coefficients(height: float) -> tuple[float, float, float, float]:
    """(a, b, c, d) of the plane z = height, i.e. 0x + 0y + 1z - height = 0."""
    return (0.0, 0.0, 1.0, -float(height))


def short_rainbow_colormap(values: np.ndarray, vmin: float, vmax: float) -> np.ndarray:
    """Map values onto a blue -> cyan -> green -> yellow -> red ramp.

    ``vmin`` maps to blue and ``vmax`` to red. A zero-width range maps every
    value to the middle of the ramp (green).
    """
    values = np.asarray(values, dtype=np.float64)
    span = vmax - vmin
    if span > 0:
        norm = np.clip((values - vmin) / span, 0.0, 1.0)
    else:
        norm = np.full(values.shape, 0.5)

    a = (1.0 - norm) / 0.25
    band = np.clip(np.floor(a).astype(np.int64), 0, 4)
    ramp = np.floor(255.0 * (a - band)).astype(np.int64)
    ramp = np.clip(ramp, 0, 255)

    rgb = np.zeros((len(values), 3), dtype=np.int64)
    # band 0: red -> yellow
    m = band == 0
    rgb[m] = np.column_stack([np.full(m.sum(), 255), ramp[m], np.zeros(m.sum())])
    # band 1: yellow -> green
    m = band == 1
    rgb[m] = np.column_stack([255 - ramp[m], np.full(m.sum(), 255), np.zeros(m.sum())])
    # band 2: green -> cyan
    m = band == 2
    rgb[m] = np.column_stack([np.zeros(m.sum()), np.full(m.sum(), 255), ramp[m]])
    # band 3: cyan -> blue
    m = band == 3
    rgb[m] = np.column_stack([np.zeros(m.sum()), 255 - ramp[m], np.full(m.sum(), 255)])
    # band 4: blue
    rgb[band == 4] = (0, 0, 255)
    return rgb.astype(np.uint8)


def pca_spread_2d(xy: np.ndarray) -> float | None:
    """Extent of 2D points along their dominant principal axis.

    Returns None when the spread is undefined: fewer than 3 points, or all
    points coincident or collinear.
    """
    xy = np.asarray(xy, dtype=np.float64)
    if len(xy) < 3 or not np.isfinite(xy).all():
        return None

    centered = xy - xy.mean(axis=0)
    cov = centered.T @ centered / len(xy)
    eigvals, eigvecs = np.linalg.eigh(cov)
    minor, major = eigvals
    if major <= _COINCIDENT_EPS or minor <= _COLLINEAR_EPS * major:
        return None

    proj = centered @ eigvecs[:, 1]
    return float(proj.max() - proj.min())


def validate_cluster(
    candidate_id: int,
    cluster: np.ndarray,
    points: np.ndarray,
    height: float,
    th_theta: float,
    frame_id: str = "base_link",
) -> PlaneCandidate | None:
    """Build the candidate for one cluster and apply the planarity check.

    Args:
        candidate_id: id given to the candidate when accepted.
        cluster: indices of the cluster members.
        points: (M, 3) positions of the cluster members, in cluster order.
        height: representative height of the cluster.
        th_theta: tolerated height change per unit of horizontal distance.

    Returns:
        The colorized, flattened candidate, or None when rejected.
    """
    points = np.asarray(points, dtype=np.float64)
    z = points[:, 2]
    z_min, z_max = float(z.min()), float(z.max())
    dz = z_max - z_min

    colors = short_rainbow_colormap(z - height, z_min - height, z_max - height)
    flat = points.copy()
    flat[:, 2] = height
    patch = PointCloud(
        points=flat,
        colors=colors,
        width=len(flat),
        height=1,
        is_dense=True,
        frame_id=frame_id,
    )

    dxy_max = pca_spread_2d(flat[:, :2])
    if dxy_max is None:
        logger.debug(
            f"Cluster {candidate_id} at z={height:.3f}: degenerate xy spread, rejected"
        )
        return None

    zmax = dxy_max * th_theta
    if not zmax > dz:
        logger.info(
            f"Cluster {candidate_id} at z={height:.3f}: height variation {dz:.4f} "
            f"exceeds tolerance {zmax:.4f} over spread {dxy_max:.3f}, rejected"
        )
        return None

    return PlaneCandidate(
        id=candidate_id,
        height=float(height),
        coefficients=horizontal_plane_coefficients(height),
        cluster=np.asarray(cluster, dtype=np.int64),
        cloud=patch,
        dz=dz,
        dxy_max=dxy_max,
    )
