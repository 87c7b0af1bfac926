"""Shared pytest fixtures for HOPE tests."""

from pathlib import Path

import matplotlib
import numpy as np
import pytest

from hope.core.cloud import PointCloud

matplotlib.use("Agg")


def lattice_patch(
    x0: float,
    y0: float,
    nx: int,
    ny: int,
    z: float,
    spacing: float = 0.05,
) -> np.ndarray:
    """(nx*ny, 3) points on a horizontal lattice, centered inside each cell.

    With ``spacing`` equal to the xy resolution every point lands in its own
    voxel, so downsampling keeps all of them.
    """
    xs = x0 + (np.arange(nx) + 0.5) * spacing
    ys = y0 + (np.arange(ny) + 0.5) * spacing
    gx, gy = np.meshgrid(xs, ys, indexing="ij")
    return np.column_stack([gx.ravel(), gy.ravel(), np.full(gx.size, z)])


@pytest.fixture
def make_patch():
    return lattice_patch


@pytest.fixture
def flat_cloud() -> PointCloud:
    """400 points on a 1m x 1m table at z=0.75, one per 5cm voxel."""
    return PointCloud.from_points(lattice_patch(0.0, 0.0, 20, 20, z=0.75))


@pytest.fixture
def two_table_cloud() -> PointCloud:
    """Two flat 0.5m x 1.0m patches (5000 points each) at z=0.40 and z=0.80.

    Points are 1cm apart, so each 5cm voxel holds 25 of them and collapses
    to its center.
    """
    low = lattice_patch(0.0, 0.0, 50, 100, z=0.40, spacing=0.01)
    high = lattice_patch(1.0, 0.0, 50, 100, z=0.80, spacing=0.01)
    return PointCloud.from_points(np.vstack([low, high]))


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Temporary data root with the standard directory layout."""
    for subdir in ["raw", "interim/s00_import_cloud", "interim/s01_planes",
                   "interim/s02_meshes"]:
        (tmp_path / subdir).mkdir(parents=True, exist_ok=True)
    return tmp_path
