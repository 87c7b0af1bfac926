"""Visualization of segmentation results (matplotlib, offscreen-friendly)."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import numpy as np

from hope.core.cloud import PointCloud
from hope.steps.s01_plane_segmentation._results import PlaneCandidate


def plot_point_cloud(
    cloud: PointCloud,
    title: str = "Point cloud",
    max_points: int = 50000,
    save_path: Path | None = None,
):
    """Scatter a cloud in 3D, RGB if it has colors, else shaded by height."""
    import matplotlib.pyplot as plt

    if len(cloud) > max_points:
        cloud = cloud.select(
            np.sort(np.random.default_rng(42).choice(len(cloud), max_points, replace=False))
        )
    pts = cloud.points
    if cloud.colors is not None:
        style = {"c": cloud.colors.astype(np.float64) / 255.0}
    else:
        style = {"c": pts[:, 2], "cmap": "viridis"}

    fig = plt.figure(figsize=(10, 8))
    ax = fig.add_subplot(111, projection="3d")
    ax.scatter(pts[:, 0], pts[:, 1], pts[:, 2], s=0.5, alpha=0.6, **style)
    ax.set_title(f"{title} ({len(pts)} pts)")
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z (m)")

    if save_path:
        fig.savefig(str(save_path), dpi=150, bbox_inches="tight")
    else:
        plt.show()
    plt.close(fig)
    return fig


def plot_planes(
    planes: Iterable[PlaneCandidate],
    source_points: np.ndarray | None = None,
    max_plane: PlaneCandidate | None = None,
    title: str = "Horizontal planes",
    save_path: Path | None = None,
):
    """Overlay every accepted patch (deviation colors) on the gray source cloud."""
    import matplotlib.pyplot as plt

    fig = plt.figure(figsize=(10, 8))
    ax = fig.add_subplot(111, projection="3d")

    if source_points is not None and len(source_points):
        ax.scatter(
            source_points[:, 0], source_points[:, 1], source_points[:, 2],
            c="0.6", s=0.3, alpha=0.3,
        )

    for plane in planes:
        pts = plane.cloud.points
        size = 4.0 if max_plane is not None and plane is max_plane else 2.0
        ax.scatter(
            pts[:, 0], pts[:, 1], pts[:, 2],
            c=plane.cloud.colors.astype(np.float64) / 255.0, s=size,
        )
        ax.text(pts[0, 0], pts[0, 1], plane.height, f"z={plane.height:.2f}")

    ax.set_title(title)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")

    if save_path:
        fig.savefig(str(save_path), dpi=150, bbox_inches="tight")
    else:
        plt.show()
    plt.close(fig)
    return fig


class MatplotlibPlaneRenderer:
    """PlaneRenderer writing a top-down PNG of each patch to ``output_dir``."""

    def __init__(self, output_dir: Path, dpi: int = 150):
        self.output_dir = Path(output_dir)
        self.dpi = dpi

    def render(self, candidate: PlaneCandidate) -> Path:
        import matplotlib.pyplot as plt

        self.output_dir.mkdir(parents=True, exist_ok=True)
        out = self.output_dir / f"plane_{candidate.id:03d}.png"

        pts = candidate.cloud.points
        fig, ax = plt.subplots(figsize=(6, 6))
        ax.scatter(pts[:, 0], pts[:, 1], c=candidate.cloud.colors / 255.0, s=6, marker="s")
        ax.set_aspect("equal")
        ax.set_title(
            f"Plane {candidate.id}: z={candidate.height:.3f} m, "
            f"{candidate.num_points} pts, dz={candidate.dz:.3f}"
        )
        ax.set_xlabel("X")
        ax.set_ylabel("Y")
        fig.savefig(str(out), dpi=self.dpi, bbox_inches="tight")
        plt.close(fig)
        return out
