"""In-memory point cloud container shared by all segmentation stages."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class PointCloud:
    """Ordered point set sharing one reference frame.

    Attributes:
        points: (N, 3) float64 positions.
        colors: optional (N, 3) uint8 RGB.
        normals: optional (N, 3) float64 unit normals (NaN where undefined).
        width, height: logical shape; ``height > 1`` means organized.
        is_dense: True when every point has finite coordinates.
        frame_id: name of the reference frame the positions are expressed in.
    """

    points: np.ndarray
    colors: np.ndarray | None = None
    normals: np.ndarray | None = None
    width: int = 0
    height: int = 1
    is_dense: bool = True
    frame_id: str = "base_link"

    def __post_init__(self) -> None:
        self.points = np.asarray(self.points, dtype=np.float64).reshape(-1, 3)
        n = len(self.points)
        if self.colors is not None:
            self.colors = np.asarray(self.colors, dtype=np.uint8).reshape(-1, 3)
            if len(self.colors) != n:
                raise ValueError(f"colors has {len(self.colors)} rows, expected {n}")
        if self.normals is not None:
            self.normals = np.asarray(self.normals, dtype=np.float64).reshape(-1, 3)
            if len(self.normals) != n:
                raise ValueError(f"normals has {len(self.normals)} rows, expected {n}")
        if self.width * self.height != n:
            # Unorganized cloud: a single row
            self.width, self.height = n, 1

    @classmethod
    def from_points(
        cls,
        points: np.ndarray,
        colors: np.ndarray | None = None,
        frame_id: str = "base_link",
    ) -> PointCloud:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return cls(
            points=points,
            colors=colors,
            width=len(points),
            height=1,
            is_dense=bool(np.isfinite(points).all()),
            frame_id=frame_id,
        )

    def __len__(self) -> int:
        return len(self.points)

    @property
    def is_empty(self) -> bool:
        return len(self.points) == 0

    @property
    def is_organized(self) -> bool:
        return self.height > 1

    def select(self, indices: np.ndarray) -> PointCloud:
        """Return the sub-cloud at ``indices`` (order preserved)."""
        idx = np.asarray(indices, dtype=np.int64)
        return PointCloud(
            points=self.points[idx],
            colors=None if self.colors is None else self.colors[idx],
            normals=None if self.normals is None else self.normals[idx],
            width=len(idx),
            height=1,
            is_dense=self.is_dense,
            frame_id=self.frame_id,
        )

    def copy(self) -> PointCloud:
        return PointCloud(
            points=self.points.copy(),
            colors=None if self.colors is None else self.colors.copy(),
            normals=None if self.normals is None else self.normals.copy(),
            width=self.width,
            height=self.height,
            is_dense=self.is_dense,
            frame_id=self.frame_id,
        )
