"""Stage 6: accepted plane candidates and the per-run result set."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from hope.core.cloud import PointCloud


@dataclass
class PlaneCandidate:
    """One horizontal patch at a representative height.

    ``id`` is the position of the source cluster in discovery order;
    ``cluster`` indexes the horizontal-filtered cloud of the run that produced
    the candidate; ``cloud`` holds the points flattened to ``height`` and
    colored by their original height deviation.
    """

    id: int
    height: float
    coefficients: tuple[float, float, float, float]
    cluster: np.ndarray
    cloud: PointCloud
    dz: float = 0.0
    dxy_max: float = 0.0

    @property
    def num_points(self) -> int:
        return len(self.cloud)

    @property
    def bounds_xy(self) -> tuple[float, float, float, float]:
        """(x_min, y_min, x_max, y_max) of the patch."""
        xy = self.cloud.points[:, :2]
        x_min, y_min = xy.min(axis=0)
        x_max, y_max = xy.max(axis=0)
        return float(x_min), float(y_min), float(x_max), float(y_max)


class ResultSet:
    """Accepted candidates in discovery order plus the largest one.

    The largest ("max plane") only changes on a strictly greater point count,
    so among equal sizes the first discovered wins.
    """

    def __init__(self) -> None:
        self._planes: list[PlaneCandidate] = []
        self._max_index: int | None = None

    def clear(self) -> None:
        self._planes.clear()
        self._max_index = None

    def add(self, candidate: PlaneCandidate) -> None:
        self._planes.append(candidate)
        if self._max_index is None or candidate.num_points > self.max_plane.num_points:
            self._max_index = len(self._planes) - 1

    @property
    def planes(self) -> list[PlaneCandidate]:
        return list(self._planes)

    @property
    def max_plane(self) -> PlaneCandidate | None:
        return None if self._max_index is None else self._planes[self._max_index]

    @property
    def max_plane_index(self) -> int | None:
        return self._max_index

    @property
    def heights(self) -> list[float]:
        return [p.height for p in self._planes]

    def __len__(self) -> int:
        return len(self._planes)

    def __iter__(self) -> Iterator[PlaneCandidate]:
        return iter(self._planes)

    def __getitem__(self, i: int) -> PlaneCandidate:
        return self._planes[i]
