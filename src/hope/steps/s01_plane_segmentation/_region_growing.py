"""Stage 3: height-thresholded region growing (Z-growing).

Unlike normal-consistency region growing, a neighbor joins the cluster when
its height is within ``z_threshold`` of the member it was reached from. Each
point moves through UNVISITED -> IN_CLUSTER, or UNVISITED -> REJECTED when
its cluster ends up too small; rejected points are never offered as seeds
again.
"""

from __future__ import annotations

import logging
from collections import deque

import numpy as np
from scipy.spatial import cKDTree

logger = logging.getLogger(__name__)

UNVISITED = 0
IN_CLUSTER = 1
REJECTED = 2


def knn_table(points: np.ndarray, k: int) -> np.ndarray:
    """(N, k) indices of each point's k nearest neighbors, self excluded.

    Rows are padded with -1 when the cloud has fewer than k + 1 points.
    """
    n = len(points)
    if n == 0:
        return np.empty((0, k), dtype=np.int64)

    tree = cKDTree(points)
    _, idx = tree.query(points, k=k + 1)
    idx = np.asarray(idx, dtype=np.int64).reshape(n, k + 1)
    idx[idx >= n] = -1

    # Drop the point itself; duplicates may put it in any column
    keep = (idx != np.arange(n)[:, None]) & (idx >= 0)
    order = np.argsort(~keep, axis=1, kind="stable")[:, :k]
    table = np.take_along_axis(idx, order, axis=1)
    table[~np.take_along_axis(keep, order, axis=1)] = -1
    return table


class ZGrowing:
    """Cluster points into connected groups of similar height.

    Usage mirrors a configurable extractor:

        zg = ZGrowing(z_threshold=0.02, neighbor_count=8,
                      min_cluster_size=20, max_cluster_size=307200)
        clusters = zg.extract(points)
    """

    def __init__(
        self,
        z_threshold: float,
        neighbor_count: int = 8,
        min_cluster_size: int = 20,
        max_cluster_size: int = 307200,
    ):
        if z_threshold < 0:
            raise ValueError(f"z_threshold must be >= 0, got {z_threshold}")
        if neighbor_count < 1:
            raise ValueError(f"neighbor_count must be >= 1, got {neighbor_count}")
        if not 1 <= min_cluster_size <= max_cluster_size:
            raise ValueError(
                f"Invalid cluster size bounds [{min_cluster_size}, {max_cluster_size}]"
            )
        self.z_threshold = z_threshold
        self.neighbor_count = neighbor_count
        self.min_cluster_size = min_cluster_size
        self.max_cluster_size = max_cluster_size
        self.status: np.ndarray = np.empty(0, dtype=np.int8)

    def extract(self, points: np.ndarray) -> list[np.ndarray]:
        """Return accepted clusters (index arrays) in discovery order."""
        points = np.asarray(points, dtype=np.float64)
        n = len(points)
        self.status = np.full(n, UNVISITED, dtype=np.int8)
        if n == 0:
            return []

        neighbors = knn_table(points, self.neighbor_count)
        z = points[:, 2]
        clusters: list[np.ndarray] = []
        n_rejected = 0

        for seed in range(n):
            if self.status[seed] != UNVISITED:
                continue

            members = self._grow(seed, neighbors, z)
            if self.min_cluster_size <= len(members) <= self.max_cluster_size:
                clusters.append(np.asarray(members, dtype=np.int64))
            else:
                self.status[members] = REJECTED
                n_rejected += 1

        logger.debug(
            f"Z-growing: {len(clusters)} clusters kept, {n_rejected} rejected "
            f"(size outside [{self.min_cluster_size}, {self.max_cluster_size}])"
        )
        return clusters

    def _grow(self, seed: int, neighbors: np.ndarray, z: np.ndarray) -> list[int]:
        status = self.status
        status[seed] = IN_CLUSTER
        members = [seed]
        queue = deque([seed])

        while queue and len(members) < self.max_cluster_size:
            current = queue.popleft()
            for nb in neighbors[current]:
                if nb < 0 or status[nb] != UNVISITED:
                    continue
                if abs(z[nb] - z[current]) > self.z_threshold:
                    continue
                status[nb] = IN_CLUSTER
                members.append(int(nb))
                queue.append(int(nb))
                if len(members) >= self.max_cluster_size:
                    break
        return members
