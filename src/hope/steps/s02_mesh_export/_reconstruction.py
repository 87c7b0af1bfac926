"""Mesh reconstruction for accepted plane patches.

Two MeshReconstructor implementations:
  - DelaunayMeshReconstructor: 2D Delaunay over the flattened patch, long
    edges trimmed so concave outlines survive.
  - PoissonMeshReconstructor: Open3D screened Poisson with upward normals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from hope.steps.s01_plane_segmentation._results import PlaneCandidate

logger = logging.getLogger(__name__)


@dataclass
class TriangleMesh:
    vertices: np.ndarray = field(default_factory=lambda: np.empty((0, 3)))
    triangles: np.ndarray = field(default_factory=lambda: np.empty((0, 3), dtype=np.int64))
    vertex_colors: np.ndarray | None = None

    @property
    def is_empty(self) -> bool:
        return len(self.triangles) == 0

    @property
    def area(self) -> float:
        if self.is_empty:
            return 0.0
        a, b, c = (self.vertices[self.triangles[:, i]] for i in range(3))
        return float(0.5 * np.linalg.norm(np.cross(b - a, c - a), axis=1).sum())


def write_mesh_ply(path: Path, mesh: TriangleMesh) -> Path:
    """Write vertices (+colors) and triangle faces to a binary PLY."""
    from plyfile import PlyData, PlyElement

    v_fields = [("x", "f4"), ("y", "f4"), ("z", "f4")]
    if mesh.vertex_colors is not None:
        v_fields += [("red", "u1"), ("green", "u1"), ("blue", "u1")]
    vertex_data = np.empty(len(mesh.vertices), dtype=v_fields)
    for i, c in enumerate("xyz"):
        vertex_data[c] = mesh.vertices[:, i]
    if mesh.vertex_colors is not None:
        for i, c in enumerate(("red", "green", "blue")):
            vertex_data[c] = mesh.vertex_colors[:, i]

    face_data = np.empty(len(mesh.triangles), dtype=[("vertex_indices", "i4", (3,))])
    face_data["vertex_indices"] = mesh.triangles

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    PlyData(
        [PlyElement.describe(vertex_data, "vertex"), PlyElement.describe(face_data, "face")],
        text=False,
    ).write(str(path))
    return path


class DelaunayMeshReconstructor:
    """Triangulate the patch in xy at its representative height.

    Triangles with an edge longer than ``max_edge_length`` are dropped.
    """

    def __init__(self, max_edge_length: float = 0.15):
        self.max_edge_length = max_edge_length

    def reconstruct_mesh(self, candidate: PlaneCandidate) -> TriangleMesh:
        from scipy.spatial import Delaunay, QhullError

        pts = candidate.cloud.points
        if len(pts) < 3:
            logger.warning(f"Plane {candidate.id}: fewer than 3 points, no mesh")
            return TriangleMesh()

        try:
            tri = Delaunay(pts[:, :2])
        except QhullError as e:
            logger.warning(f"Plane {candidate.id}: triangulation failed ({e}), no mesh")
            return TriangleMesh()

        simplices = tri.simplices
        a, b, c = (pts[simplices[:, i], :2] for i in range(3))
        longest = np.max(
            np.stack([
                np.linalg.norm(a - b, axis=1),
                np.linalg.norm(b - c, axis=1),
                np.linalg.norm(c - a, axis=1),
            ]),
            axis=0,
        )
        simplices = simplices[longest <= self.max_edge_length]

        vertices = pts.copy()
        vertices[:, 2] = candidate.height
        mesh = TriangleMesh(
            vertices=vertices,
            triangles=simplices.astype(np.int64),
            vertex_colors=candidate.cloud.colors,
        )
        logger.debug(f"Plane {candidate.id}: {len(simplices)} triangles, area {mesh.area:.3f}")
        return mesh


class PoissonMeshReconstructor:
    """Screened Poisson surface reconstruction (Open3D) of one patch.

    A higher ``depth`` gives a finer octree at a higher compute cost. Vertices
    supported by fewer samples than the ``density_quantile`` are trimmed.
    """

    def __init__(self, depth: int = 10, density_quantile: float = 0.05):
        self.depth = depth
        self.density_quantile = density_quantile

    def reconstruct_mesh(self, candidate: PlaneCandidate) -> TriangleMesh:
        import open3d as o3d

        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(candidate.cloud.points)
        normals = np.zeros_like(candidate.cloud.points)
        normals[:, 2] = 1.0
        pcd.normals = o3d.utility.Vector3dVector(normals)

        mesh, densities = o3d.geometry.TriangleMesh.create_from_point_cloud_poisson(
            pcd, depth=self.depth
        )
        densities = np.asarray(densities)
        if len(densities) and self.density_quantile > 0:
            mesh.remove_vertices_by_mask(densities < np.quantile(densities, self.density_quantile))

        result = TriangleMesh(
            vertices=np.asarray(mesh.vertices).copy(),
            triangles=np.asarray(mesh.triangles).astype(np.int64),
        )
        logger.debug(
            f"Plane {candidate.id}: Poisson depth {self.depth} -> "
            f"{len(result.vertices)} vertices, {len(result.triangles)} triangles"
        )
        return result
