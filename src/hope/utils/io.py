"""I/O utilities: PLY point cloud reader/writer, plane summaries as JSON."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import numpy as np

from hope.core.cloud import PointCloud

logger = logging.getLogger(__name__)

_COLOR_PROPS = ("red", "green", "blue")
_NORMAL_PROPS = ("nx", "ny", "nz")


def read_ply(ply_path: Path, frame_id: str = "base_link") -> PointCloud:
    """Load the ``vertex`` element of a PLY file into a PointCloud.

    Colors (red/green/blue) and normals (nx/ny/nz) are read when present.
    """
    from plyfile import PlyData

    plydata = PlyData.read(str(ply_path))
    if "vertex" not in plydata:
        raise RuntimeError(f"PLY file has no vertex element: {ply_path}")
    vertex = plydata["vertex"]
    prop_names = {p.name for p in vertex.properties}

    points = np.column_stack([
        vertex["x"].astype(np.float64),
        vertex["y"].astype(np.float64),
        vertex["z"].astype(np.float64),
    ]) if len(vertex.data) else np.empty((0, 3))

    colors = None
    if set(_COLOR_PROPS).issubset(prop_names) and len(vertex.data):
        raw = np.column_stack([vertex[c] for c in _COLOR_PROPS])
        if np.issubdtype(raw.dtype, np.floating):
            raw = np.rint(np.clip(raw, 0.0, 1.0) * 255.0)
        colors = raw.astype(np.uint8)

    normals = None
    if set(_NORMAL_PROPS).issubset(prop_names) and len(vertex.data):
        normals = np.column_stack([vertex[c].astype(np.float64) for c in _NORMAL_PROPS])

    logger.info(f"Loaded {len(points)} points from {Path(ply_path).name}")
    return PointCloud(
        points=points,
        colors=colors,
        normals=normals,
        width=len(points),
        height=1,
        is_dense=bool(np.isfinite(points).all()),
        frame_id=frame_id,
    )


def write_ply(ply_path: Path, cloud: PointCloud, binary: bool = True) -> Path:
    """Write a PointCloud (positions, optional colors and normals) to PLY."""
    from plyfile import PlyData, PlyElement

    dtype_fields = [("x", "f4"), ("y", "f4"), ("z", "f4")]
    if cloud.normals is not None:
        dtype_fields += [(c, "f4") for c in _NORMAL_PROPS]
    if cloud.colors is not None:
        dtype_fields += [(c, "u1") for c in _COLOR_PROPS]

    vertex_data = np.empty(len(cloud), dtype=dtype_fields)
    vertex_data["x"] = cloud.points[:, 0]
    vertex_data["y"] = cloud.points[:, 1]
    vertex_data["z"] = cloud.points[:, 2]
    if cloud.normals is not None:
        for i, c in enumerate(_NORMAL_PROPS):
            vertex_data[c] = cloud.normals[:, i]
    if cloud.colors is not None:
        for i, c in enumerate(_COLOR_PROPS):
            vertex_data[c] = cloud.colors[:, i]

    ply_path = Path(ply_path)
    ply_path.parent.mkdir(parents=True, exist_ok=True)
    el = PlyElement.describe(vertex_data, "vertex")
    PlyData([el], text=not binary).write(str(ply_path))
    return ply_path


def write_json(path: Path, data: Any) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return path


def read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)
