"""Configuration for Step 02: Mesh export of accepted planes."""

from typing import Literal

from pydantic import BaseModel, Field


class MeshExportConfig(BaseModel):
    method: Literal["delaunay", "poisson"] = Field(
        "delaunay", description="Reconstruction method: 2D Delaunay or Open3D Poisson"
    )
    max_edge_length: float = Field(
        0.15, gt=0, description="Delaunay: drop triangles with a longer edge (meters)"
    )
    poisson_depth: int = Field(10, ge=1, le=16, description="Poisson: octree depth")
    density_quantile: float = Field(
        0.05, ge=0, lt=1, description="Poisson: trim vertices below this density quantile"
    )
    max_plane_only: bool = Field(False, description="Only mesh the largest plane")
