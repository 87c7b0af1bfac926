"""I/O contracts for Step 02: Mesh export of accepted planes."""

from pathlib import Path

from pydantic import BaseModel, Field


class MeshExportInput(BaseModel):
    planes_file: Path = Field(..., description="Path to planes.json from plane segmentation")
    patches_dir: Path = Field(..., description="Directory with the colorized patch PLYs")


class PlaneMesh(BaseModel):
    plane_id: int
    height: float
    mesh_file: str
    num_vertices: int
    num_triangles: int
    area: float


class MeshExportOutput(BaseModel):
    meshes_dir: Path = Field(..., description="Directory with plane_XXX_mesh.ply files")
    meshes_file: Path = Field(..., description="Path to meshes.json")
    num_meshes: int = Field(..., description="Non-empty meshes written")
