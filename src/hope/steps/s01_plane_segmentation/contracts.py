"""I/O contracts for Step 01: Horizontal plane segmentation."""

from pathlib import Path

from pydantic import BaseModel, Field


class PlaneSegmentationInput(BaseModel):
    cloud_path: Path = Field(..., description="Path to cloud.ply in the base frame")


class DetectedPlane(BaseModel):
    id: int = Field(..., description="Position in discovery order")
    cluster_id: int = Field(..., description="Source cluster index")
    height: float = Field(..., description="Representative (mean) z of the patch")
    coefficients: list[float] = Field(..., min_length=4, max_length=4, description="[a, b, c, d]")
    num_points: int
    dz: float = Field(..., description="Raw height span of the cluster")
    dxy_max: float = Field(..., description="Extent along the dominant principal axis")
    bounds_xy: list[float] = Field(..., min_length=4, max_length=4, description="[x_min, y_min, x_max, y_max]")
    is_max: bool = Field(False, description="Largest accepted plane of the run")
    patch_file: str | None = Field(None, description="Colorized patch PLY, relative to patches_dir")


class PlaneSegmentationOutput(BaseModel):
    planes_file: Path = Field(..., description="Path to planes.json")
    patches_dir: Path = Field(..., description="Directory holding one PLY per plane")
    num_planes: int = Field(..., description="Accepted planes")
    num_clusters: int = Field(0, description="Clusters produced by region growing")
    max_plane_id: int | None = Field(None, description="id of the largest plane")
