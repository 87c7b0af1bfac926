"""I/O contracts for Step 00: Import a sensor point cloud."""

from pathlib import Path

from pydantic import BaseModel, Field


class ImportCloudInput(BaseModel):
    ply_path: Path = Field(..., description="Path to the raw sensor point cloud (.ply)")


class ImportCloudOutput(BaseModel):
    cloud_path: Path = Field(..., description="Path to cloud.ply in the base frame")
    metadata_path: Path = Field(..., description="Path to metadata.json")
    num_points: int = Field(..., description="Number of points in the output cloud")
