"""Configuration for Step 00: Import a sensor point cloud."""

from typing import Annotated

from pydantic import BaseModel, Field, model_validator

Vec3 = Annotated[list[float], Field(min_length=3, max_length=3)]
Quaternion = Annotated[list[float], Field(min_length=4, max_length=4)]


class ImportCloudConfig(BaseModel):
    frame_id: str = Field("base_link", description="Frame the output cloud is expressed in")

    # Sensor-range pre-filter, applied on the sensor's z (depth) before any transform
    filter_depth: bool = Field(False, description="Keep only points with min_depth <= z <= max_depth")
    min_depth: float = Field(0.3, ge=0, description="Nearest reliable depth (meters)")
    max_depth: float = Field(8.0, gt=0, description="Farthest reliable depth (meters)")

    # Sensor -> base frame transform
    translation: Vec3 | None = Field(None, description="Sensor origin in the base frame [tx, ty, tz]")
    rotation_xyzw: Quaternion | None = Field(
        None, description="Sensor orientation quaternion [qx, qy, qz, qw]"
    )
    roll: float | None = Field(None, description="Sensor roll (radians), alternative to a quaternion")
    pitch: float | None = Field(None, description="Sensor pitch (radians), alternative to a quaternion")

    @model_validator(mode="after")
    def _check(self) -> "ImportCloudConfig":
        if self.min_depth >= self.max_depth:
            raise ValueError(f"min_depth ({self.min_depth}) must be < max_depth ({self.max_depth})")
        if self.rotation_xyzw is not None and (self.roll is not None or self.pitch is not None):
            raise ValueError("Give either rotation_xyzw or roll/pitch, not both")
        return self
