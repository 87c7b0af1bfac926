"""Configuration for Step 01: Horizontal plane segmentation."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

# Normal search radius relative to the xy resolution
NORMAL_RADIUS_FACTOR = 1.01


class SegmentationConfig(BaseModel):
    """Immutable parameters of one segmentation run.

    The thresholds ``th_theta``, ``th_norm`` and ``th_area`` are derived from
    the two resolutions on access, so a copy with new resolutions always
    carries matching thresholds.
    """

    model_config = ConfigDict(frozen=True)

    xy_resolution: float = Field(0.05, gt=0, description="Voxel size in x/y (meters)")
    z_resolution: float = Field(0.02, gt=0, description="Voxel size in z (meters)")
    min_cluster_size: int = Field(20, ge=1, description="Smallest cluster kept by region growing")
    max_cluster_size: int = Field(
        307200, ge=1, description="Cluster growth cap (640x480 image by default)"
    )
    neighbor_count: int = Field(8, ge=1, description="k nearest neighbors used while growing")

    @model_validator(mode="after")
    def _check_cluster_bounds(self) -> SegmentationConfig:
        if self.max_cluster_size < self.min_cluster_size:
            raise ValueError(
                f"max_cluster_size ({self.max_cluster_size}) must be >= "
                f"min_cluster_size ({self.min_cluster_size})"
            )
        return self

    @computed_field
    @property
    def th_theta(self) -> float:
        """Tolerated height change per unit of horizontal distance."""
        return self.z_resolution / self.xy_resolution

    @computed_field
    @property
    def th_norm(self) -> float:
        """Minimum |n_z| for a normal to count as vertical."""
        return math.sqrt(1.0 / (1.0 + self.th_theta / 1.414))

    @computed_field
    @property
    def th_area(self) -> float:
        return self.xy_resolution ** 2

    @property
    def normal_radius(self) -> float:
        return NORMAL_RADIUS_FACTOR * self.xy_resolution


class PlaneSegmentationConfig(SegmentationConfig):
    save_patches: bool = Field(True, description="Write one colorized PLY per accepted plane")
