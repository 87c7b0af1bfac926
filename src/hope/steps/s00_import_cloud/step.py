"""Step 00: Import a raw sensor cloud, pre-filter it and move it to the base frame."""

from __future__ import annotations

import logging
from typing import ClassVar

import numpy as np

from hope.core.cloud import PointCloud
from hope.core.step_base import BaseStep
from hope.utils.geometry import make_transform, roll_pitch_transform, transform_points
from hope.utils.io import read_ply, write_json, write_ply
from .config import ImportCloudConfig
from .contracts import ImportCloudInput, ImportCloudOutput

logger = logging.getLogger(__name__)


def _finite_indices(cloud: PointCloud) -> np.ndarray:
    return np.flatnonzero(np.isfinite(cloud.points).all(axis=1))


def _depth_indices(cloud: PointCloud, min_depth: float, max_depth: float) -> np.ndarray:
    """Indices of points whose sensor z lies within [min_depth, max_depth]."""
    z = cloud.points[:, 2]
    return np.flatnonzero((z >= min_depth) & (z <= max_depth))


def _sensor_transform(config: ImportCloudConfig) -> np.ndarray | None:
    """4x4 sensor -> base transform from the config, or None when none is set."""
    if config.rotation_xyzw is not None or config.translation is not None:
        return make_transform(
            config.translation or [0.0, 0.0, 0.0],
            config.rotation_xyzw or [0.0, 0.0, 0.0, 1.0],
        )
    if config.roll is not None or config.pitch is not None:
        return roll_pitch_transform(config.roll or 0.0, config.pitch or 0.0)
    return None


class ImportCloudStep(BaseStep[ImportCloudInput, ImportCloudOutput, ImportCloudConfig]):
    """Load a sensor PLY and produce ``cloud.ply`` ready for plane segmentation."""

    name: ClassVar[str] = "import_cloud"
    input_type: ClassVar = ImportCloudInput
    output_type: ClassVar = ImportCloudOutput
    config_type: ClassVar = ImportCloudConfig

    def validate_inputs(self, inputs: ImportCloudInput) -> bool:
        if not inputs.ply_path.exists():
            logger.error(f"PLY file not found: {inputs.ply_path}")
            return False
        if inputs.ply_path.suffix.lower() != ".ply":
            logger.error(f"Expected .ply file, got: {inputs.ply_path.suffix}")
            return False
        return True

    def run(self, inputs: ImportCloudInput) -> ImportCloudOutput:
        output_dir = self.data_root / "interim" / "s00_import_cloud"
        output_dir.mkdir(parents=True, exist_ok=True)

        cloud = read_ply(inputs.ply_path, frame_id=self.config.frame_id)
        num_raw = len(cloud)

        # --- 1. Drop NaN / inf points ---
        cloud = cloud.select(_finite_indices(cloud))
        if len(cloud) < num_raw:
            logger.info(f"Removed {num_raw - len(cloud)} non-finite points")

        # --- 2. Depth range filter (sensor frame) ---
        if self.config.filter_depth:
            before = len(cloud)
            cloud = cloud.select(
                _depth_indices(cloud, self.config.min_depth, self.config.max_depth)
            )
            logger.info(
                f"Depth filter [{self.config.min_depth}, {self.config.max_depth}]: "
                f"{before} -> {len(cloud)} points"
            )

        # --- 3. Sensor -> base frame ---
        T = _sensor_transform(self.config)
        if T is not None:
            cloud.points = transform_points(cloud.points, T)
            if cloud.normals is not None:
                cloud.normals = cloud.normals @ T[:3, :3].T
            logger.info(f"Transformed cloud into '{self.config.frame_id}'")

        if cloud.is_empty:
            logger.warning("No points left after import; downstream steps will find no planes")

        # --- 4. Save outputs ---
        cloud_path = write_ply(output_dir / "cloud.ply", cloud)
        logger.info(f"Saved {len(cloud)} points -> {cloud_path}")

        metadata = {
            "source": str(inputs.ply_path),
            "num_raw_points": num_raw,
            "num_points": len(cloud),
            "frame_id": self.config.frame_id,
            "depth_filter": (
                [self.config.min_depth, self.config.max_depth] if self.config.filter_depth else None
            ),
            "transform": T.tolist() if T is not None else None,
        }
        metadata_path = write_json(output_dir / "metadata.json", metadata)

        return ImportCloudOutput(
            cloud_path=cloud_path,
            metadata_path=metadata_path,
            num_points=len(cloud),
        )
