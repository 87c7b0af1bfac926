"""Step 01: Horizontal plane segmentation of a base-frame point cloud."""

from __future__ import annotations

import logging
from typing import ClassVar

from hope.core.step_base import BaseStep
from hope.utils.io import read_ply, write_json, write_ply
from ._results import ResultSet
from ._segmenter import PlaneSegmenter
from .config import PlaneSegmentationConfig, SegmentationConfig
from .contracts import DetectedPlane, PlaneSegmentationInput, PlaneSegmentationOutput

logger = logging.getLogger(__name__)


def _summarize(results: ResultSet, patch_names: dict[int, str]) -> list[DetectedPlane]:
    planes = []
    for idx, plane in enumerate(results):
        planes.append(
            DetectedPlane(
                id=idx,
                cluster_id=plane.id,
                height=plane.height,
                coefficients=list(plane.coefficients),
                num_points=plane.num_points,
                dz=plane.dz,
                dxy_max=plane.dxy_max,
                bounds_xy=list(plane.bounds_xy),
                is_max=idx == results.max_plane_index,
                patch_file=patch_names.get(idx),
            )
        )
    return planes


class PlaneSegmentationStep(
    BaseStep[PlaneSegmentationInput, PlaneSegmentationOutput, PlaneSegmentationConfig]
):
    name: ClassVar[str] = "plane_segmentation"
    input_type: ClassVar = PlaneSegmentationInput
    output_type: ClassVar = PlaneSegmentationOutput
    config_type: ClassVar = PlaneSegmentationConfig

    def validate_inputs(self, inputs: PlaneSegmentationInput) -> bool:
        if not inputs.cloud_path.exists():
            logger.error(f"Cloud file not found: {inputs.cloud_path}")
            return False
        return True

    def run(self, inputs: PlaneSegmentationInput) -> PlaneSegmentationOutput:
        output_dir = self.data_root / "interim" / "s01_planes"
        patches_dir = output_dir / "patches"
        patches_dir.mkdir(parents=True, exist_ok=True)
        # Patches from a previous run must not outlive it
        for stale in patches_dir.glob("*.ply"):
            stale.unlink()

        cloud = read_ply(inputs.cloud_path)
        seg_config = SegmentationConfig(
            **self.config.model_dump(include=set(SegmentationConfig.model_fields))
        )
        logger.info(
            f"Segmenting with xy={seg_config.xy_resolution}, z={seg_config.z_resolution} "
            f"(th_theta={seg_config.th_theta:.3f}, th_norm={seg_config.th_norm:.3f})"
        )

        segmenter = PlaneSegmenter(seg_config)
        results = segmenter.find_all_planes(cloud)

        # --- Save colorized patches ---
        patch_names: dict[int, str] = {}
        if self.config.save_patches:
            for idx, plane in enumerate(results):
                name = f"plane_{idx:03d}.ply"
                write_ply(patches_dir / name, plane.cloud)
                patch_names[idx] = name
            if results.max_plane is not None:
                write_ply(patches_dir / "max_plane.ply", results.max_plane.cloud)

        planes = _summarize(results, patch_names)
        for p in planes:
            logger.info(
                f"Plane {p.id}: z={p.height:.3f}, {p.num_points} points"
                f"{' (max)' if p.is_max else ''}"
            )

        planes_file = write_json(
            output_dir / "planes.json", [p.model_dump() for p in planes]
        )
        write_json(
            output_dir / "segmentation_config.json", seg_config.model_dump(mode="json")
        )

        return PlaneSegmentationOutput(
            planes_file=planes_file,
            patches_dir=patches_dir,
            num_planes=len(planes),
            num_clusters=len(segmenter.clusters),
            max_plane_id=results.max_plane_index,
        )
