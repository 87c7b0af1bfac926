"""Step 02: Reconstruct a triangle mesh for every accepted plane patch."""

from __future__ import annotations

import logging
from typing import ClassVar

import numpy as np

from hope.core.capabilities import MeshReconstructor
from hope.core.step_base import BaseStep
from hope.steps.s01_plane_segmentation._results import PlaneCandidate
from hope.steps.s01_plane_segmentation.contracts import DetectedPlane
from hope.utils.io import read_json, read_ply, write_json
from ._reconstruction import DelaunayMeshReconstructor, PoissonMeshReconstructor, write_mesh_ply
from .config import MeshExportConfig
from .contracts import MeshExportInput, MeshExportOutput, PlaneMesh

logger = logging.getLogger(__name__)


def make_reconstructor(config: MeshExportConfig) -> MeshReconstructor:
    if config.method == "poisson":
        return PoissonMeshReconstructor(
            depth=config.poisson_depth, density_quantile=config.density_quantile
        )
    return DelaunayMeshReconstructor(max_edge_length=config.max_edge_length)


def load_candidates(
    inputs: MeshExportInput, max_plane_only: bool = False
) -> list[PlaneCandidate]:
    """Rebuild PlaneCandidates from planes.json and the patch PLYs."""
    candidates = []
    for raw in read_json(inputs.planes_file):
        plane = DetectedPlane(**raw)
        if max_plane_only and not plane.is_max:
            continue
        if plane.patch_file is None:
            logger.warning(f"Plane {plane.id} has no patch file, skipped")
            continue
        cloud = read_ply(inputs.patches_dir / plane.patch_file)
        candidates.append(
            PlaneCandidate(
                id=plane.id,
                height=plane.height,
                coefficients=tuple(plane.coefficients),
                cluster=np.empty(0, dtype=np.int64),
                cloud=cloud,
                dz=plane.dz,
                dxy_max=plane.dxy_max,
            )
        )
    return candidates


class MeshExportStep(BaseStep[MeshExportInput, MeshExportOutput, MeshExportConfig]):
    name: ClassVar[str] = "mesh_export"
    input_type: ClassVar = MeshExportInput
    output_type: ClassVar = MeshExportOutput
    config_type: ClassVar = MeshExportConfig

    def validate_inputs(self, inputs: MeshExportInput) -> bool:
        if not inputs.planes_file.exists():
            logger.error(f"planes.json not found: {inputs.planes_file}")
            return False
        if not inputs.patches_dir.is_dir():
            logger.error(f"Patch directory not found: {inputs.patches_dir}")
            return False
        return True

    def run(self, inputs: MeshExportInput) -> MeshExportOutput:
        meshes_dir = self.data_root / "interim" / "s02_meshes"
        meshes_dir.mkdir(parents=True, exist_ok=True)

        candidates = load_candidates(inputs, self.config.max_plane_only)

        reconstructor = make_reconstructor(self.config)
        entries: list[PlaneMesh] = []
        for candidate in candidates:
            mesh = reconstructor.reconstruct_mesh(candidate)
            if mesh.is_empty:
                logger.warning(f"Plane {candidate.id}: empty mesh, not written")
                continue
            name = f"plane_{candidate.id:03d}_mesh.ply"
            write_mesh_ply(meshes_dir / name, mesh)
            entries.append(
                PlaneMesh(
                    plane_id=candidate.id,
                    height=candidate.height,
                    mesh_file=name,
                    num_vertices=len(mesh.vertices),
                    num_triangles=len(mesh.triangles),
                    area=mesh.area,
                )
            )
            logger.info(
                f"Plane {candidate.id}: {len(mesh.triangles)} triangles, "
                f"area {mesh.area:.3f} m^2 ({self.config.method})"
            )

        meshes_file = write_json(
            meshes_dir / "meshes.json", [e.model_dump() for e in entries]
        )
        return MeshExportOutput(
            meshes_dir=meshes_dir,
            meshes_file=meshes_file,
            num_meshes=len(entries),
        )
