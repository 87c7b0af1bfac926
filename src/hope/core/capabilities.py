"""Capability interfaces for downstream consumers of accepted plane patches.

Rendering and mesh reconstruction live outside the segmentation core; they
only need to satisfy these protocols.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from hope.steps.s01_plane_segmentation._results import PlaneCandidate


@runtime_checkable
class PlaneRenderer(Protocol):
    def render(self, candidate: PlaneCandidate) -> Path | None:
        """Draw one accepted patch. Returns the written file, if any."""
        ...


@runtime_checkable
class MeshReconstructor(Protocol):
    def reconstruct_mesh(self, candidate: PlaneCandidate) -> Any:
        """Build a surface mesh (vertices + triangles) from one accepted patch."""
        ...
