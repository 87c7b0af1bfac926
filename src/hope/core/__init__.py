"""HOPE core: point cloud container, pipeline runner, base step, shared contracts."""

from .capabilities import MeshReconstructor, PlaneRenderer
from .cloud import PointCloud
from .contracts import PipelineConfig, StepEntry, StepMeta
from .logging import setup_logging
from .pipeline_runner import load_pipeline_config, run_pipeline
from .step_base import BaseStep

__all__ = [
    "BaseStep",
    "MeshReconstructor",
    "PipelineConfig",
    "PlaneRenderer",
    "PointCloud",
    "StepEntry",
    "StepMeta",
    "run_pipeline",
    "load_pipeline_config",
    "setup_logging",
]
