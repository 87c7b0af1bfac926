"""Pydantic models shared across pipeline steps."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class StepMeta(BaseModel):
    """Timing and parameters recorded next to a step's outputs."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str
    depends_on: list[str] = Field(default_factory=list)
    enabled: bool = True


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "hope_project"
    data_root: Path = Path("./data")
    steps: list[StepEntry] = Field(default_factory=list)
    # Fields merged into the first enabled step's input (e.g. the source PLY)
    initial_input: dict[str, Any] = Field(default_factory=dict)
