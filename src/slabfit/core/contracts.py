"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class StepMeta(BaseModel):
    """Metadata attached to step outputs for reproducibility."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "slabfit_project"
    data_root: Path = Path("./data")
    steps: list[StepEntry] = Field(default_factory=list)


class StepEntry(BaseModel):
    """One entry in the pipeline step list."""

    name: str
    module: str
    config_file: str
    depends_on: list[str] = Field(default_factory=list)
    inputs: dict[str, Any] = Field(
        default_factory=dict, description="Literal input fields, applied after dependency outputs"
    )
    enabled: bool = True


# Fix forward reference
PipelineConfig.model_rebuild()
