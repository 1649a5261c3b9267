"""I/O contracts for Step 00: Load point cloud."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class LoadPointsInput(BaseModel):
    source_path: Path = Field(..., description="Text 'x y z [nx ny nz]' file or PLY file")


class LoadPointsOutput(BaseModel):
    points_path: Path = Field(..., description="Path to points.npz (positions, normals)")
    metadata_path: Path = Field(..., description="Path to metadata.json")
    num_points: int = Field(..., description="Number of loaded points")
    has_normals: bool = Field(False, description="True if any normal is non-zero")
    bbox_min: Optional[list[float]] = Field(None, description="Bounding box low corner (None if empty)")
    bbox_max: Optional[list[float]] = Field(None, description="Bounding box high corner (None if empty)")
