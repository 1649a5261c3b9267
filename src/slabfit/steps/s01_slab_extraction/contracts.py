"""I/O contracts for Step 01: RANSAC slab extraction."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class SlabExtractionInput(BaseModel):
    points_path: Path = Field(..., description="Path to points.npz from load_points")


class DetectedSlab(BaseModel):
    id: int
    normal: list[float] = Field(..., min_length=3, max_length=3)
    d: float
    thickness: float
    num_inliers: int
    corners: list[list[float]] = Field(default_factory=list, description="Display rectangle [[x,y,z],...]")


class SlabExtractionOutput(BaseModel):
    slabs_file: Path = Field(..., description="Path to slabs.json")
    labels_file: Path = Field(..., description="Path to labels.npy (slab id per point, -1 = none)")
    residual_path: Optional[Path] = Field(None, description="Path to residual.txt (unclaimed points)")
    num_slabs: int = Field(..., description="Number of slabs found")
    num_assigned: int = Field(0, description="Points claimed by some slab")
