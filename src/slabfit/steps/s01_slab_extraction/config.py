"""Configuration for Step 01: RANSAC slab extraction."""

from typing import Optional

from pydantic import BaseModel, Field


class SlabExtractionConfig(BaseModel):
    num_planes: int = Field(10, ge=0, description="Maximum number of slabs to extract")
    num_iters: int = Field(1000, ge=0, description="RANSAC trials per slab")
    slab_thickness: float = Field(0.02, ge=0, description="Full slab thickness (scene units)")
    min_inliers: int = Field(100, ge=0, description="A slab needs strictly more inliers than this")
    seed: Optional[int] = Field(None, description="RNG seed (None = non-deterministic)")
    leaf_size: int = Field(16, ge=1, description="k-d tree leaf size")
    save_residual: bool = Field(True, description="Write unclaimed points to residual.txt")
