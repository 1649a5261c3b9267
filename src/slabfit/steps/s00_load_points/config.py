"""Configuration for Step 00: Load point cloud."""

from pydantic import BaseModel, Field


class LoadPointsConfig(BaseModel):
    skip_invalid_lines: bool = Field(
        False, description="Skip unreadable lines in text point files instead of failing"
    )
