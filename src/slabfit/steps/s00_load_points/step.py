"""Step 00: Load a text or PLY point cloud into a points.npz snapshot."""

from __future__ import annotations

import json
import logging
from typing import ClassVar

from slabfit.core.step_base import BaseStep
from slabfit.utils.point_cloud import PointCloud
from .config import LoadPointsConfig
from .contracts import LoadPointsInput, LoadPointsOutput

logger = logging.getLogger(__name__)


class LoadPointsStep(BaseStep[LoadPointsInput, LoadPointsOutput, LoadPointsConfig]):
    """Load a point file and write positions/normals + bounding box metadata."""

    name: ClassVar[str] = "load_points"
    input_type: ClassVar = LoadPointsInput
    output_type: ClassVar = LoadPointsOutput
    config_type: ClassVar = LoadPointsConfig

    def validate_inputs(self, inputs: LoadPointsInput) -> bool:
        if not inputs.source_path.exists():
            logger.error(f"Point file not found: {inputs.source_path}")
            return False
        return True

    def run(self, inputs: LoadPointsInput) -> LoadPointsOutput:
        output_dir = self.data_root / "interim" / "s00_load_points"
        output_dir.mkdir(parents=True, exist_ok=True)

        cloud = PointCloud.load(inputs.source_path, skip_invalid=self.config.skip_invalid_lines)
        if len(cloud) == 0:
            logger.warning(f"No points in {inputs.source_path}")

        points_path = output_dir / "points.npz"
        cloud.to_npz(points_path)
        logger.info(f"Saved {len(cloud)} points -> {points_path}")

        bbox_min = cloud.bbox_min.tolist() if cloud.bbox_min is not None else None
        bbox_max = cloud.bbox_max.tolist() if cloud.bbox_max is not None else None

        metadata = {
            "source": str(inputs.source_path),
            "num_points": len(cloud),
            "has_normals": cloud.has_normals,
            "bbox_min": bbox_min,
            "bbox_max": bbox_max,
        }
        metadata_path = output_dir / "metadata.json"
        with open(metadata_path, "w") as f:
            json.dump(metadata, f, indent=2)

        return LoadPointsOutput(
            points_path=points_path,
            metadata_path=metadata_path,
            num_points=len(cloud),
            has_normals=cloud.has_normals,
            bbox_min=bbox_min,
            bbox_max=bbox_max,
        )
