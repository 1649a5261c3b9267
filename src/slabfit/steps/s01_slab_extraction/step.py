"""Step 01: Greedy RANSAC slab extraction over a loaded point cloud."""

from __future__ import annotations

import json
import logging
import time
from typing import ClassVar

import numpy as np

from slabfit.core.contracts import StepMeta
from slabfit.core.step_base import BaseStep
from slabfit.utils.point_cloud import PointCloud
from ._ransac import PlaneSearchResult, extract_slabs, slab_labels
from .config import SlabExtractionConfig
from .contracts import DetectedSlab, SlabExtractionInput, SlabExtractionOutput

logger = logging.getLogger(__name__)


def _to_detected(slab_id: int, result: PlaneSearchResult) -> DetectedSlab:
    slab = result.slab
    return DetectedSlab(
        id=slab_id,
        normal=slab.plane.normal.tolist(),
        d=slab.plane.d,
        thickness=slab.thickness,
        num_inliers=result.count,
        corners=slab.corners.tolist() if slab.corners is not None else [],
    )


class SlabExtractionStep(
    BaseStep[SlabExtractionInput, SlabExtractionOutput, SlabExtractionConfig]
):
    name: ClassVar[str] = "slab_extraction"
    input_type: ClassVar = SlabExtractionInput
    output_type: ClassVar = SlabExtractionOutput
    config_type: ClassVar = SlabExtractionConfig

    def validate_inputs(self, inputs: SlabExtractionInput) -> bool:
        if not inputs.points_path.exists():
            logger.error(f"Points file not found: {inputs.points_path}")
            return False
        return True

    def run(self, inputs: SlabExtractionInput) -> SlabExtractionOutput:
        output_dir = self.data_root / "interim" / "s01_slabs"
        output_dir.mkdir(parents=True, exist_ok=True)

        cloud = PointCloud.from_npz(inputs.points_path)
        cfg = self.config

        t0 = time.time()
        results = extract_slabs(
            cloud.positions,
            num_planes=cfg.num_planes,
            num_iters=cfg.num_iters,
            thickness=cfg.slab_thickness,
            min_inliers=cfg.min_inliers,
            rng=cfg.seed,
            leaf_size=cfg.leaf_size,
        )
        elapsed = time.time() - t0

        slabs = [_to_detected(i, r) for i, r in enumerate(results)]
        labels = slab_labels(len(cloud), results)
        num_assigned = int(np.count_nonzero(labels >= 0))

        meta = StepMeta(step_name=self.step_name, elapsed_seconds=elapsed, params=cfg.model_dump())
        slabs_file = output_dir / "slabs.json"
        with open(slabs_file, "w") as f:
            json.dump(
                {"meta": meta.model_dump(), "slabs": [s.model_dump() for s in slabs]},
                f, indent=2,
            )

        labels_file = output_dir / "labels.npy"
        np.save(str(labels_file), labels)

        residual_path = None
        if cfg.save_residual:
            residual_path = output_dir / "residual.txt"
            cloud.subset(labels < 0).save(residual_path)

        logger.info(
            f"Extracted {len(slabs)} slabs covering {num_assigned}/{len(cloud)} points"
        )

        return SlabExtractionOutput(
            slabs_file=slabs_file,
            labels_file=labels_file,
            residual_path=residual_path,
            num_slabs=len(slabs),
            num_assigned=num_assigned,
        )
