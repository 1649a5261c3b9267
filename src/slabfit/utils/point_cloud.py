"""Point store: positions, normals and their bounding box."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from .io import read_ply_points, read_points_txt, write_points_txt

logger = logging.getLogger(__name__)


class PointCloud:
    """Positions and normals of an unorganized point cloud.

    Point identity is the row index and is stable for the lifetime of the
    cloud. Searches hold integer indices into ``positions``, so the arrays
    must not be reordered or resized while a search runs.
    """

    def __init__(self, positions, normals=None):
        self.positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        if normals is None:
            self.normals = np.zeros_like(self.positions)
        else:
            self.normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
        if len(self.positions) != len(self.normals):
            raise ValueError(
                f"Number of positions ({len(self.positions)}) != "
                f"number of normals ({len(self.normals)})"
            )
        self.bbox_min: np.ndarray | None = None
        self.bbox_max: np.ndarray | None = None
        self.recompute_bbox()

    def __len__(self) -> int:
        return len(self.positions)

    def recompute_bbox(self) -> None:
        """Axis-aligned bounding box of the positions; None when empty."""
        if len(self.positions) == 0:
            self.bbox_min = self.bbox_max = None
            return
        self.bbox_min = self.positions.min(axis=0)
        self.bbox_max = self.positions.max(axis=0)

    @property
    def has_normals(self) -> bool:
        return bool(np.any(self.normals))

    def subset(self, selector) -> PointCloud:
        """New cloud holding the points picked by a boolean mask or index array."""
        return PointCloud(self.positions[selector], self.normals[selector])

    # ── persistence ──────────────────────────────────────────────────

    @classmethod
    def load(cls, path: Path, skip_invalid: bool = False) -> PointCloud:
        """Load a PLY file or a plain-text 'x y z [nx ny nz]' file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Point file not found: {path}")
        if path.suffix.lower() == ".ply":
            positions, normals = read_ply_points(path)
        else:
            positions, normals = read_points_txt(path, skip_invalid=skip_invalid)
            logger.info(f"Loaded {len(positions)} points from {path.name}")
        return cls(positions, normals)

    def save(self, path: Path) -> None:
        write_points_txt(path, self.positions, self.normals)
        logger.info(f"Saved {len(self)} points -> {path}")

    @classmethod
    def from_npz(cls, path: Path) -> PointCloud:
        with np.load(str(path)) as data:
            return cls(data["positions"], data["normals"])

    def to_npz(self, path: Path) -> None:
        np.savez(str(path), positions=self.positions, normals=self.normals)
