"""Shared pytest fixtures for slabfit tests."""

from pathlib import Path

import numpy as np
import pytest


@pytest.fixture
def data_root(tmp_path: Path) -> Path:
    """Create a temporary data root with standard directory structure."""
    for subdir in ["raw", "interim/s00_load_points", "interim/s01_slabs"]:
        (tmp_path / subdir).mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture
def floor_with_outliers() -> np.ndarray:
    """100 points exactly on z=0 followed by 10 points well above it."""
    rng = np.random.default_rng(0)
    floor = np.column_stack([
        rng.uniform(0, 1, 100),
        rng.uniform(0, 1, 100),
        np.zeros(100),
    ])
    outliers = np.column_stack([
        rng.uniform(0, 1, 10),
        rng.uniform(0, 1, 10),
        rng.uniform(0.5, 2.0, 10),
    ])
    return np.vstack([floor, outliers])


@pytest.fixture
def two_planes() -> np.ndarray:
    """60 points on z=0 (indices 0..59) then 40 points on x=2 (indices 60..99)."""
    rng = np.random.default_rng(1)
    floor = np.column_stack([
        rng.uniform(0, 1, 60),
        rng.uniform(0, 1, 60),
        np.zeros(60),
    ])
    wall = np.column_stack([
        np.full(40, 2.0),
        rng.uniform(0, 1, 40),
        rng.uniform(0.5, 1.5, 40),
    ])
    return np.vstack([floor, wall])


@pytest.fixture
def two_planes_txt(data_root: Path, two_planes: np.ndarray) -> Path:
    """two_planes written in the 'x y z nx ny nz' text format."""
    normals = np.vstack([
        np.tile([0.0, 0.0, 1.0], (60, 1)),
        np.tile([1.0, 0.0, 0.0], (40, 1)),
    ])
    path = data_root / "raw" / "points.txt"
    with open(path, "w") as f:
        for p, n in zip(two_planes, normals):
            f.write(" ".join(repr(float(v)) for v in (*p, *n)) + "\n")
    return path
