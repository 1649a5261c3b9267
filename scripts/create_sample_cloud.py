"""Create a synthetic room point cloud (floor + two walls + clutter) for pipeline testing.

Usage:
    python scripts/create_sample_cloud.py                 # data/raw/points.txt
    python scripts/create_sample_cloud.py out.txt 0.005   # custom path, noise sigma
"""

import sys
from pathlib import Path

import numpy as np

from slabfit.utils.io import write_points_txt


def create_room(n_per_surface: int = 2000, noise: float = 0.003, n_clutter: int = 500, seed: int = 0):
    """Return (positions, normals) for a 4 x 3 x 2.5 corner of a room."""
    rng = np.random.default_rng(seed)

    floor = np.column_stack([
        rng.uniform(0, 4, n_per_surface),
        rng.uniform(0, 3, n_per_surface),
        rng.normal(0, noise, n_per_surface),
    ])
    wall_x = np.column_stack([
        rng.normal(0, noise, n_per_surface),
        rng.uniform(0, 3, n_per_surface),
        rng.uniform(0, 2.5, n_per_surface),
    ])
    wall_y = np.column_stack([
        rng.uniform(0, 4, n_per_surface),
        rng.normal(3, noise, n_per_surface),
        rng.uniform(0, 2.5, n_per_surface),
    ])
    clutter = rng.uniform([0.2, 0.2, 0.2], [3.8, 2.8, 2.3], (n_clutter, 3))

    positions = np.vstack([floor, wall_x, wall_y, clutter])
    normals = np.vstack([
        np.tile([0.0, 0.0, 1.0], (n_per_surface, 1)),
        np.tile([1.0, 0.0, 0.0], (n_per_surface, 1)),
        np.tile([0.0, -1.0, 0.0], (n_per_surface, 1)),
        np.zeros((n_clutter, 3)),
    ])
    return positions, normals


if __name__ == "__main__":
    output = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("data/raw/points.txt")
    noise = float(sys.argv[2]) if len(sys.argv) > 2 else 0.003
    positions, normals = create_room(noise=noise)
    write_points_txt(output, positions, normals)
    print(f"Created {output}: {len(positions)} points")
