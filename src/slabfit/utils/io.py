"""I/O utilities: plain-text point files and PLY point reader."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)


# ── Plain-text points ────────────────────────────────────────────────
#
# One point per line, either
#   x y z
# or
#   x y z nx ny nz
# Blank lines are skipped. A missing or partial normal reads as zero.

def read_points_txt(path: Path, skip_invalid: bool = False) -> tuple[np.ndarray, np.ndarray]:
    """Read positions and normals from a plain-text point file.

    Args:
        path: Text file to read.
        skip_invalid: Log and skip lines without a readable position instead
            of raising.

    Returns:
        ((N, 3) positions, (N, 3) normals), both float64.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Point file not found: {path}")

    positions: list[list[float]] = []
    normals: list[list[float]] = []
    with open(path, encoding="utf-8") as f:
        for line_no, raw in enumerate(f, 1):
            line = raw.strip()
            if not line:
                continue

            fields = line.split()
            try:
                if len(fields) < 3:
                    raise ValueError("expected at least 3 values")
                p = [float(v) for v in fields[:3]]
            except ValueError:
                msg = f"Could not read point {len(positions)} from line {line_no}: {line!r}"
                if skip_invalid:
                    logger.warning(msg)
                    continue
                raise ValueError(msg) from None

            try:
                n = [float(v) for v in fields[3:6]]
            except ValueError:
                n = []
            if len(n) != 3:
                n = [0.0, 0.0, 0.0]

            positions.append(p)
            normals.append(n)

    if not positions:
        return np.zeros((0, 3)), np.zeros((0, 3))
    return np.array(positions, dtype=np.float64), np.array(normals, dtype=np.float64)


def write_points_txt(path: Path, positions: np.ndarray, normals: np.ndarray | None = None) -> None:
    """Write positions and normals as 'x y z nx ny nz' lines."""
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    if normals is None:
        normals = np.zeros_like(positions)
    normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
    if len(positions) != len(normals):
        raise ValueError(f"Number of positions ({len(positions)}) != number of normals ({len(normals)})")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for p, n in zip(positions, normals):
            f.write(" ".join(repr(float(v)) for v in (*p, *n)) + "\n")


# ── PLY I/O ──────────────────────────────────────────────────────────

def read_ply_points(path: Path) -> tuple[np.ndarray, np.ndarray]:
    """Read positions and optional nx/ny/nz normals from a PLY vertex element."""
    from plyfile import PlyData

    plydata = PlyData.read(str(path))
    vertex = plydata["vertex"]
    prop_names = {p.name for p in vertex.properties}

    xyz = np.column_stack([
        vertex["x"].astype(np.float64),
        vertex["y"].astype(np.float64),
        vertex["z"].astype(np.float64),
    ])
    if {"nx", "ny", "nz"}.issubset(prop_names):
        normals = np.column_stack([
            vertex["nx"].astype(np.float64),
            vertex["ny"].astype(np.float64),
            vertex["nz"].astype(np.float64),
        ])
    else:
        normals = np.zeros_like(xyz)

    logger.info(f"Loaded {len(xyz)} points from {Path(path).name}")
    return xyz.reshape(-1, 3), normals.reshape(-1, 3)
