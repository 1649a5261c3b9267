"""Plane and slab geometry: three-point plane fit, slab classification, display corners."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

# Relative tolerance on |e1 x e2| / (|e1| |e2|) below which a triplet is collinear
_COLLINEAR_EPS = 1e-12


@dataclass(frozen=True, eq=False)
class Plane:
    """Plane n . x + d = 0 with unit normal n."""

    normal: np.ndarray
    d: float

    @classmethod
    def from_normal_and_point(cls, normal, point) -> Plane:
        n = np.asarray(normal, dtype=np.float64)
        length = np.linalg.norm(n)
        if length == 0.0:
            raise ValueError("Plane normal must be non-zero")
        n = n / length
        return cls(normal=n, d=float(-np.dot(n, np.asarray(point, dtype=np.float64))))

    @classmethod
    def from_three_points(cls, a, b, c) -> Plane | None:
        """Plane through three points, or None if they are collinear or coincident.

        A None result flags a degenerate sample; RANSAC callers skip it.
        """
        a = np.asarray(a, dtype=np.float64)
        e1 = np.asarray(b, dtype=np.float64) - a
        e2 = np.asarray(c, dtype=np.float64) - a
        cross = np.cross(e1, e2)
        cross_len = np.linalg.norm(cross)
        scale = np.linalg.norm(e1) * np.linalg.norm(e2)
        if scale == 0.0 or cross_len <= _COLLINEAR_EPS * scale:
            return None
        n = cross / cross_len
        return cls(normal=n, d=float(-np.dot(n, a)))

    def signed_distance(self, points) -> np.ndarray:
        """Signed distance of (N, 3) points (or a single point) to the plane."""
        return np.asarray(points, dtype=np.float64) @ self.normal + self.d

    def to_dict(self) -> dict:
        return {"normal": self.normal.tolist(), "d": self.d}


def plane_basis(normal: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Orthonormal (u, v) spanning the plane with the given unit normal."""
    n = normal / np.linalg.norm(normal)
    ref = np.array([1.0, 0.0, 0.0])
    if abs(np.dot(n, ref)) > 0.9:
        ref = np.array([0.0, 1.0, 0.0])
    u = np.cross(n, ref)
    u /= np.linalg.norm(u)
    v = np.cross(n, u)
    return u, v


def compute_corners(plane: Plane, points: np.ndarray) -> np.ndarray | None:
    """Four 3D corners of the in-plane bounding rectangle of *points*.

    Points are projected into a local 2D frame on the plane and bounded with
    Shapely's minimum rotated rectangle. When the projection has no area
    (fewer than 3 distinct points, or all collinear) the axis-aligned in-plane
    bounds are used, which may be a degenerate rectangle.

    Returns:
        (4, 3) array of corners in order around the rectangle, or None if
        *points* is empty.
    """
    from shapely.geometry import MultiPoint

    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if len(points) == 0:
        return None

    u, v = plane_basis(plane.normal)
    origin = -plane.d * plane.normal
    local = points - origin
    coords_2d = np.column_stack([local @ u, local @ v])

    rect = MultiPoint(coords_2d.tolist()).minimum_rotated_rectangle
    if rect.geom_type == "Polygon" and not rect.is_empty and rect.area > 0:
        ring = np.asarray(rect.exterior.coords)[:4]
    else:
        lo = coords_2d.min(axis=0)
        hi = coords_2d.max(axis=0)
        ring = np.array([
            [lo[0], lo[1]],
            [hi[0], lo[1]],
            [hi[0], hi[1]],
            [lo[0], hi[1]],
        ])

    return origin + ring[:, 0:1] * u + ring[:, 1:2] * v


@dataclass(eq=False)
class Slab:
    """A plane thickened symmetrically by *thickness*.

    A point is an inlier iff its perpendicular distance to the plane is at
    most thickness / 2. ``corners`` is display-only and never used for
    classification.
    """

    plane: Plane
    thickness: float
    corners: np.ndarray | None = None

    def __post_init__(self) -> None:
        if self.thickness < 0:
            raise ValueError(f"Slab thickness must be >= 0, got {self.thickness}")
        self.thickness = float(self.thickness)

    @property
    def half_thickness(self) -> float:
        return 0.5 * self.thickness

    def contains(self, points: np.ndarray) -> np.ndarray:
        """Boolean inlier mask for (N, 3) points."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        return np.abs(self.plane.signed_distance(points)) <= self.half_thickness

    def classify(self, point) -> bool:
        """True if a single point lies inside the slab."""
        return bool(self.contains(np.asarray(point, dtype=np.float64).reshape(1, 3))[0])

    def update_corners(self, points: np.ndarray) -> None:
        self.corners = compute_corners(self.plane, points)

    def to_dict(self) -> dict:
        return {
            **self.plane.to_dict(),
            "thickness": self.thickness,
            "corners": self.corners.tolist() if self.corners is not None else None,
        }
