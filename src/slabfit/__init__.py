"""slabfit: RANSAC slab fitting for unorganized 3D point clouds."""

__version__ = "0.1.0"
