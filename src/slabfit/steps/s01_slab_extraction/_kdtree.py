"""k-d tree over point indices with slab range queries.

The tree never copies point payloads. It keeps a read-only view of the
caller's (N, 3) position array plus a permutation of the indexed point ids,
so every node owns a contiguous slice ``order[start:end]``. Positions must
not be modified while the tree is alive.

Range query against a slab (plane n . x + d = 0, half-width h):
1. A node's bounding box projects onto the normal as an interval of radius
   r = 0.5 * sum(|n_i| * extent_i) around the box center.
2. |dist(center)| - r > h  -> box lies outside the slab, prune.
3. |dist(center)| + r <= h -> box lies inside, take the whole slice.
4. Otherwise descend; leaves contribute all their ids as candidates.
Candidates are finally filtered with ``Slab.contains`` so the result is
exactly the inlier set regardless of rounding in steps 2-3.
"""

from __future__ import annotations

import logging

import numpy as np

from slabfit.utils.geometry import Slab

logger = logging.getLogger(__name__)

# Relative slack on the prune test; pruning must never drop a true inlier
_PRUNE_EPS = 1e-9


class SlabKDTree:
    """Balanced k-d tree (median split on the widest axis) over point ids."""

    def __init__(self, positions: np.ndarray, ids: np.ndarray | None = None, leaf_size: int = 16):
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        view = positions.view()
        view.flags.writeable = False
        self._positions = view
        self._leaf_size = max(1, int(leaf_size))

        if ids is None:
            self._order = np.arange(len(positions), dtype=np.int64)
        else:
            self._order = np.unique(np.asarray(ids, dtype=np.int64))

        lo: list[np.ndarray] = []
        hi: list[np.ndarray] = []
        bounds: list[tuple[int, int]] = []
        children: list[list[int]] = []
        self._nodes = (lo, hi, bounds, children)
        if len(self._order):
            self._build(0, len(self._order))

        self._lo = np.array(lo).reshape(-1, 3)
        self._hi = np.array(hi).reshape(-1, 3)
        self._bounds = np.array(bounds, dtype=np.int64).reshape(-1, 2)
        self._children = np.array(children, dtype=np.int64).reshape(-1, 2)
        del self._nodes

        logger.debug(f"Built k-d tree: {len(self._order)} points, {len(self._lo)} nodes")

    def __len__(self) -> int:
        return len(self._order)

    @property
    def ids(self) -> np.ndarray:
        """Indexed point ids in tree order."""
        return self._order

    def _build(self, start: int, end: int) -> int:
        lo, hi, bounds, children = self._nodes
        idx = self._order[start:end]
        pts = self._positions[idx]
        box_lo = pts.min(axis=0)
        box_hi = pts.max(axis=0)

        node = len(lo)
        lo.append(box_lo)
        hi.append(box_hi)
        bounds.append((start, end))
        children.append([-1, -1])

        if end - start <= self._leaf_size:
            return node
        axis = int(np.argmax(box_hi - box_lo))
        if box_hi[axis] <= box_lo[axis]:
            # All points coincide
            return node

        mid = (start + end) // 2
        part = np.argpartition(pts[:, axis], mid - start)
        self._order[start:end] = idx[part]
        left = self._build(start, mid)
        right = self._build(mid, end)
        children[node] = [left, right]
        return node

    def range_query(self, slab: Slab) -> np.ndarray:
        """Ids of all indexed points inside *slab*, sorted ascending."""
        if len(self._order) == 0:
            return np.empty(0, dtype=np.int64)

        normal = slab.plane.normal
        abs_normal = np.abs(normal)
        d = slab.plane.d
        half = slab.half_thickness

        chunks: list[np.ndarray] = []
        stack = [0]
        while stack:
            node = stack.pop()
            box_lo = self._lo[node]
            box_hi = self._hi[node]
            center = 0.5 * (box_lo + box_hi)
            radius = 0.5 * float(abs_normal @ (box_hi - box_lo))
            dist = abs(float(normal @ center) + d)

            if dist - radius > half + _PRUNE_EPS * (1.0 + dist + radius):
                continue

            start, end = self._bounds[node]
            left, right = self._children[node]
            if left < 0 or dist + radius <= half:
                chunks.append(self._order[start:end])
            else:
                stack.append(right)
                stack.append(left)

        if not chunks:
            return np.empty(0, dtype=np.int64)
        candidates = np.concatenate(chunks)
        inside = slab.contains(self._positions[candidates])
        return np.sort(candidates[inside])
