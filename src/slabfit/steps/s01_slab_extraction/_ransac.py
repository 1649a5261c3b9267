"""RANSAC slab search: single-plane estimator and greedy multi-plane extraction.

Single plane (``estimate_slab``):
1. Collect ids of enabled points; none -> empty result.
2. Build one k-d tree over them, reused for every trial.
3. Per trial: draw 3 ids uniformly with replacement, fit a plane, skip the
   trial if the sample is degenerate, range-query the slab.
4. Keep the candidate iff count > min_inliers and count > best so far
   (first found wins ties).

Degenerate samples consume a trial; there is no retry.

Multiple planes (``extract_slabs``): repeat the single-plane search over the
points not yet claimed, disabling each accepted slab's inliers, until
``num_planes`` slabs are found or a round finds nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from slabfit.utils.geometry import Plane, Slab
from ._kdtree import SlabKDTree

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class PlaneSearchResult:
    """Outcome of one RANSAC round."""

    count: int = 0
    slab: Slab | None = None
    inliers: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.int64))

    @property
    def found(self) -> bool:
        return self.slab is not None


def _as_generator(rng) -> np.random.Generator:
    """Accept a Generator (anything with .integers), a seed, or None (fresh OS entropy)."""
    if hasattr(rng, "integers"):
        return rng
    return np.random.default_rng(rng)


def estimate_slab(
    positions: np.ndarray,
    num_iters: int,
    thickness: float,
    min_inliers: int,
    enabled: np.ndarray | None = None,
    rng=None,
    leaf_size: int = 16,
) -> PlaneSearchResult:
    """Find the best-supported slab among the enabled points.

    Args:
        positions: (N, 3) point positions.
        num_iters: Number of RANSAC trials; <= 0 performs no search.
        thickness: Full slab thickness; inliers lie within thickness / 2.
        min_inliers: A candidate needs strictly more inliers than this.
        enabled: Optional (N,) bool mask of points eligible for this search.
            Read only; the caller owns it.
        rng: numpy Generator, integer seed, or None.
        leaf_size: k-d tree leaf size.

    Returns:
        PlaneSearchResult with count 0 and slab None when nothing qualified.
    """
    if thickness < 0:
        raise ValueError(f"Slab thickness must be >= 0, got {thickness}")

    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    if enabled is None:
        ids = np.arange(len(positions), dtype=np.int64)
    else:
        enabled = np.asarray(enabled, dtype=bool)
        if enabled.shape != (len(positions),):
            raise ValueError(
                f"Enabled mask shape {enabled.shape} does not match {len(positions)} points"
            )
        ids = np.flatnonzero(enabled)

    best = PlaneSearchResult()
    if len(ids) == 0 or num_iters <= 0:
        return best

    tree = SlabKDTree(positions, ids, leaf_size=leaf_size)
    gen = _as_generator(rng)

    num_degenerate = 0
    for trial in range(num_iters):
        sample = ids[gen.integers(0, len(ids), size=3)]
        plane = Plane.from_three_points(*positions[sample])
        if plane is None:
            num_degenerate += 1
            continue

        candidate = Slab(plane, thickness)
        inliers = tree.range_query(candidate)
        count = len(inliers)
        if count > min_inliers and count > best.count:
            candidate.update_corners(positions[inliers])
            best = PlaneSearchResult(count=count, slab=candidate, inliers=inliers)
            logger.debug(f"Trial {trial}: new best slab with {count} inliers")

    if num_degenerate:
        logger.debug(f"Skipped {num_degenerate}/{num_iters} degenerate samples")
    return best


def extract_slabs(
    positions: np.ndarray,
    num_planes: int,
    num_iters: int,
    thickness: float,
    min_inliers: int,
    rng=None,
    leaf_size: int = 16,
) -> list[PlaneSearchResult]:
    """Greedily extract up to *num_planes* slabs with disjoint inlier sets.

    The enabled mask is local to this call: every point starts enabled and
    each accepted slab disables its inliers for all later rounds. Stops early
    when a round finds no qualifying slab.
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
    gen = _as_generator(rng)
    enabled = np.ones(len(positions), dtype=bool)

    results: list[PlaneSearchResult] = []
    for round_idx in range(num_planes):
        result = estimate_slab(
            positions, num_iters, thickness, min_inliers,
            enabled=enabled, rng=gen, leaf_size=leaf_size,
        )
        if result.count <= 0:
            logger.info(f"Round {round_idx}: no slab above {min_inliers} inliers, stopping")
            break

        results.append(result)
        enabled[result.inliers] = False
        logger.info(
            f"Slab {round_idx}: {result.count} inliers, "
            f"normal={result.slab.plane.normal.round(3)}, "
            f"{int(enabled.sum())} points remaining"
        )

    return results


def slab_labels(num_points: int, results: list[PlaneSearchResult]) -> np.ndarray:
    """Per-point slab index in discovery order, -1 for unclaimed points."""
    labels = np.full(num_points, -1, dtype=np.int64)
    for slab_id, result in enumerate(results):
        labels[result.inliers] = slab_id
    return labels
