"""Tests for the RANSAC single-plane estimator and multi-plane extractor."""

import numpy as np
import pytest

from slabfit.steps.s01_slab_extraction._ransac import (
    PlaneSearchResult, estimate_slab, extract_slabs, slab_labels,
)


class ScriptedRng:
    """Stand-in generator that returns pre-set sample triplets in order."""

    def __init__(self, triplets):
        self._triplets = iter(triplets)
        self.calls = 0

    def integers(self, low, high, size=None):
        self.calls += 1
        return np.array(next(self._triplets))


class TestEstimateSlab:
    def test_floor_with_outliers(self, floor_with_outliers: np.ndarray):
        result = estimate_slab(
            floor_with_outliers, num_iters=200, thickness=0.01, min_inliers=50, rng=0,
        )
        assert result.found
        assert result.count == 100
        np.testing.assert_array_equal(result.inliers, np.arange(100))
        assert abs(result.slab.plane.normal[2]) == pytest.approx(1.0)
        assert result.slab.corners.shape == (4, 3)

    def test_zero_iterations(self, floor_with_outliers: np.ndarray):
        result = estimate_slab(floor_with_outliers, num_iters=0, thickness=0.01, min_inliers=0)
        assert result.count == 0
        assert result.slab is None
        assert result.inliers.size == 0

    def test_negative_iterations(self, floor_with_outliers: np.ndarray):
        result = estimate_slab(floor_with_outliers, num_iters=-5, thickness=0.01, min_inliers=0)
        assert not result.found

    def test_no_points(self):
        result = estimate_slab(np.zeros((0, 3)), num_iters=10, thickness=0.01, min_inliers=0)
        assert result.count == 0 and result.slab is None

    def test_all_disabled(self, floor_with_outliers: np.ndarray):
        enabled = np.zeros(len(floor_with_outliers), dtype=bool)
        result = estimate_slab(
            floor_with_outliers, 50, 0.01, 0, enabled=enabled, rng=1,
        )
        assert result.count == 0

    def test_enabled_mask_restricts_inliers(self, two_planes: np.ndarray):
        enabled = np.zeros(len(two_planes), dtype=bool)
        enabled[60:] = True
        result = estimate_slab(two_planes, 100, 0.01, 10, enabled=enabled, rng=2)
        assert result.count == 40
        np.testing.assert_array_equal(result.inliers, np.arange(60, 100))
        assert abs(result.slab.plane.normal[0]) == pytest.approx(1.0)

    def test_enabled_mask_shape_checked(self, two_planes: np.ndarray):
        with pytest.raises(ValueError):
            estimate_slab(two_planes, 10, 0.01, 0, enabled=np.ones(3, dtype=bool))

    def test_negative_thickness(self, two_planes: np.ndarray):
        with pytest.raises(ValueError):
            estimate_slab(two_planes, 10, -0.01, 0)

    def test_collinear_cloud_finds_nothing(self):
        pts = np.column_stack([np.linspace(0, 1, 50), np.zeros(50), np.zeros(50)])
        result = estimate_slab(pts, num_iters=100, thickness=0.01, min_inliers=0, rng=3)
        assert not result.found

    def test_degenerate_sample_consumes_iteration(self, two_planes: np.ndarray):
        rng = ScriptedRng([[0, 0, 0], [0, 1, 2]])
        result = estimate_slab(two_planes, 1, 0.01, 0, rng=rng)
        assert not result.found
        assert rng.calls == 1

        rng = ScriptedRng([[0, 0, 0], [0, 1, 2]])
        result = estimate_slab(two_planes, 2, 0.01, 0, rng=rng)
        assert result.count == 60
        assert rng.calls == 2

    def test_count_must_exceed_min_inliers(self, two_planes: np.ndarray):
        result = estimate_slab(two_planes, 1, 0.01, 60, rng=ScriptedRng([[0, 1, 2]]))
        assert not result.found
        result = estimate_slab(two_planes, 1, 0.01, 59, rng=ScriptedRng([[0, 1, 2]]))
        assert result.count == 60

    def test_first_found_wins_ties(self):
        rng = np.random.default_rng(5)
        floor = np.column_stack([rng.uniform(0, 1, 30), rng.uniform(0, 1, 30), np.zeros(30)])
        wall = np.column_stack([np.full(30, 2.0), rng.uniform(0, 1, 30), rng.uniform(0.5, 1.5, 30)])
        pts = np.vstack([floor, wall])

        result = estimate_slab(pts, 2, 0.01, 0, rng=ScriptedRng([[0, 1, 2], [30, 31, 32]]))
        np.testing.assert_array_equal(result.inliers, np.arange(30))

        result = estimate_slab(pts, 2, 0.01, 0, rng=ScriptedRng([[30, 31, 32], [0, 1, 2]]))
        np.testing.assert_array_equal(result.inliers, np.arange(30, 60))

    def test_seed_is_reproducible(self, floor_with_outliers: np.ndarray):
        noisy = floor_with_outliers + np.random.default_rng(11).normal(0, 0.003, floor_with_outliers.shape)
        a = estimate_slab(noisy, 30, 0.01, 5, rng=123)
        b = estimate_slab(noisy, 30, 0.01, 5, rng=123)
        assert a.count == b.count
        np.testing.assert_array_equal(a.inliers, b.inliers)
        np.testing.assert_allclose(a.slab.plane.normal, b.slab.plane.normal)


class TestExtractSlabs:
    def test_two_planes_largest_first(self, two_planes: np.ndarray):
        results = extract_slabs(two_planes, 2, 200, 0.01, 20, rng=0)
        assert [r.count for r in results] == [60, 40]
        np.testing.assert_array_equal(results[0].inliers, np.arange(60))
        np.testing.assert_array_equal(results[1].inliers, np.arange(60, 100))

    def test_stops_early_when_nothing_left(self, two_planes: np.ndarray):
        results = extract_slabs(two_planes, 5, 200, 0.01, 20, rng=0)
        assert len(results) == 2

    def test_stops_when_support_too_small(self, two_planes: np.ndarray):
        results = extract_slabs(two_planes, 5, 200, 0.01, 45, rng=0)
        assert [r.count for r in results] == [60]

    def test_at_most_num_planes(self, two_planes: np.ndarray):
        assert len(extract_slabs(two_planes, 1, 200, 0.01, 20, rng=0)) == 1
        assert extract_slabs(two_planes, 0, 200, 0.01, 20, rng=0) == []

    def test_empty_cloud(self):
        assert extract_slabs(np.zeros((0, 3)), 3, 100, 0.01, 0) == []

    def test_inlier_sets_disjoint(self):
        rng = np.random.default_rng(21)
        pts = rng.uniform(-1, 1, (400, 3))
        results = extract_slabs(pts, 6, 100, 0.2, 10, rng=4)
        assert results
        seen: set[int] = set()
        for r in results:
            ids = set(r.inliers.tolist())
            assert len(ids) == r.count
            assert not ids & seen
            assert ids <= set(range(len(pts)))
            seen |= ids

    def test_extraction_is_repeatable_on_same_cloud(self, two_planes: np.ndarray):
        first = extract_slabs(two_planes, 2, 200, 0.01, 20, rng=0)
        second = extract_slabs(two_planes, 2, 200, 0.01, 20, rng=0)
        assert [r.count for r in first] == [r.count for r in second] == [60, 40]


class TestSlabLabels:
    def test_labels(self):
        results = [
            PlaneSearchResult(count=2, inliers=np.array([0, 3])),
            PlaneSearchResult(count=1, inliers=np.array([1])),
        ]
        np.testing.assert_array_equal(slab_labels(5, results), [0, 1, -1, 0, -1])

    def test_no_results(self):
        np.testing.assert_array_equal(slab_labels(3, []), [-1, -1, -1])
