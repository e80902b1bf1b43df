"""
Tests for greedy multi-object initialization
"""

import numpy as np
import pytest

from tracking import (
    DiagnosticLog,
    EventKind,
    Initializer,
    MarkerTemplateStore,
    PointPool,
    TrackingSettings
)
from utils.geometry_utils import transform_points

from conftest import SQUARE_5CM, place


@pytest.fixture
def diagnostics():
    return DiagnosticLog()


@pytest.fixture
def make_initializer(square_5cm, profile, two_objects, diagnostics):
    def _make(objects=None):
        store = MarkerTemplateStore([square_5cm], [profile])
        return Initializer(store, objects or two_objects, diagnostics, TrackingSettings())
    return _make


class TestPointPool:

    def test_claim_removes_points(self):
        pool = PointPool(SQUARE_5CM)
        pool.claim(np.array([3, 1]))

        assert len(pool) == 2
        assert pool.live_indices().tolist() == [0, 2]
        assert np.array_equal(pool.live_points(), SQUARE_5CM[[0, 2]])

    def test_double_claim_rejected(self):
        pool = PointPool(SQUARE_5CM)
        pool.claim(np.array([0]))

        with pytest.raises(ValueError):
            pool.claim(np.array([0, 1]))


class TestInitializer:

    def test_acceptance_radius(self, make_initializer):
        assert make_initializer().max_deviation == pytest.approx(1.0 / 3)

    def test_two_squares_initialize(self, make_initializer, two_objects, two_squares_cloud, diagnostics):
        initializer = make_initializer()

        assert initializer.initialize(two_squares_cloud)
        assert initializer.attempts == 1
        assert diagnostics.events == []

        cf1, cf2 = two_objects
        assert np.allclose(cf1.center, [0.0, 0.0, 0.0], atol=1e-9)
        assert np.allclose(cf2.center, [1.0, 0.0, 0.0], atol=1e-9)
        for obj in two_objects:
            assert obj.fitness_score < 1e-12
            assert np.array_equal(obj.velocity, np.zeros(3))

        # cf2's points come first in the cloud
        assert initializer.claimed_indices == {'cf1': (4, 5, 6, 7), 'cf2': (0, 1, 2, 3)}

    def test_claims_are_disjoint(self, make_initializer, two_squares_cloud):
        initializer = make_initializer()
        initializer.initialize(two_squares_cloud)

        claims = [set(c) for c in initializer.claimed_indices.values()]
        assert len(claims) == 2
        assert claims[0].isdisjoint(claims[1])

    def test_missing_object_leaves_it_unfit(self, make_initializer, two_objects, diagnostics):
        initializer = make_initializer()
        cloud = place(SQUARE_5CM, 0.0)

        assert not initializer.initialize(cloud)

        cf1, cf2 = two_objects
        assert set(initializer.claimed_indices) == {'cf1'}
        assert np.allclose(cf1.center, [0.0, 0.0, 0.0], atol=1e-9)
        assert np.array_equal(cf2.transformation, cf2.initial_transformation)

        kinds = [(e.object_name, e.kind) for e in diagnostics.events]
        assert kinds == [('cf2', EventKind.AMBIGUOUS_PLACEMENT)]

    def test_markers_of_neighbour_not_stolen(self, make_initializer, two_objects, diagnostics):
        initializer = make_initializer()
        # only cf2 is visible; cf1 is fit first and must not take cf2's markers
        cloud = place(SQUARE_5CM, 1.0)

        assert not initializer.initialize(cloud)

        assert set(initializer.claimed_indices) == {'cf2'}
        event = diagnostics.events[0]
        assert event.object_name == 'cf1'
        assert event.kind == EventKind.AMBIGUOUS_PLACEMENT
        assert event.measured == pytest.approx(1.0)
        assert event.bound == pytest.approx(1.0 / 3)

    def test_poor_fit_rejected(self, make_initializer, two_objects, diagnostics):
        initializer = make_initializer()
        bent = place(SQUARE_5CM, 0.0)
        bent[0, 2] += 0.04
        cloud = np.vstack([bent, place(SQUARE_5CM, 1.0)])

        assert not initializer.initialize(cloud)

        assert set(initializer.claimed_indices) == {'cf2'}
        poor = [e for e in diagnostics.events if e.kind == EventKind.POOR_FIT]
        assert poor and all(e.object_name == 'cf1' for e in poor)
        assert all(e.measured > 0.005 for e in poor)

    def test_yawed_object(self, make_initializer, two_objects):
        initializer = make_initializer()
        cloud = np.vstack([place(SQUARE_5CM, 0.0, yaw=0.3), place(SQUARE_5CM, 1.0)])

        assert initializer.initialize(cloud)

        # the square is four-fold symmetric, so compare marker positions
        cf1 = two_objects[0]
        fitted = transform_points(cf1.transformation, SQUARE_5CM)
        for point in cloud[:4]:
            assert np.min(np.linalg.norm(fitted - point, axis=1)) < 1e-6

    def test_retry_refits_all_objects(self, make_initializer, two_objects, two_squares_cloud):
        initializer = make_initializer()

        assert not initializer.initialize(place(SQUARE_5CM, 0.0))
        assert initializer.initialize(two_squares_cloud)

        assert initializer.attempts == 2
        assert set(initializer.claimed_indices) == {'cf1', 'cf2'}
