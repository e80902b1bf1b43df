"""
Tests for pose and point-set geometry helpers
"""

import numpy as np
import pytest

from utils.geometry_utils import (
    estimate_rigid_transform,
    matrix_to_quaternion,
    quaternion_to_matrix,
    min_pairwise_distance,
    point_set_rank,
    pose_from_euler,
    transform_points,
    translate,
    translation_and_euler,
    wrap_angle
)

from conftest import ASYMMETRIC_4, SQUARE_5CM


class TestPoses:

    def test_euler_decomposition(self):
        T = pose_from_euler(0.1, -0.2, 0.3, roll=0.05, pitch=-0.1, yaw=1.2)
        x, y, z, roll, pitch, yaw = translation_and_euler(T)

        assert (x, y, z) == pytest.approx((0.1, -0.2, 0.3))
        assert (roll, pitch, yaw) == pytest.approx((0.05, -0.1, 1.2))

    def test_yaw_rotates_about_z(self):
        T = pose_from_euler(0.0, 0.0, 0.0, yaw=np.pi / 2)
        moved = transform_points(T, np.array([[1.0, 0.0, 0.0]]))

        assert np.allclose(moved, [[0.0, 1.0, 0.0]])

    def test_translate_keeps_rotation(self):
        T = pose_from_euler(1.0, 2.0, 3.0, yaw=0.4)
        moved = translate(T, np.array([0.5, 0.0, -1.0]))

        assert np.allclose(moved[:3, 3], [1.5, 2.0, 2.0])
        assert np.array_equal(moved[:3, :3], T[:3, :3])
        assert np.allclose(T[:3, 3], [1.0, 2.0, 3.0])

    def test_identity_quaternion(self):
        assert np.allclose(matrix_to_quaternion(np.eye(3)), [1.0, 0.0, 0.0, 0.0])

    def test_quaternion_matches_pose(self):
        T = pose_from_euler(0.0, 0.0, 0.0, roll=0.2, yaw=-0.9)
        q = matrix_to_quaternion(T[:3, :3])

        assert np.allclose(quaternion_to_matrix(q), T[:3, :3])


class TestRigidTransform:

    def test_recovers_known_transform(self):
        T_true = pose_from_euler(0.3, -0.1, 0.05, roll=0.1, pitch=0.2, yaw=-0.7)
        target = transform_points(T_true, ASYMMETRIC_4)

        T = estimate_rigid_transform(ASYMMETRIC_4, target)

        assert np.allclose(T, T_true, atol=1e-9)

    def test_identical_sets_give_identity(self):
        T = estimate_rigid_transform(SQUARE_5CM, SQUARE_5CM)

        assert np.allclose(T, np.eye(4), atol=1e-12)


class TestScalars:

    def test_wrap_angle(self):
        assert wrap_angle(3 * np.pi / 2) == pytest.approx(-np.pi / 2)
        assert wrap_angle(-3 * np.pi / 2) == pytest.approx(np.pi / 2)
        assert wrap_angle(0.25) == pytest.approx(0.25)

    def test_min_pairwise_distance(self):
        points = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.5, 0.0]])

        assert min_pairwise_distance(points) == pytest.approx(0.5)
        assert min_pairwise_distance(points[:1]) == np.inf

    def test_point_set_rank(self):
        assert point_set_rank(np.zeros((1, 3))) == 0
        assert point_set_rank(np.array([[0.0, 0.0, 0.0], [0.1, 0.0, 0.0], [0.3, 0.0, 0.0]])) == 1
        assert point_set_rank(SQUARE_5CM) == 2
        assert point_set_rank(ASYMMETRIC_4) == 3
