"""
Shared fixtures for tracker tests
"""

import numpy as np
import pytest

from tracking import DynamicsProfile, MarkerTemplate, TrackedObject
from utils.geometry_utils import pose_from_euler, transform_points

# 5 cm square, centred on the body origin
SQUARE_5CM = np.array([
    [0.025, 0.025, 0.0],
    [-0.025, 0.025, 0.0],
    [-0.025, -0.025, 0.0],
    [0.025, -0.025, 0.0],
])

# 25 cm square; coordinates are exact binary fractions
SQUARE_25CM = np.array([
    [0.125, 0.125, 0.0],
    [-0.125, 0.125, 0.0],
    [-0.125, -0.125, 0.0],
    [0.125, -0.125, 0.0],
])

# asymmetric 4-marker layout
ASYMMETRIC_4 = np.array([
    [0.0177184, 0.0139654, 0.0557585],
    [-0.0262914, 0.0509139, 0.0402475],
    [-0.0328889, -0.02757, 0.0390601],
    [0.0431307, -0.0331216, 0.0388839],
])


def make_profile(**overrides) -> DynamicsProfile:
    bounds = dict(
        max_x_velocity=1.0,
        max_y_velocity=1.0,
        max_z_velocity=1.0,
        max_roll_rate=10.0,
        max_pitch_rate=10.0,
        max_yaw_rate=10.0,
        max_roll=1.0,
        max_pitch=1.0,
        max_fitness_score=1e-6,
    )
    bounds.update(overrides)
    return DynamicsProfile(**bounds)


def place(points: np.ndarray, x: float, y: float = 0.0, z: float = 0.0, yaw: float = 0.0) -> np.ndarray:
    """Template points placed at a pose"""
    return transform_points(pose_from_euler(x, y, z, yaw=yaw), points)


@pytest.fixture
def profile():
    return make_profile()


@pytest.fixture
def square_5cm():
    return MarkerTemplate("square_5cm", SQUARE_5CM)


@pytest.fixture
def square_25cm():
    return MarkerTemplate("square_25cm", SQUARE_25CM)


@pytest.fixture
def two_objects():
    """Two objects sharing template 0 and profile 0, nominal centres 1 m apart"""
    return [
        TrackedObject("cf1", 0, 0, pose_from_euler(0.0, 0.0, 0.0)),
        TrackedObject("cf2", 0, 0, pose_from_euler(1.0, 0.0, 0.0)),
    ]


@pytest.fixture
def two_squares_cloud():
    """Both 5 cm squares at their nominal positions, cf2's points first"""
    return np.vstack([place(SQUARE_5CM, 1.0), place(SQUARE_5CM, 0.0)])
