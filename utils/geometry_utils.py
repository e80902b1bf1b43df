#!/usr/bin/env python3
"""
Geometry utilities for rigid-body pose tracking

Poses are 4x4 homogeneous matrices (float64). Euler angles follow the
roll/pitch/yaw convention: extrinsic rotations about x, y, z in that order.
"""

import numpy as np
from typing import Tuple
from scipy.spatial.distance import pdist
from scipy.spatial.transform import Rotation


def as_points(points) -> np.ndarray:
    """Coerce any point-like input to a float64 [N, 3] array"""
    return np.asarray(points, dtype=np.float64).reshape(-1, 3)


def make_transform(
    rotation: np.ndarray,
    translation: np.ndarray
) -> np.ndarray:
    """
    Build a homogeneous transform

    Args:
        rotation: [3, 3] rotation matrix
        translation: [3] translation vector

    Returns:
        T: [4, 4] transform
    """
    T = np.eye(4)
    T[:3, :3] = rotation
    T[:3, 3] = translation
    return T


def pose_from_euler(
    x: float,
    y: float,
    z: float,
    roll: float = 0.0,
    pitch: float = 0.0,
    yaw: float = 0.0
) -> np.ndarray:
    """Build a transform from translation and roll/pitch/yaw (radians)"""
    R = Rotation.from_euler('xyz', [roll, pitch, yaw]).as_matrix()
    return make_transform(R, [x, y, z])


def translation_and_euler(T: np.ndarray) -> Tuple[float, float, float, float, float, float]:
    """
    Decompose a transform into translation and Euler angles

    Args:
        T: [4, 4] transform

    Returns:
        (x, y, z, roll, pitch, yaw)
    """
    roll, pitch, yaw = Rotation.from_matrix(T[:3, :3]).as_euler('xyz')
    x, y, z = T[:3, 3]
    return float(x), float(y), float(z), float(roll), float(pitch), float(yaw)


def translate(T: np.ndarray, delta: np.ndarray) -> np.ndarray:
    """Pre-compose a pure translation: returns Translation(delta) * T"""
    out = T.copy()
    out[:3, 3] += delta
    return out


def transform_points(T: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    Apply a transform to points

    Args:
        T: [4, 4] transform
        points: [N, 3] point coordinates

    Returns:
        transformed: [N, 3] point coordinates
    """
    return points @ T[:3, :3].T + T[:3, 3]


def estimate_rigid_transform(
    source: np.ndarray,
    target: np.ndarray
) -> np.ndarray:
    """
    Least-squares rigid transform mapping source points onto target points

    Args:
        source: [N, 3] source points
        target: [N, 3] corresponding target points

    Returns:
        T: [4, 4] transform with T * source ~= target
    """
    source_center = source.mean(axis=0)
    target_center = target.mean(axis=0)

    rot, _ = Rotation.align_vectors(target - target_center, source - source_center)
    R = rot.as_matrix()

    return make_transform(R, target_center - R @ source_center)


def wrap_angle(angle: float) -> float:
    """Wrap angle to [-pi, pi)"""
    return float((angle + np.pi) % (2 * np.pi) - np.pi)


def compute_centroid(points: np.ndarray) -> np.ndarray:
    """Mean of [N, 3] points"""
    return points.mean(axis=0)


def min_pairwise_distance(points: np.ndarray) -> float:
    """
    Smallest distance between any two points

    Args:
        points: [N, 3] point coordinates

    Returns:
        distance: inf when fewer than two points are given
    """
    if len(points) < 2:
        return np.inf
    return float(pdist(points).min())


def point_set_rank(points: np.ndarray, tol: float = 1e-9) -> int:
    """Dimension spanned by centred points (0 = single point, 1 = line, 2 = plane, 3 = volume)"""
    if len(points) < 2:
        return 0
    centered = points - points.mean(axis=0)
    return int(np.linalg.matrix_rank(centered, tol=tol))


def quaternion_to_matrix(q: np.ndarray) -> np.ndarray:
    """
    Convert quaternion to rotation matrix

    Args:
        q: [4] quaternion [w, x, y, z]

    Returns:
        R: [3, 3] rotation matrix
    """
    rot = Rotation.from_quat([q[1], q[2], q[3], q[0]])  # scipy uses [x,y,z,w]
    return rot.as_matrix()


def matrix_to_quaternion(R: np.ndarray) -> np.ndarray:
    """
    Convert rotation matrix to quaternion

    Args:
        R: [3, 3] rotation matrix

    Returns:
        q: [4] quaternion [w, x, y, z]
    """
    rot = Rotation.from_matrix(R)
    q_scipy = rot.as_quat()  # [x, y, z, w]
    return np.array([q_scipy[3], q_scipy[0], q_scipy[1], q_scipy[2]])
