"""Utility modules for the marker pose tracker"""

from .config_loader import ConfigLoader, load_config
from .logger import setup_logger, log_section, log_config
from .geometry_utils import (
    as_points,
    make_transform,
    pose_from_euler,
    translation_and_euler,
    translate,
    transform_points,
    estimate_rigid_transform,
    wrap_angle,
    compute_centroid,
    min_pairwise_distance,
    point_set_rank,
    matrix_to_quaternion,
    quaternion_to_matrix
)
from .io_utils import (
    CloudLogError,
    CloudLogWriter,
    iter_cloud_log,
    load_cloud_log,
    save_json,
    load_json,
    save_npz,
    load_npz
)

__all__ = [
    'ConfigLoader',
    'load_config',
    'setup_logger',
    'log_section',
    'log_config',
    'as_points',
    'make_transform',
    'pose_from_euler',
    'translation_and_euler',
    'translate',
    'transform_points',
    'estimate_rigid_transform',
    'wrap_angle',
    'compute_centroid',
    'min_pairwise_distance',
    'point_set_rank',
    'matrix_to_quaternion',
    'quaternion_to_matrix',
    'CloudLogError',
    'CloudLogWriter',
    'iter_cloud_log',
    'load_cloud_log',
    'save_json',
    'load_json',
    'save_npz',
    'load_npz',
]
