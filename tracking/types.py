#!/usr/bin/env python3
"""
Data model for marker-based rigid body tracking
"""

import math
import numpy as np
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional

from utils.geometry_utils import (
    as_points,
    make_transform,
    matrix_to_quaternion,
    point_set_rank,
    pose_from_euler,
    quaternion_to_matrix,
    translation_and_euler
)


@dataclass(frozen=True)
class DynamicsProfile:
    """Bounds on plausible per-frame motion and fit quality for a class of objects"""
    max_x_velocity: float  # m/s
    max_y_velocity: float
    max_z_velocity: float
    max_roll_rate: float  # rad/s
    max_pitch_rate: float
    max_yaw_rate: float
    max_roll: float  # rad
    max_pitch: float
    max_fitness_score: float

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"Dynamics bound {f.name} must be non-negative, got {getattr(self, f.name)}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DynamicsProfile":
        """Load from dictionary"""
        missing = [f.name for f in fields(cls) if f.name not in data]
        if missing:
            raise ValueError(f"Dynamics configuration is missing {', '.join(missing)}")
        return cls(**{f.name: float(data[f.name]) for f in fields(cls)})


@dataclass(frozen=True, eq=False)
class MarkerTemplate:
    """Nominal marker layout of one physical object, in the object's local frame"""
    name: str
    points: np.ndarray  # [N, 3]

    def __post_init__(self):
        points = as_points(self.points).copy()
        if len(points) == 0:
            raise ValueError(f"Marker template '{self.name}' has no points")
        points.setflags(write=False)
        object.__setattr__(self, 'points', points)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def supports_orientation(self) -> bool:
        """Orientation is observable only if the markers span at least a plane"""
        return point_set_rank(self.points) >= 2

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "MarkerTemplate":
        """Load from dictionary"""
        return cls(name=name, points=np.array(data['points'], dtype=np.float64))


@dataclass(eq=False)
class TrackedObject:
    """Per-object tracking state"""
    name: str
    marker_index: int
    dynamics_index: int
    initial_transformation: np.ndarray  # [4, 4] nominal pose

    transformation: Optional[np.ndarray] = None  # [4, 4] current pose
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    last_valid_time: float = 0.0  # seconds; 0.0 is the stream origin
    valid: bool = False
    fitness_score: float = math.inf
    orientation_available: bool = True

    def __post_init__(self):
        self.initial_transformation = np.array(self.initial_transformation, dtype=np.float64)
        if self.transformation is None:
            self.transformation = self.initial_transformation.copy()

    @property
    def center(self) -> np.ndarray:
        return self.transformation[:3, 3]

    @property
    def initial_center(self) -> np.ndarray:
        return self.initial_transformation[:3, 3]

    @classmethod
    def from_config(
        cls,
        data: Dict[str, Any],
        marker_index: int,
        dynamics_index: int
    ) -> "TrackedObject":
        """
        Create from an `objects` entry of the tracker configuration

        The nominal orientation is either `initial_yaw` (radians) or
        `initial_orientation` as a [w, x, y, z] quaternion, not both.
        """
        x, y, z = data['initial_position']

        if 'initial_orientation' in data:
            if 'initial_yaw' in data:
                raise ValueError(f"Object '{data['name']}' sets both initial_yaw and initial_orientation")
            q = np.asarray(data['initial_orientation'], dtype=np.float64)
            if q.shape != (4,) or not np.linalg.norm(q) > 0:
                raise ValueError(f"Object '{data['name']}' needs a non-zero [w, x, y, z] initial_orientation")
            initial_transformation = make_transform(quaternion_to_matrix(q), [x, y, z])
        else:
            initial_transformation = pose_from_euler(x, y, z, yaw=data.get('initial_yaw', 0.0))

        return cls(
            name=data['name'],
            marker_index=marker_index,
            dynamics_index=dynamics_index,
            initial_transformation=initial_transformation
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict"""
        x, y, z, roll, pitch, yaw = translation_and_euler(self.transformation)
        return {
            'name': self.name,
            'valid': self.valid,
            'position': [x, y, z],
            'orientation': matrix_to_quaternion(self.transformation[:3, :3]).tolist(),  # [w, x, y, z]
            'rotation': [roll, pitch, yaw],
            'velocity': self.velocity.tolist(),
            'last_valid_time': self.last_valid_time,
            'fitness_score': self.fitness_score if math.isfinite(self.fitness_score) else None,
            'orientation_available': self.orientation_available
        }


class EventKind(str, Enum):
    AMBIGUOUS_PLACEMENT = "ambiguous_placement"
    POOR_FIT = "poor_fit"
    INITIALIZATION_FAILED = "initialization_failed"
    INVALID_ELAPSED_TIME = "invalid_elapsed_time"
    NOT_CONVERGED = "not_converged"
    DYNAMICS_VIOLATION = "dynamics_violation"


@dataclass(frozen=True)
class TrackingEvent:
    """A recoverable tracking failure, with enough detail to explain a rejected fit"""
    object_name: str
    kind: EventKind
    quantity: str = ""
    measured: float = math.nan
    bound: float = math.nan
    timestamp: Optional[float] = None

    def message(self) -> str:
        """Human-readable description"""
        who = f"object '{self.object_name}'" if self.object_name else "tracker"

        if self.kind == EventKind.DYNAMICS_VIOLATION:
            return f"Dynamic check failed for {who}: {self.quantity}: {self.measured:.6g} > {self.bound:.6g}"
        if self.kind == EventKind.AMBIGUOUS_PLACEMENT:
            if self.quantity == "points":
                return (f"Only {self.measured:.0f} unclaimed points left for {who}, "
                        f"which has {self.bound:.0f} markers")
            return (f"Nearest neighbors of {who} are centered {self.measured:.4f} m from the nominal "
                    f"position (limit {self.bound:.4f} m)")
        if self.kind == EventKind.POOR_FIT:
            return (f"Nearest neighbor of {self.quantity} in {who} is "
                    f"{1000 * self.measured:.2f} mm from nominal (limit {1000 * self.bound:.2f} mm)")
        if self.kind == EventKind.NOT_CONVERGED:
            return f"ICP did not converge for {who}"
        if self.kind == EventKind.INVALID_ELAPSED_TIME:
            return f"Skipping {who}: elapsed time since last valid pose is {self.measured:.6g} s"
        return ("Object tracker initialization failed - check that position is correct, "
                "all markers are visible, and marker configuration matches config file")


@dataclass
class TrackingSettings:
    """Tuning shared by the initializer and the frame tracker"""
    icp_max_iterations: int = 5
    init_yaw_hypotheses: int = 20
    init_max_residual: float = 0.005  # m

    def __post_init__(self):
        if self.icp_max_iterations < 1:
            raise ValueError(f"icp_max_iterations must be at least 1, got {self.icp_max_iterations}")
        if self.init_yaw_hypotheses < 1:
            raise ValueError(f"init_yaw_hypotheses must be at least 1, got {self.init_yaw_hypotheses}")
        if self.init_max_residual <= 0:
            raise ValueError(f"init_max_residual must be positive, got {self.init_max_residual}")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TrackingSettings":
        """Load from the optional `tracking` config section"""
        data = data or {}
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})
