#!/usr/bin/env python3
"""
Per-frame pose tracking of initialized objects

Each object is predicted forward with its last velocity, refined by ICP
against the full cloud, and accepted only if the implied motion respects its
dynamics profile.
"""

import logging
import numpy as np
from typing import Callable, Dict, List, Sequence, Tuple

from registration import Aligner, IterativeClosestPoint
from tracking.diagnostics import DiagnosticLog
from tracking.template_store import MarkerTemplateStore
from tracking.types import DynamicsProfile, EventKind, TrackedObject, TrackingEvent, TrackingSettings
from utils.geometry_utils import as_points, translate, translation_and_euler, wrap_angle

logger = logging.getLogger(__name__)

# slack for float rounding in finite differences; a value at its bound passes
BOUND_RTOL = 1e-9
BOUND_ATOL = 1e-12


def with_slack(bound: float) -> float:
    return bound * (1 + BOUND_RTOL) + BOUND_ATOL


def within_bound(measured: float, bound: float) -> bool:
    """Inclusive bound check; NaN never passes"""
    return bool(abs(measured) <= with_slack(bound))


def dynamics_measurements(
    previous: np.ndarray,
    current: np.ndarray,
    dt: float,
    fitness_score: float,
    profile: DynamicsProfile
) -> Dict[str, Tuple[float, float]]:
    """
    Quantities checked against a dynamics profile

    Args:
        previous: [4, 4] last accepted pose
        current: [4, 4] candidate pose
        dt: Seconds since the last accepted pose
        fitness_score: Alignment fitness of the candidate
        profile: Bounds to check against

    Returns:
        Mapping of quantity name -> (measured value, bound)
    """
    x, y, z, roll, pitch, yaw = translation_and_euler(current)
    last_x, last_y, last_z, last_roll, last_pitch, last_yaw = translation_and_euler(previous)

    return {
        'vx': ((x - last_x) / dt, profile.max_x_velocity),
        'vy': ((y - last_y) / dt, profile.max_y_velocity),
        'vz': ((z - last_z) / dt, profile.max_z_velocity),
        'wroll': (wrap_angle(roll - last_roll) / dt, profile.max_roll_rate),
        'wpitch': (wrap_angle(pitch - last_pitch) / dt, profile.max_pitch_rate),
        'wyaw': (wrap_angle(yaw - last_yaw) / dt, profile.max_yaw_rate),
        'roll': (roll, profile.max_roll),
        'pitch': (pitch, profile.max_pitch),
        'fitness': (fitness_score, profile.max_fitness_score),
    }


class FrameTracker:
    """Frame-to-frame ICP tracking with dynamics-bound rejection"""

    def __init__(
        self,
        store: MarkerTemplateStore,
        objects: Sequence[TrackedObject],
        diagnostics: DiagnosticLog,
        settings: TrackingSettings,
        aligner_factory: Callable[..., Aligner] = IterativeClosestPoint
    ):
        self.store = store
        self.objects = objects
        self.diagnostics = diagnostics
        self.settings = settings
        self.aligner_factory = aligner_factory

    def track(self, timestamp: float, cloud: np.ndarray) -> List[TrackingEvent]:
        """
        Update every object from one cloud

        Args:
            timestamp: Frame time in seconds
            cloud: [M, 3] observed marker positions

        Returns:
            Events emitted while tracking this frame
        """
        first_event = len(self.diagnostics.events)

        icp = self.aligner_factory(max_iterations=self.settings.icp_max_iterations)
        icp.set_input_target(as_points(cloud))

        for obj in self.objects:
            self._track_object(obj, timestamp, icp)

        return self.diagnostics.events[first_event:]

    def _track_object(self, obj: TrackedObject, timestamp: float, icp: Aligner):
        obj.valid = False

        dt = timestamp - obj.last_valid_time
        if dt <= 0:
            self.diagnostics.emit(obj.name, EventKind.INVALID_ELAPSED_TIME, quantity="dt", measured=dt)
            return

        profile = self.store.profile_for(obj)

        # ignore correspondences farther than the object could have moved
        icp.max_correspondence_distance = with_slack(profile.max_x_velocity * dt)
        icp.set_input_source(self.store.template_for(obj).points)

        predicted = translate(obj.transformation, obj.velocity * dt)
        result = icp.align(predicted)
        if not result.converged:
            self.diagnostics.emit(obj.name, EventKind.NOT_CONVERGED)
            return

        measurements = dynamics_measurements(
            obj.transformation, result.transformation, dt, result.fitness_score, profile
        )
        violations = [
            (quantity, measured, bound)
            for quantity, (measured, bound) in measurements.items()
            if not within_bound(measured, bound)
        ]

        if violations:
            for quantity, measured, bound in violations:
                self.diagnostics.emit(
                    obj.name, EventKind.DYNAMICS_VIOLATION,
                    quantity=quantity, measured=measured, bound=bound
                )
            return

        obj.velocity = (result.transformation[:3, 3] - obj.center) / dt
        obj.transformation = result.transformation
        obj.last_valid_time = timestamp
        obj.fitness_score = result.fitness_score
        obj.valid = True
