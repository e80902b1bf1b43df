#!/usr/bin/env python3
"""
Tracking initialization from a single unlabeled marker cloud

Objects are fit one at a time in configuration order. An object that fits
well takes its markers out of the working pool so later objects cannot reuse
them.
"""

import logging
import numpy as np
from typing import Callable, Dict, Optional, Sequence, Tuple

from registration import Aligner, IterativeClosestPoint, KNNIndex, SpatialIndex
from tracking.diagnostics import DiagnosticLog
from tracking.template_store import MarkerTemplateStore
from tracking.types import EventKind, TrackedObject, TrackingSettings
from utils.geometry_utils import (
    as_points,
    compute_centroid,
    min_pairwise_distance,
    pose_from_euler,
    transform_points
)

logger = logging.getLogger(__name__)


class PointPool:
    """Working copy of an observed cloud: indexed points plus a live mask"""

    def __init__(self, cloud: np.ndarray):
        self.points = as_points(cloud)
        self.live = np.ones(len(self.points), dtype=bool)

    def __len__(self) -> int:
        return int(self.live.sum())

    def live_indices(self) -> np.ndarray:
        return np.flatnonzero(self.live)

    def live_points(self) -> np.ndarray:
        return self.points[self.live]

    def claim(self, indices: np.ndarray):
        """Mark points as taken; they must all still be live"""
        indices = np.asarray(indices, dtype=int)
        if not self.live[indices].all():
            raise ValueError(f"Points already claimed: {indices[~self.live[indices]].tolist()}")
        self.live[indices] = False


class Initializer:
    """Greedy multi-object initialization with yaw-hypothesis ICP"""

    def __init__(
        self,
        store: MarkerTemplateStore,
        objects: Sequence[TrackedObject],
        diagnostics: DiagnosticLog,
        settings: TrackingSettings,
        aligner_factory: Callable[..., Aligner] = IterativeClosestPoint,
        index_factory: Callable[[np.ndarray], SpatialIndex] = KNNIndex
    ):
        self.store = store
        self.objects = objects
        self.diagnostics = diagnostics
        self.settings = settings
        self.aligner_factory = aligner_factory
        self.index_factory = index_factory

        self.attempts = 0
        self.claimed_indices: Dict[str, Tuple[int, ...]] = {}

        # limit allowed deviation from nominal positions by the closest pair of objects
        centers = np.array([obj.initial_center for obj in objects]).reshape(-1, 3)
        self.max_deviation = min_pairwise_distance(centers) / 3

        logger.info(f"Limiting distance from nominal position to {self.max_deviation:.4f} m")

    def initialize(self, cloud: np.ndarray) -> bool:
        """
        Fit every object to an unlabeled cloud

        Args:
            cloud: [M, 3] observed marker positions

        Returns:
            True if all objects fit; accepted objects get their pose either way
        """
        pool = PointPool(cloud)
        icp = self.aligner_factory(max_iterations=self.settings.icp_max_iterations)

        live_idx = pool.live_indices()
        index = self.index_factory(pool.live_points())
        icp.set_input_target(index.points)

        self.claimed_indices = {}
        all_fits_good = True

        for obj in self.objects:
            candidate = self._fit_object(obj, index, icp)
            if candidate is None:
                all_fits_good = False
                continue

            transformation, fitness, local_claim = candidate
            claim = live_idx[local_claim]
            pool.claim(claim)

            obj.transformation = transformation
            obj.velocity = np.zeros(3)
            obj.fitness_score = fitness
            self.claimed_indices[obj.name] = tuple(sorted(int(i) for i in claim))

            # update search structures over the remaining points
            live_idx = pool.live_indices()
            index = self.index_factory(pool.live_points())
            icp.set_input_target(index.points)

        self.attempts += 1

        logger.info(
            f"Initialization attempt {self.attempts}: "
            f"{len(self.claimed_indices)}/{len(self.objects)} objects fit, "
            f"{len(pool)} of {len(pool.points)} points unclaimed"
        )
        return all_fits_good

    def _fit_object(
        self,
        obj: TrackedObject,
        index: SpatialIndex,
        icp: Aligner
    ) -> Optional[Tuple[np.ndarray, float, np.ndarray]]:
        """Best yaw-hypothesis fit of one object; None if it cannot be trusted"""
        template = self.store.template_for(obj)
        n_markers = len(template)
        nominal_center = obj.initial_center

        if len(index) < n_markers:
            self.diagnostics.emit(
                obj.name, EventKind.AMBIGUOUS_PLACEMENT,
                quantity="points", measured=len(index), bound=n_markers
            )
            return None

        # only try to fit if the nearest neighbours sit near the nominal position
        _, nearest_idx = index.query(nominal_center, n_markers)
        actual_center = compute_centroid(index.points[nearest_idx])
        deviation = float(np.linalg.norm(actual_center - nominal_center))
        if deviation > self.max_deviation:
            self.diagnostics.emit(
                obj.name, EventKind.AMBIGUOUS_PLACEMENT,
                quantity="center", measured=deviation, bound=self.max_deviation
            )
            return None

        icp.set_input_source(template.points)
        best = None
        for i in range(self.settings.init_yaw_hypotheses):
            yaw = i * (2 * np.pi / self.settings.init_yaw_hypotheses)
            guess = pose_from_euler(*actual_center, yaw=yaw)
            result = icp.align(guess)
            if best is None or result.fitness_score < best.fitness_score:
                best = result

        # every marker must land on an observed point
        distances, taken = index.nearest(transform_points(best.transformation, template.points))
        fit_good = True
        for i in np.flatnonzero(distances > self.settings.init_max_residual):
            self.diagnostics.emit(
                obj.name, EventKind.POOR_FIT,
                quantity=f"marker {i}", measured=distances[i], bound=self.settings.init_max_residual
            )
            fit_good = False

        if not fit_good:
            return None

        return best.transformation, best.fitness_score, np.unique(taken)
