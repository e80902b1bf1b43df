#!/usr/bin/env python3
"""
Point-to-point ICP alignment service

Aligns a small source marker set onto an observed target cloud. Each
iteration pairs every transformed source point with its nearest target point
(pairs farther than max_correspondence_distance are dropped) and solves the
rigid transform from the untransformed source points to the paired targets.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Protocol

from registration.spatial_index import KNNIndex
from utils.geometry_utils import as_points, estimate_rigid_transform, transform_points

MIN_CORRESPONDENCES = 3


@dataclass
class AlignmentResult:
    """Outcome of one alignment call"""
    transformation: np.ndarray  # [4, 4]
    converged: bool
    fitness_score: float  # mean squared distance to nearest target, lower is better
    num_correspondences: int = 0
    iterations: int = 0


class Aligner(Protocol):
    """Registration service used by the initializer and the frame tracker"""

    max_iterations: int
    max_correspondence_distance: float

    def set_input_source(self, points: np.ndarray):
        ...

    def set_input_target(self, points: np.ndarray):
        ...

    def align(self, initial_guess: Optional[np.ndarray] = None) -> AlignmentResult:
        ...


class IterativeClosestPoint:
    """Bounded-iteration point-to-point ICP"""

    def __init__(
        self,
        max_iterations: int = 5,
        max_correspondence_distance: float = np.inf,
        transformation_epsilon: float = 1e-12
    ):
        self.max_iterations = max_iterations
        self.max_correspondence_distance = max_correspondence_distance
        self.transformation_epsilon = transformation_epsilon

        self.source = np.empty((0, 3))
        self.target = np.empty((0, 3))
        self.target_index = KNNIndex(self.target)

    def set_input_source(self, points: np.ndarray):
        self.source = as_points(points)

    def set_input_target(self, points: np.ndarray):
        """Reseat the target cloud and rebuild its index"""
        self.target = as_points(points)
        self.target_index = KNNIndex(self.target)

    def fitness_score(self, transformation: np.ndarray) -> float:
        """Mean squared distance from transformed source points to their nearest target"""
        if len(self.source) == 0 or len(self.target) == 0:
            return np.inf

        dist, _ = self.target_index.nearest(transform_points(transformation, self.source))
        return float(np.mean(dist ** 2))

    def align(self, initial_guess: Optional[np.ndarray] = None) -> AlignmentResult:
        """
        Run ICP from an initial guess

        Args:
            initial_guess: [4, 4] starting transform (identity if None)

        Returns:
            AlignmentResult; converged is False when fewer than three source
            points find a target within max_correspondence_distance. Hitting
            max_iterations counts as converged.
        """
        T = np.eye(4) if initial_guess is None else np.array(initial_guess, dtype=np.float64)

        converged = False
        num_correspondences = 0
        iterations = 0

        if len(self.source) > 0 and len(self.target) > 0:
            converged = True
            for iterations in range(1, self.max_iterations + 1):
                moved = transform_points(T, self.source)
                dist, idx = self.target_index.nearest(moved)

                mask = dist <= self.max_correspondence_distance
                num_correspondences = int(mask.sum())
                if num_correspondences < MIN_CORRESPONDENCES:
                    converged = False
                    break

                T_next = estimate_rigid_transform(self.source[mask], self.target[idx[mask]])
                delta = np.abs(T_next - T).max()
                T = T_next

                if delta < self.transformation_epsilon:
                    break

        return AlignmentResult(
            transformation=T,
            converged=converged,
            fitness_score=self.fitness_score(T),
            num_correspondences=num_correspondences,
            iterations=iterations
        )
