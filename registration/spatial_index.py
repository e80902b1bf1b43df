#!/usr/bin/env python3
"""
Spatial index service for nearest-neighbour queries over marker clouds
"""

import numpy as np
from typing import Protocol, Tuple
from sklearn.neighbors import NearestNeighbors

from utils.geometry_utils import as_points


class SpatialIndex(Protocol):
    """Nearest-neighbour queries over a fixed point set; rebuild when the set changes"""

    points: np.ndarray

    def query(self, point: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
        ...

    def nearest(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        ...

    def __len__(self) -> int:
        ...


class KNNIndex:
    """k-d tree index backed by scikit-learn"""

    def __init__(self, points: np.ndarray):
        self.points = as_points(points)
        self._nbrs = None

        if len(self.points) > 0:
            self._nbrs = NearestNeighbors(algorithm='kd_tree').fit(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def query(self, point: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
        """
        k nearest neighbours of a single point

        Args:
            point: [3] query point
            k: Number of neighbours (clipped to the index size)

        Returns:
            distances: [k] ascending distances
            indices: [k] indices into self.points
        """
        k = min(k, len(self))
        if k <= 0:
            return np.empty(0), np.empty(0, dtype=int)

        dist, idx = self._nbrs.kneighbors(as_points(point), n_neighbors=k)
        return dist[0], idx[0]

    def nearest(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Single nearest neighbour for each query point

        Args:
            points: [N, 3] query points

        Returns:
            distances: [N] (inf when the index is empty)
            indices: [N] (-1 when the index is empty)
        """
        points = as_points(points)
        if self._nbrs is None or len(points) == 0:
            return np.full(len(points), np.inf), np.full(len(points), -1, dtype=int)

        dist, idx = self._nbrs.kneighbors(points, n_neighbors=1)
        return dist[:, 0], idx[:, 0]
