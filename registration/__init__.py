"""
Registration services

Spatial index and ICP alignment behind small protocols so the tracking core
does not depend on a particular numerical backend.
"""

from .spatial_index import SpatialIndex, KNNIndex
from .icp import Aligner, AlignmentResult, IterativeClosestPoint

__all__ = [
    'SpatialIndex',
    'KNNIndex',
    'Aligner',
    'AlignmentResult',
    'IterativeClosestPoint',
]
