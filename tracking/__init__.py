"""
Rigid body tracking from unlabeled marker clouds

- Greedy multi-object initialization with yaw-hypothesis ICP
- Frame-to-frame ICP tracking with velocity prediction
- Dynamics-bound rejection of implausible fits
"""

from .types import (
    DynamicsProfile,
    EventKind,
    MarkerTemplate,
    TrackedObject,
    TrackingEvent,
    TrackingSettings
)
from .template_store import MarkerTemplateStore
from .diagnostics import DiagnosticLog
from .initializer import Initializer, PointPool
from .frame_tracker import FrameTracker
from .object_tracker import ObjectTracker, TrackerState

__all__ = [
    'DynamicsProfile',
    'EventKind',
    'MarkerTemplate',
    'TrackedObject',
    'TrackingEvent',
    'TrackingSettings',
    'MarkerTemplateStore',
    'DiagnosticLog',
    'Initializer',
    'PointPool',
    'FrameTracker',
    'ObjectTracker',
    'TrackerState',
]
