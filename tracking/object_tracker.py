#!/usr/bin/env python3
"""
Tracking orchestrator

Owns the tracked objects. Initialization is retried on every frame until it
succeeds; from then on (including the frame on which it succeeded) each
frame goes to the frame tracker.
"""

import logging
import time
import numpy as np
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from registration import Aligner, IterativeClosestPoint, KNNIndex, SpatialIndex
from tracking.diagnostics import DiagnosticLog, WarningCallback
from tracking.frame_tracker import FrameTracker
from tracking.initializer import Initializer
from tracking.template_store import MarkerTemplateStore
from tracking.types import (
    DynamicsProfile,
    EventKind,
    MarkerTemplate,
    TrackedObject,
    TrackingEvent,
    TrackingSettings
)
from utils.geometry_utils import as_points

logger = logging.getLogger(__name__)


class TrackerState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


class ObjectTracker:
    """Track a fixed set of rigid bodies from unlabeled marker clouds"""

    def __init__(
        self,
        dynamics_profiles: Sequence[DynamicsProfile],
        marker_templates: Sequence[MarkerTemplate],
        objects: Sequence[TrackedObject],
        settings: Optional[TrackingSettings] = None,
        aligner_factory: Callable[..., Aligner] = IterativeClosestPoint,
        index_factory: Callable[[np.ndarray], SpatialIndex] = KNNIndex
    ):
        self.store = MarkerTemplateStore(marker_templates, dynamics_profiles)
        self._objects: List[TrackedObject] = list(objects)
        self.store.check(self._objects)
        self.settings = settings or TrackingSettings()

        for obj in self._objects:
            obj.orientation_available = self.store.template_for(obj).supports_orientation

        self.diagnostics = DiagnosticLog()
        self.initializer = Initializer(
            self.store, self._objects, self.diagnostics, self.settings,
            aligner_factory=aligner_factory, index_factory=index_factory
        )
        self.frame_tracker = FrameTracker(
            self.store, self._objects, self.diagnostics, self.settings,
            aligner_factory=aligner_factory
        )
        self.state = TrackerState.UNINITIALIZED

        logger.info(
            f"Tracking {len(self._objects)} objects with "
            f"{len(self.store.marker_templates)} marker configurations and "
            f"{len(self.store.dynamics_profiles)} dynamics configurations"
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ObjectTracker":
        """
        Build a tracker from a loaded configuration

        Args:
            config: Dictionary with `markers`, `dynamics`, `objects` and
                optional `tracking` sections (see config/tracker_config.yaml)
        """
        marker_names = list(config['markers'])
        dynamics_names = list(config['dynamics'])

        marker_templates = [MarkerTemplate.from_dict(name, config['markers'][name]) for name in marker_names]
        dynamics_profiles = [DynamicsProfile.from_dict(config['dynamics'][name]) for name in dynamics_names]

        objects = []
        for obj in config['objects']:
            if obj['marker'] not in marker_names:
                raise ValueError(f"Object '{obj['name']}' references unknown marker configuration '{obj['marker']}'")
            if obj['dynamics'] not in dynamics_names:
                raise ValueError(f"Object '{obj['name']}' references unknown dynamics configuration '{obj['dynamics']}'")
            objects.append(TrackedObject.from_config(
                obj,
                marker_index=marker_names.index(obj['marker']),
                dynamics_index=dynamics_names.index(obj['dynamics'])
            ))

        return cls(
            dynamics_profiles,
            marker_templates,
            objects,
            settings=TrackingSettings.from_dict(config.get('tracking'))
        )

    @property
    def objects(self) -> List[TrackedObject]:
        return self._objects

    @property
    def initialized(self) -> bool:
        return self.state == TrackerState.INITIALIZED

    @property
    def init_attempts(self) -> int:
        return self.initializer.attempts

    @property
    def last_events(self) -> List[TrackingEvent]:
        """Events of the most recent update, in emission order"""
        return list(self.diagnostics.events)

    def set_log_warning_callback(self, callback: Optional[WarningCallback]):
        """Register a single-argument sink for diagnostic messages (None drops them)"""
        self.diagnostics.set_callback(callback)

    def update(self, timestamp: float, cloud: np.ndarray) -> List[TrackingEvent]:
        """
        Process one frame

        Args:
            timestamp: Frame time in seconds
            cloud: [M, 3] observed marker positions

        Returns:
            Events emitted during this frame
        """
        cloud = as_points(cloud)
        self.diagnostics.begin_frame(timestamp)

        if self.state == TrackerState.UNINITIALIZED:
            if self.initializer.initialize(cloud):
                self.state = TrackerState.INITIALIZED
                logger.info(f"✓ Tracker initialized after {self.init_attempts} attempt(s)")
            else:
                self.diagnostics.emit("", EventKind.INITIALIZATION_FAILED)

        if self.state == TrackerState.INITIALIZED:
            self.frame_tracker.track(timestamp, cloud)

        return self.last_events

    def update_realtime(self, cloud: np.ndarray) -> List[TrackingEvent]:
        """Process one frame stamped with the monotonic clock"""
        return self.update(time.monotonic(), cloud)
