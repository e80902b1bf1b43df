#!/usr/bin/env python3
"""
Read-only store of marker templates and dynamics profiles, addressed by index
"""

from typing import List, Sequence

from tracking.types import DynamicsProfile, MarkerTemplate, TrackedObject


class MarkerTemplateStore:
    """Marker templates and dynamics profiles shared by all tracked objects"""

    def __init__(
        self,
        marker_templates: Sequence[MarkerTemplate],
        dynamics_profiles: Sequence[DynamicsProfile]
    ):
        self.marker_templates: List[MarkerTemplate] = list(marker_templates)
        self.dynamics_profiles: List[DynamicsProfile] = list(dynamics_profiles)

    def template(self, index: int) -> MarkerTemplate:
        if not 0 <= index < len(self.marker_templates):
            raise IndexError(f"No marker template at index {index} ({len(self.marker_templates)} loaded)")
        return self.marker_templates[index]

    def profile(self, index: int) -> DynamicsProfile:
        if not 0 <= index < len(self.dynamics_profiles):
            raise IndexError(f"No dynamics profile at index {index} ({len(self.dynamics_profiles)} loaded)")
        return self.dynamics_profiles[index]

    def template_for(self, obj: TrackedObject) -> MarkerTemplate:
        return self.template(obj.marker_index)

    def profile_for(self, obj: TrackedObject) -> DynamicsProfile:
        return self.profile(obj.dynamics_index)

    def check(self, objects: Sequence[TrackedObject]):
        """Raise IndexError if any object references a missing template or profile"""
        for obj in objects:
            self.template_for(obj)
            self.profile_for(obj)
