"""
Offline playback of recorded marker clouds through the tracker
"""

from .play_clouds import PointCloudPlayer, tracked_markers, save_results

__all__ = [
    'PointCloudPlayer',
    'tracked_markers',
    'save_results',
]
