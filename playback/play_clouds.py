#!/usr/bin/env python3
"""
Offline playback of recorded marker clouds

Replays a binary cloud log through the object tracker:
- Per-frame pose snapshots saved as JSON
- Per-object trajectories saved as NPZ
- Optional conversion of the recording into the tracked marker positions

Usage:
    python playback/play_clouds.py --config config/tracker_config.yaml --input recordings/clouds.bin
"""

import argparse
import sys
import numpy as np
from pathlib import Path
from typing import Any, Dict, List, Optional
from tqdm import tqdm

sys.path.append(str(Path(__file__).parent.parent))

from tracking import ObjectTracker
from utils import (
    CloudLogWriter,
    load_cloud_log,
    load_config,
    log_config,
    log_section,
    save_json,
    save_npz,
    setup_logger,
    transform_points
)


class PointCloudPlayer:
    """Load a cloud log and feed it to a tracker frame by frame"""

    def __init__(self, show_progress: bool = True):
        self.timestamps: List[int] = []  # milliseconds
        self.clouds: List[np.ndarray] = []
        self.show_progress = show_progress

    def __len__(self) -> int:
        return len(self.clouds)

    def load(self, path: str):
        """Load every record; a malformed file fails here, before any tracking"""
        records = load_cloud_log(path)
        self.timestamps = [millis for millis, _ in records]
        self.clouds = [cloud for _, cloud in records]

    def play(
        self,
        tracker: ObjectTracker,
        writer: Optional[CloudLogWriter] = None
    ) -> List[Dict[str, Any]]:
        """
        Run the tracker over all loaded frames

        Args:
            tracker: Tracker to update
            writer: If given, receives the tracked marker positions of every frame

        Returns:
            One snapshot per frame: timestamp, initialized flag, events, objects
        """
        frames = []

        for millis, cloud in tqdm(
            zip(self.timestamps, self.clouds),
            total=len(self.clouds),
            desc="Playing clouds",
            disable=not self.show_progress
        ):
            events = tracker.update(millis / 1000.0, cloud)

            frames.append({
                'timestamp': millis / 1000.0,
                'num_points': len(cloud),
                'initialized': tracker.initialized,
                'events': [event.message() for event in events],
                'objects': [obj.to_dict() for obj in tracker.objects]
            })

            if writer is not None:
                writer.log(millis, tracked_markers(tracker))

        return frames

    def convert(self, tracker: ObjectTracker, output_path: str) -> List[Dict[str, Any]]:
        """Play the recording and write the tracked marker positions as a new cloud log"""
        with CloudLogWriter(output_path) as writer:
            return self.play(tracker, writer=writer)


def tracked_markers(tracker: ObjectTracker) -> np.ndarray:
    """Template points of every object placed at its current pose, [N, 3]"""
    markers = [
        transform_points(obj.transformation, tracker.store.template_for(obj).points)
        for obj in tracker.objects
    ]
    return np.vstack(markers) if markers else np.empty((0, 3))


def save_results(frames: List[Dict[str, Any]], object_names: List[str], output_dir: Path):
    """
    Save playback results

    Args:
        frames: Snapshots returned by PointCloudPlayer.play
        object_names: Object names in tracker order
        output_dir: Output directory
    """
    output_dir = Path(output_dir)

    valid_counts = {name: 0 for name in object_names}
    for frame in frames:
        for obj in frame['objects']:
            valid_counts[obj['name']] += int(obj['valid'])

    save_json(output_dir / "tracking.json", {
        'metadata': {
            'num_frames': len(frames),
            'num_objects': len(object_names),
            'valid_frames': valid_counts,
            'coordinate_system': 'world',
            'units': 'meters'
        },
        'frames': frames
    })

    save_npz(
        output_dir / "trajectories.npz",
        names=np.array(object_names),
        timestamps=np.array([frame['timestamp'] for frame in frames]),
        positions=np.array([[obj['position'] for obj in frame['objects']] for frame in frames]).reshape(
            len(frames), len(object_names), 3),
        orientations=np.array([[obj['orientation'] for obj in frame['objects']] for frame in frames]).reshape(
            len(frames), len(object_names), 4),
        valid=np.array([[obj['valid'] for obj in frame['objects']] for frame in frames], dtype=bool).reshape(
            len(frames), len(object_names))
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Replay a recorded cloud log through the object tracker")
    parser.add_argument('--config', default="config/tracker_config.yaml", help="Tracker configuration file")
    parser.add_argument('--input', default=None, help="Cloud log to replay (defaults to data.input_path)")
    parser.add_argument('--output-dir', default=None, help="Output directory (defaults to data.output_dir)")
    parser.add_argument('--convert', default=None, help="Also write tracked marker positions to this cloud log")
    return parser.parse_args(argv)


def main(argv=None):
    """Main playback entry point"""
    args = parse_args(argv)
    config = load_config(args.config)

    logging_config = config.get('logging', {})
    logger = setup_logger(
        name="Playback",
        log_dir=logging_config.get('log_dir', 'logs'),
        level=logging_config.get('level', 'INFO'),
        save_to_file=logging_config.get('save_logs', False)
    )

    data_config = config.get('data', {})
    input_path = args.input or data_config.get('input_path')
    output_dir = Path(args.output_dir or data_config.get('output_dir', 'output'))
    if not input_path:
        logger.error("No input cloud log given (use --input or data.input_path)")
        return 1

    log_section(logger, "Marker Cloud Playback")
    log_config(logger, {'input': input_path, 'output': str(output_dir), 'tracking': config.get('tracking', {})})

    tracker = ObjectTracker.from_config(config)
    tracker.set_log_warning_callback(logger.warning)

    player = PointCloudPlayer()
    player.load(input_path)
    logger.info(f"Loaded {len(player)} frames from {input_path}")

    if args.convert:
        frames = player.convert(tracker, args.convert)
        logger.info(f"Saved tracked markers: {args.convert}")
    else:
        frames = player.play(tracker)

    if not tracker.initialized:
        logger.warning(f"Tracker never initialized ({tracker.init_attempts} attempts)")

    save_results(frames, [obj.name for obj in tracker.objects], output_dir)
    logger.info(f"✓ Playback complete, results in {output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
