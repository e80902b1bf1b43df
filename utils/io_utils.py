#!/usr/bin/env python3
"""
I/O utilities for recorded point-cloud streams and tracking results

Cloud log format, repeated until end of file (all little-endian):
    timestamp (milliseconds) : uint32
    cloud size               : uint32
    [x y z, x y z, ...]      : float32
"""

import numpy as np
import json
import struct
from pathlib import Path
from typing import Dict, Iterator, List, Tuple

RECORD_HEADER = struct.Struct('<II')
POINT_DTYPE = np.dtype('<f4')


class CloudLogError(ValueError):
    """Raised when a cloud log is truncated or unreadable"""


class CloudLogWriter:
    """Append timestamped point clouds to a binary cloud log"""

    def __init__(self, filepath: str):
        self.filepath = Path(filepath)
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.filepath, 'wb')
        self.records = 0

    def log(self, millis: int, points: np.ndarray):
        """
        Write one record

        Args:
            millis: Timestamp in milliseconds
            points: [N, 3] point coordinates (stored as float32)
        """
        points = np.asarray(points, dtype=POINT_DTYPE).reshape(-1, 3)
        self.file.write(RECORD_HEADER.pack(int(millis), len(points)))
        self.file.write(points.tobytes())
        self.records += 1

    def flush(self):
        self.file.flush()

    def close(self):
        if not self.file.closed:
            self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def iter_cloud_log(filepath: str) -> Iterator[Tuple[int, np.ndarray]]:
    """
    Iterate over the records of a cloud log

    Args:
        filepath: Input file path

    Yields:
        (millis, points) with points as [N, 3] float64

    Raises:
        FileNotFoundError: if the file does not exist
        CloudLogError: if a record is truncated
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Cloud log not found: {filepath}")

    with open(filepath, 'rb') as f:
        record = 0
        while True:
            header = f.read(RECORD_HEADER.size)
            if not header:
                return
            if len(header) < RECORD_HEADER.size:
                raise CloudLogError(
                    f"{filepath}: truncated header in record {record} "
                    f"({len(header)} of {RECORD_HEADER.size} bytes)"
                )

            millis, size = RECORD_HEADER.unpack(header)
            n_bytes = size * 3 * POINT_DTYPE.itemsize
            payload = f.read(n_bytes)
            if len(payload) < n_bytes:
                raise CloudLogError(
                    f"{filepath}: record {record} declares {size} points "
                    f"but only {len(payload)} of {n_bytes} bytes remain"
                )

            points = np.frombuffer(payload, dtype=POINT_DTYPE).reshape(-1, 3)
            yield millis, points.astype(np.float64)
            record += 1


def load_cloud_log(filepath: str) -> List[Tuple[int, np.ndarray]]:
    """Load a whole cloud log; fails before returning anything if it is malformed"""
    return list(iter_cloud_log(filepath))


def save_json(filepath: str, data: Dict):
    """Save dictionary to JSON file"""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, 'w') as f:
        json.dump(data, f, indent=2)


def load_json(filepath: str) -> Dict:
    """Load dictionary from JSON file"""
    with open(filepath, 'r') as f:
        return json.load(f)


def save_npz(filepath: str, **arrays):
    """Save multiple arrays to compressed NPZ file"""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    np.savez_compressed(filepath, **arrays)


def load_npz(filepath: str) -> Dict[str, np.ndarray]:
    """Load arrays from NPZ file"""
    data = np.load(filepath, allow_pickle=True)
    return {key: data[key] for key in data.keys()}
