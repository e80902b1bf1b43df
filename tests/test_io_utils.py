"""
Tests for cloud log and result file I/O
"""

import struct

import numpy as np
import pytest

from utils.io_utils import (
    CloudLogError,
    CloudLogWriter,
    load_cloud_log,
    load_json,
    load_npz,
    save_json,
    save_npz
)


class TestCloudLog:

    def test_reads_little_endian_records(self, tmp_path):
        path = tmp_path / "clouds.bin"
        with open(path, 'wb') as f:
            f.write(struct.pack('<II', 1500, 2))
            f.write(struct.pack('<6f', 0.5, 1.0, -2.0, 0.25, 0.0, 3.0))
            f.write(struct.pack('<II', 1510, 0))

        records = load_cloud_log(path)

        assert [millis for millis, _ in records] == [1500, 1510]
        assert records[0][1].dtype == np.float64
        assert records[0][1].tolist() == [[0.5, 1.0, -2.0], [0.25, 0.0, 3.0]]
        assert records[1][1].shape == (0, 3)

    def test_writer_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "clouds.bin"
        cloud = np.array([[0.1, 0.2, 0.3], [1.0, -1.0, 0.5]])

        with CloudLogWriter(path) as writer:
            writer.log(0, cloud)
            writer.log(10, cloud[:1])
            assert writer.records == 2

        records = load_cloud_log(path)
        assert [len(points) for _, points in records] == [2, 1]
        assert np.allclose(records[0][1], cloud, atol=1e-7)

    def test_truncated_header(self, tmp_path):
        path = tmp_path / "clouds.bin"
        path.write_bytes(struct.pack('<II', 0, 0) + b'\x01\x02')

        with pytest.raises(CloudLogError, match="truncated header"):
            load_cloud_log(path)

    def test_truncated_payload(self, tmp_path):
        path = tmp_path / "clouds.bin"
        path.write_bytes(struct.pack('<II', 0, 3) + struct.pack('<3f', 1.0, 2.0, 3.0))

        with pytest.raises(CloudLogError, match="declares 3 points"):
            load_cloud_log(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_cloud_log(tmp_path / "missing.bin")


class TestResultFiles:

    def test_json(self, tmp_path):
        path = tmp_path / "out" / "tracking.json"
        save_json(path, {'frames': [{'timestamp': 0.01}]})

        assert load_json(path) == {'frames': [{'timestamp': 0.01}]}

    def test_npz(self, tmp_path):
        path = tmp_path / "trajectories.npz"
        save_npz(path, positions=np.zeros((2, 1, 3)), names=np.array(['cf1']))

        arrays = load_npz(path)
        assert arrays['positions'].shape == (2, 1, 3)
        assert arrays['names'].tolist() == ['cf1']
