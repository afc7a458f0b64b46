"""Tests for client.config and server.config -- validation and persistence."""

import os
import tempfile
import unittest
from unittest import mock

from client.config import (
    DEFAULTS,
    TransferConfig,
    load_config,
    save_config,
)
from client.constants import DEFAULT_STREAMS, MAX_STREAMS, MIB
from common.errors import ConfigError
from server.config import ServerConfig


class TestTransferConfig(unittest.TestCase):
    def test_defaults_valid(self):
        cfg = TransferConfig()
        self.assertEqual(cfg.stream_count, DEFAULT_STREAMS)
        self.assertEqual(sum(cfg.segment_sizes()), cfg.total_size)

    def test_immutable(self):
        cfg = TransferConfig()
        with self.assertRaises(AttributeError):
            cfg.total_size = 1

    def test_rejects_non_positive_size(self):
        with self.assertRaises(ConfigError):
            TransferConfig(total_size=0)

    def test_rejects_bad_stream_count(self):
        with self.assertRaises(ConfigError):
            TransferConfig(stream_count=0)
        with self.assertRaises(ConfigError):
            TransferConfig(stream_count=MAX_STREAMS + 1)

    def test_rejects_bad_chunk_size(self):
        with self.assertRaises(ConfigError):
            TransferConfig(chunk_size=0)

    def test_rejects_empty_segments(self):
        with self.assertRaises(ConfigError):
            TransferConfig(total_size=3, stream_count=4)

    def test_config_error_is_value_error(self):
        with self.assertRaises(ValueError):
            TransferConfig(total_size=-1)


class TestSegmentSizes(unittest.TestCase):
    def test_even_split(self):
        cfg = TransferConfig(total_size=10 * MIB, stream_count=4)
        self.assertEqual(cfg.segment_sizes(), [10 * MIB // 4] * 4)

    def test_remainder_goes_to_last(self):
        cfg = TransferConfig(total_size=10, stream_count=4)
        self.assertEqual(cfg.segment_sizes(), [2, 2, 2, 4])

    def test_single_stream(self):
        cfg = TransferConfig(total_size=12345, stream_count=1)
        self.assertEqual(cfg.segment_sizes(), [12345])

    def test_sum_always_matches(self):
        for total in (16, 17, 1000, 1023, 10 * MIB + 3):
            for streams in (1, 3, 4, 16):
                cfg = TransferConfig(total_size=total, stream_count=streams)
                self.assertEqual(sum(cfg.segment_sizes()), total)
                self.assertEqual(len(cfg.segment_sizes()), streams)


class TestServerConfig(unittest.TestCase):
    def test_defaults_valid(self):
        cfg = ServerConfig()
        self.assertEqual(cfg.port, 8080)
        self.assertEqual(cfg.chunk_size, 64 * 1024)
        self.assertEqual(cfg.default_size, 10 * MIB)
        self.assertFalse(cfg.randomize)

    def test_invalid_values(self):
        for kwargs in (
            {"chunk_size": 0},
            {"default_size": -1},
            {"port": 70000},
            {"read_timeout": -1.0},
            {"shutdown_timeout": -0.5},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ConfigError):
                    ServerConfig(**kwargs)

    def test_to_dict(self):
        d = ServerConfig(port=9000).to_dict()
        self.assertEqual(d["port"], 9000)
        self.assertIn("write_timeout", d)


class TestLoadSaveConfig(unittest.TestCase):
    def test_defaults_have_required_keys(self):
        for key in ("server_url", "size", "streams", "chunk_size", "ping_count", "timeout"):
            self.assertIn(key, DEFAULTS)

    def test_load_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["streams"], DEFAULT_STREAMS)
                self.assertEqual(cfg["server_url"], "http://localhost:8080")

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                save_config({"streams": 8, "server_url": "http://example:9000"})
                cfg = load_config()
                self.assertEqual(cfg["streams"], 8)
                self.assertEqual(cfg["server_url"], "http://example:9000")
                # Defaults still present
                self.assertEqual(cfg["ping_count"], 1)

    def test_unknown_keys_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                save_config({"bogus": 1})
                self.assertNotIn("bogus", load_config())

    def test_corrupt_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                f.write("NOT JSON")
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["streams"], DEFAULT_STREAMS)


if __name__ == "__main__":
    unittest.main()
