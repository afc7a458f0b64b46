"""Tests for CLI validation in speedtest.py and speedtest_server.py."""

import json
import os
import tempfile
import unittest
from unittest import mock

from client.config import load_config
from client.constants import MAX_PING_COUNT, MAX_STREAMS, MAX_TIMEOUT, MIB
from common.errors import ConfigError


class TestClientValidation(unittest.TestCase):
    def _validate(self, **kwargs):
        # Import here to avoid triggering side effects at module level
        from speedtest import _validate
        defaults = {
            "size": 10 * MIB,
            "streams": 4,
            "chunk_size": 64 * 1024,
            "ping_count": 1,
            "timeout": 30.0,
        }
        defaults.update(kwargs)
        return _validate(**defaults)

    def test_defaults_valid(self):
        cfg = self._validate()
        self.assertEqual(cfg.total_size, 10 * MIB)
        self.assertEqual(cfg.stream_count, 4)

    def test_ping_count_bounds(self):
        with self.assertRaises(ValueError):
            self._validate(ping_count=0)
        with self.assertRaises(ValueError):
            self._validate(ping_count=MAX_PING_COUNT + 1)
        self._validate(ping_count=MAX_PING_COUNT)

    def test_timeout_bounds(self):
        with self.assertRaises(ValueError):
            self._validate(timeout=0)
        with self.assertRaises(ValueError):
            self._validate(timeout=MAX_TIMEOUT + 1)

    def test_streams_bounds(self):
        with self.assertRaises(ValueError):
            self._validate(streams=0)
        with self.assertRaises(ValueError):
            self._validate(streams=MAX_STREAMS + 1)

    def test_size_must_be_positive(self):
        with self.assertRaises(ConfigError):
            self._validate(size=0)


class TestServerArgs(unittest.TestCase):
    def _config(self, argv):
        from speedtest_server import build_parser, config_from_args
        return config_from_args(build_parser().parse_args(argv))

    def test_defaults(self):
        cfg = self._config([])
        self.assertEqual(cfg.port, 8080)
        self.assertFalse(cfg.randomize)

    def test_flags(self):
        cfg = self._config([
            "--port", "9000", "--chunk-size", "1024", "--default-size", "4096",
            "--random", "--write-timeout", "2.5",
        ])
        self.assertEqual(cfg.port, 9000)
        self.assertEqual(cfg.chunk_size, 1024)
        self.assertEqual(cfg.default_size, 4096)
        self.assertTrue(cfg.randomize)
        self.assertAlmostEqual(cfg.write_timeout, 2.5)

    def test_invalid_fails_fast(self):
        with self.assertRaises(ConfigError):
            self._config(["--chunk-size", "0"])


class TestSaveConfig(unittest.TestCase):
    def _main(self, path, argv):
        from speedtest import main
        with mock.patch("client.config._config_path", return_value=path), \
                mock.patch("sys.argv", ["speedtest"] + argv), \
                mock.patch("speedtest.run_speedtest") as run:
            main()
        run.assert_not_called()

    def test_saves_flags_as_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "sub", "config.json")
            self._main(path, [
                "--save-config", "--server", "http://example:9000",
                "--streams", "8", "--random",
            ])
            with open(path, encoding="utf-8") as fh:
                saved = json.load(fh)
            self.assertEqual(saved["server_url"], "http://example:9000")
            self.assertEqual(saved["streams"], 8)
            self.assertTrue(saved["randomize"])

            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
            self.assertEqual(cfg["streams"], 8)
            self.assertTrue(cfg["randomize"])

    def test_invalid_values_are_not_saved(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with self.assertRaises(SystemExit) as ctx:
                self._main(path, ["--save-config", "--streams", "0"])
            self.assertEqual(ctx.exception.code, 1)
            self.assertFalse(os.path.exists(path))


if __name__ == "__main__":
    unittest.main()
