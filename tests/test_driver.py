"""End-to-end tests for client.driver -- the phase sequence."""

import unittest
import warnings
from unittest import mock

from aiohttp import web
from aiohttp.test_utils import AioHTTPTestCase, unused_port

from client.config import TransferConfig
from client import driver as driver_module
from client.driver import MeasurementDriver, MeasurementReport
from client.phases import MeasurementPhase
from client.upload import UploadTester
from server import handlers
from server.app import create_app
from server.config import ServerConfig
from server.context import ServerContext

P = MeasurementPhase


class TestFullRun(AioHTTPTestCase):
    async def get_application(self):
        return create_app(ServerConfig(chunk_size=4096))

    async def test_all_phases_complete(self):
        cfg = TransferConfig(total_size=256 * 1024, stream_count=4, chunk_size=8192)
        driver = MeasurementDriver(str(self.server.make_url("/")), cfg, ping_count=3, progress_interval=0.01)

        transitions = []
        snaps = []
        driver.on_phase = lambda phase, report: transitions.append(phase)
        driver.on_progress = snaps.append

        report = await driver.run()

        self.assertTrue(report.success)
        self.assertIsNone(report.error)
        self.assertEqual(driver.history, [P.PING, P.DOWNLOAD, P.UPLOAD, P.DONE])
        self.assertEqual(transitions, [P.DOWNLOAD, P.UPLOAD, P.DONE])

        self.assertEqual(len(report.ping.samples), 3)
        self.assertEqual(report.ping.bytes_total, 3 * len(b"pong"))
        self.assertGreater(report.ping.latency_ms, 0)
        self.assertEqual(report.download.bytes_transferred, 256 * 1024)
        self.assertEqual(report.upload.bytes_confirmed, 256 * 1024)
        self.assertFalse(report.upload.partial)

        phases_seen = {s.phase for s in snaps}
        self.assertEqual(phases_seen, {P.DOWNLOAD, P.UPLOAD})

        d = report.to_dict()
        self.assertEqual(d["phase"], "done")
        self.assertIn("ping", d)
        self.assertIn("download", d)
        self.assertIn("upload", d)

    async def test_random_upload_payload(self):
        cfg = TransferConfig(total_size=64 * 1024, stream_count=2, chunk_size=4096)
        driver = MeasurementDriver(str(self.server.make_url("/")), cfg, randomize=True)
        with mock.patch("client.driver.UploadTester", wraps=UploadTester) as tester_cls:
            report = await driver.run()

        self.assertTrue(report.success)
        self.assertTrue(tester_cls.call_args.kwargs["randomize"])
        self.assertEqual(report.upload.bytes_confirmed, 64 * 1024)

    async def test_run_only_once(self):
        cfg = TransferConfig(total_size=1024, stream_count=1)
        driver = MeasurementDriver(str(self.server.make_url("/")), cfg)
        await driver.run()
        with self.assertRaises(RuntimeError):
            await driver.run()


class TestUnreachableServer(unittest.IsolatedAsyncioTestCase):
    async def test_ping_failure_goes_straight_to_error(self):
        base = f"http://127.0.0.1:{unused_port()}"
        cfg = TransferConfig(total_size=1024, stream_count=2)
        driver = MeasurementDriver(base, cfg)

        transitions = []
        driver.on_phase = lambda phase, report: transitions.append(phase)

        report = await driver.run()

        self.assertFalse(report.success)
        self.assertIs(report.phase, P.ERROR)
        self.assertEqual(driver.history, [P.PING, P.ERROR])
        self.assertEqual(transitions, [P.ERROR])
        self.assertIsNone(report.download)
        self.assertIsNone(report.upload)
        self.assertTrue(report.error)


class TestDownloadFailureStopsRun(AioHTTPTestCase):
    """A server without /download: the upload phase must never start."""

    async def get_application(self):
        app = web.Application()
        app[handlers.CONTEXT_KEY] = ServerContext.create(ServerConfig())
        app.router.add_get("/ping", handlers.ping)
        app.router.add_post("/upload", handlers.upload)
        return app

    async def test_error_after_ping(self):
        cfg = TransferConfig(total_size=4096, stream_count=2)
        driver = MeasurementDriver(str(self.server.make_url("/")), cfg)
        report = await driver.run()

        self.assertIs(report.phase, P.ERROR)
        self.assertEqual(driver.history, [P.PING, P.DOWNLOAD, P.ERROR])
        self.assertIsNotNone(report.ping)
        self.assertIn("404", report.error)

        metrics = self.app[handlers.CONTEXT_KEY].metrics
        self.assertEqual(metrics.value("ping_requests"), 1)
        self.assertEqual(metrics.value("upload_requests"), 0)

        # Only the error is reported, never the half-finished phases.
        self.assertEqual(set(report.to_dict()), {"server", "phase", "error"})


class TestReport(unittest.TestCase):
    def test_failed_report_dict(self):
        report = MeasurementReport(server_url="http://x", phase=P.ERROR, error="boom")
        self.assertEqual(report.to_dict(), {"server": "http://x", "phase": "error", "error": "boom"})
        self.assertFalse(report.success)


class TestModuleSource(unittest.TestCase):
    def test_compiles_without_warnings(self):
        with open(driver_module.__file__, encoding="utf-8") as fh:
            source = fh.read()
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(source, driver_module.__file__, "exec")


if __name__ == "__main__":
    unittest.main()
