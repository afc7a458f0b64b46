"""Tests for client.phases -- the phase state machine."""

import unittest

from client.phases import MeasurementPhase, next_phase


class TestNextPhase(unittest.TestCase):
    def test_happy_path(self):
        phase = MeasurementPhase.PING
        seen = [phase]
        while not phase.terminal:
            phase = next_phase(phase)
            seen.append(phase)
        self.assertEqual(seen, [
            MeasurementPhase.PING,
            MeasurementPhase.DOWNLOAD,
            MeasurementPhase.UPLOAD,
            MeasurementPhase.DONE,
        ])

    def test_failure_from_any_running_phase(self):
        for phase in (MeasurementPhase.PING, MeasurementPhase.DOWNLOAD, MeasurementPhase.UPLOAD):
            with self.subTest(phase=phase):
                self.assertIs(next_phase(phase, failed=True), MeasurementPhase.ERROR)

    def test_terminal_phases_have_no_transition(self):
        for phase in (MeasurementPhase.DONE, MeasurementPhase.ERROR):
            with self.subTest(phase=phase):
                self.assertTrue(phase.terminal)
                with self.assertRaises(ValueError):
                    next_phase(phase)
                with self.assertRaises(ValueError):
                    next_phase(phase, failed=True)

    def test_values(self):
        self.assertEqual(MeasurementPhase.UPLOAD.value, "upload")
        self.assertEqual(MeasurementPhase("error"), MeasurementPhase.ERROR)


if __name__ == "__main__":
    unittest.main()
