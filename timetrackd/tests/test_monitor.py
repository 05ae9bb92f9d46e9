"""Unit tests for the change-detection monitor."""

import dataclasses
import io
import unittest
from typing import List, Union
from unittest.mock import AsyncMock, MagicMock

from timetrackd.utils.activity.compositor.base_compositor import BaseCompositor
from timetrackd.utils.activity.monitor import ActivityMonitor, format_sample
from timetrackd.utils.activity.sampler import Sample, Sampler
from timetrackd.utils.exceptions import ProbeIOError, ProbeParseError

MONITOR_LOGGER = "timetrackd.utils.activity.monitor"

TERMINAL = Sample(
    window_title="Terminal",
    pid=4821,
    process_name="bash",
    screensaver_active=False,
    idle=False,
)


class MockSampler:
    """Sampler that replays a fixed sequence of samples and errors."""

    def __init__(self, results: List[Union[Sample, Exception]]):
        self.results = list(results)
        self.intervals: List[int] = []

    async def get_sample(self, sample_interval: int) -> Sample:
        self.intervals.append(sample_interval)
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class TestFormatSample(unittest.TestCase):
    """Test cases for format_sample."""

    def test_window_line(self):
        self.assertEqual(format_sample(TERMINAL), "'Terminal' ([4821] bash)")

    def test_idle_suffix(self):
        sample = dataclasses.replace(TERMINAL, idle=True)
        self.assertEqual(format_sample(sample), "'Terminal' ([4821] bash) (idle)")

    def test_screensaver_hides_details(self):
        for idle in (False, True):
            with self.subTest(idle=idle):
                sample = dataclasses.replace(TERMINAL, screensaver_active=True, idle=idle)
                self.assertEqual(format_sample(sample), "screensaver")

    def test_empty_title(self):
        sample = dataclasses.replace(TERMINAL, window_title="")
        self.assertEqual(format_sample(sample), "'' ([4821] bash)")


class TestActivityMonitor(unittest.IsolatedAsyncioTestCase):
    """Test cases for ActivityMonitor.tick and run."""

    def make_monitor(self, results, sample_interval=5):
        self.output = io.StringIO()
        self.sampler = MockSampler(results)
        return ActivityMonitor(self.sampler, sample_interval, output=self.output)

    def lines(self) -> List[str]:
        return self.output.getvalue().splitlines()

    async def test_first_sample_is_reported(self):
        monitor = self.make_monitor([TERMINAL])
        line = await monitor.tick()
        self.assertEqual(line, "'Terminal' ([4821] bash)")
        self.assertEqual(self.output.getvalue(), "'Terminal' ([4821] bash)\n")
        self.assertEqual(monitor.last_sample, TERMINAL)

    async def test_repeated_sample_is_reported_once(self):
        monitor = self.make_monitor([TERMINAL, TERMINAL])
        await monitor.tick()
        self.assertIsNone(await monitor.tick())
        self.assertEqual(len(self.lines()), 1)

    async def test_any_field_change_is_reported(self):
        """Test that a change in any single field produces a second line."""
        changes = {
            "window_title": "Editor",
            "pid": 1,
            "process_name": "zsh",
            "screensaver_active": True,
            "idle": True,
        }
        for field_name, value in changes.items():
            with self.subTest(field=field_name):
                changed = dataclasses.replace(TERMINAL, **{field_name: value})
                monitor = self.make_monitor([TERMINAL, changed])
                await monitor.tick()
                await monitor.tick()
                self.assertEqual(len(self.lines()), 2)
                self.assertEqual(monitor.last_sample, changed)

    async def test_screensaver_change(self):
        locked = dataclasses.replace(TERMINAL, screensaver_active=True)
        monitor = self.make_monitor([TERMINAL, locked, locked, TERMINAL])
        for _ in range(4):
            await monitor.tick()
        self.assertEqual(self.lines(), [
            "'Terminal' ([4821] bash)",
            "screensaver",
            "'Terminal' ([4821] bash)",
        ])

    async def test_failure_resets_last_sample(self):
        """Test that a sample after a failure is reported even if unchanged."""
        monitor = self.make_monitor([TERMINAL, ProbeIOError("xdotool missing"), TERMINAL])
        await monitor.tick()
        with self.assertLogs(MONITOR_LOGGER, level="ERROR") as logs:
            self.assertIsNone(await monitor.tick())
        self.assertIsNone(monitor.last_sample)
        self.assertEqual(len(logs.records), 1)
        self.assertIn("io error", logs.output[0])
        self.assertIn("xdotool missing", logs.output[0])

        await monitor.tick()
        self.assertEqual(self.lines(), ["'Terminal' ([4821] bash)"] * 2)

    async def test_sampler_receives_interval(self):
        monitor = self.make_monitor([TERMINAL], sample_interval=7)
        await monitor.tick()
        self.assertEqual(self.sampler.intervals, [7])

    async def test_run_until_stopped(self):
        """Test that run keeps ticking and stops when asked."""
        monitor = self.make_monitor([])
        ticks = []

        async def get_sample(sample_interval):
            ticks.append(sample_interval)
            if len(ticks) == 3:
                monitor.stop()
            return TERMINAL

        self.sampler.get_sample = get_sample
        monitor.sample_interval = 0
        await monitor.run()
        self.assertEqual(len(ticks), 3)
        self.assertEqual(self.lines(), ["'Terminal' ([4821] bash)"])
        self.assertFalse(monitor.running)

    async def test_run_survives_failures(self):
        monitor = self.make_monitor([])
        results = [ProbeIOError("gone"), ProbeParseError("bad pid", "abc"), TERMINAL]

        async def get_sample(sample_interval):
            result = results.pop(0)
            if not results:
                monitor.stop()
            if isinstance(result, Exception):
                raise result
            return result

        self.sampler.get_sample = get_sample
        monitor.sample_interval = 0
        with self.assertLogs(MONITOR_LOGGER, level="ERROR") as logs:
            await monitor.run()
        self.assertEqual(len([r for r in logs.records if r.levelname == "ERROR"]), 2)
        self.assertEqual(self.lines(), ["'Terminal' ([4821] bash)"])


class TestMonitorWithSampler(unittest.IsolatedAsyncioTestCase):
    """End-to-end ticks through a real Sampler and a mocked compositor."""

    def setUp(self):
        """Set up test fixtures."""
        self.compositor = MagicMock(spec=BaseCompositor)
        self.compositor.describe_probe = MagicMock(return_value=None)
        self.compositor.get_active_window_title = AsyncMock(return_value="Terminal")
        self.compositor.get_active_window_pid = AsyncMock(return_value="4821")
        self.compositor.get_process_name = AsyncMock(return_value="bash")
        self.compositor.get_screensaver_status = AsyncMock(return_value="screensaver status: inactive")
        self.compositor.get_idle_time = AsyncMock(return_value="2000")
        self.output = io.StringIO()
        self.monitor = ActivityMonitor(Sampler(self.compositor), 5, output=self.output)

    async def test_example_tick(self):
        await self.monitor.tick()
        self.assertEqual(self.output.getvalue(), "'Terminal' ([4821] bash)\n")
        self.compositor.get_process_name.assert_awaited_once_with("4821")

    async def test_malformed_pid(self):
        """Test that a non-numeric pid emits a diagnostic and no line."""
        await self.monitor.tick()
        self.compositor.get_active_window_pid.return_value = "abc"
        with self.assertLogs(MONITOR_LOGGER, level="ERROR") as logs:
            self.assertIsNone(await self.monitor.tick())
        self.assertEqual(len(logs.records), 1)
        self.assertIn("parse error", logs.output[0])
        self.assertIsNone(self.monitor.last_sample)
        self.assertEqual(self.output.getvalue(), "'Terminal' ([4821] bash)\n")
        self.compositor.get_idle_time.assert_awaited_once()

    async def test_idle_after_interval(self):
        await self.monitor.tick()
        self.compositor.get_idle_time.return_value = "6000"
        await self.monitor.tick()
        self.assertEqual(self.output.getvalue().splitlines(), [
            "'Terminal' ([4821] bash)",
            "'Terminal' ([4821] bash) (idle)",
        ])


if __name__ == '__main__':
    unittest.main()
