"""Change detection over successive activity samples.

The ActivityMonitor keeps the last observed Sample and writes a line to its
output stream whenever a new sample differs from it. A failed sampling
attempt forgets the last sample, so the first sample after a failure is
always reported.
"""

import asyncio
import logging
import sys
from typing import Optional, TextIO

from timetrackd.utils.activity.sampler import Sample, Sampler
from timetrackd.utils.exceptions import SampleError

logger = logging.getLogger(__name__)

SCREENSAVER_LINE = "screensaver"
IDLE_SUFFIX = " (idle)"


def format_sample(sample: Sample) -> str:
    """Render a sample as a change log line."""
    if sample.screensaver_active:
        return SCREENSAVER_LINE
    line = f"'{sample.window_title}' ([{sample.pid}] {sample.process_name})"
    if sample.idle:
        line += IDLE_SUFFIX
    return line


class ActivityMonitor:
    """Samples periodically and reports state changes."""

    def __init__(self, sampler: Sampler, sample_interval: int, output: Optional[TextIO] = None) -> None:
        """Initialize the monitor.

        Args:
            sampler: Source of samples.
            sample_interval: Seconds to wait after each tick.
            output: Stream for change lines, stdout by default.
        """
        self.sampler = sampler
        self.sample_interval = sample_interval
        self.output = output if output is not None else sys.stdout
        self.last_sample: Optional[Sample] = None
        self.running = False

    async def tick(self) -> Optional[str]:
        """Take one sample and report it if it differs from the last one.

        Returns:
            The emitted line, or None if nothing was emitted.
        """
        try:
            sample = await self.sampler.get_sample(self.sample_interval)
        except SampleError as e:
            logger.error(f"Error fetching data: {e.kind} error: {e}")
            self.last_sample = None
            return None

        line = None
        if self.last_sample is None or self.last_sample != sample:
            line = format_sample(sample)
            print(line, file=self.output, flush=True)
        self.last_sample = sample
        return line

    async def run(self) -> None:
        """Tick, then sleep for one interval, until stopped."""
        self.running = True
        logger.info(f"Sampling every {self.sample_interval}s")
        while self.running:
            await self.tick()
            if not self.running:
                break
            await asyncio.sleep(self.sample_interval)
        logger.info("Sampling stopped")

    def stop(self) -> None:
        """Stop the loop after the current tick or sleep."""
        self.running = False
