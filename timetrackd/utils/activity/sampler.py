"""Activity sampling.

A Sampler runs the compositor's probes in a fixed order and assembles one
Sample from their output. Either every probe succeeds and a complete Sample
is returned, or the first failure is raised and nothing is returned.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from timetrackd.utils.activity.compositor.base_compositor import BaseCompositor
from timetrackd.utils.exceptions import ProbeParseError

logger = logging.getLogger(__name__)

PID_MAX = 2 ** 32 - 1
IDLE_TIME_MAX = 2 ** 128 - 1

SCREENSAVER_INACTIVE_MARKER = "inactive"

_UNSIGNED_RE = re.compile(r"\+?[0-9]+")


@dataclass(frozen=True)
class Sample:
    """Snapshot of desktop activity at one instant."""
    window_title: str
    pid: int
    process_name: str
    screensaver_active: bool
    idle: bool


def parse_unsigned(text: str, field_name: str, maximum: int, command: Optional[str] = None) -> int:
    """Parse decimal text as an unsigned integer no larger than ``maximum``.

    Only ASCII digits with an optional leading '+' are accepted.
    """
    if not _UNSIGNED_RE.fullmatch(text):
        raise ProbeParseError(f"Invalid {field_name}: {text!r} is not an unsigned integer", text, command=command)
    value = int(text)
    if value > maximum:
        raise ProbeParseError(f"Invalid {field_name}: {text!r} is out of range", text, command=command)
    return value


def is_screensaver_active(status: str) -> bool:
    # Anything without the marker, including empty output, counts as active
    return SCREENSAVER_INACTIVE_MARKER not in status


def is_idle(idle_time_ms: int, sample_interval: int) -> bool:
    """Whether the user has been idle for longer than one sample interval."""
    return idle_time_ms > sample_interval * 1000


class Sampler:
    """Builds Samples from a compositor's probes."""

    def __init__(self, compositor: BaseCompositor) -> None:
        self.compositor = compositor

    async def get_sample(self, sample_interval: int) -> Sample:
        """Take one sample.

        Args:
            sample_interval: The sampling interval in seconds, used to decide
                whether the user counts as idle.

        Raises:
            SampleError: if any probe fails or its output cannot be parsed.
        """
        window_title = await self.compositor.get_active_window_title()
        pid_text = await self.compositor.get_active_window_pid()
        pid = parse_unsigned(
            pid_text, "process id", PID_MAX,
            command=self.compositor.describe_probe("active_window_pid"),
        )
        process_name = await self.compositor.get_process_name(pid_text)
        screensaver_active = is_screensaver_active(
            await self.compositor.get_screensaver_status()
        )
        idle_time = parse_unsigned(
            await self.compositor.get_idle_time(), "idle time", IDLE_TIME_MAX,
            command=self.compositor.describe_probe("idle_time"),
        )

        sample = Sample(
            window_title=window_title,
            pid=pid,
            process_name=process_name,
            screensaver_active=screensaver_active,
            idle=is_idle(idle_time, sample_interval),
        )
        logger.debug(f"Sampled {sample} (idle for {idle_time} ms)")
        return sample
