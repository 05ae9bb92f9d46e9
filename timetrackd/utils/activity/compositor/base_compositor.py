# timetrackd/utils/activity/compositor/base_compositor.py
import abc
from typing import Optional


class BaseCompositor(abc.ABC):
    """Abstract base class for window-system backends.

    Each method runs one probe and returns its raw, stripped text. Parsing is
    left to the sampler so every backend reports in the same shape.
    """

    def describe_probe(self, probe: str) -> Optional[str]:
        """Get the command line behind a probe, for diagnostics.

        Args:
            probe: The probe method name without its ``get_`` prefix,
                e.g. "active_window_pid".

        Returns:
            The command line, or None if the backend does not run commands.
        """
        return None

    @abc.abstractmethod
    async def get_active_window_title(self) -> str:
        """Get the title of the currently focused window."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_active_window_pid(self) -> str:
        """Get the process id owning the focused window, as decimal text."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_process_name(self, pid: str) -> str:
        """Get the command name of a process.

        Args:
            pid: The process id exactly as returned by get_active_window_pid.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def get_screensaver_status(self) -> str:
        """Get the screensaver query output, containing "inactive" when unlocked."""
        raise NotImplementedError

    @abc.abstractmethod
    async def get_idle_time(self) -> str:
        """Get the time since the last user input in milliseconds, as decimal text."""
        raise NotImplementedError
