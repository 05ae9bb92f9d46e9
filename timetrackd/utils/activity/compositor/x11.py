# timetrackd/utils/activity/compositor/x11.py
import shlex
from typing import List, Optional

from timetrackd.utils.activity.compositor.base_compositor import BaseCompositor
from timetrackd.utils.activity.probe import get_command_output


class X11Compositor(BaseCompositor):
    """Compositor implementation for X11 sessions using command line tools."""

    WINDOW_QUERY_COMMAND = "xdotool"
    PROCESS_LIST_COMMAND = "ps"
    SCREENSAVER_COMMAND = "gnome-screensaver-command"
    IDLE_TIME_COMMAND = "xprintidle"

    WINDOW_TITLE_ARGS = ["getactivewindow", "getwindowname"]
    WINDOW_PID_ARGS = ["getactivewindow", "getwindowpid"]
    SCREENSAVER_ARGS = ["-q"]
    IDLE_TIME_ARGS: List[str] = []

    def describe_probe(self, probe: str) -> Optional[str]:
        commands = {
            "active_window_title": [self.WINDOW_QUERY_COMMAND, *self.WINDOW_TITLE_ARGS],
            "active_window_pid": [self.WINDOW_QUERY_COMMAND, *self.WINDOW_PID_ARGS],
            "screensaver_status": [self.SCREENSAVER_COMMAND, *self.SCREENSAVER_ARGS],
            "idle_time": [self.IDLE_TIME_COMMAND, *self.IDLE_TIME_ARGS],
        }
        command = commands.get(probe)
        return shlex.join(command) if command else None

    async def get_active_window_title(self) -> str:
        return await get_command_output(self.WINDOW_QUERY_COMMAND, self.WINDOW_TITLE_ARGS)

    async def get_active_window_pid(self) -> str:
        return await get_command_output(self.WINDOW_QUERY_COMMAND, self.WINDOW_PID_ARGS)

    async def get_process_name(self, pid: str) -> str:
        return await get_command_output(
            self.PROCESS_LIST_COMMAND, ["-p", pid, "-o", "comm="]
        )

    async def get_screensaver_status(self) -> str:
        return await get_command_output(self.SCREENSAVER_COMMAND, self.SCREENSAVER_ARGS)

    async def get_idle_time(self) -> str:
        return await get_command_output(self.IDLE_TIME_COMMAND, self.IDLE_TIME_ARGS)
