"""Command probe.

Runs one external introspection command and returns its trimmed stdout.
The locale of the child is forced to ``C`` so markers such as "inactive"
do not depend on the host's language settings.
"""

import asyncio
import logging
import os
import shlex
from typing import Dict, Sequence

from timetrackd.utils.exceptions import ProbeDecodeError, ProbeIOError

logger = logging.getLogger(__name__)

PROBE_ENV_OVERRIDES: Dict[str, str] = {"LC_ALL": "C"}


def probe_env() -> Dict[str, str]:
    """Environment for probe commands: the parent's plus the locale override."""
    env = dict(os.environ)
    env.update(PROBE_ENV_OVERRIDES)
    return env


async def get_command_output(command: str, args: Sequence[str] = ()) -> str:
    """Run ``command`` with ``args`` and return its stdout as stripped text.

    The exit status is not checked: some query tools report state through it
    while still printing a usable answer.

    Raises:
        ProbeIOError: the command could not be started or its output read.
        ProbeDecodeError: the output is not valid UTF-8.
    """
    command_line = shlex.join([command, *args])
    try:
        proc = await asyncio.create_subprocess_exec(
            command, *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=probe_env(),
        )
        stdout, stderr = await proc.communicate()
    except OSError as e:
        raise ProbeIOError(f"Failed to run probe: {e}", command=command_line) from e

    if proc.returncode != 0:
        logger.debug(f"Probe exited with status {proc.returncode}: {command_line}")
    if stderr:
        logger.debug(f"Probe stderr from {command_line}: {stderr!r}")

    try:
        text = stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ProbeDecodeError(f"Probe output is not valid UTF-8: {e}", command=command_line) from e

    return text.strip()
