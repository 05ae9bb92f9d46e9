"""Main entry point for the activity sampler."""
import argparse
import asyncio
import signal
import sys
from pathlib import Path
from typing import List, Optional

from timetrackd.utils.activity.compositor.x11 import X11Compositor
from timetrackd.utils.activity.monitor import ActivityMonitor
from timetrackd.utils.activity.sampler import Sampler
from timetrackd.utils.config import Config, load_config
from timetrackd.utils.exceptions import ConfigError
from timetrackd.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="timetrackd",
        description="Print a line whenever the active window, idle or screensaver state changes.",
    )
    parser.add_argument("--config", type=Path, default=None,
                        help="Path to the TOML config file (default: $XDG_CONFIG_HOME/timetrackd.toml)")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="Also write log records to this file")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


def create_monitor(config: Config) -> ActivityMonitor:
    """Wire the X11 backend, sampler and monitor together."""
    sampler = Sampler(X11Compositor())
    return ActivityMonitor(sampler, config.sample_interval)


async def async_main(config: Config) -> None:
    """Async main entry point."""
    monitor = create_monitor(config)
    run_task = asyncio.create_task(monitor.run())

    def shutdown() -> None:
        logger.info("Shutting down")
        monitor.stop()
        run_task.cancel()

    loop = asyncio.get_running_loop()
    signals = (signal.SIGTERM, signal.SIGINT)
    for s in signals:
        loop.add_signal_handler(s, shutdown)

    try:
        await run_task
    except asyncio.CancelledError:
        pass
    finally:
        for s in signals:
            loop.remove_signal_handler(s)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(development=args.debug, log_file=args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"Could not load config: {e}")
        return 1
    logger.info(f"Config: {config}")

    try:
        asyncio.run(async_main(config))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
