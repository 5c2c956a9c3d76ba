#!/usr/bin/env python3
"""IPMI power control over HTTP."""

import argparse
import asyncio
import logging
import signal
import sys

import yaml

from constants import DEFAULT_CONFIG_FILE
from ipmi_power_http_app import IpmiPowerHttp

__version__ = "0.2.0"

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Query and control server power via ipmitool over HTTP")
    parser.add_argument("-c", "--config-file", default=DEFAULT_CONFIG_FILE, help="path to the YAML configuration")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


async def main(config_file: str):
    """Main entry point."""
    app = IpmiPowerHttp.from_config_file(config_file)
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()
    failure = []

    async def runner():
        try:
            await app.start()
        except asyncio.CancelledError:
            pass
        except OSError as e:
            logger.error(f"Failed to start server: {e}")
            failure.append(e)
        finally:
            await app.stop()
            stop_event.set()

    task = loop.create_task(runner())

    def _shutdown():
        if not task.done():
            logger.info("Shutting down...")
            task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _shutdown)
        except NotImplementedError:
            pass

    await stop_event.wait()
    return 1 if failure else 0


def run(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        return asyncio.run(main(args.config_file))
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error(f"Configuration error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(run())
