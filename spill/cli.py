"""
Spill Command Line
"""

from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from spill import __version__
from spill.config import SpillConfig, parse_port, setup_logging
from spill.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CALLBACK_PORT,
    DEFAULT_LISTEN_HOST,
    DEFAULT_TARGET_PORT,
)
from spill.errors import SpillError
from spill.node import SpillNode

logger = logging.getLogger(__name__)

BANNER = r"""
      . .
      .. . *.
- -_ _-__-0oOo
 _-_ -__ -||||)
    ______||||______
~~~~~~~~~~^""' Spill
"""


def print_banner() -> None:
    print(BANNER)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spill",
        description="Advertise a fake IPP printer over UDP and log who calls back",
    )
    parser.add_argument("--target", "-t", type=str,
                        help="Target IP address, CIDR network, or filename to scan")
    parser.add_argument("--port", "-p", type=str,
                        help=f"Target UDP port (default: {DEFAULT_TARGET_PORT})")
    parser.add_argument("--dest", "-d", type=str,
                        help="IP address for callbacks")
    parser.add_argument("--destport", type=str,
                        help=f"TCP port to listen on for HTTP callbacks (default: {DEFAULT_CALLBACK_PORT})")
    parser.add_argument("--listen", type=str,
                        help=f"Address the callback listener binds to (default: {DEFAULT_LISTEN_HOST})")
    parser.add_argument("--batch-size", "-b", type=int,
                        help=f"Packets sent concurrently per batch (default: {DEFAULT_BATCH_SIZE})")
    parser.add_argument("--config", "-c", type=str, help="Path to JSON config file")
    parser.add_argument("--log-level", type=str, help="Log level (default: INFO)")
    parser.add_argument("--log-file", type=str, help="Also log to this file")
    parser.add_argument("--no-banner", action="store_true", help="Do not print the banner")
    parser.add_argument("--no-wait", action="store_true",
                        help="Exit after dispatch instead of waiting for callbacks")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def config_from_args(args: argparse.Namespace) -> SpillConfig:
    """
    Build the run configuration. Command line values override the file.

    Raises:
        ConfigFileError: Config file unreadable
        InvalidPortError: Port flag is not a valid port
    """
    config = SpillConfig.load(args.config) if args.config else SpillConfig()

    if args.target:
        config.target = args.target
    if args.port is not None:
        config.dispatch.target_port = parse_port(args.port)
    if args.batch_size is not None:
        config.dispatch.batch_size = args.batch_size
    if args.dest:
        config.listener.callback_host = args.dest
    if args.destport is not None:
        config.listener.port = parse_port(args.destport)
    if args.listen:
        config.listener.host = args.listen
    if args.log_level:
        config.log.level = args.log_level
    if args.log_file:
        config.log.file = args.log_file
    if args.no_wait:
        config.wait_forever = False

    return config


async def _run(node: SpillNode) -> None:
    node.install_signal_handlers()
    await node.run()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.no_banner:
        print_banner()

    try:
        config = config_from_args(args)
    except SpillError as e:
        setup_logging(SpillConfig().log)
        logger.error(e.message)
        return 1

    setup_logging(config.log)

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        parser.print_usage(sys.stderr)
        return 1

    node = SpillNode(config)

    try:
        asyncio.run(_run(node))
    except SpillError as e:
        logger.error(e.message)
        return 1
    except KeyboardInterrupt:
        pass

    return 0
