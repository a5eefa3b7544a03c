"""
Liquidator daemon entry point: runs the sweep scheduler until SIGINT/SIGTERM.

  python liquidator_main.py liquidator.toml            # Run daemon (blocking)
  python liquidator_main.py liquidator.toml --log-level debug
  python liquidator_main.py --help                     # Show options

The config file is watched and hot-reloaded; an invalid edit pauses
liquidations until the file is fixed.

Environment variables:
  LIQUIDATOR_LOG_LEVEL    Default: "info"  (overridden by [log] level)
  LIQUIDATOR_LOG_FORMAT   Default: "text"  (overridden by [log] format)
"""

import argparse
import logging
import signal
import sys
from typing import Callable, List, Optional

from config.loader import load_config_file
from config.snapshot import ConfigSnapshot
from execution.liquidator import Liquidator
from runtime.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Liquidation sweep daemon")
    parser.add_argument("config_file", help="Path to the TOML config file")
    parser.add_argument("--log-level", default=None, help="debug|info|warning|error|critical")
    parser.add_argument("--log-format", default=None, help="text|json")
    parser.add_argument(
        "--no-watch", action="store_true", help="Do not reload the config file when it changes"
    )
    return parser.parse_args(argv)


def _setup_signal_handlers(liquidator: Liquidator) -> None:
    """Setup graceful shutdown on SIGTERM/SIGINT."""
    def handle_shutdown(signum, frame):
        logger.info(f"Signal {signum} received. Graceful shutdown...")
        liquidator.cancel()

    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)


def main(
    argv: Optional[List[str]] = None,
    config_loader: Callable[[str], ConfigSnapshot] = load_config_file,
    logging_configurator: Callable[[Optional[str], Optional[str]], object] = configure_logging,
) -> int:
    """
    Run the liquidator daemon.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])
        config_loader: Reads the config file into a snapshot
        logging_configurator: Called with (level, format)

    Returns:
        Process exit code: 0 on clean shutdown, 1 on startup failure
    """
    args = _parse_args(argv)

    try:
        snapshot = config_loader(args.config_file)
    except (OSError, ValueError) as e:
        print(f"Error loading config file {args.config_file}: {e}", file=sys.stderr)
        return 1

    level = args.log_level or snapshot.string("log.level") or None
    fmt = args.log_format or snapshot.string("log.format") or None
    try:
        logging_configurator(level, fmt)
    except ValueError as e:
        print(f"Error configuring logging: {e}", file=sys.stderr)
        return 1

    logger.info("=" * 80)
    logger.info("LIQUIDATOR DAEMON STARTUP")
    logger.info(f"Config file: {args.config_file}")
    logger.info("=" * 80)

    liquidator = Liquidator()
    _setup_signal_handlers(liquidator)

    try:
        liquidator.start(
            config_path=args.config_file,
            initial_config=snapshot,
            watch=not args.no_watch,
        )
    except FileNotFoundError as e:
        logger.error(f"Error watching config file: {e}")
        return 1

    logger.info("Liquidator stopped gracefully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
