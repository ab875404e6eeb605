"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

Run the server with:

    python -m shipserve 127.0.0.1:3000
    python -m shipserve 0.0.0.0:8080 --mode sequential
    python -m shipserve 127.0.0.1:3000 --workers 8 --public-dir ./public

Exit status:
    0  server stopped normally (Ctrl+C / SIGTERM)
    1  listen address could not be bound, or invalid configuration
    2  invalid command-line arguments (argparse)

=============================================================================
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ConfigError, LOG_FORMATS, MODES, ServerConfig, parse_address
from .core import ListenBindError
from .server import HTTPServer


logger = logging.getLogger("shipserve")


def _address(value: str):
    """argparse type for HOST:PORT."""
    try:
        return parse_address(value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="shipserve",
        description="Shipping-orders HTTP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m shipserve 127.0.0.1:3000                     # Worker pool (default)
  python -m shipserve 127.0.0.1:3000 --mode sequential   # One connection at a time
  python -m shipserve 0.0.0.0:3000 --workers 8           # 8 worker threads
  python -m shipserve 127.0.0.1:3000 --data-dir ./data   # Custom orders.json location
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "address",
        type=_address,
        help="Listen address as HOST:PORT (e.g. 127.0.0.1:3000)"
    )

    parser.add_argument(
        "--buffer-size",
        type=int,
        default=None,
        help="Bytes read per request; larger requests are truncated (default: 1024)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--mode",
        choices=MODES,
        default=None,
        help="Connection handling: sequential or worker pool (default: $SHIPSERVE_MODE or pool)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=None,
        help="Number of worker threads in pool mode (default: $SHIPSERVE_WORKERS or 4)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--public-dir",
        default=None,
        help="Directory of static pages (default: $SHIPSERVE_PUBLIC_DIR or bundled public/)"
    )

    parser.add_argument(
        "--data-dir",
        default=None,
        help="Directory containing orders.json (default: $SHIPSERVE_DATA_DIR or bundled data/)"
    )

    parser.add_argument(
        "--api-prefix",
        default="api",
        help="First path segment of the JSON API (default: api)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: $SHIPSERVE_LOG_LEVEL or INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="text",
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"shipserve {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """
    Translate parsed arguments into a ServerConfig.

    Options not given on the command line fall back to the environment,
    then to the ServerConfig defaults. The address is always given, so
    SHIPSERVE_HOST and SHIPSERVE_PORT are never consulted here.

    Raises:
        ConfigError: If an environment variable that is needed is invalid.
    """
    host, port = args.address
    given = {
        "host": host,
        "port": port,
        "buffer_size": args.buffer_size,
        "mode": args.mode,
        "workers": args.workers,
        "api_prefix": args.api_prefix,
        "public_dir": args.public_dir,
        "data_dir": args.data_dir,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }

    return ServerConfig.from_env(**{k: v for k, v in given.items() if v is not None})


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # ─────────────────────────────────────────────────────────────────────
    # RUN SERVER
    # ─────────────────────────────────────────────────────────────────────
    # Blocks until Ctrl+C or SIGTERM

    try:
        server.run()
    except ListenBindError as e:
        logger.error(f"Could not start server: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
