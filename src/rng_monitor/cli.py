"""Command-line entry point: ``rng-monitor``.

Loads settings from the environment, applies command-line overrides,
configures logging, and serves the API (with scheduled generation) via
uvicorn.
"""

from __future__ import annotations

import argparse
import logging
from typing import Any

from rng_monitor.config import MonitorConfig

logger = logging.getLogger("rng_monitor")


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``rng-monitor``."""
    parser = argparse.ArgumentParser(
        prog="rng-monitor",
        description="Sample the OS CSPRNG every minute and serve randomness-quality statistics.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  %(prog)s                          # 0.0.0.0:3000, SQLite at ./rng_monitor.db
  %(prog)s --port 8080              # Custom port
  %(prog)s --db /var/lib/rng.db     # Custom database file
  %(prog)s --memory                 # Keep samples in memory only
  %(prog)s --no-scheduler           # Serve queries without generating

Every setting can also be given as an RNG_* environment variable.
""",
    )
    parser.add_argument("--host", type=str, default=None, help="Bind host (default: 0.0.0.0).")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: 3000).")
    parser.add_argument("--db", type=str, default=None, help="SQLite database file.")
    parser.add_argument(
        "--memory",
        action="store_true",
        help="Use the in-memory store instead of SQLite.",
    )
    parser.add_argument(
        "--no-scheduler",
        action="store_true",
        help="Do not generate samples; only serve the query API.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> MonitorConfig:
    """Build a MonitorConfig where explicit flags override the environment."""
    overrides: dict[str, Any] = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.db is not None:
        overrides["database_path"] = args.db
    if args.memory:
        overrides["store_backend"] = "memory"
    if args.no_scheduler:
        overrides["scheduler_enabled"] = False
    return MonitorConfig(**overrides)


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and serve until interrupted."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    import uvicorn

    from rng_monitor.api.app import create_app

    config = config_from_args(args)
    app = create_app(config)
    logger.info("rng-monitor listening on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    main()
