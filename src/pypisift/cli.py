"""CLI entry point for the PyPISift server."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from pypisift import __version__

CONFIG_ENV_VAR = "PYPISIFT_CONFIG"


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point for the PyPISift server."""
    args = build_parser().parse_args(argv)

    log_level = (args.log_level or "info").upper()
    logging.basicConfig(
        level=getattr(logging, log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    from pypisift.config.settings import Settings

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        settings = Settings.from_yaml(config_path)
        # Worker processes rebuild settings through the app factory.
        os.environ[CONFIG_ENV_VAR] = str(config_path.resolve())
    else:
        settings = Settings()

    if args.log_level:
        os.environ["PYPISIFT_OBSERVABILITY__LOG_LEVEL"] = args.log_level

    import uvicorn

    uvicorn.run(
        "pypisift.api.app:create_app",
        factory=True,
        host=args.host or settings.server.host,
        port=args.port or settings.server.port,
        workers=1 if args.reload else (args.workers or settings.server.workers),
        reload=args.reload,
        log_level=log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pypisift",
        description="PyPISift — legacy PyPI XML-RPC search over OpenSearch",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to YAML configuration file")
    parser.add_argument("--host", type=str, default=None, help="Server bind address (overrides config)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Server port (overrides config)")
    parser.add_argument("--workers", "-w", type=int, default=None, help="Number of worker processes")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument("--version", action="version", version=f"PyPISift {__version__}")
    return parser


if __name__ == "__main__":
    main()
