"""CLI entry point for the shelfbrowse server."""

from __future__ import annotations

import argparse
import os
import socket
import sys
from pathlib import Path


def main() -> None:
    """Main CLI entry point for the shelfbrowse server."""
    parser = argparse.ArgumentParser(
        prog="shelfbrowse",
        description="shelfbrowse — Virtual shelf browse over a Solr call-number index",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
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
    parser.add_argument("--version", action="version", version=f"shelfbrowse {_get_version()}")

    args = parser.parse_args()

    from pydantic import ValidationError

    from shelfbrowse.api.app import CONFIG_FILE_ENV
    from shelfbrowse.config.settings import Settings

    # workers build their own app, so overrides travel through the environment
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        os.environ[CONFIG_FILE_ENV] = str(config_path.resolve())
    if args.log_level:
        os.environ["SHELFBROWSE_OBSERVABILITY__LOG_LEVEL"] = args.log_level

    try:
        settings = Settings.from_yaml(args.config) if args.config else Settings()
    except ValidationError as e:
        print(f"Error: invalid configuration:\n{e}", file=sys.stderr)
        sys.exit(1)

    host = args.host or settings.server.host
    port = args.port or settings.server.port
    workers = args.workers or settings.server.workers
    log_level = args.log_level or settings.observability.log_level

    _check_port(host, port)

    import uvicorn

    uvicorn.run(
        "shelfbrowse.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        workers=workers if not args.reload else 1,
        reload=args.reload,
        log_level=log_level.lower(),
    )


def _check_port(host: str, port: int) -> None:
    """Exit with a message if the port is already taken."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host if host != "0.0.0.0" else "127.0.0.1", port))
    except OSError:
        print(f"Error: Port {port} is already in use. Run 'lsof -i :{port}' to find the process.", file=sys.stderr)
        sys.exit(1)
    finally:
        sock.close()


def _get_version() -> str:
    """Get the package version."""
    try:
        from shelfbrowse import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
