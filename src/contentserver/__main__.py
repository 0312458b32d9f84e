"""
=============================================================================
CONTENT SERVER CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:7878, bundled pages)
    python -m contentserver

    # Serve your own pages
    python -m contentserver --root ./public

    # Four worker threads, read each request up to its blank line
    python -m contentserver --workers 4 --full-read

Environment variables (CONTENTSERVER_*) provide the defaults; command-line
arguments override them.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig, LOG_FORMATS
from .errors import BindError
from .server import ContentServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contentserver",
        description="Minimal two-page HTTP/1.1 content server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  contentserver                          # Run with defaults
  contentserver --port 3000              # Custom port
  contentserver --root ./public          # Serve hello.html / 404.html from ./public
  contentserver --workers 4              # Serve connections on 4 worker threads
  contentserver --full-read              # Read up to the blank line, reject oversized requests
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.timeout or 0,
        help="Per-connection read/write deadline in seconds, 0 for none"
    )

    # ─────────────────────────────────────────────────────────────────────
    # STORAGE / REQUEST ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.document_root,
        help="Directory holding hello.html and 404.html (default: bundled pages)"
    )

    parser.add_argument(
        "--buffer-size",
        type=int,
        default=defaults.buffer_size,
        help=f"Request buffer size in bytes (default: {defaults.buffer_size})"
    )

    read_mode = parser.add_mutually_exclusive_group()
    read_mode.add_argument(
        "--single-read",
        action="store_true",
        default=defaults.single_read,
        help="Read each request with one bounded recv(); larger requests are truncated (default)"
    )
    read_mode.add_argument(
        "--full-read",
        dest="single_read",
        action="store_false",
        default=defaults.single_read,
        help="Read until the blank line ending the headers; oversized requests are rejected"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY / LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.workers,
        help=f"Worker threads, 0 serves connections sequentially (default: {defaults.workers})"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"contentserver {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout if args.timeout > 0 else None,
        document_root=args.root,
        buffer_size=args.buffer_size,
        max_request_size=max(ServerConfig.max_request_size, args.buffer_size),
        single_read=args.single_read,
        workers=args.workers,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv=None) -> int:
    """Parse arguments, build the server and run it until shutdown."""
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        build_parser(ServerConfig()).error(f"invalid CONTENTSERVER_* environment: {e}")

    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        server = ContentServer(config)
    except ValueError as e:
        parser.error(str(e))

    try:
        server.run()
    except BindError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
