"""
=============================================================================
HTTP SERVER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on port 8080
    python -m minihttp

    # Custom port and document root
    minihttp-server -p 3000 ./public

    # Echo every request header to the console
    minihttp-server -s ./public

Command-line arguments override environment variables (see
ServerConfig.from_env), which override the built-in defaults.

Exit status:
    0   -h, or a client sent "exit"
    1   DOCPATH is not a directory, or the server failed to start

=============================================================================
"""

import argparse
import logging
import os
import sys

from .config import ServerConfig
from .server import HTTPServer


logger = logging.getLogger("minihttp")


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp-server",
        description="Minimal HTTP/1.0 file server",
        epilog=(
            "DOCPATH is the document root path from which resources will be "
            "served. The default is the current working directory."
        ),
    )

    parser.add_argument(
        "-p", "--port",
        type=int,
        default=defaults.port,
        help=f"use TCP port number PORT (default: {defaults.port})",
    )

    parser.add_argument(
        "-s", "--show-headers",
        action="store_true",
        default=defaults.verbose_headers,
        help="display full client request header",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"logging level (default: {defaults.log_level.upper()})",
    )

    parser.add_argument(
        "--date-style",
        choices=["locale", "http"],
        default=defaults.date_style,
        help="format of the Date response header (default: %(default)s)",
    )

    parser.add_argument(
        "docpath",
        nargs="?",
        default=defaults.document_root,
        metavar="DOCPATH",
        help="document root (default: current directory)",
    )

    return parser


def main(argv=None) -> int:
    defaults = ServerConfig.from_env()
    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    if not os.path.isdir(args.docpath):
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: DOCPATH is not a directory: {args.docpath}", file=sys.stderr)
        return 1

    config = ServerConfig(
        document_root=args.docpath,
        host=defaults.host,
        port=args.port,
        verbose_headers=args.show_headers,
        log_level=args.log_level,
        date_style=args.date_style,
    )

    try:
        server = HTTPServer(config)
        server.print_banner()
        server.run()
    except Exception as e:
        logger.exception(f"Server error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
