"""
Interactive console client.

Prompts for the session parameters, runs the request, and asks whether to
run another session. Answering anything starting with "n" quits.

    minihttp-client [--port PORT] [--log-level LEVEL]
"""

import argparse
import logging
import sys
import traceback
from typing import Callable, Optional

from .client import (
    ClientSessionParams,
    HTTPClient,
    DEFAULT_HTTP_VERSION,
    DEFAULT_METHOD,
    DEFAULT_PORT,
    DEFAULT_USER_AGENT,
)


def read_session_params(
    port: int = DEFAULT_PORT,
    prompt: Optional[Callable[[str], str]] = None,
) -> ClientSessionParams:
    """Ask the operator for one session's parameters, applying defaults."""
    prompt = prompt or input

    host = prompt("Enter host name or IP address: ").strip()
    method = prompt(f'Enter HTTP method type (default is "{DEFAULT_METHOD}"): ').strip()
    version = prompt(f'Enter HTTP version (default is "{DEFAULT_HTTP_VERSION}"): ').strip()
    resource = prompt(f"Enter resource name: http://{host}:{port}/").strip()
    user_agent = prompt(f'Enter User-Agent string (default is "{DEFAULT_USER_AGENT}"): ').strip()

    return ClientSessionParams(
        host=host,
        resource_path=resource,
        method=method or DEFAULT_METHOD,
        http_version=version or DEFAULT_HTTP_VERSION,
        user_agent=user_agent or DEFAULT_USER_AGENT,
        port=port,
    )


def run(client: HTTPClient, port: int = DEFAULT_PORT, prompt: Optional[Callable[[str], str]] = None):
    """Run sessions until the operator answers the continue prompt with "n..."."""
    prompt = prompt or input

    while True:
        client.run_session(read_session_params(port, prompt))

        answer = prompt("Run another session (y/n)? ")
        if answer.strip().lower().startswith("n"):
            break


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="minihttp-client",
        description="Interactive HTTP/1.x client: fetch a resource and save it locally",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=DEFAULT_PORT,
        help=f"Server TCP port (default: {DEFAULT_PORT})",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        run(HTTPClient(), port=args.port)
    except (EOFError, KeyboardInterrupt):
        print()
        return 0
    except Exception:
        traceback.print_exc()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
