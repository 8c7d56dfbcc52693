"""
=============================================================================
MINIHTTP - A Minimal HTTP/1.x File Server and Client
=============================================================================

A small HTTP implementation on raw Python sockets: a thread-per-connection
server that serves files from a document root, and a console client that
fetches one resource per session and saves it locally.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    minihttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # Server CLI (python -m minihttp)
    ├── server.py            # HTTPServer orchestrator
    ├── session.py           # Per-connection state machine
    ├── config.py            # ServerConfig dataclass
    ├── client.py            # RequestEncoder, ResponseDecoder, HTTPClient
    ├── console.py           # Interactive client CLI
    ├── core/
    │   ├── socket_server.py # Accept loop + ShutdownController
    │   └── connection.py    # Buffered socket I/O
    └── http/
        ├── request.py       # Request line parsing
        ├── headers.py       # Header block framing
        ├── resolver.py      # URL path → file, with containment check
        ├── response.py      # Response serialization
        └── status_codes.py  # HTTPStatus enum

=============================================================================
QUICK START
=============================================================================

    from minihttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(document_root="./public", port=8080))
    server.run()

    from minihttp import HTTPClient, ClientSessionParams

    HTTPClient().run_session(ClientSessionParams("localhost", "index.html"))

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig
from .client import HTTPClient, ClientSessionParams

__all__ = ["HTTPServer", "ServerConfig", "HTTPClient", "ClientSessionParams", "__version__"]
