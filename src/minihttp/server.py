"""
=============================================================================
MAIN HTTP SERVER
=============================================================================

Ties the pieces together into a running file server.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        │  (Orchestrator) │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────────┐    │
    │    │ SocketServer │    │  Shutdown    │    │ ResourceResolver │    │
    │    │ (accept loop)│    │  Controller  │    │  RequestParser   │    │
    │    └──────┬───────┘    └──────────────┘    └──────────────────┘    │
    │           │ one new thread per connection                           │
    │           ▼                                                         │
    │    ┌──────────────┐                                                 │
    │    │SessionHandler│  read → parse → resolve → respond → close      │
    │    └──────────────┘                                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST FLOW
=============================================================================

    1. SocketServer accepts a TCP connection
    2. HTTPServer spawns a thread running SessionHandler.run()
    3. The session reads the request line and header block
    4. RequestParser → ResourceResolver → response
    5. Response written and flushed, connection closed, thread exits

=============================================================================
"""

import logging
import threading
from typing import Optional

from .config import ServerConfig
from .core import SocketServer, ShutdownController, Connection
from .http import RequestParser, ResourceResolver
from .session import SessionHandler


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Thread-per-connection HTTP/1.0 file server.

    Usage:
        server = HTTPServer(ServerConfig(document_root="./public"))
        server.run()   # blocks until "exit", Ctrl+C or stop()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self.shutdown_controller = ShutdownController()
        self._socket_server = SocketServer(self.config, self.shutdown_controller)

        # Shared read-only collaborators for every session
        self._resolver = ResourceResolver(self.config.document_root)
        self._parser = RequestParser()

        self._sessions_started = 0
        self._running = False

    @property
    def address(self):
        """Bound (host, port)."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, configure_logging: bool = True):
        """
        Start the server (blocking).

        Returns once shutdown has been requested and the listening socket
        is closed. Sessions still in flight finish on their own threads.

        Args:
            configure_logging: Install the root logging configuration.
        """
        if configure_logging:
            self._setup_logging()

        self.shutdown_controller.reset()
        self._running = True

        try:
            self._socket_server.start(self._handle_connection)
        finally:
            self._running = False
            logger.info(
                f"Server stopped ({self.shutdown_controller.reason or 'listener closed'}), "
                f"{self._sessions_started} sessions served"
            )

    def stop(self, reason: str = "stop() called"):
        """Request shutdown from another thread."""
        self._socket_server.shutdown(reason)

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_listening(timeout)

    def print_banner(self):
        """Print server startup information."""
        host, port = self.config.host or "0.0.0.0", self.config.port
        print(self.config.server_name)
        print("-" * len(self.config.server_name))
        print(f"TCP Port:\t\t{port}")
        print(f"Listen address:\t\t{host}")
        print(f"Document root:\t\t\"{self.config.root_path}\"")
        print("\nWaiting for connections...")

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttp").setLevel(level)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a fresh worker thread for ``conn``.

        Called on the accept thread, so it only spawns and returns.
        """
        handler = SessionHandler(
            conn,
            self.config,
            shutdown=self.shutdown_controller,
            resolver=self._resolver,
            parser=self._parser,
        )

        self._sessions_started += 1
        worker = threading.Thread(
            target=handler.run,
            name=f"session-{conn.id}",
        )
        worker.start()
