"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Listens for TCP connections and hands each one off. It knows nothing about
HTTP; the callback given to start() does the rest.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a socket file descriptor
    2. bind()      Associate the socket with an IP:PORT
    3. listen()    Mark socket as a "listening" socket
    4. accept()    Wait for a connection; returns a NEW socket per client
    5. close()     Release the listening socket

=============================================================================
STOPPING THE ACCEPT LOOP
=============================================================================

accept() blocks. To be able to stop, the listening socket gets a short
timeout, and each time accept() gives up the loop checks the shared
ShutdownController:

    while not shutdown requested:
        try:
            accept()            # Blocks for accept_timeout seconds max
        except timeout:
            continue            # Check the controller, loop again

Anyone can request shutdown: a signal handler (Ctrl+C, SIGTERM), another
thread, or a client session that received "exit". The loop notices within
one accept_timeout, leaves, and closes the listening socket.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class ShutdownController:
    """
    Process-wide "please stop" flag shared by the accept loop and sessions.

    A thin wrapper around threading.Event that also remembers why shutdown
    was requested.
    """

    def __init__(self):
        self._event = threading.Event()
        self.reason: Optional[str] = None

    def request(self, reason: str = "shutdown requested"):
        """Ask the accept loop to stop. Safe to call from any thread, repeatedly."""
        if not self._event.is_set():
            self.reason = reason
            logger.info(f"Shutdown requested: {reason}")
        self._event.set()

    @property
    def requested(self) -> bool:
        return self._event.is_set()

    def reset(self):
        self.reason = None
        self._event.clear()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig, shutdown: Optional[ShutdownController] = None):
        self.config = config
        self.shutdown_controller = shutdown or ShutdownController()

        # The actual socket object (created in start())
        self._socket: Optional[socket.socket] = None

        # Set once the socket is listening; tests wait on this
        self._listening = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._listening.is_set() and not self.shutdown_controller.requested

    @property
    def address(self) -> Tuple[str, int]:
        """The bound address (IP, port); the real port even if config.port is 0."""
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return host, port
        return self.config.host, self.config.port

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Avoid "Address already in use" while the old socket sits in TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Bounded accept() so the loop can observe shutdown
        sock.settimeout(self.config.accept_timeout)

        return sock

    def _setup_signals(self):
        """
        Route SIGINT (Ctrl+C) and SIGTERM to a graceful shutdown.

        Signal handlers can only be installed from the main thread; when the
        server runs in a worker thread (tests, embedding) this is skipped.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            self.shutdown(f"received {signal_name}")

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown is requested.

        This method BLOCKS.

        Args:
            connection_handler: Called on the accept thread with each new
                                Connection. It must return quickly (spawn a
                                worker) or it stalls the accept loop.

        Raises:
            OSError: If binding fails, or accept() fails while running.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host or '0.0.0.0'}:{port}")
        self._listening.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while not self.shutdown_controller.requested:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: re-check the shutdown flag
                continue
            except OSError as e:
                if self.shutdown_controller.requested:
                    break
                logger.error(f"Accept error: {e}")
                raise

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(socket=client_socket, address=client_address)
            connection_handler(conn)

    def shutdown(self, reason: str = "shutdown requested"):
        """Initiate graceful shutdown. Idempotent."""
        self.shutdown_controller.request(reason)

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            self._socket.close()
            self._socket = None

        self._listening.clear()
        logger.info("Socket server stopped")

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is bound and listening."""
        return self._listening.wait(timeout)
