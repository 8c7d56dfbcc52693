"""
=============================================================================
SERVER SESSION
=============================================================================

One accepted connection, processed start to finish by a single worker
thread.

=============================================================================
SESSION STATE MACHINE
=============================================================================

Linear, no backtracking:

    AWAIT_REQUEST_LINE ──► READ_HEADERS ──► DISPATCH ──┬──► RESPOND ───┐
            │                                          │               │
            │ (EOF: nothing to answer)                 └──► TERMINATE ─┤
            │                                                          ▼
            └───────────────────────────────────────────────────► CLOSED

    AWAIT_REQUEST_LINE  Blocking read of the first line.
    READ_HEADERS        Read (and optionally echo) header lines up to the
                        blank line. Their content is not used.
    DISPATCH            Parse the request line and pick the response:
                          GET          → resolve under the document root
                          DELETE/HEAD/
                          POST/PUT     → 501
                          exit         → 200, then stop the server
                          unknown      → 400
                          empty        → no response at all
    RESPOND/TERMINATE   Send the response (flushed).
    CLOSED              Close output, input, socket.

=============================================================================
TRUST BOUNDARY: THE "exit" KEYWORD
=============================================================================

Any client that can connect can send "exit" and stop the server. There is
no authentication. It is an operator convenience for local use,
not a feature to expose on an untrusted network.

"exit" closes the listener; it does not cut short sessions already in
flight. Workers are non-daemon threads and session reads have no timeout,
so a client that connected earlier and then stalls keeps the process alive
until it sends its request or disconnects.

=============================================================================
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .config import ServerConfig
from .core.connection import Connection
from .core.socket_server import ShutdownController
from .http.headers import read_header_block
from .http.request import HTTPParseError, RequestParser
from .http.resolver import ResourceResolver
from .http.response import HTTPResponse, ok, not_implemented, response_for


logger = logging.getLogger(__name__)


class SessionState(Enum):
    AWAIT_REQUEST_LINE = "await_request_line"
    READ_HEADERS = "read_headers"
    DISPATCH = "dispatch"
    RESPOND = "respond"
    TERMINATE = "terminate"
    CLOSED = "closed"


class SessionHandler:
    """
    Runs the request/response exchange for one connection.

    The handler only reads the shared config, resolver and parser, so many
    sessions can run side by side without locking.

    Usage:
        handler = SessionHandler(conn, config, shutdown=controller)
        threading.Thread(target=handler.run).start()
    """

    def __init__(
        self,
        connection: Connection,
        config: ServerConfig,
        shutdown: Optional[ShutdownController] = None,
        resolver: Optional[ResourceResolver] = None,
        parser: Optional[RequestParser] = None,
        console: Callable[[str], None] = print,
    ):
        self.connection = connection
        self.config = config
        self.shutdown = shutdown
        self.resolver = resolver or ResourceResolver(config.document_root)
        self.parser = parser or RequestParser()
        self.console = console

        self.state = SessionState.AWAIT_REQUEST_LINE
        self.response: Optional[HTTPResponse] = None

    def run(self):
        """
        Thread entry point: the session's error boundary.

        Nothing raised here reaches the accept loop or sibling sessions;
        failures are logged with their traceback and the session ends.
        """
        conn = self.connection
        try:
            self.complete_session()
        except Exception as e:
            logger.exception(f"[{conn.id}] Session with {conn.peer} failed: {e}")
        finally:
            if not conn.is_closed:
                try:
                    conn.close()
                except OSError as e:
                    logger.warning(f"[{conn.id}] Close after failure also failed: {e}")
            self.state = SessionState.CLOSED

    def complete_session(self):
        """
        Read one request, answer it and close the connection.

        Raises:
            OSError: Transport failures, including errors while closing.
        """
        conn = self.connection

        # ─────────────────────────────────────────────────────────────────
        # AWAIT REQUEST LINE
        # ─────────────────────────────────────────────────────────────────
        self.state = SessionState.AWAIT_REQUEST_LINE
        request_line = conn.read_line()

        if request_line is None:
            logger.debug(f"[{conn.id}] {conn.peer} closed without sending a request")
        else:
            logger.info(f'{conn.peer} -- "{request_line}"')

        # ─────────────────────────────────────────────────────────────────
        # READ HEADERS
        # ─────────────────────────────────────────────────────────────────
        # Not used for anything (no conditional GET etc.), only echoed
        self.state = SessionState.READ_HEADERS
        if request_line is not None:
            echo = self.console if self.config.verbose_headers else None
            read_header_block(conn, echo=echo)

        # ─────────────────────────────────────────────────────────────────
        # DISPATCH + RESPOND
        # ─────────────────────────────────────────────────────────────────
        self.state = SessionState.DISPATCH
        self.response = self.dispatch(request_line)

        if self.response is not None:
            conn.send_response(self.response, self.config.date_style)

        if self.state == SessionState.TERMINATE:
            logger.info("Exiting at client's request.")
            if self.shutdown is not None:
                self.shutdown.request(f"exit requested by {conn.peer}")

        # ─────────────────────────────────────────────────────────────────
        # CLOSE
        # ─────────────────────────────────────────────────────────────────
        conn.close()
        self.state = SessionState.CLOSED

    def dispatch(self, request_line: Optional[str]) -> Optional[HTTPResponse]:
        """
        Map a request line to the response to send.

        Returns:
            The response, or None when there was no request to answer.
        """
        try:
            request = self.parser.parse(request_line)
        except HTTPParseError as e:
            logger.debug(f"[{self.connection.id}] {e}")
            self.state = SessionState.RESPOND
            return response_for(e.status_code)

        if request is None:
            return None

        if request.is_termination:
            self.state = SessionState.TERMINATE
            return ok()

        self.state = SessionState.RESPOND

        if request.is_not_implemented:
            return not_implemented()

        status, body = self.resolver.lookup(request.raw_path)
        return response_for(status, body)


def handle_connection(
    connection: Connection,
    config: ServerConfig,
    shutdown: Optional[ShutdownController] = None,
    **kwargs,
):
    """Run a full session for ``connection`` on the calling thread."""
    SessionHandler(connection, config, shutdown=shutdown, **kwargs).run()
