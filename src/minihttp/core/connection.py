"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps a connected TCP socket in the small, blocking API that both the
server session and the client need:

    read_line()      one text line, terminator stripped, None at EOF
    read_exact(n)    exactly n bytes (or an error)
    write(data)      queue bytes for sending
    flush()          push queued bytes onto the wire
    close()          output, then input, then the socket itself

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request line may arrive split
over several recv() calls, or glued to the headers behind it:

    recv() → "GET /ind"
    recv() → "ex.html HTTP/1.0\r\nHost: exam"
    recv() → "ple.com\r\n\r\n"

So we never call recv() directly. The socket is wrapped in buffered file
objects (socket.makefile) that do the accumulation for us: readline() keeps
reading until it sees "\n", read(n) keeps reading until it has n bytes or
the peer closes.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► WRITING ──────► CLOSED
     │             │                              ▲
     └─────────────┴──────────────────────────────┘

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..http.headers import strip_line_terminator
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


# HTTP header text is ISO-8859-1; every byte maps to exactly one character.
HEADER_ENCODING = "iso-8859-1"


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and idempotent close."""
    NEW = "new"              # Just accepted/connected
    READING = "reading"      # Reading request or response data
    WRITING = "writing"      # Sending data
    CLOSED = "closed"        # Streams and socket released


class IncompleteReadError(ConnectionError):
    """The peer closed the stream before the expected number of bytes arrived."""

    def __init__(self, expected: int, received: bytes):
        super().__init__(
            f"Connection closed after {len(received)} of {expected} bytes"
        )
        self.expected = expected
        self.received = received


@dataclass
class Connection:
    """
    A connected TCP socket with buffered line/byte I/O.

    Attributes:
        socket: The connected socket.
        address: Peer (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current connection state.
        created_at: When the connection was accepted or opened.
        timeout: Socket timeout in seconds. None blocks forever.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    _reader: object = field(default=None, repr=False)
    _writer: object = field(default=None, repr=False)

    def __post_init__(self):
        self.socket.settimeout(self.timeout)

        # Separate buffered streams for each direction
        self._reader = self.socket.makefile("rb")
        self._writer = self.socket.makefile("wb")

    @classmethod
    def open(cls, host: str, port: int, timeout: Optional[float] = None) -> "Connection":
        """
        Connect to ``host:port`` and wrap the socket.

        Raises:
            socket.gaierror: The host name cannot be resolved.
            OSError: The connection was refused or failed.
        """
        sock = socket.create_connection((host, port), timeout=timeout)
        return cls(socket=sock, address=(host, port), timeout=timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def peer(self) -> str:
        """Peer address as "ip:port" for log lines."""
        if isinstance(self.address, tuple) and len(self.address) >= 2:
            return f"{self.address[0]}:{self.address[1]}"
        return str(self.address)

    @property
    def local_address(self) -> tuple:
        """Our end of the connection as (ip, port)."""
        name = self.socket.getsockname()
        if isinstance(name, tuple):
            return name[0], name[1]
        return "localhost", 0

    @property
    def server_url(self) -> str:
        """
        URL-like identity of the local endpoint, for the Server header.

        Example: "http://192.168.1.10:8080/"
        """
        host, port = self.local_address
        return f"http://{host}:{port}/"

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_line(self) -> Optional[str]:
        """
        Read one line.

        Returns:
            The line without its "\\r\\n" or "\\n" terminator, "" for an empty
            line, or None if the peer closed the stream.
        """
        self.state = ConnectionState.READING

        raw = self._reader.readline()
        if not raw:
            return None

        return strip_line_terminator(raw.decode(HEADER_ENCODING))

    def read_exact(self, count: int) -> bytes:
        """
        Read exactly ``count`` bytes.

        Raises:
            IncompleteReadError: The stream ended first.
        """
        self.state = ConnectionState.READING

        if count <= 0:
            return b""

        # BufferedReader.read(n) loops over recv() until n bytes or EOF
        data = self._reader.read(count)
        if len(data) < count:
            raise IncompleteReadError(count, data)
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def write(self, data: bytes):
        self.state = ConnectionState.WRITING
        self._writer.write(data)

    def flush(self):
        self._writer.flush()

    def send_response(self, response: HTTPResponse, date_style: str = "locale"):
        """
        Serialize ``response`` onto the connection and flush.

        The Server header is derived from this connection's local address.
        """
        self.write(response.to_bytes(self.server_url, date_style))
        self.flush()

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close output, input and socket, in that order.

        Errors (for example a failed final flush) are raised to the caller.
        Calling close() again after it succeeded is a no-op.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self._writer.close()    # flushes anything still buffered
            self._reader.close()
        finally:
            self.socket.close()
            self.state = ConnectionState.CLOSED
            logger.debug(f"[{self.id}] Connection closed after {time.time() - self.created_at:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
