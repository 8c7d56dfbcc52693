"""
=============================================================================
HTTP CLIENT
=============================================================================

Sends one request per session, prints the response header block and saves
the response body to a local file named after the requested resource.

=============================================================================
ONE CLIENT SESSION
=============================================================================

    ┌──────────────┐    GET /docs/a.html HTTP/1.1     ┌──────────────┐
    │              │    Host: example.com             │              │
    │  HTTPClient  │    User-Agent: HW3 HTTPClient    │    Server    │
    │              │ ───────────────────────────────► │              │
    │              │                                  │              │
    │              │    HTTP/1.0 200 OK               │              │
    │              │    Date: ...                     │              │
    │              │    Content-Length: 1234          │              │
    │              │ ◄─────────────────────────────── │              │
    │              │    <1234 bytes>                  │              │
    └──────┬───────┘                                  └──────────────┘
           │
           ▼
        ./a.html   (1234 bytes, written in binary mode)

=============================================================================
BYTES, NOT CHARACTERS
=============================================================================

Content-Length counts BYTES. The body is read as exactly that many bytes
and written to disk untouched, so multi-byte UTF-8 text and binary files
(images, archives) survive the trip. Only the header block is decoded to
text, for display.

=============================================================================
"""

import sys
import socket
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from .core.connection import Connection, IncompleteReadError
from .http.headers import ParsedHeaders, read_header_block


logger = logging.getLogger(__name__)


DEFAULT_PORT = 8080
DEFAULT_METHOD = "GET"
DEFAULT_HTTP_VERSION = "1.1"
DEFAULT_USER_AGENT = "HW3 HTTPClient"


class InvalidResourceName(ValueError):
    """The requested resource has no usable final path segment to save under."""


class ResponseError(Exception):
    """The server's response could not be read completely."""


@dataclass(frozen=True)
class ClientSessionParams:
    """
    Parameters for one client session, collected once and read-only.

    Attributes:
        host: Server host name or IP address.
        resource_path: Resource relative to the server root, WITHOUT the
                       leading "/" (e.g. "docs/index.html").
        method: Request method keyword.
        http_version: Version number only, e.g. "1.1".
        user_agent: User-Agent header value.
        port: Server TCP port.
    """

    host: str
    resource_path: str
    method: str = DEFAULT_METHOD
    http_version: str = DEFAULT_HTTP_VERSION
    user_agent: str = DEFAULT_USER_AGENT
    port: int = DEFAULT_PORT


@dataclass
class ClientResponse:
    """
    A decoded response.

    Attributes:
        headers: Every line of the header block, status line first.
        body: Exactly Content-Length bytes (empty if there was none).
        saved_to: Where the body was written, if it was.
    """

    headers: ParsedHeaders = field(default_factory=ParsedHeaders)
    body: bytes = b""
    saved_to: Optional[Path] = None

    @property
    def status_line(self) -> str:
        return self.headers.lines[0] if self.headers.lines else ""

    @property
    def status_code(self) -> Optional[int]:
        """Numeric status from the status line, or None if unparseable."""
        parts = self.status_line.split(" ", 2)
        if len(parts) < 2:
            return None
        try:
            return int(parts[1])
        except ValueError:
            return None


class RequestEncoder:
    """
    Builds the request line and header block for a session.

        GET /docs/index.html HTTP/1.1\\r\\n
        Host: example.com\\r\\n
        User-Agent: HW3 HTTPClient\\r\\n
        \\r\\n

    No body is ever sent.
    """

    def encode(self, params: ClientSessionParams) -> bytes:
        lines = [
            f"{params.method} /{params.resource_path} HTTP/{params.http_version}",
            f"Host: {params.host}",
            f"User-Agent: {params.user_agent}",
            "",     # end of headers
            "",
        ]
        return "\r\n".join(lines).encode("iso-8859-1")


class ResponseDecoder:
    """
    Reads a response: header block (echoed to the console), then exactly
    Content-Length body bytes.
    """

    def __init__(self, console: Optional[Callable[[str], None]] = print):
        self.console = console

    def read(self, connection: Connection) -> ClientResponse:
        """
        Raises:
            ResponseError: The body was cut short.
        """
        headers = read_header_block(connection, echo=self.console)
        response = ClientResponse(headers=headers)

        length = headers.content_length
        if length:
            try:
                response.body = connection.read_exact(length)
            except IncompleteReadError as e:
                raise ResponseError(str(e)) from e

        logger.debug(f"Read {len(headers)} header lines and {len(response.body)} body bytes")
        return response


# =============================================================================
# SAVING THE BODY
# =============================================================================

def output_filename(resource_path: str) -> str:
    """
    Local file name for a resource: its final path segment.

        "docs/index.html"      → "index.html"
        "a.txt?lang=en"        → "a.txt"
        "docs/" or ""          → InvalidResourceName

    Raises:
        InvalidResourceName: The final segment is empty (a directory or
                             root request) or is "." / "..".
    """
    path = resource_path.split("?", 1)[0]
    name = path.rsplit("/", 1)[-1]

    if name in ("", ".", ".."):
        raise InvalidResourceName(f"Invalid resource name: {resource_path!r}")
    return name


def save_body(resource_path: str, body: bytes, directory: str = ".") -> Path:
    """Write ``body`` to ``directory/<output_filename(resource_path)>``."""
    target = Path(directory) / output_filename(resource_path)
    target.write_bytes(body)
    return target


# =============================================================================
# CLIENT
# =============================================================================

class HTTPClient:
    """
    Runs client sessions.

    Usage:
        client = HTTPClient()
        response = client.run_session(ClientSessionParams("localhost", "index.html"))
    """

    def __init__(
        self,
        download_dir: str = ".",
        console: Optional[Callable[[str], None]] = print,
        timeout: Optional[float] = None,
    ):
        self.download_dir = download_dir
        self.timeout = timeout
        self.encoder = RequestEncoder()
        self.decoder = ResponseDecoder(console=console)

    def run_session(self, params: ClientSessionParams) -> Optional[ClientResponse]:
        """
        Send one request and consume its response.

        Returns:
            The decoded response, or None if the host name does not resolve
            (reported on stderr, like a failed lookup in a browser).

        Raises:
            OSError: Connection failures.
            ResponseError: Truncated body.
            InvalidResourceName: A body arrived for a resource that has no
                                 file name to save it under.
        """
        try:
            conn = Connection.open(params.host, params.port, timeout=self.timeout)
        except socket.gaierror as e:
            print(f"Unable to resolve host: {params.host} ({e})", file=sys.stderr)
            return None

        with conn:
            conn.write(self.encoder.encode(params))
            conn.flush()

            response = self.decoder.read(conn)

        if response.body:
            response.saved_to = save_body(params.resource_path, response.body, self.download_dir)
            logger.info(f"Saved {len(response.body)} bytes to {response.saved_to}")

        return response
