"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.0 responses: status line, the headers every response carries,
and the body.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ STATUS LINE ──────────────────────────────────────────────────┐ │
    │  │    HTTP/1.0 404 Not Found\r\n                                   │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Date: Sat Oct 18 14:03:11 2026\r\n      ← always            │ │
    │  │    Server: http://192.168.1.10:8080/\r\n   ← always            │ │
    │  │    Content-Length: 95\r\n                  ← only if body > 0  │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BLANK LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY ─────────────────────────────────────────────────────────┐ │
    │  │    <html><head><title>404 Not Found</title></head>...          │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR PAGES
=============================================================================

When there is no real content to send (every error, and the "exit"
acknowledgement) the body is a tiny HTML page whose title and heading are
the status text. A browser then shows the user what went wrong instead of a
blank page.

=============================================================================
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.0"

DATE_STYLES = ("locale", "http")


@dataclass
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    Attributes:
        status: HTTPStatus enum value.
        headers: Extra headers. Date and Server are filled in by to_bytes()
                 unless already present; Content-Length is always computed.
        body: Raw body bytes (may be empty).
        version: Protocol version for the status line.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = HTTP_VERSION

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.0 200 OK"."""
        return f"{self.version} {self.status.text}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a response header. Returns self for chaining."""
        self.headers[name] = value
        return self

    def to_bytes(self, server: str = "", date_style: str = "locale") -> bytes:
        """
        Serialize the response for sending over the socket.

            HTTP/1.0 200 OK\\r\\n             ← Status line
            Date: ...\\r\\n                   ← Auto-added
            Server: http://host:port/\\r\\n   ← Auto-added
            Content-Length: 27\\r\\n          ← Only for a non-empty body
            \\r\\n                            ← Empty line (separator)
            <body bytes>

        Args:
            server: Value for the Server header.
            date_style: "locale" or "http", see current_date().

        Returns:
            Complete response as bytes.
        """
        response_headers = {
            "Date": current_date(date_style),
            "Server": server,
        }
        response_headers.update(self.headers)

        # A zero-length body means "no body": the header is left out entirely
        response_headers.pop("Content-Length", None)
        if self.body:
            response_headers["Content-Length"] = str(len(self.body))

        lines = [self.status_line]
        for name, value in response_headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .body(content)
            .build())

    If no body is set, build() synthesizes the status page.
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: Optional[bytes] = None

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        self._headers[name] = value
        return self

    def body(self, body: Optional[Union[str, bytes]]) -> "ResponseBuilder":
        """
        Set the response body. Strings are encoded as UTF-8.

        Passing None clears the body so build() falls back to the status
        page.
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._body = body
        return self

    def build(self) -> HTTPResponse:
        body = self._body
        if body is None:
            body = error_page(self._status)

        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=body,
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def error_page(status: HTTPStatus) -> bytes:
    """HTML page whose title and heading are the status text."""
    text = status.text
    return (
        f"<html><head><title>{text}</title></head>"
        f"<body><h1>{text}</h1></body></html>"
    ).encode("utf-8")


def format_locale_date(dt: datetime) -> str:
    """Local time in the current locale's date-time representation."""
    return dt.strftime("%c")


def format_http_date(dt: datetime) -> str:
    """
    Format a UTC datetime as an HTTP-date (RFC 7231).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Sat, 18 Oct 2026 12:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def current_date(style: str = "locale") -> str:
    """
    Value for the Date header.

    Args:
        style: "locale" for the local clock in the locale's format,
               "http" for an RFC 7231 date in GMT.
    """
    if style == "http":
        return format_http_date(datetime.now(timezone.utc))
    return format_locale_date(datetime.now())


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def response_for(status: HTTPStatus, body: Optional[bytes] = None) -> HTTPResponse:
    """Response with the given status; no body means the status page."""
    return ResponseBuilder().status(status).body(body).build()


def ok(body: Optional[bytes] = None) -> HTTPResponse:
    """200 OK, with the file contents or the status page."""
    return response_for(HTTPStatus.OK, body)


def not_implemented() -> HTTPResponse:
    return response_for(HTTPStatus.NOT_IMPLEMENTED)
