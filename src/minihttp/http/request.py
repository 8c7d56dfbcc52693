"""
=============================================================================
HTTP REQUEST LINE PARSER
=============================================================================

Turns the first line a client sends into a structured RequestLine.

=============================================================================
REQUEST LINE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    GET /index.html?country=us&system=linux HTTP/1.1                  │
    │    ─┬─ ─────┬───── ─────┬──── ──────┬───── ───┬────                  │
    │     │       │           │           │         │                      │
    │   Method   Path     query token  query token  Version                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Whitespace, "?" and "&" are all delimiters, so the line above becomes the
tokens:

    GET | /index.html | country=us | system=linux | HTTP/1.1

Query tokens are kept on the RequestLine for logging only; they never
influence which file is served.

=============================================================================
METHOD KEYWORDS
=============================================================================

    GET                      → resolve the path and serve it
    exit                     → operator shutdown request (case-sensitive!)
    DELETE, HEAD, POST, PUT  → 501 Not Implemented, path is never resolved
    anything else            → 400 Bad Request

An empty line is not an error: it means the client hung up (or sent
nothing), and the session closes without answering.

=============================================================================
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from .status_codes import HTTPStatus


class HTTPParseError(Exception):
    """
    Raised when a request cannot be understood.

    Carries the HTTP status that should be returned to the client. Every
    parse error in this server maps to 400 Bad Request, but the status is
    kept on the exception so callers never hard-code it.
    """

    def __init__(self, message: str, status_code: HTTPStatus = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code  # HTTP status to return


@dataclass(frozen=True)
class RequestLine:
    """
    A parsed request line. Immutable once parsed.

    Attributes:
        method: First token ("GET", "exit", "POST", ...).
        raw_path: URL path exactly as sent, e.g. "/docs/../index.html".
                  Empty for requests that carry no path.
        version_token: Trailing "HTTP/x.y" token, or "" if absent.
        query_tokens: "?"/"&"-delimited tokens after the path. Discarded
                      for resource resolution.
    """

    method: str
    raw_path: str = ""
    version_token: str = ""
    query_tokens: Tuple[str, ...] = ()

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def is_termination(self) -> bool:
        """True for the operator "exit" keyword."""
        return self.method == RequestParser.TERMINATE_KEYWORD

    @property
    def is_not_implemented(self) -> bool:
        """True for recognized methods that this server answers with 501."""
        return self.method in RequestParser.NOT_IMPLEMENTED_METHODS


class RequestParser:
    """
    Tokenizes request lines.

    Usage:
        parser = RequestParser()
        request = parser.parse("GET /index.html HTTP/1.1")
        request.method     # "GET"
        request.raw_path   # "/index.html"
    """

    TERMINATE_KEYWORD = "exit"

    NOT_IMPLEMENTED_METHODS = frozenset({
        "DELETE",
        "HEAD",
        "POST",
        "PUT",
    })

    # Compiled once at class load time
    DELIMITER_PATTERN = re.compile(r"[\s?&]+")
    VERSION_PATTERN = re.compile(r"^HTTP/")

    def tokenize(self, line: str) -> list:
        """Split on whitespace, "?" and "&", dropping empty tokens."""
        return [token for token in self.DELIMITER_PATTERN.split(line) if token]

    def parse(self, line: Optional[str]) -> Optional[RequestLine]:
        """
        Parse one request line.

        Args:
            line: The first line received on a connection, without its
                  terminator. None means end of stream.

        Returns:
            A RequestLine, or None when there is no request at all (None,
            empty or whitespace-only input).

        Raises:
            HTTPParseError: Unknown method keyword, or GET without a path.
        """
        if line is None:
            return None

        tokens = self.tokenize(line)
        if not tokens:
            return None

        method = tokens[0]
        rest = tokens[1:]

        # ─────────────────────────────────────────────────────────────────
        # VERSION MARKER
        # ─────────────────────────────────────────────────────────────────
        # Only the last token can be the version, and never the path.
        version = ""
        if len(rest) > 1 and self.VERSION_PATTERN.match(rest[-1]):
            version = rest.pop()

        if method == "GET":
            if not rest:
                raise HTTPParseError(f"Missing path in request line: {line!r}")
            return RequestLine(
                method=method,
                raw_path=rest[0],
                version_token=version,
                query_tokens=tuple(rest[1:]),
            )

        if method == self.TERMINATE_KEYWORD or method in self.NOT_IMPLEMENTED_METHODS:
            return RequestLine(
                method=method,
                raw_path=rest[0] if rest else "",
                version_token=version,
            )

        raise HTTPParseError(f"Unrecognized request keyword: {method!r}")


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request_line(line: Optional[str]) -> Optional[RequestLine]:
    """Parse a request line with a default RequestParser."""
    return RequestParser().parse(line)
