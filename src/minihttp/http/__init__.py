"""
=============================================================================
HTTP PROTOCOL MODULE
=============================================================================

The protocol pieces of minihttp, independent of sockets and threads:

    request.py       Request line tokenizing (RequestParser, RequestLine)
    headers.py       Header block framing shared by client and server
    resolver.py      URL path → file under the document root
    response.py      Status line + headers + body serialization
    status_codes.py  The HTTPStatus enum

Everything here works on strings, bytes and paths, so it can be tested
without opening a single socket.

=============================================================================
"""

from .headers import ParsedHeaders, read_header_block, strip_line_terminator
from .request import RequestLine, RequestParser, HTTPParseError, parse_request_line
from .resolver import ResolvedResource, ResourceResolver
from .response import (
    HTTPResponse,
    ResponseBuilder,
    error_page,
    response_for,
    ok,
    not_implemented,
)
from .status_codes import HTTPStatus

__all__ = [
    # Header framing
    "ParsedHeaders",
    "read_header_block",
    "strip_line_terminator",

    # Request parsing
    "RequestLine",
    "RequestParser",
    "HTTPParseError",
    "parse_request_line",

    # Resource resolution
    "ResolvedResource",
    "ResourceResolver",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "error_page",
    "response_for",
    "ok",
    "not_implemented",

    # Status codes
    "HTTPStatus",
]
