"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The statuses this server can answer with, and their reason phrases.

=============================================================================
WHICH STATUS FOR WHICH REQUEST?
=============================================================================

Exactly one status is chosen per request. Once chosen it is final; the
session sends it and closes.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ OK              - File found and readable (or "exit")    │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  400   │ Bad Request     - Unknown method keyword, missing path,  │
    │        │                   path without a leading "/"             │
    │  403   │ Forbidden       - Path escapes the document root, or the │
    │        │                   target is not a regular readable file  │
    │  404   │ Not Found       - Target missing or hidden               │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  501   │ Not Implemented - DELETE, HEAD, POST, PUT                │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
        >>> HTTPStatus.NOT_FOUND.text
        '404 Not Found'
    """

    OK = 200                    # Resource served
    BAD_REQUEST = 400           # Malformed request line
    FORBIDDEN = 403             # Outside document root / not servable
    NOT_FOUND = 404             # Missing or hidden resource
    NOT_IMPLEMENTED = 501       # Recognized method we don't support

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.0 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]

    @property
    def text(self) -> str:
        """Code and phrase, e.g. "403 Forbidden" (used in error pages)."""
        return f"{int(self)} {self.phrase}"


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.FORBIDDEN: "Forbidden",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.NOT_IMPLEMENTED: "Not Implemented",
}
