"""
=============================================================================
HEADER BLOCK FRAMING
=============================================================================

Helpers shared by both ends of the wire for reading a header block: the
server skips a request's headers, the client reads a response's headers to
find out how many body bytes follow.

=============================================================================
WHERE DOES THE HEADER BLOCK END?
=============================================================================

    HTTP/1.0 200 OK\r\n              ← status line (read separately)
    Date: Sat, 18 Oct 2026 ...\r\n   ┐
    Server: http://10.0.0.5:8080/\r\n│ header lines
    Content-Length: 42\r\n           ┘
    \r\n                             ← empty line: end of header block
    <42 bytes of body>

Line-reading transports hand us lines that may end in "\r\n" or in a bare
"\n", so both terminators are accepted.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional


logger = logging.getLogger(__name__)


# Matched case-sensitively, including the single space after the colon.
CONTENT_LENGTH_PREFIX = "Content-Length: "


def strip_line_terminator(line: str) -> str:
    """Remove a trailing "\\r\\n" or "\\n" from a line."""
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


@dataclass
class ParsedHeaders:
    """
    Raw header lines of one request or response, in arrival order.

    Attributes:
        lines: Header lines without terminators. The blank terminator line
               is not included.
        complete: False if the stream ended before the blank line.
    """

    lines: List[str] = field(default_factory=list)
    complete: bool = True

    @property
    def content_length(self) -> Optional[int]:
        """
        Value of the first "Content-Length: " line, or None.

        Later duplicates are ignored. A value that is not a non-negative
        integer counts as absent.
        """
        for line in self.lines:
            if line.startswith(CONTENT_LENGTH_PREFIX):
                value = line[len(CONTENT_LENGTH_PREFIX):].strip()
                try:
                    length = int(value)
                except ValueError:
                    logger.warning(f"Ignoring malformed Content-Length: {value!r}")
                    return None
                return length if length >= 0 else None
        return None

    @property
    def has_body(self) -> bool:
        """True when a positive Content-Length announces a body."""
        return bool(self.content_length)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)


def read_header_block(
    connection,
    echo: Optional[Callable[[str], None]] = None,
) -> ParsedHeaders:
    """
    Read header lines until an empty line or end of stream.

    Args:
        connection: Anything with a ``read_line()`` returning a line without
                    its terminator, or None at end of stream.
        echo: Optional callback invoked with every line read, including the
              blank terminator (used for console output).

    Returns:
        ParsedHeaders holding the lines before the blank line.
    """
    headers = ParsedHeaders()

    while True:
        line = connection.read_line()
        if line is None:
            # Peer closed before the blank line
            headers.complete = False
            break

        if echo is not None:
            echo(line)

        if line == "":
            break

        headers.lines.append(line)

    return headers
