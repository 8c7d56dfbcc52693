"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Tuple
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minihttp import HTTPServer, ServerConfig
from minihttp.core import Connection


INDEX_HTML = b"<html><body><h1>Welcome</h1></body></html>\n"
BINARY_DATA = bytes(range(256)) * 4


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """
    A document root with a handful of files:

        tmp/www/index.html
        tmp/www/hello.txt        (multi-byte UTF-8)
        tmp/www/data.bin         (all 256 byte values)
        tmp/www/.hidden
        tmp/www/docs/index.html
        tmp/www/empty/           (directory without index.html)
        tmp/www2/secret.txt      (sibling sharing the "www" prefix)
    """
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "hello.txt").write_text("héllo wörld\n", encoding="utf-8")
    (root / "data.bin").write_bytes(BINARY_DATA)
    (root / ".hidden").write_text("secret")

    docs = root / "docs"
    docs.mkdir()
    (docs / "index.html").write_text("<h1>Docs</h1>")

    (root / "empty").mkdir()

    sibling = tmp_path / "www2"
    sibling.mkdir()
    (sibling / "secret.txt").write_text("not for you")

    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def socket_pair() -> Generator[Tuple[Connection, socket.socket], None, None]:
    """
    A server-side Connection plus the raw client socket talking to it.

    Lets a session run without a listening socket.
    """
    server_sock, client_sock = socket.socketpair()
    conn = Connection(socket=server_sock, address=("127.0.0.1", 50000))

    yield conn, client_sock

    if not conn.is_closed:
        conn.close()
    client_sock.close()


def read_all(sock: socket.socket) -> bytes:
    """Read from ``sock`` until the peer closes."""
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"configure_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_listening(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def join(self, timeout: float = 5.0) -> bool:
        """Wait for the server thread to exit. True if it did."""
        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def stop(self):
        """Stop the server."""
        self.server.stop("test finished")
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(doc_root: Path) -> Generator[TestServer, None, None]:
    """A running server on a free port serving ``doc_root``."""
    server = HTTPServer(ServerConfig(
        document_root=str(doc_root),
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        accept_timeout=0.1,
        log_level="WARNING",
    ))

    test_srv = TestServer(server)
    test_srv.start()

    yield test_srv

    test_srv.stop()
