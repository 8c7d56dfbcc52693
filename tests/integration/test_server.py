"""
End-to-end tests: a real listening server and the real client.
"""

import socket

import pytest

from minihttp import HTTPClient, ClientSessionParams

from conftest import INDEX_HTML, BINARY_DATA, read_all


def raw_request(port: int, request: bytes) -> bytes:
    with socket.create_connection(("127.0.0.1", port), timeout=5.0) as sock:
        sock.sendall(request)
        return read_all(sock)


@pytest.fixture
def client(tmp_path) -> HTTPClient:
    downloads = tmp_path / "downloads"
    downloads.mkdir()
    return HTTPClient(download_dir=str(downloads), console=None, timeout=5.0)


class TestServerRoundTrip:
    """Files served by the server arrive byte-for-byte at the client."""

    def test_fetch_index(self, test_server, client):
        response = client.run_session(
            ClientSessionParams("127.0.0.1", "index.html", port=test_server.port)
        )

        assert response.status_code == 200
        assert response.body == INDEX_HTML
        assert response.saved_to.read_bytes() == INDEX_HTML

    def test_fetch_binary(self, test_server, client):
        response = client.run_session(
            ClientSessionParams("127.0.0.1", "data.bin", port=test_server.port)
        )

        assert response.saved_to.name == "data.bin"
        assert response.saved_to.read_bytes() == BINARY_DATA

    def test_fetch_utf8_text(self, test_server, client, doc_root):
        response = client.run_session(
            ClientSessionParams("127.0.0.1", "hello.txt", port=test_server.port)
        )

        assert response.body == (doc_root / "hello.txt").read_bytes()

    def test_error_page_is_saved(self, test_server, client):
        """Test that a 404 still delivers (and saves) its status page."""
        response = client.run_session(
            ClientSessionParams("127.0.0.1", "missing.html", port=test_server.port)
        )

        assert response.status_code == 404
        assert b"404 Not Found" in response.saved_to.read_bytes()

    def test_traversal_forbidden(self, test_server):
        raw = raw_request(test_server.port, b"GET /../www2/secret.txt HTTP/1.0\r\n\r\n")

        assert raw.startswith(b"HTTP/1.0 403 Forbidden\r\n")

    def test_post_not_implemented(self, test_server, client):
        response = client.run_session(
            ClientSessionParams("127.0.0.1", "index.html", method="POST", port=test_server.port)
        )

        assert response.status_code == 501

    def test_concurrent_sessions(self, test_server):
        """Test that a stalled client does not block others."""
        stalled = socket.create_connection(("127.0.0.1", test_server.port), timeout=5.0)
        try:
            stalled.sendall(b"GET /index.html HTTP/1.0\r\n")  # no blank line yet

            raw = raw_request(test_server.port, b"GET /index.html HTTP/1.0\r\n\r\n")
            assert raw.endswith(INDEX_HTML)
        finally:
            stalled.close()


class TestExit:
    """The "exit" keyword stops the whole server."""

    def test_exit_stops_server(self, test_server):
        port = test_server.port
        raw = raw_request(port, b"exit\r\n\r\n")

        assert raw.startswith(b"HTTP/1.0 200 OK\r\n")
        assert test_server.join(timeout=5.0)
        assert test_server.server.is_running is False

        with pytest.raises(ConnectionRefusedError):
            socket.create_connection(("127.0.0.1", port), timeout=1.0)
