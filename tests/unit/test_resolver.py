"""
Unit tests for resource resolution.
"""

import os
from pathlib import Path

import pytest

from minihttp.http.request import HTTPParseError
from minihttp.http.resolver import ResourceResolver, ResolvedResource
from minihttp.http.status_codes import HTTPStatus

from conftest import INDEX_HTML, BINARY_DATA


@pytest.fixture
def resolver(doc_root: Path) -> ResourceResolver:
    return ResourceResolver(str(doc_root))


class TestLookup:
    """Tests for status selection and body loading."""

    def test_serves_file(self, resolver):
        status, body = resolver.lookup("/index.html")

        assert status == HTTPStatus.OK
        assert body == INDEX_HTML

    def test_binary_file_is_exact(self, resolver):
        status, body = resolver.lookup("/data.bin")

        assert status == HTTPStatus.OK
        assert body == BINARY_DATA

    def test_root_serves_index(self, resolver):
        """Test that "/" maps to the default document."""
        status, body = resolver.lookup("/")

        assert status == HTTPStatus.OK
        assert body == INDEX_HTML

    def test_subdirectory_serves_index(self, resolver):
        status, body = resolver.lookup("/docs")

        assert status == HTTPStatus.OK
        assert body == b"<h1>Docs</h1>"

    def test_directory_without_index(self, resolver):
        assert resolver.lookup("/empty/") == (HTTPStatus.NOT_FOUND, None)

    def test_missing_file(self, resolver):
        assert resolver.lookup("/nope.html") == (HTTPStatus.NOT_FOUND, None)

    def test_hidden_file(self, resolver):
        """Test that dot-files are reported missing even though they exist."""
        assert resolver.lookup("/.hidden") == (HTTPStatus.NOT_FOUND, None)

    def test_path_without_slash(self, resolver):
        assert resolver.lookup("index.html") == (HTTPStatus.BAD_REQUEST, None)

    def test_overlong_name_is_not_found(self, resolver):
        """Test that a segment longer than the filesystem allows is just missing."""
        assert resolver.lookup("/" + "a" * 300) == (HTTPStatus.NOT_FOUND, None)

    def test_overlong_name_in_subdirectory(self, resolver):
        assert resolver.lookup("/docs/" + "b" * 300 + "/x.html") == (HTTPStatus.NOT_FOUND, None)

    def test_nul_byte_is_bad_request(self, resolver):
        assert resolver.lookup("/index.html\x00.txt") == (HTTPStatus.BAD_REQUEST, None)

    def test_dotdot_inside_root(self, resolver):
        """Test that ".." which stays inside the root is fine."""
        status, body = resolver.lookup("/docs/../index.html")

        assert status == HTTPStatus.OK
        assert body == INDEX_HTML


class TestPathTraversal:
    """Tests for the document root containment check."""

    @pytest.mark.parametrize("url_path", [
        "/../../etc/passwd",
        "/..",
        "/docs/../../www2/secret.txt",
    ])
    def test_escape_is_forbidden(self, resolver, url_path):
        assert resolver.lookup(url_path) == (HTTPStatus.FORBIDDEN, None)

    def test_sibling_with_shared_prefix(self, resolver, doc_root):
        """Test that "/srv/www2" is not treated as inside "/srv/www"."""
        sibling = doc_root.parent / "www2"

        assert not resolver.is_within_root(sibling.resolve())
        assert resolver.lookup("/../www2/secret.txt")[0] == HTTPStatus.FORBIDDEN

    def test_root_itself_is_within(self, resolver, doc_root):
        assert resolver.is_within_root(doc_root.resolve())

    def test_symlink_out_of_root(self, resolver, doc_root):
        """Test that a symlink pointing outside is refused."""
        link = doc_root / "escape.txt"
        try:
            link.symlink_to(doc_root.parent / "www2" / "secret.txt")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        assert resolver.lookup("/escape.txt") == (HTTPStatus.FORBIDDEN, None)


class TestNotServable:
    """Tests for targets that exist but cannot be sent."""

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires mkfifo")
    def test_fifo_is_forbidden(self, resolver, doc_root):
        os.mkfifo(doc_root / "pipe")

        assert resolver.lookup("/pipe") == (HTTPStatus.FORBIDDEN, None)

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="root can read any file",
    )
    def test_unreadable_is_forbidden(self, resolver, doc_root):
        target = doc_root / "locked.txt"
        target.write_text("locked")
        target.chmod(0)
        try:
            assert resolver.lookup("/locked.txt") == (HTTPStatus.FORBIDDEN, None)
        finally:
            target.chmod(0o644)


class TestResolve:
    """Tests for the intermediate ResolvedResource."""

    def test_resolve_requires_leading_slash(self, resolver):
        with pytest.raises(HTTPParseError):
            resolver.resolve("index.html")

    def test_resolve_appends_default_document(self, resolver, doc_root):
        resource = resolver.resolve("/docs/")

        assert resource.path == (doc_root / "docs" / "index.html").resolve()
        assert resource.is_regular_file is True
        assert resource.status == HTTPStatus.OK

    def test_status_precedence(self):
        """Test that containment is checked before existence."""
        outside = ResolvedResource(absolute_path="/etc/passwd", exists=True, within_root=False)

        assert outside.status == HTTPStatus.FORBIDDEN

    def test_custom_default_document(self, doc_root):
        (doc_root / "docs" / "home.html").write_text("home")
        resolver = ResourceResolver(str(doc_root), default_document="home.html")

        assert resolver.lookup("/docs/") == (HTTPStatus.OK, b"home")
