"""
Unit tests for request line parsing.
"""

import pytest

from minihttp.http.request import (
    RequestLine,
    RequestParser,
    HTTPParseError,
    parse_request_line,
)
from minihttp.http.status_codes import HTTPStatus


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self):
        """Test parsing a simple GET request line."""
        request = RequestParser().parse("GET /index.html HTTP/1.1")

        assert request.method == "GET"
        assert request.raw_path == "/index.html"
        assert request.version_token == "HTTP/1.1"
        assert request.query_tokens == ()
        assert request.is_get is True

    def test_query_tokens_split_on_question_and_ampersand(self):
        """Test that "?" and "&" delimit tokens and are kept off the path."""
        request = parse_request_line("GET /index.html?country=us&system=linux HTTP/1.1")

        assert request.raw_path == "/index.html"
        assert request.query_tokens == ("country=us", "system=linux")
        assert request.version_token == "HTTP/1.1"

    def test_version_is_optional(self):
        """Test an HTTP/0.9 style line without version."""
        request = parse_request_line("GET /a.txt")

        assert request.raw_path == "/a.txt"
        assert request.version_token == ""

    def test_path_never_taken_as_version(self):
        """Test that a lone second token is the path even if it looks like a version."""
        request = parse_request_line("GET HTTP/1.0")

        assert request.raw_path == "HTTP/1.0"
        assert request.version_token == ""

    def test_repeated_whitespace(self):
        """Test that runs of delimiters produce no empty tokens."""
        request = parse_request_line("GET   /a.txt \t HTTP/1.0")

        assert request.raw_path == "/a.txt"
        assert request.version_token == "HTTP/1.0"

    def test_get_without_path(self):
        """Test that GET alone is a bad request."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request_line("GET")

        assert exc_info.value.status_code == HTTPStatus.BAD_REQUEST

    @pytest.mark.parametrize("method", ["DELETE", "HEAD", "POST", "PUT"])
    def test_not_implemented_methods(self, method: str):
        """Test that recognized but unsupported methods are flagged."""
        request = parse_request_line(f"{method} /index.html HTTP/1.0")

        assert request.method == method
        assert request.is_not_implemented is True
        assert request.is_get is False

    def test_exit_keyword(self):
        """Test the operator termination keyword."""
        request = parse_request_line("exit")

        assert request.is_termination is True
        assert request.raw_path == ""

    def test_exit_is_case_sensitive(self):
        """Test that "EXIT" is just an unknown method."""
        with pytest.raises(HTTPParseError):
            parse_request_line("EXIT")

    @pytest.mark.parametrize("line", ["get /index.html HTTP/1.0", "FETCH /", "OPTIONS * HTTP/1.1"])
    def test_unknown_method(self, line: str):
        """Test that anything else is rejected with 400."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request_line(line)

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("line", [None, "", "   ", "\t"])
    def test_no_request(self, line):
        """Test that end of stream or a blank line is not a request at all."""
        assert parse_request_line(line) is None


class TestRequestLine:
    """Tests for RequestLine value object."""

    def test_is_immutable(self):
        """Test that a parsed request line cannot be modified."""
        request = RequestLine(method="GET", raw_path="/")

        with pytest.raises(AttributeError):
            request.raw_path = "/other"

    def test_tokenize(self):
        """Test the raw tokenizer."""
        tokens = RequestParser().tokenize("GET /a?b=1&c=2 HTTP/1.0")

        assert tokens == ["GET", "/a", "b=1", "c=2", "HTTP/1.0"]
