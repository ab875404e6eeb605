"""
Unit tests for HTTP response building.
"""

import pytest

from shipserve.http.response import (
    HTTPResponse,
    MissingBodyError,
    ResponseBuilder,
    internal_error,
    not_found,
    ok,
)
from shipserve.http.status_codes import HTTPStatus, status_text


class TestStatusText:
    """Tests for the status code → reason phrase lookup."""

    @pytest.mark.parametrize("code,phrase", [
        ("200", "OK"),
        ("400", "Bad Request"),
        ("404", "Not Found"),
        ("500", "Internal Server Error"),
    ])
    def test_known_codes(self, code: str, phrase: str):
        """Test the fixed phrases."""
        assert status_text(code) == phrase
        assert status_text(int(code)) == phrase

    @pytest.mark.parametrize("code", ["201", "302", "418", "503", "abc", ""])
    def test_unknown_codes_default_to_not_found(self, code: str):
        """Test that unregistered codes get "Not Found"."""
        assert status_text(code) == "Not Found"

    def test_status_enum(self):
        """Test the HTTPStatus helpers."""
        assert HTTPStatus.OK == 200
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.INTERNAL_SERVER_ERROR.code == "500"


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_default_headers(self):
        """Test that omitted headers default to Content-Type: text/html."""
        response = HTTPResponse.new("200", body="hi")
        assert response.headers == {"Content-Type": "text/html"}

    def test_caller_headers_used_verbatim(self):
        """Test that caller headers replace the default entirely."""
        response = HTTPResponse.new("200", {"X-Trace": "1"}, "hi")
        assert response.headers == {"X-Trace": "1"}

        empty = HTTPResponse.new("200", {}, "hi")
        assert empty.headers == {}

    def test_status_text_derived(self):
        """Test that status text follows the status code."""
        assert HTTPResponse.new("500", body="").status_text == "Internal Server Error"
        assert HTTPResponse.new(299, body="").status_text == "Not Found"
        assert HTTPResponse.new(404, body="").status_code == "404"

    def test_serialize_not_found(self):
        """Test the exact wire format of a 404."""
        response = HTTPResponse.new("404", {"Content-Type": "text/html"}, "xxxx")

        assert response.to_bytes() == (
            b"HTTP/1.1 404 Not Found\r\n"
            b"Content-Type: text/html\r\n"
            b"Content-Length: 4\r\n"
            b"\r\n"
            b"xxxx"
        )

    def test_serialize_empty_body(self):
        """Test that an empty body still serializes with length 0."""
        response = HTTPResponse.new("200", body="")

        assert response.to_text() == (
            "HTTP/1.1 200 OK\r\n"
            "Content-Type: text/html\r\n"
            "Content-Length: 0\r\n"
            "\r\n"
        )

    def test_content_length_counts_bytes(self):
        """Test that Content-Length is the UTF-8 byte length."""
        response = HTTPResponse.new("200", body="héllo ✓")

        assert response.content_length == len("héllo ✓".encode("utf-8"))
        assert f"Content-Length: {response.content_length}\r\n" in response.to_text()

    def test_content_length_follows_mutated_body(self):
        """Test that Content-Length is computed at serialization time."""
        response = HTTPResponse.new("200", body="a")
        response.body = "abcdef"

        assert b"Content-Length: 6\r\n" in response.to_bytes()

    def test_missing_body_is_fatal(self):
        """Test that serializing without a body raises."""
        response = HTTPResponse.new("200")

        with pytest.raises(MissingBodyError):
            response.to_bytes()

        assert issubclass(MissingBodyError, RuntimeError)

    def test_custom_version(self):
        response = HTTPResponse("200", body="", version="HTTP/2.0")
        assert response.to_text().startswith("HTTP/2.0 200 OK\r\n")


class TestResponseBuilder:
    """Tests for ResponseBuilder class."""

    def test_build_defaults(self):
        """Test that a bare builder gives 200 with default headers."""
        response = ResponseBuilder().build()

        assert response.status_code == "200"
        assert response.headers == {"Content-Type": "text/html"}
        assert response.body == ""

    def test_content_type_replaces_default(self):
        """Test that setting a header drops the default set."""
        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type("application/json")
            .body("[]")
            .build())

        assert response.headers == {"Content-Type": "application/json"}
        assert response.body == "[]"


class TestConvenienceFunctions:
    """Tests for ok / not_found / internal_error."""

    def test_ok(self):
        assert ok("x").status_code == "200"
        assert ok("x").headers == {"Content-Type": "text/html"}
        assert ok("x", content_type="text/css").headers == {"Content-Type": "text/css"}

    def test_not_found(self):
        response = not_found("<h1>404</h1>")

        assert response.status_code == "404"
        assert response.status_text == "Not Found"
        assert response.body == "<h1>404</h1>"

    def test_internal_error(self):
        response = internal_error()

        assert response.status_line == "HTTP/1.1 500 Internal Server Error"
        assert response.body == ""
