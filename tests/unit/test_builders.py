"""
Unit tests for the fixed demo messages.
"""

from perflab.http import HTTPStatus, parse_request, parse_response
from perflab.http import builders


class TestDemoRequests:
    """Tests for the request builders."""

    def test_full_request_is_largest(self):
        """The browser-style request carries the most header bytes."""
        full = builders.full_request()
        assert len(full.headers) == 16
        assert full.header_size > builders.minimal_request().header_size
        assert full.header_size > builders.conditional_request().header_size

    def test_minimal_request_headers(self):
        """Minimal request keeps only Host, Accept and Connection."""
        assert list(builders.minimal_request().headers) == ["Host", "Accept", "Connection"]

    def test_conditional_request_validators(self):
        """The conditional request carries both validators."""
        request = builders.conditional_request()
        assert request.get_header("If-None-Match") == builders.DEMO_ETAG
        assert request.get_header("If-Modified-Since") == builders.DEMO_LAST_MODIFIED

    def test_compressed_request_version(self):
        """Compressed requests use the HTTP/2 version token."""
        request = builders.compressed_request()
        assert request.version == "HTTP/2"
        assert request.header_list() == builders.compressed_request_headers()

    def test_text_requests_parse(self):
        """Every HTTP/1.1 request parses with the demo parser."""
        for request in (
            builders.full_request(),
            builders.minimal_request(),
            builders.conditional_request(),
        ):
            assert parse_request(request.to_bytes()) == request


class TestDemoResponses:
    """Tests for the response builders."""

    def test_content_length_matches_body(self):
        """Content-Length is computed from the body actually sent."""
        for response in (builders.full_response(), builders.minimal_response()):
            assert response.get_header("Content-Length") == str(response.body_size)

    def test_content_length_counts_utf8_bytes(self):
        """Non-ASCII bodies are measured in bytes."""
        assert builders.content_length("é") == "2"

    def test_cached_response(self):
        """The 304 response has no body and repeats the ETag."""
        response = builders.cached_response()
        assert response.status == HTTPStatus.NOT_MODIFIED
        assert response.body == ""
        assert response.get_header("ETag") == builders.DEMO_ETAG

    def test_full_response_parses(self):
        """The full response survives a text round trip."""
        response = builders.full_response()
        assert parse_response(response.to_bytes()) == response

    def test_minimal_response_smaller(self):
        """Minimal response headers are a fraction of the full ones."""
        assert builders.minimal_response().header_size < builders.full_response().header_size // 4

    def test_error_response(self):
        """Error replies carry a plain-text explanation."""
        response = builders.error_response(HTTPStatus.BAD_REQUEST, "bad line")
        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body == "Bad Request: bad line"
        assert response.get_header("Content-Length") == str(response.body_size)
