"""
Integration tests: header demo client and server over loopback.
"""

import socket

import pytest

from perflab.exceptions import DemoConnectionError
from perflab.headers import HeaderDemoClient, HeaderMode
from perflab.http import HTTPStatus, parse_response
from perflab.http import builders


class TestHeaderRoundTrip:
    """One exchange per mode against a live server."""

    def test_full_mode(self, config, header_server):
        """FULL gets the full 200 response."""
        client = HeaderDemoClient(config)
        result = client.exchange(HeaderMode.FULL, address=header_server.address)
        assert result.status == 200
        assert result.response == builders.full_response()
        assert result.request_bytes == len(builders.full_request().to_bytes())
        assert result.response_header_bytes == builders.full_response().header_size

    def test_minimal_mode(self, config, header_server, header_state):
        """MINIMAL on both sides gets the minimal response."""
        header_state.mode = HeaderMode.MINIMAL
        client = HeaderDemoClient(config, header_state)
        result = client.exchange(address=header_server.address)
        assert result.status == 200
        assert result.response == builders.minimal_response()

    def test_compressed_mode(self, config, header_server):
        """COMPRESSED sends and receives HTTP/2-style frames."""
        client = HeaderDemoClient(config)
        result = client.exchange(HeaderMode.COMPRESSED, address=header_server.address)
        assert result.status == 200
        assert result.response.version == "HTTP/2"
        assert result.response.body == builders.DEMO_BODY
        assert result.request_header_bytes < builders.minimal_request().header_size

    def test_cached_mode(self, config, header_server):
        """CACHED gets 304 with no body."""
        client = HeaderDemoClient(config)
        result = client.exchange(HeaderMode.CACHED, address=header_server.address)
        assert result.status == 304
        assert result.response.body == ""

    def test_every_mode_smaller_than_full(self, config, header_server, header_state):
        """Each optimized mode moves fewer bytes than FULL."""
        client = HeaderDemoClient(config, header_state)
        totals = {}
        for mode in HeaderMode:
            header_state.mode = mode
            totals[mode] = client.exchange(address=header_server.address).total_bytes
        for mode in (HeaderMode.MINIMAL, HeaderMode.COMPRESSED, HeaderMode.CACHED):
            assert totals[mode] < totals[HeaderMode.FULL]
        assert client.requests_sent == 4
        assert header_server.requests_served == 4

    def test_server_counters(self, config, header_server):
        """The server counts bytes in and out."""
        client = HeaderDemoClient(config)
        result = client.exchange(HeaderMode.MINIMAL, address=header_server.address)
        assert header_server.bytes_received == result.request_bytes
        assert header_server.bytes_sent == result.response_bytes


class TestHeaderServerErrors:
    """Malformed input over a real socket."""

    def _raw_exchange(self, address, data: bytes) -> bytes:
        with socket.create_connection(address, timeout=5) as sock:
            sock.sendall(data)
            sock.shutdown(socket.SHUT_WR)
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def test_garbage_gets_400(self, header_server):
        """Unparseable text gets a 400 reply."""
        reply = self._raw_exchange(header_server.address, b"not http\r\n\r\n")
        assert parse_response(reply).status == HTTPStatus.BAD_REQUEST

    def test_server_survives_bad_request(self, config, header_server):
        """A bad request does not stop the server."""
        self._raw_exchange(header_server.address, b"\r\n\r\n")
        result = HeaderDemoClient(config).exchange(HeaderMode.FULL, address=header_server.address)
        assert result.status == 200


class TestHeaderClientErrors:
    """Client behaviour without a server."""

    def test_connection_refused(self, config, free_port):
        """No listener raises DemoConnectionError."""
        port = free_port
        with pytest.raises(DemoConnectionError) as exc_info:
            HeaderDemoClient(config).exchange(HeaderMode.FULL, address=("127.0.0.1", port))
        assert exc_info.value.address == ("127.0.0.1", port)

    def test_reset_during_read(self, config, monkeypatch):
        """A socket error while reading the reply raises DemoConnectionError."""

        class AbortingConnection:
            def __init__(self, *args, **kwargs):
                pass

            @classmethod
            def connect(cls, *args, **kwargs):
                return cls()

            def send_all(self, data):
                return True

            def finish_sending(self):
                pass

            def read_to_eof(self):
                raise ConnectionAbortedError("Software caused connection abort")

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

        monkeypatch.setattr("perflab.headers.client.Connection", AbortingConnection)
        with pytest.raises(DemoConnectionError) as exc_info:
            HeaderDemoClient(config).exchange(HeaderMode.FULL, address=("127.0.0.1", 8888))
        assert "No complete reply" in str(exc_info.value)
