"""
Integration tests: payload demo client and server over loopback.
"""

import socket
import struct

from perflab.config import DemoConfig
from perflab.payload import PayloadDemoClient, PayloadMode


class TestPayloadRoundTrip:
    """Every payload mode against a live server."""

    def test_every_mode_is_acked(self, config, payload_server):
        """The server acks exactly what was sent, in every mode."""
        client = PayloadDemoClient(config)
        for mode in PayloadMode:
            result = client.send(mode, address=payload_server.address)
            assert result.accepted, mode
            assert result.bytes_acked == result.bytes_sent
        assert payload_server.payloads_received == len(PayloadMode)
        assert payload_server.records_decoded == len(PayloadMode) * config.user_count

    def test_chunking(self, payload_server):
        """Payloads larger than a chunk go out in several sends."""
        config = DemoConfig(host="127.0.0.1", port=0, chunk_size=512, user_count=50)
        result = PayloadDemoClient(config).send(PayloadMode.NONE, address=payload_server.address)
        assert result.chunks > 1
        assert result.accepted

    def test_all_smaller_than_none(self, config, payload_server):
        """All optimizations beat plain JSON on the wire."""
        client = PayloadDemoClient(config)
        plain = client.send(PayloadMode.NONE, address=payload_server.address)
        best = client.send(PayloadMode.ALL, address=payload_server.address)
        assert best.bytes_sent < plain.bytes_sent
        assert best.reduction_percent > 0
        assert best.dictionary_entries > 0


class TestPayloadRejection:
    """Frames the server cannot decode."""

    def test_bad_frame_acked_with_zero(self, payload_server):
        """Garbage is acknowledged with 0 and counted as rejected."""
        with socket.create_connection(payload_server.address, timeout=5) as sock:
            sock.sendall(b"definitely not a frame")
            sock.shutdown(socket.SHUT_WR)
            ack = sock.recv(4)
        assert struct.unpack("<I", ack)[0] == 0
        assert payload_server.payloads_rejected == 1
