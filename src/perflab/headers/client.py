"""
=============================================================================
HEADER DEMO CLIENT
=============================================================================

Sends the request for the current mode and measures what came back.

    mode          request sent                  expected reply
    ──────────    ──────────────────────────    ───────────────────────
    FULL          16 browser headers            full 200
    MINIMAL       Host, Accept, Connection      minimal 200
    COMPRESSED    HTTP/2 frame (host, accept)   HTTP/2 frame 200
    CACHED        If-None-Match + IMS           304, no body

=============================================================================
"""

import logging
import time
from typing import Optional, Tuple

from ..config import DemoConfig
from ..core import Connection
from ..exceptions import DemoConnectionError
from ..hpack import HeaderCompressor, HeaderDecompressor
from ..http import builders
from ..http.message import HTTPRequest, MessageParser
from ..report import ExchangeResult
from ..state import DemoState
from .modes import HeaderMode
from .wire import decode_frame, encode_frame, is_compressed_frame


logger = logging.getLogger(__name__)


def build_request(mode: HeaderMode) -> Tuple[HTTPRequest, bytes, int]:
    """
    Build and serialize the request for ``mode``.

    Returns:
        (request, wire bytes, header bytes). For the compressed mode the
        header bytes are the size of the compressed block.
    """
    if mode == HeaderMode.COMPRESSED:
        request = builders.compressed_request()
        compressor = HeaderCompressor()
        data = encode_frame(request, compressor)
        return request, data, compressor.last_stats.compressed_size

    if mode == HeaderMode.MINIMAL:
        request = builders.minimal_request()
    elif mode == HeaderMode.CACHED:
        request = builders.conditional_request()
    else:
        request = builders.full_request()

    return request, request.to_bytes(), request.header_size


class HeaderDemoClient:
    """
    One-shot client: each exchange() opens a connection, sends, half-closes
    and reads the reply to EOF.
    """

    def __init__(self, config: DemoConfig, state: Optional[DemoState] = None):
        self.config = config
        self.state = state or DemoState(HeaderMode(config.header_mode))
        self.parser = MessageParser(max_message_size=config.max_message_size)
        self.requests_sent = 0

    def exchange(
        self,
        mode: Optional[HeaderMode] = None,
        address: Optional[Tuple[str, int]] = None,
    ) -> ExchangeResult:
        """
        Run one round trip.

        Raises:
            DemoConnectionError: If the server cannot be reached or hangs up.
            MessageParseError / HeaderDecodingError: If the reply is malformed.
        """
        mode = HeaderMode(self.state.mode if mode is None else mode)
        host, port = address or (self.config.host, self.config.port)

        request, data, header_bytes = build_request(mode)
        logger.info(f"Sending {mode.name} request: {len(data)} bytes ({header_bytes} header bytes)")

        start_time = time.perf_counter()
        reply = self._round_trip(host, port, data)
        elapsed = time.perf_counter() - start_time

        if is_compressed_frame(reply):
            frame = decode_frame(reply, HeaderDecompressor())
            response = frame.message
            response_header_bytes = frame.block_size
        else:
            response = self.parser.parse_response(reply)
            response_header_bytes = response.header_size

        self.requests_sent += 1
        result = ExchangeResult(
            mode=mode.name,
            request_bytes=len(data),
            request_header_bytes=header_bytes,
            response_bytes=len(reply),
            response_header_bytes=response_header_bytes,
            status=int(response.status),
            elapsed=elapsed,
            response=response,
        )
        logger.info(f"Response received: {result.summary()}")
        return result

    def _round_trip(self, host: str, port: int, data: bytes) -> bytes:
        try:
            conn = Connection.connect(
                host,
                port,
                timeout=self.config.timeout,
                buffer_size=self.config.buffer_size,
                max_message_size=self.config.max_message_size,
            )
        except OSError as e:
            raise DemoConnectionError(f"Cannot connect to {host}:{port}: {e}", (host, port))

        with conn:
            if not conn.send_all(data):
                raise DemoConnectionError(f"Server {host}:{port} closed before request was sent", (host, port))
            conn.finish_sending()
            try:
                reply = conn.read_to_eof()
            except (TimeoutError, ValueError, OSError) as e:
                raise DemoConnectionError(f"No complete reply from {host}:{port}: {e}", (host, port))

        if not reply:
            raise DemoConnectionError(f"Server {host}:{port} sent an empty reply", (host, port))
        return reply
