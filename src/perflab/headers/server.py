"""
=============================================================================
HEADER DEMO SERVER
=============================================================================

Answers one request per connection with the response that matches the
current header mode:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       Request Handling Flow                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   read_to_eof()                                                      │
    │       │                                                              │
    │       ├── HTTP/2 frame? ──► decode block ──► compressed 200 frame    │
    │       │                                                              │
    │       ├── text request                                               │
    │       │     ├── validators match? ──────────► 304 Not Modified       │
    │       │     ├── mode MINIMAL ───────────────► minimal 200            │
    │       │     └── anything else ──────────────► full 200               │
    │       │                                                              │
    │       └── unparseable ──────────────────────► 400 / 413 / 505 text   │
    │                                                                      │
    │   sendall(reply), shutdown(SHUT_WR), close()                         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Each connection gets its own compressor/decompressor pair: the HPACK
context lives exactly as long as the connection, as in HTTP/2.

=============================================================================
"""

import logging
import time
from typing import Optional, Tuple

from ..access_log import ExchangeLog, log_exchange
from ..config import DemoConfig
from ..core import Connection, SocketServer
from ..exceptions import HeaderDecodingError, MessageParseError
from ..hpack import HeaderCompressor, HeaderDecompressor
from ..http import builders
from ..http.message import HTTPRequest, HTTPResponse, MessageParser
from ..http.status_codes import HTTPStatus
from ..state import DemoState
from .modes import HeaderMode
from .wire import decode_frame, encode_frame, is_compressed_frame


logger = logging.getLogger(__name__)


class HeaderDemoServer:
    """
    Socket server for the header optimization demo.

    Usage:
        server = HeaderDemoServer(config)
        server.serve_in_background()
        host, port = server.wait_until_ready()
        ...
        server.shutdown()
    """

    def __init__(self, config: DemoConfig, state: Optional[DemoState] = None):
        self.config = config
        self.state = state or DemoState(HeaderMode(config.header_mode))
        self.parser = MessageParser(max_message_size=config.max_message_size)
        self._server = SocketServer(config)

        self.requests_served = 0
        self.bytes_received = 0
        self.bytes_sent = 0

    @property
    def mode(self) -> HeaderMode:
        return self.state.mode

    @property
    def address(self) -> Tuple[str, int]:
        return self._server.address

    def start(self):
        """Serve in the foreground until shutdown() or Ctrl+C."""
        self._server.start(self.handle_connection)

    def serve_in_background(self):
        return self._server.serve_in_background(self.handle_connection)

    def wait_until_ready(self, timeout: Optional[float] = 5.0) -> Tuple[str, int]:
        return self._server.wait_until_ready(timeout)

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        self._server.shutdown()
        self._server.wait_for_shutdown(timeout)

    # =========================================================================
    # CONNECTION HANDLING
    # =========================================================================

    def handle_connection(self, conn: Connection):
        """Read one request, send one reply."""
        start_time = time.perf_counter()

        try:
            data = conn.read_to_eof()
        except TimeoutError as e:
            logger.warning(f"[{conn.id}] {e}")
            return
        except ValueError as e:
            logger.warning(f"[{conn.id}] {e}")
            reply = builders.error_response(HTTPStatus.PAYLOAD_TOO_LARGE, str(e)).to_bytes()
            self._send(conn, reply)
            return

        logger.info(f"[{conn.id}] Request received from {conn.peer}: {len(data)} bytes")

        reply, request_line, description, status = self.build_reply(data)
        logger.info(f"[{conn.id}] Sending: {description} ({len(reply)} bytes)")

        if not self._send(conn, reply):
            return

        self.requests_served += 1
        self.bytes_received += len(data)
        self.bytes_sent += len(reply)

        log_exchange(
            ExchangeLog(
                peer=conn.peer,
                request=request_line,
                mode=self.mode.name,
                status=status,
                bytes_received=len(data),
                bytes_sent=len(reply),
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )
        )

    def _send(self, conn: Connection, reply: bytes) -> bool:
        sent = conn.send_all(reply)
        conn.finish_sending()
        return sent

    def build_reply(self, data: bytes) -> Tuple[bytes, str, str, int]:
        """
        Choose and serialize the reply for raw request bytes.

        Returns:
            (reply bytes, request start line, description, status code)
        """
        if is_compressed_frame(data):
            return self._reply_to_frame(data)

        try:
            request = self.parser.parse_request(data)
        except MessageParseError as e:
            logger.warning(f"Bad request: {e}")
            status = HTTPStatus(e.status_code)
            response = builders.error_response(status, str(e))
            return response.to_bytes(), "-", f"{status.value} {status.phrase}", status

        response, description = self.choose_response(request)
        return response.to_bytes(), request.start_line, description, response.status

    def _reply_to_frame(self, data: bytes) -> Tuple[bytes, str, str, int]:
        try:
            frame = decode_frame(data, HeaderDecompressor())
        except (HeaderDecodingError, MessageParseError) as e:
            logger.warning(f"Bad compressed frame: {e}")
            response = builders.error_response(HTTPStatus.BAD_REQUEST, str(e))
            return response.to_bytes(), "-", "400 Bad Request", HTTPStatus.BAD_REQUEST

        logger.debug(
            f"Compressed request: {frame.block_size} byte block, "
            f"headers={frame.message.header_list()}"
        )
        reply = encode_frame(builders.compressed_response(), HeaderCompressor())
        return (
            reply,
            frame.message.start_line,
            "Compressed headers response (HTTP/2 style)",
            HTTPStatus.OK,
        )

    def choose_response(self, request: HTTPRequest) -> Tuple[HTTPResponse, str]:
        """Pick the text response for a parsed HTTP/1.x request."""
        if self.validators_match(request):
            return builders.cached_response(), "Cached response (304 Not Modified)"

        if self.mode == HeaderMode.MINIMAL:
            return builders.minimal_response(), "Minimal HTTP response"

        return builders.full_response(), "Full HTTP response"

    @staticmethod
    def validators_match(request: HTTPRequest) -> bool:
        """
        If-None-Match wins over If-Modified-Since when both are present
        (RFC 7232 §6).
        """
        etag = request.get_header("If-None-Match")
        if etag is not None:
            return etag == builders.DEMO_ETAG

        since = request.get_header("If-Modified-Since")
        return since == builders.DEMO_LAST_MODIFIED
