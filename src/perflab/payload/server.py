"""
Payload demo server.

Reads one framed payload per connection, decodes it and answers with a
4-byte little-endian acknowledgement: the number of bytes received, or 0
when the payload was rejected.
"""

import logging
import struct
import time
from typing import Optional, Tuple

from ..access_log import ExchangeLog, log_exchange
from ..config import DemoConfig
from ..core import Connection, SocketServer
from ..exceptions import FrameError, PayloadDecodeError
from ..report import format_bytes
from .encoding import decode_payload
from .framing import DataHeader


logger = logging.getLogger(__name__)

ACK = struct.Struct("<I")


class PayloadDemoServer:
    def __init__(self, config: DemoConfig):
        self.config = config
        self._server = SocketServer(config)

        self.payloads_received = 0
        self.payloads_rejected = 0
        self.records_decoded = 0
        self.bytes_received = 0

    @property
    def address(self) -> Tuple[str, int]:
        return self._server.address

    def start(self):
        self._server.start(self.handle_connection)

    def serve_in_background(self):
        return self._server.serve_in_background(self.handle_connection)

    def wait_until_ready(self, timeout: Optional[float] = 5.0) -> Tuple[str, int]:
        return self._server.wait_until_ready(timeout)

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        self._server.shutdown()
        self._server.wait_for_shutdown(timeout)

    def handle_connection(self, conn: Connection):
        start_time = time.perf_counter()

        try:
            data = conn.read_to_eof()
        except (TimeoutError, ValueError) as e:
            logger.warning(f"[{conn.id}] {e}")
            self.payloads_rejected += 1
            conn.send_all(ACK.pack(0))
            conn.finish_sending()
            return

        self.bytes_received += len(data)
        logger.info(f"[{conn.id}] Received {format_bytes(len(data))} from {conn.peer}")

        try:
            mode, users = decode_payload(data)
        except (FrameError, PayloadDecodeError) as e:
            logger.warning(f"[{conn.id}] Rejected payload: {e}")
            self.payloads_rejected += 1
            conn.send_all(ACK.pack(0))
            conn.finish_sending()
            return

        header = DataHeader.from_bytes(data)
        if header.compressed:
            logger.info(
                f"[{conn.id}] RLE payload: {header.original_size} -> {len(data)} bytes on the wire"
            )
        logger.info(f"[{conn.id}] Decoded {len(users)} records ({mode.label})")

        self.payloads_received += 1
        self.records_decoded += len(users)

        conn.send_all(ACK.pack(len(data)))
        conn.finish_sending()

        log_exchange(
            ExchangeLog(
                peer=conn.peer,
                request=f"PAYLOAD {mode.name} records={len(users)}",
                mode=mode.name,
                status=200,
                bytes_received=len(data),
                bytes_sent=ACK.size,
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )
        )
