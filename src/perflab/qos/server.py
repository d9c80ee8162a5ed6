"""
QoS demo server: acknowledge every packet as soon as it has fully
arrived, so the client's per-packet latency is queueing delay plus one
loopback round trip.
"""

import logging
import threading
import time
from collections import Counter
from typing import Optional, Tuple

from ..access_log import ExchangeLog, log_exchange
from ..config import DemoConfig
from ..core import Connection, SocketServer
from ..exceptions import FrameError
from .policy import TrafficType
from .wire import ACK, PACKET_HEADER, PacketHeader


logger = logging.getLogger(__name__)


class QoSServer:
    def __init__(self, config: DemoConfig):
        self.config = config
        self._server = SocketServer(config)
        self._lock = threading.Lock()

        self.packets_received: Counter = Counter()
        self.suspicious_packets = 0
        self.bytes_received = 0

    @property
    def address(self) -> Tuple[str, int]:
        return self._server.address

    def serve_in_background(self):
        return self._server.serve_in_background(self.handle_connection)

    def wait_until_ready(self, timeout: Optional[float] = 5.0) -> Tuple[str, int]:
        return self._server.wait_until_ready(timeout)

    def shutdown(self, timeout: Optional[float] = 5.0) -> None:
        self._server.shutdown()
        self._server.wait_for_shutdown(timeout)

    @property
    def total_packets(self) -> int:
        with self._lock:
            return sum(self.packets_received.values())

    def handle_connection(self, conn: Connection):
        start_time = time.perf_counter()
        packets = 0
        received = 0

        while True:
            try:
                raw = conn.read_exact(PACKET_HEADER.size, allow_eof=True)
                if not raw:
                    break
                header = PacketHeader.from_bytes(raw)
                conn.read_exact(header.size)
            except FrameError as e:
                logger.warning(f"[{conn.id}] Bad packet from {conn.peer}: {e}")
                break
            except (ConnectionError, TimeoutError) as e:
                logger.warning(f"[{conn.id}] {e}")
                break

            packets += 1
            received += PACKET_HEADER.size + header.size
            self._count(header)
            logger.debug(
                f"[{conn.id}] #{header.sequence} {header.traffic.name} {header.size} bytes"
                f"{' (suspicious)' if header.suspicious else ''}"
            )

            if not conn.send_all(ACK):
                break

        conn.finish_sending()
        log_exchange(
            ExchangeLog(
                peer=conn.peer,
                request=f"QOS packets={packets}",
                mode="QOS",
                status=200,
                bytes_received=received,
                bytes_sent=packets * len(ACK),
                duration_ms=(time.perf_counter() - start_time) * 1000,
            )
        )

    def _count(self, header: PacketHeader) -> None:
        with self._lock:
            self.packets_received[TrafficType(header.traffic)] += 1
            self.bytes_received += PACKET_HEADER.size + header.size
            if header.suspicious:
                self.suspicious_packets += 1
