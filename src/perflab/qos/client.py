"""
QoS demo client.

One connection per run; each mode sends a fixed traffic pattern and
measures, per packet, the time from "ready to send" to "ACK received":

    NONE       CRITICAL x n, NORMAL x n, BULK x n          all 10 ms queueing
    PRIORITY   same pattern, delay by priority
    DYNAMIC    n/2 of each, congestion detected, n/2 of each again
    SECURITY   CRITICAL x n/2, NORMAL x n/2, then BULK x n/2 marked suspicious
"""

import logging
import time
from typing import Callable, Optional, Tuple

from ..config import DemoConfig
from ..core import Connection
from ..exceptions import DemoConnectionError
from .policy import QoSManager, QoSMode, TrafficType
from .stats import QoSReport, TrafficStats
from .wire import ACK, PacketHeader, build_packet


logger = logging.getLogger(__name__)


class QoSClient:
    def __init__(self, config: DemoConfig, sleep: Callable[[float], None] = time.sleep):
        self.config = config
        self._sleep = sleep
        self._sequence = 0

    def run(
        self,
        mode: Optional[QoSMode] = None,
        address: Optional[Tuple[str, int]] = None,
    ) -> QoSReport:
        """
        Raises:
            DemoConnectionError: If the server is unreachable or stops acking.
        """
        mode = QoSMode(self.config.qos_mode if mode is None else mode)
        host, port = address or (self.config.host, self.config.port)
        manager = QoSManager(mode, sleep=self._sleep)
        report = QoSReport(mode)

        try:
            conn = Connection.connect(host, port, timeout=self.config.timeout,
                                      buffer_size=self.config.buffer_size)
        except OSError as e:
            raise DemoConnectionError(f"Cannot connect to {host}:{port}: {e}", (host, port))

        logger.info(f"Running {mode.label} against {host}:{port}")
        with conn:
            if mode == QoSMode.DYNAMIC:
                self._run_dynamic(conn, manager, report)
            elif mode == QoSMode.SECURITY:
                self._run_security(conn, manager, report)
            else:
                suffix = "No QoS" if mode == QoSMode.NONE else "High Priority"
                for traffic in TrafficType:
                    stats = self._stats(manager, f"{traffic.label} ({suffix})", traffic)
                    self._send(conn, manager, stats, self.config.qos_packets)
                    report.stats.append(stats)
            conn.finish_sending()

        for stats in report.stats:
            logger.info(
                f"{stats.name}: avg {stats.avg_ms:.2f}ms over {stats.packets} packets, "
                f"SLA {'met' if stats.met_sla else 'missed'}"
            )
        return report

    def _run_dynamic(self, conn: Connection, manager: QoSManager, report: QoSReport):
        half = max(1, self.config.qos_packets // 2)
        phase = {}
        for traffic in TrafficType:
            phase[traffic] = self._stats(manager, f"{traffic.label} (Adaptive Priority)", traffic)
            self._send(conn, manager, phase[traffic], half)

        report.events.extend(manager.adjust_for_congestion())

        for traffic in TrafficType:
            self._send(conn, manager, phase[traffic], half)
            report.stats.append(phase[traffic])

    def _run_security(self, conn: Connection, manager: QoSManager, report: QoSReport):
        half = max(1, self.config.qos_packets // 2)
        for traffic in (TrafficType.CRITICAL, TrafficType.NORMAL):
            stats = self._stats(manager, f"Legitimate {traffic.label} (PROTECTED)", traffic)
            self._send(conn, manager, stats, half)
            report.stats.append(stats)

        report.events.append("[!] SECURITY ALERT: unusual bulk transfer, deprioritizing source")
        logger.warning(report.events[-1])

        stats = self._stats(manager, "Suspicious Bulk (DEPRIORITIZED)", TrafficType.BULK, suspicious=True)
        self._send(conn, manager, stats, half, suspicious=True)
        report.stats.append(stats)

    @staticmethod
    def _stats(manager: QoSManager, name: str, traffic: TrafficType, suspicious: bool = False) -> TrafficStats:
        return TrafficStats(
            name=name,
            traffic=traffic,
            priority=manager.assign_priority(traffic, suspicious),
            packet_size=manager.packet_size(traffic),
        )

    def _send(
        self,
        conn: Connection,
        manager: QoSManager,
        stats: TrafficStats,
        count: int,
        suspicious: bool = False,
    ):
        for _ in range(count):
            self._sequence += 1
            packet = build_packet(
                PacketHeader(stats.traffic, self._sequence, stats.packet_size, suspicious)
            )

            start = time.perf_counter()
            manager.apply_delay(stats.priority)
            if not conn.send_all(packet):
                raise DemoConnectionError(f"Server {conn.peer} closed mid-run", conn.address)
            try:
                ack = conn.read_exact(len(ACK))
            except (ConnectionError, TimeoutError, OSError) as e:
                raise DemoConnectionError(f"No ack from {conn.peer}: {e}", conn.address)
            if ack != ACK:
                raise DemoConnectionError(f"Unexpected ack {ack!r} from {conn.peer}", conn.address)

            stats.latencies_ms.append((time.perf_counter() - start) * 1000)
