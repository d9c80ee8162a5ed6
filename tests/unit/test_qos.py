"""
Unit tests for the QoS policy, packet header and statistics.
"""

import pytest

from perflab.exceptions import FrameError
from perflab.qos import (
    PacketHeader,
    Priority,
    QoSManager,
    QoSMode,
    QoSReport,
    TrafficStats,
    TrafficType,
    build_packet,
)
from perflab.qos.wire import MAX_PACKET_SIZE, PACKET_HEADER


class TestQoSManager:
    """Tests for priority assignment, delays and congestion handling."""

    def test_priority_follows_class(self):
        """CRITICAL→HIGH, NORMAL→MEDIUM, BULK→LOW."""
        manager = QoSManager(QoSMode.PRIORITY)
        assert manager.assign_priority(TrafficType.CRITICAL) == Priority.HIGH
        assert manager.assign_priority(TrafficType.NORMAL) == Priority.MEDIUM
        assert manager.assign_priority(TrafficType.BULK) == Priority.LOW

    def test_suspicious_only_matters_in_security_mode(self):
        """Suspicious critical traffic is demoted only when security is on."""
        assert QoSManager(QoSMode.PRIORITY).assign_priority(TrafficType.CRITICAL, True) == Priority.HIGH
        assert QoSManager(QoSMode.SECURITY).assign_priority(TrafficType.CRITICAL, True) == Priority.LOW

    def test_no_qos_delay_is_flat(self):
        """Without QoS every priority waits 10 ms."""
        manager = QoSManager(QoSMode.NONE)
        assert {manager.delay_for(p) for p in Priority} == {0.010}

    def test_priority_delays(self):
        """1 / 5 / 15 ms at the default shares."""
        manager = QoSManager(QoSMode.PRIORITY)
        assert manager.delay_for(Priority.HIGH) == pytest.approx(0.001)
        assert manager.delay_for(Priority.MEDIUM) == pytest.approx(0.005)
        assert manager.delay_for(Priority.LOW) == pytest.approx(0.015)

    def test_congestion_reallocates(self):
        """Dynamic mode moves to 80/15/5 and delays scale with the share."""
        manager = QoSManager(QoSMode.DYNAMIC)
        events = manager.adjust_for_congestion()
        assert events
        assert manager.congested
        assert manager.bandwidth[Priority.HIGH] == 80
        assert manager.delay_for(Priority.HIGH) < 0.001
        assert manager.delay_for(Priority.LOW) == pytest.approx(0.030)
        assert manager.adjust_for_congestion() == []

    def test_static_modes_ignore_congestion(self):
        """Only the dynamic mode adapts."""
        manager = QoSManager(QoSMode.PRIORITY)
        assert manager.adjust_for_congestion() == []
        assert manager.bandwidth[Priority.HIGH] == 70

    def test_apply_delay_uses_sleep(self):
        """The queueing delay goes through the injected sleep."""
        slept = []
        QoSManager(QoSMode.PRIORITY, sleep=slept.append).apply_delay(Priority.MEDIUM)
        assert slept == [pytest.approx(0.005)]

    def test_sla(self):
        """10 / 50 / 200 ms limits."""
        manager = QoSManager()
        assert manager.check_sla(10.0, Priority.HIGH)
        assert not manager.check_sla(10.1, Priority.HIGH)
        assert manager.check_sla(199.0, Priority.LOW)

    def test_packet_sizes(self):
        """1 KB, 10 KB and 100 KB."""
        assert [QoSManager.packet_size(t) for t in TrafficType] == [1024, 10240, 102400]

    def test_mode_cycle(self):
        """Modes wrap around."""
        assert QoSMode.SECURITY.next() == QoSMode.NONE


class TestPacketHeader:
    """Tests for the length-prefixed packet."""

    def test_layout(self):
        """Class, flags, sequence and size in network order."""
        header = PacketHeader(TrafficType.BULK, 7, 3, suspicious=True)
        packet = build_packet(header)
        assert packet == b"\x02\x01\x00\x00\x00\x07\x00\x00\x00\x03XXX"
        assert PacketHeader.from_bytes(packet) == header

    def test_unknown_class(self):
        """Traffic classes outside 0-2 raise."""
        with pytest.raises(FrameError):
            PacketHeader.from_bytes(PACKET_HEADER.pack(9, 0, 1, 10))

    def test_oversized(self):
        """Sizes beyond the limit raise before anything is read."""
        with pytest.raises(FrameError):
            PacketHeader.from_bytes(PACKET_HEADER.pack(0, 0, 1, MAX_PACKET_SIZE + 1))

    def test_short(self):
        """A partial header raises."""
        with pytest.raises(FrameError):
            PacketHeader.from_bytes(b"\x00\x00")


class TestTrafficStats:
    """Tests for latency statistics and the report."""

    def _stats(self, latencies, priority=Priority.HIGH):
        return TrafficStats("Critical", TrafficType.CRITICAL, priority, 1024, list(latencies))

    def test_summary_values(self):
        """avg / min / max and bytes."""
        stats = self._stats([2.0, 4.0, 9.0])
        assert stats.avg_ms == 5.0
        assert (stats.min_ms, stats.max_ms) == (2.0, 9.0)
        assert stats.bytes_transferred == 3 * 1024

    def test_sla_uses_average(self):
        """One slow packet does not break the SLA if the average holds."""
        assert self._stats([1.0, 1.0, 25.0]).met_sla
        assert not self._stats([12.0, 11.0]).met_sla

    def test_empty_does_not_meet_sla(self):
        """No packets, no SLA."""
        stats = self._stats([])
        assert stats.avg_ms == 0.0
        assert not stats.met_sla

    def test_report_render(self):
        """The table shows each class and its SLA verdict."""
        report = QoSReport(QoSMode.PRIORITY, [
            self._stats([1.0, 2.0]),
            self._stats([300.0], Priority.LOW),
        ])
        text = report.render()
        assert "PRIORITY-BASED QoS" in text
        assert "MET (<= 10 ms)" in text
        assert "MISSED (> 200 ms)" in text
