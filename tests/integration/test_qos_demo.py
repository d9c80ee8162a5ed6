"""
Integration tests: QoS client and ACK server over loopback.
"""

import socket
from dataclasses import replace

import pytest

from perflab.__main__ import main
from perflab.exceptions import DemoConnectionError
from perflab.qos import Priority, QoSClient, QoSMode, TrafficType
from perflab.qos.wire import PACKET_HEADER


def no_sleep(seconds: float) -> None:
    pass


@pytest.fixture
def qos_config(config):
    return replace(config, qos_packets=4)


class TestQoSRuns:
    """One run per mode against a live server."""

    def test_priority_mode(self, qos_config, qos_server):
        """Every class sends its packets and each one is acknowledged."""
        report = QoSClient(qos_config, sleep=no_sleep).run(QoSMode.PRIORITY, qos_server.address)
        assert [s.traffic for s in report.stats] == list(TrafficType)
        assert [s.priority for s in report.stats] == [Priority.HIGH, Priority.MEDIUM, Priority.LOW]
        assert all(s.packets == 4 for s in report.stats)
        assert qos_server.total_packets == 12
        assert qos_server.packets_received[TrafficType.BULK] == 4

    def test_no_qos_waits_every_packet(self, qos_config, qos_server):
        """The flat 10 ms queueing delay shows up in every latency."""
        config = replace(qos_config, qos_packets=2)
        report = QoSClient(config).run(QoSMode.NONE, qos_server.address)
        assert all(s.min_ms >= 9.0 for s in report.stats)

    def test_dynamic_mode(self, qos_config, qos_server):
        """Two half phases around one congestion event."""
        report = QoSClient(qos_config, sleep=no_sleep).run(QoSMode.DYNAMIC, qos_server.address)
        assert any("congestion" in event for event in report.events)
        assert all(s.packets == 4 for s in report.stats)
        assert qos_server.total_packets == 12

    def test_security_mode(self, qos_config, qos_server):
        """Suspicious bulk traffic is flagged on the wire and gets LOW."""
        report = QoSClient(qos_config, sleep=no_sleep).run(QoSMode.SECURITY, qos_server.address)
        assert len(report.stats) == 3
        assert report.stats[-1].priority == Priority.LOW
        assert qos_server.suspicious_packets == 2
        assert qos_server.total_packets == 6


class TestQoSErrors:
    """Failures on either side."""

    def test_connection_refused(self, config, free_port):
        """No listener raises DemoConnectionError."""
        with pytest.raises(DemoConnectionError):
            QoSClient(config, sleep=no_sleep).run(QoSMode.PRIORITY, ("127.0.0.1", free_port))

    def test_bad_packet_closes_connection(self, qos_config, qos_server):
        """An unknown class gets no ACK; the server keeps serving."""
        with socket.create_connection(qos_server.address, timeout=5) as sock:
            sock.sendall(PACKET_HEADER.pack(9, 0, 1, 4))
            assert sock.recv(16) == b""

        report = QoSClient(qos_config, sleep=no_sleep).run(QoSMode.PRIORITY, qos_server.address)
        assert qos_server.total_packets == 12
        assert all(s.packets == 4 for s in report.stats)


class TestQoSCommand:
    """perflab qos end to end."""

    def test_qos_command(self, capsys):
        """One priority run against an in-process server."""
        code = main(["qos", "--mode", "1", "--port", "0", "-n", "2", "--log-level", "WARNING"])
        assert code == 0
        output = capsys.readouterr().out
        assert "PRIORITY-BASED QoS" in output
        assert "Server acknowledged: 6 packets" in output
