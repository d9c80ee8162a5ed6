"""
=============================================================================
QoS (TRAFFIC PRIORITIZATION) DEMO
=============================================================================

    ┌───────────┐  length-prefixed packets on one connection  ┌───────────┐
    │ QoSClient │ ──────────────────────────────────────────► │ QoSServer │
    │           │ ◄────────────────────────────────── "ACK"   │           │
    └───────────┘         per packet                          └───────────┘
          │
          └── QoSManager decides priority and queueing delay per packet

    policy.py  TrafficType, Priority, QoSMode, QoSManager
    wire.py    packet header and ACK
    server.py  ACK server with per-class counters
    client.py  traffic patterns per mode, latency measurement
    stats.py   TrafficStats (avg/min/max, SLA), QoSReport

=============================================================================
"""

from .policy import KEY_LEARNINGS, Priority, QoSManager, QoSMode, TrafficType
from .wire import ACK, PacketHeader, build_packet
from .server import QoSServer
from .client import QoSClient
from .stats import QoSReport, TrafficStats

__all__ = [
    "KEY_LEARNINGS",
    "Priority",
    "QoSManager",
    "QoSMode",
    "TrafficType",
    "ACK",
    "PacketHeader",
    "build_packet",
    "QoSServer",
    "QoSClient",
    "QoSReport",
    "TrafficStats",
]
