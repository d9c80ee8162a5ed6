"""
=============================================================================
QoS POLICY
=============================================================================

Traffic classes, the priority each one gets, and what that priority
costs in queueing delay before a packet is released:

    ┌──────────┬──────────────────────┬──────────┬─────────┬───────────┬─────┐
    │ class    │ example              │ priority │ packet  │ bandwidth │ SLA │
    ├──────────┼──────────────────────┼──────────┼─────────┼───────────┼─────┤
    │ CRITICAL │ video / VoIP         │ HIGH     │   1 KB  │    70%    │  10 │
    │ NORMAL   │ web browsing         │ MEDIUM   │  10 KB  │    20%    │  50 │
    │ BULK     │ downloads / updates  │ LOW      │ 100 KB  │    10%    │ 200 │
    └──────────┴──────────────────────┴──────────┴─────────┴───────────┴─────┘
                                                  SLA = max average latency, ms

Queueing delay per packet:

    no QoS          10 ms for everyone
    with QoS        HIGH 1 ms, MEDIUM 5 ms, LOW 15 ms at the default shares

Under congestion (dynamic mode) the shares move to 80/15/5 and each delay
scales by default share / current share, so critical traffic gets faster
and bulk traffic slower. In security mode suspicious traffic is forced to
LOW whatever its class.

=============================================================================
"""

import logging
import time
from enum import IntEnum
from typing import Callable, Dict, List


logger = logging.getLogger(__name__)


class TrafficType(IntEnum):
    CRITICAL = 0
    NORMAL = 1
    BULK = 2

    @property
    def label(self) -> str:
        return _TRAFFIC_LABELS[self]


class Priority(IntEnum):
    HIGH = 0
    MEDIUM = 1
    LOW = 2


class QoSMode(IntEnum):
    NONE = 0
    PRIORITY = 1
    DYNAMIC = 2
    SECURITY = 3

    def next(self) -> "QoSMode":
        members = list(QoSMode)
        return members[(members.index(self) + 1) % len(members)]

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]

    @property
    def notes(self) -> List[str]:
        return list(_MODE_NOTES[self])


_TRAFFIC_LABELS = {
    TrafficType.CRITICAL: "Critical (Video/VoIP)",
    TrafficType.NORMAL: "Normal (Web)",
    TrafficType.BULK: "Bulk (Download)",
}

_MODE_LABELS = {
    QoSMode.NONE: "NO QoS (BASELINE)",
    QoSMode.PRIORITY: "PRIORITY-BASED QoS",
    QoSMode.DYNAMIC: "DYNAMIC QoS (CONGESTION ADAPTIVE)",
    QoSMode.SECURITY: "QoS + SECURITY INTEGRATION",
}

_MODE_NOTES = {
    QoSMode.NONE: (
        "All traffic types experience similar latency",
        "Critical traffic may NOT meet SLA requirements",
        "No differentiation between traffic priorities",
    ),
    QoSMode.PRIORITY: (
        "Critical traffic gets lowest latency (priority treatment)",
        "SLA requirements are MET for high-priority traffic",
        "Bulk traffic latency increases but remains acceptable",
    ),
    QoSMode.DYNAMIC: (
        "QoS detected congestion between the two phases",
        "Critical traffic bandwidth increased dynamically",
        "System adapted without manual intervention",
    ),
    QoSMode.SECURITY: (
        "Legitimate traffic maintains high priority",
        "Suspicious traffic automatically deprioritized",
        "Critical services protected during security events",
    ),
}

KEY_LEARNINGS = (
    "QoS lets latency-sensitive traffic jump the queue",
    "SLAs are met by starving bulk traffic, not by adding bandwidth",
    "Dynamic QoS reallocates bandwidth when congestion appears",
    "Security signals can feed QoS: suspicious flows get the lowest priority",
)


PACKET_SIZES: Dict[TrafficType, int] = {
    TrafficType.CRITICAL: 1024,
    TrafficType.NORMAL: 10 * 1024,
    TrafficType.BULK: 100 * 1024,
}

DEFAULT_BANDWIDTH: Dict[Priority, int] = {Priority.HIGH: 70, Priority.MEDIUM: 20, Priority.LOW: 10}
CONGESTED_BANDWIDTH: Dict[Priority, int] = {Priority.HIGH: 80, Priority.MEDIUM: 15, Priority.LOW: 5}

MAX_LATENCY_MS: Dict[Priority, float] = {
    Priority.HIGH: 10.0,
    Priority.MEDIUM: 50.0,
    Priority.LOW: 200.0,
}

UNMANAGED_DELAY = 0.010
PRIORITY_DELAYS: Dict[Priority, float] = {
    Priority.HIGH: 0.001,
    Priority.MEDIUM: 0.005,
    Priority.LOW: 0.015,
}


class QoSManager:
    """Priority assignment, queueing delay and SLA checks for one run."""

    def __init__(self, mode: QoSMode = QoSMode.PRIORITY, sleep: Callable[[float], None] = time.sleep):
        self.mode = QoSMode(mode)
        self.bandwidth: Dict[Priority, int] = dict(DEFAULT_BANDWIDTH)
        self.congested = False
        self._sleep = sleep

    @property
    def dynamic(self) -> bool:
        return self.mode == QoSMode.DYNAMIC

    @property
    def security(self) -> bool:
        return self.mode == QoSMode.SECURITY

    def assign_priority(self, traffic: TrafficType, suspicious: bool = False) -> Priority:
        if self.security and suspicious:
            return Priority.LOW
        return Priority(int(TrafficType(traffic)))

    @staticmethod
    def packet_size(traffic: TrafficType) -> int:
        return PACKET_SIZES[TrafficType(traffic)]

    def delay_for(self, priority: Priority) -> float:
        """Seconds a packet of this priority waits before it is sent."""
        if self.mode == QoSMode.NONE:
            return UNMANAGED_DELAY
        scale = DEFAULT_BANDWIDTH[priority] / self.bandwidth[priority]
        return PRIORITY_DELAYS[priority] * scale

    def apply_delay(self, priority: Priority) -> None:
        self._sleep(self.delay_for(priority))

    def check_sla(self, latency_ms: float, priority: Priority) -> bool:
        return latency_ms <= MAX_LATENCY_MS[priority]

    def adjust_for_congestion(self) -> List[str]:
        """
        Shift bandwidth toward HIGH. Only dynamic mode adapts.

        Returns:
            Event lines for the report (empty when nothing changed).
        """
        if not self.dynamic or self.congested:
            return []

        self.bandwidth = dict(CONGESTED_BANDWIDTH)
        self.congested = True
        events = [
            "[!] Network congestion detected, adjusting QoS priorities",
            f"[OK] Critical traffic: bandwidth increased to {self.bandwidth[Priority.HIGH]}%",
            f"[OK] Bulk traffic: bandwidth reduced to {self.bandwidth[Priority.LOW]}%",
        ]
        for event in events:
            logger.info(event)
        return events
