"""Per-traffic-class latency statistics and the QoS run report."""

from dataclasses import dataclass, field
from typing import List

from ..report import format_bytes
from .policy import MAX_LATENCY_MS, Priority, QoSMode, TrafficType


@dataclass
class TrafficStats:
    name: str
    traffic: TrafficType
    priority: Priority
    packet_size: int
    latencies_ms: List[float] = field(default_factory=list)

    @property
    def packets(self) -> int:
        return len(self.latencies_ms)

    @property
    def bytes_transferred(self) -> int:
        return self.packets * self.packet_size

    @property
    def avg_ms(self) -> float:
        return sum(self.latencies_ms) / self.packets if self.packets else 0.0

    @property
    def min_ms(self) -> float:
        return min(self.latencies_ms, default=0.0)

    @property
    def max_ms(self) -> float:
        return max(self.latencies_ms, default=0.0)

    @property
    def sla_ms(self) -> float:
        return MAX_LATENCY_MS[self.priority]

    @property
    def met_sla(self) -> bool:
        """The average, not the worst packet, is held to the SLA."""
        return self.packets > 0 and self.avg_ms <= self.sla_ms


@dataclass
class QoSReport:
    mode: QoSMode
    stats: List[TrafficStats] = field(default_factory=list)
    events: List[str] = field(default_factory=list)

    def render(self) -> str:
        lines = [f"=== {self.mode.label} ==="]
        lines.extend(self.events)
        lines.append("")
        lines.append(
            f"{'Traffic':<40} {'Prio':<7} {'Pkts':>4} {'Avg ms':>8} {'Min ms':>8} "
            f"{'Max ms':>8} {'Bytes':>10}  SLA"
        )
        lines.append("-" * 100)
        for s in self.stats:
            sla = f"MET (<= {s.sla_ms:.0f} ms)" if s.met_sla else f"MISSED (> {s.sla_ms:.0f} ms)"
            lines.append(
                f"{s.name:<40} {s.priority.name:<7} {s.packets:>4} {s.avg_ms:>8.2f} "
                f"{s.min_ms:>8.2f} {s.max_ms:>8.2f} {format_bytes(s.bytes_transferred):>10}  {sla}"
            )
        lines.append("")
        lines.append("=== QoS ANALYSIS ===")
        lines.extend(f"- {note}" for note in self.mode.notes)
        return "\n".join(lines)
