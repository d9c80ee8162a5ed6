"""
QoS demo packets.

Unlike the header and payload demos, a QoS connection carries many
packets, so each one is length-prefixed:

    ┌──────────┬────────┬────────────┬────────────┬─────────────┐
    │ traffic  │ flags  │ sequence   │ size       │ payload     │
    │ u8       │ u8     │ u32 BE     │ u32 BE     │ size bytes  │
    └──────────┴────────┴────────────┴────────────┴─────────────┘

    flags bit 0: marked suspicious by the sender

The server answers every packet with the 3 bytes "ACK".
"""

import struct
from dataclasses import dataclass

from ..exceptions import FrameError
from .policy import TrafficType


PACKET_HEADER = struct.Struct("!BBII")
ACK = b"ACK"

FLAG_SUSPICIOUS = 0x01
MAX_PACKET_SIZE = 1024 * 1024


@dataclass
class PacketHeader:
    traffic: TrafficType
    sequence: int
    size: int
    suspicious: bool = False

    def to_bytes(self) -> bytes:
        flags = FLAG_SUSPICIOUS if self.suspicious else 0
        return PACKET_HEADER.pack(int(self.traffic), flags, self.sequence, self.size)

    @classmethod
    def from_bytes(cls, data: bytes) -> "PacketHeader":
        """
        Raises:
            FrameError: For a short header, an unknown traffic class or a
                size over MAX_PACKET_SIZE.
        """
        if len(data) < PACKET_HEADER.size:
            raise FrameError(f"Packet header needs {PACKET_HEADER.size} bytes, got {len(data)}")
        traffic, flags, sequence, size = PACKET_HEADER.unpack_from(data, 0)
        try:
            traffic = TrafficType(traffic)
        except ValueError:
            raise FrameError(f"Unknown traffic class {traffic}")
        if size > MAX_PACKET_SIZE:
            raise FrameError(f"Packet size {size} exceeds {MAX_PACKET_SIZE}")
        return cls(traffic, sequence, size, bool(flags & FLAG_SUSPICIOUS))


def build_packet(header: PacketHeader, fill: bytes = b"X") -> bytes:
    return header.to_bytes() + fill * header.size
