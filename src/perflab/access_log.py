"""
=============================================================================
ACCESS LOG
=============================================================================

One line per demo exchange, on the "perflab.access" logger so it can be
filtered separately from the servers' diagnostic logging:

    text:  127.0.0.1:50412 [27/Jan/2025:12:00:00 +0000] "GET /api/users HTTP/1.1"
           mode=FULL 200 rx=921 tx=1064 0.41ms
    json:  {"time": "...", "logger": "perflab.access", "message": "<text line>",
            "access": {"peer": "127.0.0.1:50412", "mode": "FULL", ...}}

The fields ride on the record as ``extra`` so the JSON formatter nests
them as an object; the message itself is always the text line.

=============================================================================
"""

import logging
import time
from dataclasses import dataclass, field


logger = logging.getLogger("perflab.access")


@dataclass
class ExchangeLog:
    """Everything worth knowing about one request/response on the server."""

    peer: str
    request: str
    mode: str
    status: int
    bytes_received: int
    bytes_sent: int
    duration_ms: float
    timestamp: str = field(default_factory=lambda: time.strftime("%d/%b/%Y:%H:%M:%S %z"))

    def to_dict(self) -> dict:
        return {
            "peer": self.peer,
            "request": self.request,
            "mode": self.mode,
            "status": self.status,
            "bytes_received": self.bytes_received,
            "bytes_sent": self.bytes_sent,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        return (
            f'{self.peer} [{self.timestamp}] "{self.request}" '
            f"mode={self.mode} {self.status} "
            f"rx={self.bytes_received} tx={self.bytes_sent} {self.duration_ms:.2f}ms"
        )


def log_exchange(entry: ExchangeLog) -> None:
    logger.info(entry.to_text(), extra={"access": entry.to_dict()})
