"""
Result records and number formatting shared by the demo clients and the
console summaries.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ExchangeResult:
    """
    One request/response round trip as seen by a demo client.

    Header sizes count header bytes only: the header lines for text
    messages, the compressed block for HTTP/2-style frames.
    """

    mode: str
    request_bytes: int
    request_header_bytes: int
    response_bytes: int
    response_header_bytes: int
    status: int
    elapsed: float
    response: Optional[Any] = field(default=None, repr=False)

    @property
    def total_bytes(self) -> int:
        return self.request_bytes + self.response_bytes

    def summary(self) -> str:
        return (
            f"[{self.mode}] status={self.status} "
            f"request={format_bytes(self.request_bytes)} "
            f"(headers {format_bytes(self.request_header_bytes)}) "
            f"response={format_bytes(self.response_bytes)} "
            f"(headers {format_bytes(self.response_header_bytes)}) "
            f"in {self.elapsed * 1000:.2f}ms"
        )


def format_bytes(size: int) -> str:
    """
    Human-readable size.

        >>> format_bytes(512)
        '512 B'
        >>> format_bytes(2048)
        '2.00 KB'
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def savings_percent(baseline: int, value: int) -> float:
    """How much smaller ``value`` is than ``baseline``, in percent."""
    if baseline <= 0:
        return 0.0
    return 100.0 * (baseline - value) / baseline
