"""
Offline size comparison of every header mode.

No sockets involved: the messages are built and serialized exactly as the
client and server would send them, then measured.
"""

from dataclasses import dataclass
from typing import List

from ..hpack import HeaderCompressor
from ..http import builders
from ..report import format_bytes, savings_percent
from .client import build_request
from .modes import HeaderMode
from .wire import encode_frame


@dataclass
class ModeComparison:
    mode: HeaderMode
    request_bytes: int
    request_header_bytes: int
    response_bytes: int
    response_header_bytes: int
    savings_vs_full: float = 0.0

    @property
    def total_bytes(self) -> int:
        return self.request_bytes + self.response_bytes


def _response_sizes(mode: HeaderMode):
    if mode == HeaderMode.COMPRESSED:
        compressor = HeaderCompressor()
        data = encode_frame(builders.compressed_response(), compressor)
        return len(data), compressor.last_stats.compressed_size

    if mode == HeaderMode.MINIMAL:
        response = builders.minimal_response()
    elif mode == HeaderMode.CACHED:
        response = builders.cached_response()
    else:
        response = builders.full_response()
    return response.total_size, response.header_size


def compare_modes() -> List[ModeComparison]:
    """Sizes for each mode, with round-trip savings relative to FULL."""
    rows = []
    for mode in HeaderMode:
        _request, data, request_headers = build_request(mode)
        response_bytes, response_headers = _response_sizes(mode)
        rows.append(ModeComparison(
            mode=mode,
            request_bytes=len(data),
            request_header_bytes=request_headers,
            response_bytes=response_bytes,
            response_header_bytes=response_headers,
        ))

    baseline = rows[0].total_bytes
    for row in rows:
        row.savings_vs_full = savings_percent(baseline, row.total_bytes)
    return rows


def render_comparison(rows: List[ModeComparison]) -> str:
    header = (
        f"{'MODE':<12}{'REQUEST':>12}{'REQ HDRS':>12}"
        f"{'RESPONSE':>12}{'RESP HDRS':>12}{'SAVED':>10}"
    )
    lines = [header, "-" * len(header)]
    for row in rows:
        lines.append(
            f"{row.mode.name:<12}"
            f"{format_bytes(row.request_bytes):>12}"
            f"{format_bytes(row.request_header_bytes):>12}"
            f"{format_bytes(row.response_bytes):>12}"
            f"{format_bytes(row.response_header_bytes):>12}"
            f"{row.savings_vs_full:>9.1f}%"
        )
    return "\n".join(lines)
