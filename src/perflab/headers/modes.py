"""
=============================================================================
HEADER OPTIMIZATION MODES
=============================================================================

    ┌───────┬─────────────┬──────────────────────────────────────────────┐
    │ value │ name        │ what goes over the wire                      │
    ├───────┼─────────────┼──────────────────────────────────────────────┤
    │   0   │ FULL        │ browser-style request, verbose response      │
    │   1   │ MINIMAL     │ only the essential headers                   │
    │   2   │ COMPRESSED  │ HTTP/2-style frame with an HPACK-like block  │
    │   3   │ CACHED      │ conditional request, 304 Not Modified        │
    └───────┴─────────────┴──────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum
from typing import List


class HeaderMode(IntEnum):
    FULL = 0
    MINIMAL = 1
    COMPRESSED = 2
    CACHED = 3

    def next(self) -> "HeaderMode":
        """0 → 1 → 2 → 3 → 0"""
        members = list(HeaderMode)
        return members[(members.index(self) + 1) % len(members)]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def notes(self) -> List[str]:
        """Lecture bullets printed after each exchange."""
        return list(_NOTES[self])


_LABELS = {
    HeaderMode.FULL: "FULL HEADERS (HTTP/1.1)",
    HeaderMode.MINIMAL: "MINIMAL HEADERS",
    HeaderMode.COMPRESSED: "COMPRESSED HEADERS (HTTP/2 HPACK)",
    HeaderMode.CACHED: "CACHED RESPONSE (304 Not Modified)",
}

_NOTES = {
    HeaderMode.FULL: (
        "Typical browser request with all headers",
        "High overhead from verbose headers",
        "Baseline for comparison",
    ),
    HeaderMode.MINIMAL: (
        "Only essential headers included",
        "Removed unnecessary headers",
        "Reduced overhead significantly",
    ),
    HeaderMode.COMPRESSED: (
        "Headers compressed using HPACK-like algorithm",
        "Static table for common headers",
        "Repeated headers cost a single byte once indexed",
    ),
    HeaderMode.CACHED: (
        "Conditional request with cache validators",
        "Server returns 304 without body",
        "Client uses cached version",
        "Massive bandwidth savings",
    ),
}


KEY_LEARNINGS = (
    "HTTP headers add significant overhead to requests/responses",
    "Removing unnecessary headers reduces bandwidth usage",
    "Header compression (HPACK) shrinks header blocks dramatically",
    "Caching with conditional requests eliminates redundant data transfer",
    "HTTP/2 header compression is much more efficient than HTTP/1.1",
    "Header optimization accelerates request/response cycles",
)


def analysis_notes(mode: HeaderMode) -> List[str]:
    return mode.notes
