"""
=============================================================================
DNS OPTIMIZATION MODES
=============================================================================

    ┌───────┬──────────┬─────────────────────────────────────────────────┐
    │ value │ name     │ what happens                                    │
    ├───────┼──────────┼─────────────────────────────────────────────────┤
    │   0   │ NORMAL   │ one lookup, every time                          │
    │   1   │ CACHED   │ lookup, store with TTL, second lookup hits      │
    │   2   │ COMPARE  │ same name against several public servers        │
    │   3   │ BATCH    │ many lookups through the cache, hit rate        │
    └───────┴──────────┴─────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum
from typing import List


class DNSMode(IntEnum):
    NORMAL = 0
    CACHED = 1
    COMPARE = 2
    BATCH = 3

    def next(self) -> "DNSMode":
        members = list(DNSMode)
        return members[(members.index(self) + 1) % len(members)]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def notes(self) -> List[str]:
        return list(_NOTES[self])


_LABELS = {
    DNSMode.NORMAL: "NORMAL DNS QUERY",
    DNSMode.CACHED: "DNS WITH LOCAL CACHE",
    DNSMode.COMPARE: "COMPARE DNS SERVERS",
    DNSMode.BATCH: "BATCH QUERIES (CACHE HIT RATE)",
}

_NOTES = {
    DNSMode.NORMAL: (
        "Every lookup pays a full network round trip",
        "Repeated lookups of the same name are pure overhead",
    ),
    DNSMode.CACHED: (
        "Caching eliminates the network round trip",
        "Only ONE DNS query is visible in Wireshark",
    ),
    DNSMode.COMPARE: (
        "Resolver latency differs from server to server",
        "Configure the fastest one as the primary DNS",
    ),
    DNSMode.BATCH: (
        "After the first miss every lookup is a cache hit",
        "Hit rate approaches 100% within one TTL",
    ),
}


# Well-known public resolvers, (address, label)
DNS_SERVERS = (
    ("8.8.8.8", "Google DNS"),
    ("8.8.4.4", "Google DNS Secondary"),
    ("1.1.1.1", "Cloudflare DNS"),
    ("1.0.0.1", "Cloudflare DNS Secondary"),
    ("208.67.222.222", "OpenDNS"),
    ("208.67.220.220", "OpenDNS Secondary"),
)


KEY_LEARNINGS = (
    "DNS lookups add latency before the first byte of every new connection",
    "A local cache with a sensible TTL (300-3600s) removes most lookups",
    "Resolver choice matters: measure, then configure the fastest",
    "Batching lookups through a cache shows the hit rate directly",
)
