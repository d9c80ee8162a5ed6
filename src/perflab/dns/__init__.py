"""
=============================================================================
DNS OPTIMIZATION DEMO
=============================================================================

    cache.py     DNSCache: name → address with TTL expiry
    message.py   A-record query/response wire format
    resolver.py  SystemResolver, UDPResolver, CachingResolver
    modes.py     DNSMode (NORMAL, CACHED, COMPARE, BATCH), public servers
    demo.py      one run per mode, each with a printable report

=============================================================================
"""

from .cache import DNSCache, normalize_domain
from .message import build_query, build_response, parse_message
from .modes import DNS_SERVERS, DNSMode, KEY_LEARNINGS
from .resolver import CachingResolver, Resolution, SystemResolver, UDPResolver
from .demo import compare_servers, parse_server, run_batch, run_cached, run_lookup, run_mode

__all__ = [
    "DNSCache",
    "normalize_domain",
    "build_query",
    "build_response",
    "parse_message",
    "DNS_SERVERS",
    "DNSMode",
    "KEY_LEARNINGS",
    "CachingResolver",
    "Resolution",
    "SystemResolver",
    "UDPResolver",
    "compare_servers",
    "parse_server",
    "run_batch",
    "run_cached",
    "run_lookup",
    "run_mode",
]
