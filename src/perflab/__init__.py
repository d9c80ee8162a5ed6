"""
=============================================================================
PERFLAB - Classroom Performance & Network Optimization Demos
=============================================================================

This package collects small, self-contained demonstrations used in a
profiling / networking course. Each demo is an independent entry point;
they share only the ambient plumbing (configuration, logging, sockets and
the interactive console driver).

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        PERFLAB DEMO FAMILIES                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. HEADER OPTIMIZATION (perflab.headers)                          │
    │      - Full vs. minimal HTTP/1.1 headers                            │
    │      - HPACK-like compressed header block (perflab.hpack)           │
    │      - Conditional requests and 304 Not Modified                    │
    │                                                                      │
    │   2. PAYLOAD OPTIMIZATION (perflab.payload)                         │
    │      - JSON vs. binary encoding                                     │
    │      - String deduplication dictionary                              │
    │      - Run-length compression inside a framed TCP payload           │
    │                                                                      │
    │   3. DNS OPTIMIZATION (perflab.dns)                                 │
    │      - Local TTL cache, direct UDP queries to public resolvers      │
    │                                                                      │
    │   4. QoS (perflab.qos)                                              │
    │      - Priority queueing, SLA checks, congestion and security modes │
    │                                                                      │
    │   5. PROFILING WORKLOADS (perflab.workloads)                        │
    │      - Fixed-duration CPU threads fighting over one lock            │
    │      - Objects kept alive by module-level "roots"                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    perflab/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m perflab)
    ├── config.py            # DemoConfig dataclass
    ├── exceptions.py        # Error hierarchy
    ├── logging_setup.py     # Logging configuration
    ├── console.py           # Interactive ENTER / mode / quit driver
    ├── report.py            # ExchangeResult and size formatting
    ├── core/                # Socket plumbing
    │   ├── socket_server.py # Accept loop, background serving
    │   └── connection.py    # Read-to-EOF / send / half-close wrapper
    ├── http/                # HTTP-like messages
    │   ├── message.py       # HTTPRequest / HTTPResponse + parser
    │   ├── builders.py      # The fixed demo messages
    │   └── status_codes.py  # HTTPStatus enum
    ├── hpack/               # HPACK-like header codec
    │   ├── static_table.py  # RFC 7541 static table
    │   ├── integers.py      # Prefix integers and string literals
    │   ├── table.py         # Static + append-only dynamic table
    │   ├── encoder.py       # HeaderCompressor
    │   ├── decoder.py       # HeaderDecompressor
    │   └── stats.py         # CompressionStats
    ├── headers/             # Header optimization demo
    ├── payload/             # Payload optimization demo
    ├── dns/                 # DNS cache and resolver demo
    ├── qos/                 # Traffic prioritization demo
    └── workloads/           # CPU / memory profiling workloads

=============================================================================
QUICK START
=============================================================================

    # Interactive header demo (ENTER to send, "mode" to cycle, "quit")
    python -m perflab headers

    # One compressed-header round trip, then exit
    python -m perflab headers --mode 2 --once

    # Offline size comparison of every header mode
    python -m perflab compare

    # Payload demo with every optimization enabled
    python -m perflab payload --mode 4 --once

    # DNS cache miss then hit
    python -m perflab dns --mode 1

    # QoS with a suspicious bulk flow
    python -m perflab qos --mode 3

    # Lock contention workload for a profiler
    python -m perflab contention --threads 4 --duration 10

=============================================================================
"""

__version__ = "1.0.0"

from .config import DemoConfig
from .exceptions import PerflabError

__all__ = ["DemoConfig", "PerflabError", "__version__"]
