"""
=============================================================================
DEMO CONFIGURATION
=============================================================================

Centralized configuration for every perflab demo.

Every knob a lecture toggles (which header mode, which payload mode, how
many users) lives in one dataclass that can be filled from code,
environment variables or the CLI.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m perflab headers --mode 2                         │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── PERFLAB_HEADER_MODE=2 python -m perflab headers            │
    │                                                                      │
    │   3. Defaults (this file)                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass, replace
from typing import Optional


HEADER_MODE_COUNT = 4
PAYLOAD_MODE_COUNT = 5
DNS_MODE_COUNT = 4
QOS_MODE_COUNT = 4


@dataclass
class DemoConfig:
    """
    Configuration shared by the demo servers, clients and workloads.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout, max_message_size

    DEMO MODES
    - header_mode (0-3), payload_mode (0-4), user_count, chunk_size
    - dns_mode (0-3), dns_domain, dns_queries, dns_ttl
    - qos_mode (0-3), qos_packets

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Loopback by default so Wireshark can watch the 127.0.0.1 interface."""

    port: int = 8888
    """
    Port for the demo server.
    0 lets the OS pick a free port (used by the tests).
    """

    backlog: int = 16
    """Queued connections; the demos are single-client so this stays small."""

    buffer_size: int = 64 * 1024
    """Receive buffer per recv() call (64 KB, as in the lessons)."""

    timeout: Optional[float] = 5.0
    """Socket timeout in seconds for clients and accepted connections."""

    max_message_size: int = 1024 * 1024
    """Upper bound on a single request or response read to EOF."""

    # ─────────────────────────────────────────────────────────────────────
    # DEMO MODES
    # ─────────────────────────────────────────────────────────────────────

    header_mode: int = 0
    """0=Full, 1=Minimal, 2=Compressed, 3=Cached."""

    payload_mode: int = 4
    """0=None, 1=Dedup, 2=Binary, 3=Compress, 4=All."""

    user_count: int = 100
    """Number of generated user records for the payload demo."""

    chunk_size: int = 4096
    """Payload client send() chunk size (4 KB)."""

    dns_mode: int = 0
    """0=Normal, 1=Cached, 2=Compare servers, 3=Batch."""

    dns_domain: str = "google.com"

    dns_queries: int = 100
    """Lookups in the batch (hit rate) mode."""

    dns_ttl: int = 300
    """
    Seconds a cached answer stays valid when the resolver reports no TTL
    (the system resolver never does).
    """

    qos_mode: int = 1
    """0=No QoS, 1=Priority, 2=Dynamic, 3=Security."""

    qos_packets: int = 10
    """Packets sent per traffic class."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG shows every accept/close; INFO shows one line per exchange."""

    log_format: str = "text"
    """'text' for the console, 'json' for log aggregators."""

    @classmethod
    def from_env(cls) -> "DemoConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        PERFLAB_HOST          Server host (default: 127.0.0.1)
        PERFLAB_PORT          Server port (default: 8888)
        PERFLAB_BUFFER_SIZE   recv() buffer size (default: 65536)
        PERFLAB_TIMEOUT       Socket timeout seconds (default: 5)
        PERFLAB_HEADER_MODE   Header demo mode 0-3 (default: 0)
        PERFLAB_PAYLOAD_MODE  Payload demo mode 0-4 (default: 4)
        PERFLAB_USERS         Generated user records (default: 100)
        PERFLAB_DNS_MODE      DNS demo mode 0-3 (default: 0)
        PERFLAB_DNS_DOMAIN    Name to resolve (default: google.com)
        PERFLAB_QOS_MODE      QoS demo mode 0-3 (default: 1)
        PERFLAB_LOG_LEVEL     Logging level (default: INFO)
        PERFLAB_LOG_FORMAT    text or json (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("PERFLAB_HOST", "127.0.0.1"),
            port=int(os.getenv("PERFLAB_PORT", "8888")),
            buffer_size=int(os.getenv("PERFLAB_BUFFER_SIZE", str(64 * 1024))),
            timeout=float(os.getenv("PERFLAB_TIMEOUT", "5")),
            header_mode=int(os.getenv("PERFLAB_HEADER_MODE", "0")),
            payload_mode=int(os.getenv("PERFLAB_PAYLOAD_MODE", "4")),
            user_count=int(os.getenv("PERFLAB_USERS", "100")),
            dns_mode=int(os.getenv("PERFLAB_DNS_MODE", "0")),
            dns_domain=os.getenv("PERFLAB_DNS_DOMAIN", "google.com"),
            qos_mode=int(os.getenv("PERFLAB_QOS_MODE", "1")),
            log_level=os.getenv("PERFLAB_LOG_LEVEL", "INFO"),
            log_format=os.getenv("PERFLAB_LOG_FORMAT", "text"),
        )

    def with_overrides(self, **overrides) -> "DemoConfig":
        """
        Return a copy with the given fields replaced.

        None values are ignored so argparse defaults of None don't clobber
        values that came from the environment.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)

    def validate(self) -> None:
        """
        Validate configuration values.

        Fail fast at startup rather than halfway through a lecture.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_message_size < self.buffer_size:
            raise ValueError("max_message_size must be >= buffer_size")

        if not 0 <= self.header_mode < HEADER_MODE_COUNT:
            raise ValueError(
                f"Invalid header_mode: {self.header_mode}. Must be 0-{HEADER_MODE_COUNT - 1}."
            )

        if not 0 <= self.payload_mode < PAYLOAD_MODE_COUNT:
            raise ValueError(
                f"Invalid payload_mode: {self.payload_mode}. Must be 0-{PAYLOAD_MODE_COUNT - 1}."
            )

        if self.user_count < 1:
            raise ValueError("user_count must be >= 1")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if not 0 <= self.dns_mode < DNS_MODE_COUNT:
            raise ValueError(f"Invalid dns_mode: {self.dns_mode}. Must be 0-{DNS_MODE_COUNT - 1}.")

        if not self.dns_domain or len(self.dns_domain) > 253:
            raise ValueError(f"Invalid dns_domain: {self.dns_domain!r}")

        if self.dns_queries < 1:
            raise ValueError("dns_queries must be >= 1")

        if self.dns_ttl < 1:
            raise ValueError("dns_ttl must be >= 1")

        if not 0 <= self.qos_mode < QOS_MODE_COUNT:
            raise ValueError(f"Invalid qos_mode: {self.qos_mode}. Must be 0-{QOS_MODE_COUNT - 1}.")

        if self.qos_packets < 1:
            raise ValueError("qos_packets must be >= 1")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"Invalid log_format: {self.log_format}. Use 'text' or 'json'.")
