"""
=============================================================================
RESOLVERS
=============================================================================

Three ways to turn a name into an IPv4 address, all with the same
``resolve(domain) -> Resolution`` shape:

    SystemResolver   getaddrinfo(): whatever the OS is configured with,
                     including its own cache. No TTL is visible.

    UDPResolver      one A query straight to a chosen server (8.8.8.8,
                     1.1.1.1, ...) on port 53. This is what makes comparing
                     servers meaningful: the OS resolver is bypassed.

    CachingResolver  wraps either of the above with a DNSCache.

             resolve("google.com")
                      │
           ┌──────────▼──────────┐   hit    ┌────────────┐
           │   CachingResolver   │────────► │  DNSCache  │
           └──────────┬──────────┘          └────────────┘
                      │ miss                       ▲
           ┌──────────▼──────────┐   answer + TTL  │
           │ System/UDPResolver  │─────────────────┘
           └─────────────────────┘

=============================================================================
"""

import logging
import random
import socket
import time
from dataclasses import dataclass
from typing import Optional

from ..exceptions import DNSMessageError, ResolutionError
from .cache import DNSCache, normalize_domain
from .message import build_query, parse_message


logger = logging.getLogger(__name__)

DNS_PORT = 53
DEFAULT_TTL = 300
MAX_UDP_MESSAGE = 512


@dataclass
class Resolution:
    """One answered lookup."""

    domain: str
    address: str
    ttl: int
    elapsed_ms: float
    source: str
    cached: bool = False


class SystemResolver:
    """Resolve through the operating system (``socket.getaddrinfo``)."""

    name = "system"

    def __init__(self, ttl: int = DEFAULT_TTL):
        self.ttl = ttl

    def resolve(self, domain: str) -> Resolution:
        """
        Raises:
            ResolutionError: If the OS resolver has no IPv4 address for the name.
        """
        start = time.perf_counter()
        try:
            infos = socket.getaddrinfo(domain, None, socket.AF_INET, socket.SOCK_STREAM)
        except (socket.gaierror, UnicodeError) as e:
            raise ResolutionError(f"{domain}: {e}", domain, self.name)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if not infos:
            raise ResolutionError(f"{domain}: no IPv4 address", domain, self.name)
        address = infos[0][4][0]
        logger.debug(f"system resolved {domain} -> {address} in {elapsed_ms:.2f}ms")
        return Resolution(domain, address, self.ttl, elapsed_ms, self.name)


class UDPResolver:
    """
    Send one A query to ``server`` and wait for the matching reply.

    Replies with another id (late answers to an earlier query) are
    ignored until the timeout.
    """

    def __init__(
        self,
        server: str,
        port: int = DNS_PORT,
        timeout: Optional[float] = 2.0,
        label: Optional[str] = None,
    ):
        self.server = server
        self.port = port
        self.timeout = timeout
        self.name = label or server

    def resolve(self, domain: str) -> Resolution:
        """
        Raises:
            ResolutionError: On timeout, a socket error, an error rcode, a
                malformed reply or a reply without an A record.
        """
        query_id = random.randrange(0x10000)
        try:
            query = build_query(domain, query_id)
        except DNSMessageError as e:
            raise ResolutionError(f"{domain}: {e}", domain, self.name)

        start = time.perf_counter()
        try:
            reply = self._exchange(query, query_id)
        except socket.timeout:
            raise ResolutionError(
                f"{domain}: no reply from {self.server}:{self.port} within {self.timeout}s",
                domain, self.name,
            )
        except OSError as e:
            raise ResolutionError(f"{domain}: {self.server}:{self.port}: {e}", domain, self.name)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if reply.rcode != 0:
            raise ResolutionError(f"{domain}: server answered {reply.rcode_name}", domain, self.name)
        records = reply.a_records()
        if not records:
            raise ResolutionError(f"{domain}: no A record in reply", domain, self.name)

        record = records[0]
        logger.debug(
            f"{self.name} resolved {domain} -> {record.address} "
            f"(ttl {record.ttl}s) in {elapsed_ms:.2f}ms"
        )
        return Resolution(domain, record.address, record.ttl, elapsed_ms, self.name)

    def _exchange(self, query: bytes, query_id: int):
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.settimeout(self.timeout)
            sock.sendto(query, (self.server, self.port))
            while True:
                data, _ = sock.recvfrom(MAX_UDP_MESSAGE)
                try:
                    reply = parse_message(data)
                except DNSMessageError as e:
                    logger.warning(f"Malformed reply from {self.server}: {e}")
                    continue
                if reply.id == query_id and reply.is_response:
                    return reply
                logger.debug(f"Ignoring reply id {reply.id}, waiting for {query_id}")


class CachingResolver:
    """Answer from the cache while the TTL lasts, otherwise ask ``resolver``."""

    def __init__(self, resolver, cache: Optional[DNSCache] = None):
        self.resolver = resolver
        self.cache = cache if cache is not None else DNSCache()
        self.name = f"{resolver.name}+cache"

    def resolve(self, domain: str) -> Resolution:
        start = time.perf_counter()
        address = self.cache.lookup(domain)
        if address is not None:
            elapsed_ms = (time.perf_counter() - start) * 1000
            return Resolution(
                domain,
                address,
                self.cache.remaining_ttl(domain),
                elapsed_ms,
                self.resolver.name,
                cached=True,
            )

        resolution = self.resolver.resolve(domain)
        self.cache.add(normalize_domain(domain), resolution.address, resolution.ttl)
        resolution.elapsed_ms = (time.perf_counter() - start) * 1000
        return resolution
