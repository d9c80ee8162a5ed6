"""
DNS demo runs: one function per mode, each returning a report that
renders the console text.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..config import DemoConfig
from ..exceptions import ResolutionError
from .cache import DNSCache
from .modes import DNS_SERVERS, DNSMode
from .resolver import DNS_PORT, CachingResolver, Resolution, SystemResolver, UDPResolver


logger = logging.getLogger(__name__)


def parse_server(endpoint: str) -> Tuple[str, int]:
    """
    "8.8.8.8" or "127.0.0.1:5353" → (host, port).

    Raises:
        ValueError: For an empty host or a port outside 1-65535.
    """
    host, sep, port_text = endpoint.rpartition(":")
    if not sep:
        host, port = endpoint, DNS_PORT
    else:
        port = int(port_text)
    if not host:
        raise ValueError(f"Invalid DNS server: {endpoint!r}")
    if not 0 < port < 65536:
        raise ValueError(f"Invalid DNS server port in {endpoint!r}")
    return host, port


# =============================================================================
# REPORTS
# =============================================================================

@dataclass
class LookupReport:
    resolution: Resolution

    def render(self) -> str:
        r = self.resolution
        return "\n".join([
            f"Domain: {r.domain}",
            f"[OK] Response: {r.address}",
            f"[OK] Query time: {r.elapsed_ms:.2f} ms",
            f"[OK] Resolver: {r.source}",
        ])


@dataclass
class CacheReport:
    first: Resolution
    second: Resolution

    @property
    def time_saved_ms(self) -> float:
        return self.first.elapsed_ms - self.second.elapsed_ms

    @property
    def improvement_percent(self) -> float:
        if self.first.elapsed_ms <= 0:
            return 0.0
        return 100.0 * self.time_saved_ms / self.first.elapsed_ms

    def render(self) -> str:
        return "\n".join([
            f"Domain: {self.first.domain}",
            "--- First Query (Cache Miss) ---",
            f"[OK] Response: {self.first.address} in {self.first.elapsed_ms:.2f} ms",
            f"[OK] Added to local cache (TTL: {self.first.ttl}s)",
            "--- Second Query (Cache Hit) ---",
            f"[OK] Response: {self.second.address} (from cache) in {self.second.elapsed_ms:.3f} ms",
            "",
            "=== CACHE BENEFIT ANALYSIS ===",
            f"First query (no cache):  {self.first.elapsed_ms:.2f} ms",
            f"Second query (cached):   {self.second.elapsed_ms:.3f} ms",
            f"Improvement:             {self.improvement_percent:.2f}%",
            f"Time saved:              {self.time_saved_ms:.2f} ms",
        ])


@dataclass
class ServerResult:
    label: str
    server: str
    resolution: Optional[Resolution] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.resolution is not None


@dataclass
class ServerComparison:
    domain: str
    results: List[ServerResult] = field(default_factory=list)

    @property
    def fastest(self) -> Optional[ServerResult]:
        answered = [r for r in self.results if r.ok]
        if not answered:
            return None
        return min(answered, key=lambda r: r.resolution.elapsed_ms)

    def render(self) -> str:
        lines = [f"Domain: {self.domain}", "", "=== DNS SERVER COMPARISON ==="]
        fastest = self.fastest
        for result in self.results:
            if result.ok:
                line = (
                    f"{result.label} ({result.server}): {result.resolution.address} "
                    f"in {result.resolution.elapsed_ms:.2f} ms"
                )
                if result is fastest:
                    line += " ** FASTEST **"
            else:
                line = f"{result.label} ({result.server}): [FAIL] {result.error}"
            lines.append(line)

        lines.append("")
        if fastest is None:
            lines.append("[FAIL] No server answered")
        else:
            lines.append(
                f"[OK] Fastest DNS server: {fastest.label} ({fastest.resolution.elapsed_ms:.2f} ms)"
            )
        return "\n".join(lines)


@dataclass
class BatchReport:
    domain: str
    queries: int
    hits: int
    misses: int
    total_ms: float
    miss_ms: float

    @property
    def hit_rate(self) -> float:
        return 100.0 * self.hits / self.queries if self.queries else 0.0

    @property
    def estimated_uncached_ms(self) -> float:
        """Every query at the average miss cost."""
        if self.misses == 0:
            return 0.0
        return self.miss_ms / self.misses * self.queries

    @property
    def time_saved_ms(self) -> float:
        return self.estimated_uncached_ms - self.total_ms

    @property
    def improvement_percent(self) -> float:
        if self.estimated_uncached_ms <= 0:
            return 0.0
        return 100.0 * self.time_saved_ms / self.estimated_uncached_ms

    def render(self) -> str:
        return "\n".join([
            f"Domain: {self.domain}",
            "=== BATCH QUERY RESULTS ===",
            f"Total queries:           {self.queries}",
            f"Cache hits:              {self.hits}",
            f"Cache misses:            {self.misses}",
            f"Cache hit rate:          {self.hit_rate:.2f}%",
            "",
            "=== PERFORMANCE IMPACT ===",
            f"Total time (with cache):    {self.total_ms:.2f} ms",
            f"Total time (without cache): {self.estimated_uncached_ms:.2f} ms (estimated)",
            f"Time saved:                 {self.time_saved_ms:.2f} ms",
            f"Performance improvement:    {self.improvement_percent:.2f}%",
            f"[OK] Only {self.misses} DNS queries went on the wire",
        ])


# =============================================================================
# RUNS
# =============================================================================

def run_lookup(resolver, domain: str) -> LookupReport:
    """
    Raises:
        ResolutionError: If the lookup fails.
    """
    return LookupReport(resolver.resolve(domain))


def run_cached(resolver, domain: str, cache: Optional[DNSCache] = None) -> CacheReport:
    """Miss then hit on a fresh cache."""
    caching = CachingResolver(resolver, cache)
    caching.cache.clear()
    first = caching.resolve(domain)
    second = caching.resolve(domain)
    logger.info(f"cache: miss {first.elapsed_ms:.2f}ms, hit {second.elapsed_ms:.3f}ms")
    return CacheReport(first, second)


def compare_servers(
    domain: str,
    servers: Sequence[Tuple[str, str]] = DNS_SERVERS,
    timeout: Optional[float] = 2.0,
) -> ServerComparison:
    """
    Query each (server endpoint, label) pair directly over UDP. A server that
    fails is reported, not raised.
    """
    comparison = ServerComparison(domain)
    for endpoint, label in servers:
        host, port = parse_server(endpoint)
        resolver = UDPResolver(host, port, timeout=timeout, label=label)
        try:
            resolution = resolver.resolve(domain)
        except ResolutionError as e:
            logger.warning(f"{label} ({endpoint}) failed: {e}")
            comparison.results.append(ServerResult(label, endpoint, error=str(e)))
            continue
        comparison.results.append(ServerResult(label, endpoint, resolution))
    return comparison


def run_batch(resolver, domain: str, queries: int = 100, cache: Optional[DNSCache] = None) -> BatchReport:
    """
    Raises:
        ValueError: If queries < 1.
        ResolutionError: If a cache miss cannot be resolved.
    """
    if queries < 1:
        raise ValueError("queries must be >= 1")

    caching = CachingResolver(resolver, cache)
    caching.cache.clear()

    total_ms = 0.0
    miss_ms = 0.0
    start = time.perf_counter()
    for index in range(queries):
        resolution = caching.resolve(domain)
        total_ms += resolution.elapsed_ms
        if not resolution.cached:
            miss_ms += resolution.elapsed_ms
        if (index + 1) % 10 == 0:
            logger.debug(f"Progress: {index + 1}/{queries} queries")

    logger.info(f"batch of {queries} took {(time.perf_counter() - start) * 1000:.2f}ms wall")
    return BatchReport(
        domain=domain,
        queries=queries,
        hits=caching.cache.hits,
        misses=caching.cache.misses,
        total_ms=total_ms,
        miss_ms=miss_ms,
    )


def run_mode(
    mode: DNSMode,
    config: DemoConfig,
    resolver=None,
    servers: Optional[Sequence[Tuple[str, str]]] = None,
):
    """Dispatch one mode; returns a report with ``render()``."""
    resolver = resolver or SystemResolver(ttl=config.dns_ttl)
    domain = config.dns_domain

    if mode == DNSMode.NORMAL:
        return run_lookup(resolver, domain)
    if mode == DNSMode.CACHED:
        return run_cached(resolver, domain)
    if mode == DNSMode.COMPARE:
        return compare_servers(domain, servers or DNS_SERVERS, timeout=config.timeout)
    return run_batch(resolver, domain, config.dns_queries)
