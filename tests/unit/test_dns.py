"""
Unit tests for the DNS cache, wire format, resolvers and demo reports.
"""

import socket

import pytest

from perflab.config import DemoConfig
from perflab.dns import (
    CachingResolver,
    DNSCache,
    DNSMode,
    Resolution,
    SystemResolver,
    build_query,
    build_response,
    parse_message,
    parse_server,
    run_batch,
    run_cached,
    run_lookup,
    run_mode,
)
from perflab.dns.demo import ServerComparison, ServerResult
from perflab.dns.message import decode_name, encode_name
from perflab.exceptions import DNSMessageError, ResolutionError


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeResolver:
    """Answers every name with one address and counts the calls."""

    name = "fake"

    def __init__(self, address: str = "10.0.0.1", ttl: int = 300, fail: bool = False):
        self.address = address
        self.ttl = ttl
        self.fail = fail
        self.calls = 0

    def resolve(self, domain: str) -> Resolution:
        self.calls += 1
        if self.fail:
            raise ResolutionError(f"{domain}: NXDOMAIN", domain, self.name)
        return Resolution(domain, self.address, self.ttl, 5.0, self.name)


class TestDNSCache:
    """Tests for DNSCache."""

    def test_hit_within_ttl(self):
        """An added entry is returned until it expires."""
        clock = FakeClock()
        cache = DNSCache(clock)
        cache.add("google.com", "142.250.1.1", 300)
        clock.now += 299
        assert cache.lookup("google.com") == "142.250.1.1"
        assert cache.remaining_ttl("google.com") == 1

    def test_expired_entry_is_dropped(self):
        """At expiry the entry is removed and the lookup misses."""
        clock = FakeClock()
        cache = DNSCache(clock)
        cache.add("google.com", "142.250.1.1", 300)
        clock.now += 300
        assert cache.lookup("google.com") is None
        assert len(cache) == 0

    def test_names_compare_like_dns(self):
        """Case and a trailing dot do not matter."""
        cache = DNSCache(FakeClock())
        cache.add("Google.COM.", "142.250.1.1", 60)
        assert cache.lookup("google.com") == "142.250.1.1"

    def test_zero_ttl_is_not_cached(self):
        """TTL 0 means the answer must not be reused."""
        cache = DNSCache(FakeClock())
        cache.add("a.test", "10.0.0.1", 0)
        assert cache.lookup("a.test") is None

    def test_negative_ttl_rejected(self):
        """Negative TTLs are a programming error."""
        with pytest.raises(ValueError):
            DNSCache().add("a.test", "10.0.0.1", -1)

    def test_hit_rate_and_clear(self):
        """Hits and misses are counted until clear()."""
        cache = DNSCache(FakeClock())
        cache.lookup("a.test")
        cache.add("a.test", "10.0.0.1", 60)
        cache.lookup("a.test")
        cache.lookup("a.test")
        assert (cache.hits, cache.misses) == (2, 1)
        assert cache.hit_rate == pytest.approx(200 / 3)
        cache.clear()
        assert (cache.hits, cache.misses, len(cache)) == (0, 0, 0)


class TestDNSMessage:
    """Tests for the A-record wire format."""

    def test_query_bytes(self):
        """Header with RD set, one question, labels, type A, class IN."""
        assert build_query("a.io", 0x1234) == (
            b"\x12\x34\x01\x00\x00\x01\x00\x00\x00\x00\x00\x00"
            b"\x01a\x02io\x00"
            b"\x00\x01\x00\x01"
        )

    @pytest.mark.parametrize("domain", ["", "a..b", "x" * 64 + ".com", "café.fr"])
    def test_bad_names(self, domain):
        """Empty labels, labels over 63 bytes and non-ASCII names raise."""
        with pytest.raises(DNSMessageError):
            encode_name(domain)

    def test_response_answers(self):
        """A built response parses to the echoed question and A records."""
        query = build_query("example.test", 7)
        reply = parse_message(build_response(query, [("10.1.2.3", 120), ("10.1.2.4", 60)]))
        assert reply.id == 7
        assert reply.is_response
        assert reply.rcode_name == "NOERROR"
        assert reply.questions[0].name == "example.test"
        assert [r.address for r in reply.a_records()] == ["10.1.2.3", "10.1.2.4"]
        assert [r.ttl for r in reply.answers] == [120, 60]

    def test_compressed_answer_names(self):
        """Answer names are 2-byte pointers back to the question."""
        data = build_response(build_query("example.test", 1), [("10.1.2.3", 5)])
        question_end = 12 + len(encode_name("example.test")) + 4
        assert data[question_end:question_end + 2] == b"\xc0\x0c"
        assert parse_message(data).answers[0].name == "example.test"

    def test_nxdomain(self):
        """The rcode is exposed by name."""
        reply = parse_message(build_response(build_query("nope.test", 1), rcode=3))
        assert reply.rcode_name == "NXDOMAIN"
        assert reply.a_records() == []

    def test_pointer_loop(self):
        """A pointer to itself is rejected instead of looping forever."""
        data = b"\x00" * 12 + b"\xc0\x0c"
        with pytest.raises(DNSMessageError):
            decode_name(data, 12)

    def test_truncated(self):
        """Cutting an answer short raises."""
        data = build_response(build_query("example.test", 1), [("10.1.2.3", 5)])
        with pytest.raises(DNSMessageError):
            parse_message(data[:-2])
        with pytest.raises(DNSMessageError):
            parse_message(data[:5])


class TestResolvers:
    """Tests for SystemResolver and CachingResolver."""

    def test_system_resolver(self, monkeypatch):
        """The first IPv4 address from getaddrinfo is used."""
        def fake_getaddrinfo(host, port, family, type_):
            assert family == socket.AF_INET
            return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("93.184.216.34", 0))]

        monkeypatch.setattr("perflab.dns.resolver.socket.getaddrinfo", fake_getaddrinfo)
        resolution = SystemResolver(ttl=60).resolve("example.com")
        assert resolution.address == "93.184.216.34"
        assert resolution.ttl == 60
        assert resolution.source == "system"

    def test_system_resolver_failure(self, monkeypatch):
        """gaierror becomes ResolutionError."""
        def fake_getaddrinfo(*args):
            raise socket.gaierror(-2, "Name or service not known")

        monkeypatch.setattr("perflab.dns.resolver.socket.getaddrinfo", fake_getaddrinfo)
        with pytest.raises(ResolutionError) as exc_info:
            SystemResolver().resolve("nope.invalid")
        assert exc_info.value.domain == "nope.invalid"

    def test_caching_resolver(self):
        """Only the first lookup reaches the wrapped resolver."""
        upstream = FakeResolver()
        caching = CachingResolver(upstream, DNSCache(FakeClock()))
        first = caching.resolve("a.test")
        second = caching.resolve("A.test.")
        assert not first.cached
        assert second.cached
        assert second.address == "10.0.0.1"
        assert upstream.calls == 1

    def test_failures_are_not_cached(self):
        """A failed lookup leaves the cache empty."""
        caching = CachingResolver(FakeResolver(fail=True))
        with pytest.raises(ResolutionError):
            caching.resolve("a.test")
        assert len(caching.cache) == 0


class TestDemoRuns:
    """Tests for the per-mode runs and their reports."""

    def test_lookup(self):
        """Mode 0 reports the address."""
        report = run_lookup(FakeResolver(), "a.test")
        assert "10.0.0.1" in report.render()

    def test_cached(self):
        """Mode 1 misses then hits."""
        report = run_cached(FakeResolver(), "a.test")
        assert not report.first.cached
        assert report.second.cached
        assert "CACHE BENEFIT ANALYSIS" in report.render()

    def test_batch(self):
        """Mode 3: one miss, the rest hits; the estimate scales the miss cost."""
        upstream = FakeResolver()
        report = run_batch(upstream, "a.test", queries=20)
        assert (report.hits, report.misses) == (19, 1)
        assert upstream.calls == 1
        assert report.hit_rate == 95.0
        assert report.estimated_uncached_ms == pytest.approx(report.miss_ms * 20)
        assert "Cache hit rate:          95.00%" in report.render()

    def test_batch_rejects_zero(self):
        """At least one query is needed."""
        with pytest.raises(ValueError):
            run_batch(FakeResolver(), "a.test", queries=0)

    def test_comparison_fastest(self):
        """The quickest answering server is marked; failures are listed."""
        comparison = ServerComparison("a.test", [
            ServerResult("slow", "10.0.0.53", Resolution("a.test", "10.0.0.1", 60, 30.0, "slow")),
            ServerResult("fast", "10.0.0.54", Resolution("a.test", "10.0.0.1", 60, 3.0, "fast")),
            ServerResult("down", "10.0.0.55", error="timeout"),
        ])
        assert comparison.fastest.label == "fast"
        text = comparison.render()
        assert "fast (10.0.0.54): 10.0.0.1 in 3.00 ms ** FASTEST **" in text
        assert "[FAIL] timeout" in text

    def test_run_mode_dispatch(self):
        """run_mode uses the configured domain and query count."""
        config = DemoConfig(dns_domain="b.test", dns_queries=5)
        report = run_mode(DNSMode.BATCH, config, resolver=FakeResolver())
        assert report.domain == "b.test"
        assert report.queries == 5

    @pytest.mark.parametrize("endpoint,expected", [
        ("8.8.8.8", ("8.8.8.8", 53)),
        ("127.0.0.1:5353", ("127.0.0.1", 5353)),
    ])
    def test_parse_server(self, endpoint, expected):
        """Port defaults to 53."""
        assert parse_server(endpoint) == expected

    @pytest.mark.parametrize("endpoint", [":53", "1.1.1.1:0", "1.1.1.1:x"])
    def test_parse_server_rejects(self, endpoint):
        """Empty hosts and bad ports raise ValueError."""
        with pytest.raises(ValueError):
            parse_server(endpoint)
