"""
Integration tests: UDP DNS queries against a local responder.
"""

import socket
import threading

import pytest

from perflab.__main__ import main
from perflab.dns import CachingResolver, UDPResolver, build_response, compare_servers
from perflab.exceptions import ResolutionError


class StaticResponder:
    """Loopback UDP server answering every A query from a fixed list."""

    def __init__(self, answers=(("10.1.2.3", 120),), rcode=0, silent=False, stray_first=False):
        self.answers = answers
        self.rcode = rcode
        self.silent = silent
        self.stray_first = stray_first
        self.queries = 0

        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(0.2)
        self.host, self.port = self.sock.getsockname()

        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def endpoint(self) -> str:
        return f"{self.host}:{self.port}"

    def _serve(self):
        while not self._stop.is_set():
            try:
                query, peer = self.sock.recvfrom(512)
            except socket.timeout:
                continue
            except OSError:
                return
            self.queries += 1
            if self.silent:
                continue
            reply = build_response(query, self.answers, self.rcode)
            if self.stray_first:
                stray = bytearray(reply)
                stray[0] ^= 0xFF
                self.sock.sendto(bytes(stray), peer)
            self.sock.sendto(reply, peer)

    def stop(self):
        self._stop.set()
        self._thread.join(timeout=2)
        self.sock.close()


@pytest.fixture
def responder():
    """Factory for StaticResponder; every responder is stopped afterwards."""
    started = []

    def make(**kwargs) -> StaticResponder:
        server = StaticResponder(**kwargs)
        started.append(server)
        return server

    yield make

    for server in started:
        server.stop()


class TestUDPResolver:
    """Direct queries over UDP."""

    def test_answer(self, responder):
        """The first A record and its TTL are returned."""
        server = responder(answers=(("10.9.8.7", 42),))
        resolution = UDPResolver(server.host, server.port, timeout=2).resolve("example.test")
        assert resolution.address == "10.9.8.7"
        assert resolution.ttl == 42
        assert server.queries == 1

    def test_nxdomain(self, responder):
        """An error rcode is a ResolutionError naming it."""
        server = responder(answers=(), rcode=3)
        with pytest.raises(ResolutionError, match="NXDOMAIN"):
            UDPResolver(server.host, server.port, timeout=2).resolve("nope.test")

    def test_no_a_record(self, responder):
        """NOERROR with no answers is still a failure."""
        server = responder(answers=())
        with pytest.raises(ResolutionError, match="no A record"):
            UDPResolver(server.host, server.port, timeout=2).resolve("empty.test")

    def test_timeout(self, responder):
        """A silent server times out."""
        server = responder(silent=True)
        with pytest.raises(ResolutionError, match="no reply"):
            UDPResolver(server.host, server.port, timeout=0.3).resolve("example.test")

    def test_reply_with_other_id_ignored(self, responder):
        """A reply for another query id does not satisfy this one."""
        server = responder(stray_first=True)
        resolution = UDPResolver(server.host, server.port, timeout=2).resolve("example.test")
        assert resolution.address == "10.1.2.3"

    def test_cached_over_udp(self, responder):
        """Five lookups through the cache put one query on the wire."""
        server = responder()
        caching = CachingResolver(UDPResolver(server.host, server.port, timeout=2))
        for _ in range(5):
            caching.resolve("example.test")
        assert server.queries == 1
        assert caching.cache.hits == 4


class TestCompareServers:
    """Mode 2 against local servers."""

    def test_compare(self, responder):
        """Answering servers are timed; a silent one is reported as failed."""
        first = responder()
        second = responder(answers=(("10.1.2.4", 60),))
        dead = responder(silent=True)
        comparison = compare_servers(
            "example.test",
            [(first.endpoint, "first"), (second.endpoint, "second"), (dead.endpoint, "dead")],
            timeout=0.3,
        )
        assert [r.ok for r in comparison.results] == [True, True, False]
        assert comparison.fastest.label in ("first", "second")
        assert "** FASTEST **" in comparison.render()

    def test_cli_compare(self, responder, capsys):
        """perflab dns --mode 2 with explicit servers."""
        server = responder()
        code = main(["dns", "--mode", "2", "-D", "example.test", "-S", server.endpoint,
                     "--log-level", "WARNING"])
        assert code == 0
        output = capsys.readouterr().out
        assert "COMPARE DNS SERVERS" in output
        assert "** FASTEST **" in output

    def test_cli_compare_all_fail(self, responder, capsys, monkeypatch):
        """No answering server exits 1."""
        monkeypatch.setenv("PERFLAB_TIMEOUT", "0.3")
        server = responder(silent=True)
        code = main(["dns", "--mode", "2", "-S", server.endpoint, "--log-level", "ERROR"])
        assert code == 1
        assert "No server answered" in capsys.readouterr().out
