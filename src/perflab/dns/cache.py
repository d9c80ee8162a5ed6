"""
Local DNS cache with per-entry expiry.

    add("google.com", "142.250.1.1", ttl=300)
        │
        ▼
    ┌──────────────┬───────────────┬────────────────────┐
    │ domain       │ address       │ expires_at         │
    ├──────────────┼───────────────┼────────────────────┤
    │ google.com   │ 142.250.1.1   │ now + 300          │
    └──────────────┴───────────────┴────────────────────┘
        │
        ▼
    lookup("google.com")  → address while now < expires_at,
                            then the entry is dropped and None is returned

Keys are case-insensitive and ignore a trailing dot, the way DNS names are
compared on the wire.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


Clock = Callable[[], float]


def normalize_domain(domain: str) -> str:
    return domain.strip().rstrip(".").lower()


@dataclass
class CacheEntry:
    address: str
    expires_at: float
    ttl: int


class DNSCache:
    """Thread-safe name → IPv4 address cache."""

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def add(self, domain: str, address: str, ttl: int) -> None:
        """
        Store an answer for ``ttl`` seconds.

        Raises:
            ValueError: If ttl is negative.
        """
        if ttl < 0:
            raise ValueError(f"ttl must be >= 0, got {ttl}")

        key = normalize_domain(domain)
        with self._lock:
            if ttl == 0:
                # A zero TTL means "do not cache"
                self._entries.pop(key, None)
                return
            self._entries[key] = CacheEntry(address, self._clock() + ttl, ttl)

    def lookup(self, domain: str) -> Optional[str]:
        """Return the cached address, or None on a miss or an expired entry."""
        key = normalize_domain(domain)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() >= entry.expires_at:
                del self._entries[key]
                entry = None

            if entry is None:
                self.misses += 1
                return None

            self.hits += 1
            return entry.address

    def remaining_ttl(self, domain: str) -> int:
        """Whole seconds left before the entry expires (0 if absent)."""
        with self._lock:
            entry = self._entries.get(normalize_domain(domain))
            if entry is None:
                return 0
            return max(0, int(entry.expires_at - self._clock()))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    @property
    def hit_rate(self) -> float:
        """Hits as a percentage of all lookups."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return 100.0 * self.hits / total
