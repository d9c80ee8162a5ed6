"""
=============================================================================
RETENTION WORKLOAD
=============================================================================

Python has a garbage collector, yet objects still "leak" when something
long-lived keeps a reference to them. The two classic roots:

    ┌──────────────────────────┐        ┌──────────────────────────────┐
    │ module-level registry    │        │ module-level event listeners │
    │ _REGISTRY: list          │        │ _SUBSCRIBERS: list           │
    │   └─► DataProcessor #1   │        │   └─► processor.on_event     │
    │   └─► DataProcessor #2   │        │        (bound method keeps   │
    │   └─► ...                │        │         the instance alive)  │
    └──────────────────────────┘        └──────────────────────────────┘

RetentionDemo allocates processors, drops every local reference, shows
that gc.collect() frees nothing, then clears the roots and shows the
memory coming back. Memory is measured with tracemalloc; live objects are
counted through a WeakSet, which does not keep them alive itself.

=============================================================================
"""

import gc
import logging
import tracemalloc
import weakref
from dataclasses import dataclass
from typing import Callable, List

from ..report import format_bytes


logger = logging.getLogger(__name__)


# Module-level roots: anything referenced from here lives until cleared
_REGISTRY: List["DataProcessor"] = []
_SUBSCRIBERS: List[Callable[[str], None]] = []


class DataProcessor:
    """Holds ``size`` integers and registers itself in both roots."""

    _instances: "weakref.WeakSet[DataProcessor]" = weakref.WeakSet()

    def __init__(self, size: int):
        self.data = [i * 2 for i in range(size)]
        self.events_seen = 0

        _REGISTRY.append(self)
        _SUBSCRIBERS.append(self.on_event)
        DataProcessor._instances.add(self)

    def on_event(self, name: str) -> None:
        self.events_seen += 1

    def process(self) -> int:
        return sum(self.data)

    @classmethod
    def live_count(cls) -> int:
        return len(cls._instances)


def publish(name: str) -> None:
    """Deliver an event to every subscriber."""
    for callback in list(_SUBSCRIBERS):
        callback(name)


def release_roots() -> int:
    """Clear both roots; returns how many processors were registered."""
    released = len(_REGISTRY)
    _REGISTRY.clear()
    _SUBSCRIBERS.clear()
    return released


@dataclass
class RetentionReport:
    objects: int
    size: int
    baseline_bytes: int
    retained_bytes: int
    released_bytes: int
    live_before_release: int
    live_after_release: int

    @property
    def reclaimed_bytes(self) -> int:
        return self.retained_bytes - self.released_bytes

    def render(self) -> str:
        return "\n".join([
            f"Allocated {self.objects} processors x {self.size} ints",
            f"After gc.collect() with roots held:   {self.live_before_release} live, "
            f"{format_bytes(self.retained_bytes)} traced above baseline",
            f"After clearing roots + gc.collect():  {self.live_after_release} live, "
            f"{format_bytes(self.released_bytes)} traced above baseline",
            f"Reclaimed: {format_bytes(max(self.reclaimed_bytes, 0))}",
        ])


class RetentionDemo:
    def __init__(self, objects: int = 50, size: int = 10_000):
        if objects < 1 or size < 1:
            raise ValueError("objects and size must be >= 1")
        self.objects = objects
        self.size = size

    def allocate(self) -> None:
        """Create processors and keep no reference to them here."""
        for _ in range(self.objects):
            DataProcessor(self.size).process()
        publish("allocated")

    def run(self) -> RetentionReport:
        started_tracing = not tracemalloc.is_tracing()
        if started_tracing:
            tracemalloc.start()

        try:
            release_roots()
            gc.collect()
            baseline, _ = tracemalloc.get_traced_memory()

            self.allocate()
            gc.collect()
            retained, _ = tracemalloc.get_traced_memory()
            live_before = DataProcessor.live_count()
            logger.info(f"{live_before} processors still alive after gc.collect()")

            release_roots()
            gc.collect()
            released, _ = tracemalloc.get_traced_memory()
            live_after = DataProcessor.live_count()
            logger.info(f"{live_after} processors alive after clearing roots")
        finally:
            if started_tracing:
                tracemalloc.stop()

        return RetentionReport(
            objects=self.objects,
            size=self.size,
            baseline_bytes=baseline,
            retained_bytes=retained - baseline,
            released_bytes=released - baseline,
            live_before_release=live_before,
            live_after_release=live_after,
        )
