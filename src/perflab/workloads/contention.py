"""
=============================================================================
LOCK CONTENTION WORKLOAD
=============================================================================

N threads, one dict, one lock:

    thread 0 ──┐
    thread 1 ──┼──► with shared_lock: results[key] = value ──► repeat
    thread 2 ──┤         ▲
    thread 3 ──┘         └── everyone queues here

Each thread does a slice of CPU work (busy_math) and then publishes the
result under the lock until the wall-clock deadline passes. The report
shows how much of the run was spent waiting for the lock, which is the
number a profiler's concurrency view makes visible.

=============================================================================
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List

from .kernels import busy_math


logger = logging.getLogger(__name__)


@dataclass
class ContentionReport:
    threads: int
    duration: float
    elapsed: float
    iterations: List[int] = field(default_factory=list)
    lock_wait_seconds: List[float] = field(default_factory=list)
    map_size: int = 0

    @property
    def total_iterations(self) -> int:
        return sum(self.iterations)

    @property
    def total_lock_wait(self) -> float:
        return sum(self.lock_wait_seconds)

    def render(self) -> str:
        lines = [
            f"Threads: {self.threads}   Duration: {self.duration:.2f}s   Elapsed: {self.elapsed:.2f}s",
            f"Shared map entries: {self.map_size}",
        ]
        for index, (count, waited) in enumerate(zip(self.iterations, self.lock_wait_seconds)):
            lines.append(f"  thread {index}: {count} iterations, {waited * 1000:.1f}ms waiting for lock")
        lines.append(f"Total: {self.total_iterations} iterations, {self.total_lock_wait:.3f}s lock wait")
        return "\n".join(lines)


def run_contention(
    threads: int = 4,
    duration: float = 5.0,
    key_space: int = 1000,
    rounds: int = 200,
) -> ContentionReport:
    """
    Run the workload and return once every thread has been joined.

    Raises:
        ValueError: For non-positive threads, duration or key_space.
    """
    if threads < 1:
        raise ValueError("threads must be >= 1")
    if duration <= 0:
        raise ValueError("duration must be > 0")
    if key_space < 1:
        raise ValueError("key_space must be >= 1")

    results: Dict[int, float] = {}
    shared_lock = threading.Lock()
    iterations = [0] * threads
    waits = [0.0] * threads

    start = time.perf_counter()
    deadline = start + duration

    def worker(index: int):
        count = 0
        waited = 0.0
        while time.perf_counter() < deadline:
            value = busy_math(index + count, rounds)

            before = time.perf_counter()
            with shared_lock:
                waited += time.perf_counter() - before
                results[(index * 7919 + count) % key_space] = value
            count += 1
        iterations[index] = count
        waits[index] = waited

    workers = [
        threading.Thread(target=worker, args=(i,), name=f"contention-{i}")
        for i in range(threads)
    ]
    logger.info(f"Starting {threads} threads for {duration:.2f}s")
    for t in workers:
        t.start()
    for t in workers:
        t.join()

    report = ContentionReport(
        threads=threads,
        duration=duration,
        elapsed=time.perf_counter() - start,
        iterations=iterations,
        lock_wait_seconds=waits,
        map_size=len(results),
    )
    logger.info(f"Contention run finished: {report.total_iterations} iterations")
    return report
