"""
CPU kernels that are slow on purpose.

They exist to give a sampling profiler an obvious hot spot. Do not
"fix" them: fib() must stay exponential.
"""

import math


def fib(n: int) -> int:
    """
    Naive recursive Fibonacci, O(2^n) calls.

        >>> fib(10)
        55
    """
    if n < 0:
        raise ValueError("n must be >= 0")
    if n < 2:
        return n
    return fib(n - 1) + fib(n - 2)


def busy_math(x: float, rounds: int = 1000) -> float:
    """A few transcendental calls per round, so the flame graph shows math."""
    total = 0.0
    for i in range(rounds):
        value = x + i
        total += math.sin(value) * math.cos(value)
        total += math.sqrt(value + 1.0)
        total += math.log(value + 1.0)
    return total
