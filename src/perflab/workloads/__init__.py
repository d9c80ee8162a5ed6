"""
Profiling workloads: code with a deliberate performance problem for a
profiler to find.

    kernels.py     fib() and busy_math(), pure CPU
    contention.py  threads fighting over one lock until a deadline
    retention.py   objects kept alive by module-level roots
"""

from .kernels import fib, busy_math
from .contention import run_contention, ContentionReport
from .retention import RetentionDemo, RetentionReport, DataProcessor

__all__ = [
    "fib",
    "busy_math",
    "run_contention",
    "ContentionReport",
    "RetentionDemo",
    "RetentionReport",
    "DataProcessor",
]
