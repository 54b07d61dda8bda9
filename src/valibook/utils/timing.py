"""Latency tracking for discovery and validation runs."""

import functools
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Optional

from valibook.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class TimingStat:
    """Aggregated timings for one operation."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0
    last_ms: float = 0.0

    def add(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)
        self.last_ms = duration_ms

    @property
    def mean_ms(self) -> float:
        return self.total_ms / self.count if self.count > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "count": self.count,
            "mean_ms": round(self.mean_ms, 3),
            "min_ms": round(self.min_ms, 3) if self.count else 0.0,
            "max_ms": round(self.max_ms, 3),
            "last_ms": round(self.last_ms, 3),
        }


class LatencyTracker:
    """Thread-safe tracker for operation latencies."""

    def __init__(self):
        self._stats: Dict[str, TimingStat] = defaultdict(TimingStat)
        self._lock = Lock()

    def record(self, operation: str, duration_ms: float) -> None:
        """Record a timing measurement in milliseconds."""
        with self._lock:
            self._stats[operation].add(duration_ms)

    def get_stats(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """Get statistics for one operation, or all of them."""
        with self._lock:
            if operation:
                return {operation: self._stats[operation].to_dict()}
            return {op: stat.to_dict() for op, stat in self._stats.items()}

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()


_global_tracker = LatencyTracker()


def get_latency_tracker() -> LatencyTracker:
    """Get the global latency tracker instance."""
    return _global_tracker


@contextmanager
def TimingContext(operation: str, log_level: str = "debug"):
    """Context manager timing a block of code.

    Example:
        with TimingContext("load_table"):
            rows = loader.load(path)
    """
    start_time = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000
        _global_tracker.record(operation, duration_ms)
        log_fn = getattr(logger, log_level, logger.debug)
        log_fn(f"{operation} completed in {duration_ms:.3f}ms")


def timed(operation: Optional[str] = None, log_level: str = "debug"):
    """Decorator timing each call of the wrapped function.

    Example:
        @timed("discovery")
        def discover(...):
            ...
    """

    def decorator(func: Callable) -> Callable:
        op_name = operation or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with TimingContext(op_name, log_level=log_level):
                return func(*args, **kwargs)

        return wrapper

    return decorator
