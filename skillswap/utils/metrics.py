"""
In-process metrics: counters and duration histograms for provider calls and
suggestion generation. Emitted as structured log lines and exposed at /metrics.
"""

import time
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Dict, Any

from skillswap.utils.logger import get_logger

logger = get_logger("metrics")

_counters: Dict[str, int] = defaultdict(int)
_histograms: Dict[str, list] = defaultdict(list)

MAX_HISTOGRAM_SAMPLES = 500  # Rolling window


def inc(name: str, value: int = 1) -> None:
    """Increment a counter."""
    _counters[name] += value


def observe(name: str, value: float) -> None:
    """Record a histogram observation (e.g., duration)."""
    bucket = _histograms[name]
    bucket.append(value)
    if len(bucket) > MAX_HISTOGRAM_SAMPLES:
        _histograms[name] = bucket[-MAX_HISTOGRAM_SAMPLES:]


@asynccontextmanager
async def track_duration(service: str, operation: str = "call"):
    """
    Track call duration and success/failure.

    Usage:
        async with track_duration("openai", "generate"):
            text = await provider_call(...)
    """
    start = time.monotonic()
    status = "error"
    try:
        yield
        status = "success"
    finally:
        duration_ms = (time.monotonic() - start) * 1000
        observe(f"{service}.{operation}.duration_ms", duration_ms)
        inc(f"{service}.{operation}.{status}")
        log_fn = logger.info if status == "success" else logger.warning
        log_fn(
            "metrics.call",
            extra={
                "service": service,
                "operation": operation,
                "duration_ms": round(duration_ms, 1),
                "status": status,
            },
        )


def get_snapshot() -> Dict[str, Any]:
    """Return a snapshot of all counters and histogram summaries."""
    snapshot: Dict[str, Any] = {"counters": dict(_counters)}

    summaries = {}
    for name, samples in _histograms.items():
        if samples:
            ordered = sorted(samples)
            last = len(ordered) - 1
            summaries[name] = {
                "count": len(ordered),
                "p50": round(ordered[int(last * 0.5)], 1),
                "p95": round(ordered[int(last * 0.95)], 1),
                "max": round(ordered[-1], 1),
            }
    snapshot["histograms"] = summaries
    return snapshot


def reset() -> None:
    """Reset all metrics (used by tests)."""
    _counters.clear()
    _histograms.clear()
