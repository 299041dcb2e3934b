"""
Thread-safe in-memory metrics for provider dispatch.

Counters (attempts.<provider>, failures.<provider>, success.<provider>,
degraded.<kind>), latency samples per provider, and the last few provider
failures for diagnosis. Everything resets on restart.
"""

import time
import threading
from collections import defaultdict
from typing import Dict, List

_lock = threading.Lock()

_counters: Dict[str, int] = defaultdict(int)

# ── Latency samples (last 100 per provider) ───────────────────────────────────
_latency_samples: Dict[str, List[float]] = defaultdict(list)
MAX_SAMPLES = 100

# ── Error log (last 50 provider failures) ─────────────────────────────────────
_recent_errors: List[dict] = []
MAX_ERRORS = 50

_started_at = time.time()


def inc_counter(name: str, amount: int = 1):
    """Increment a counter (e.g. 'attempts.replicate', 'degraded.video')."""
    with _lock:
        _counters[name] += amount


def record_latency(provider: str, duration_ms: float):
    """Record a provider call duration in milliseconds."""
    with _lock:
        samples = _latency_samples[provider]
        samples.append(duration_ms)
        if len(samples) > MAX_SAMPLES:
            _latency_samples[provider] = samples[-MAX_SAMPLES:]


def record_error(provider: str, error_type: str, message: str):
    """Remember a provider failure. Messages are truncated, never contain secrets."""
    with _lock:
        _recent_errors.append({
            "timestamp": time.time(),
            "provider": provider,
            "error_type": error_type,
            "message": message[:300],
        })
        if len(_recent_errors) > MAX_ERRORS:
            _recent_errors.pop(0)


def get_snapshot() -> dict:
    """Consistent copy of everything collected so far."""
    with _lock:
        latency = {}
        for provider, samples in _latency_samples.items():
            if not samples:
                continue
            ordered = sorted(samples)
            n = len(ordered)
            latency[provider] = {
                "p50": ordered[n // 2],
                "p95": ordered[int(n * 0.95)] if n >= 20 else ordered[-1],
                "avg": sum(ordered) / n,
                "count": n,
            }

        return {
            "timestamp": time.time(),
            "uptime_seconds": time.time() - _started_at,
            "counters": dict(_counters),
            "latency": latency,
            "recent_errors": list(_recent_errors[-10:]),
        }


def reset():
    """Clear all collected data."""
    with _lock:
        _counters.clear()
        _latency_samples.clear()
        _recent_errors.clear()
