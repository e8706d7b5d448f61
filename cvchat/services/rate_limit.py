"""Request rate limiting behind an injectable limiter interface."""

import math
import threading
import time
from functools import wraps
from typing import Dict, Optional, Tuple

from flask import current_app, request

from cvchat.errors import RateLimited


class RateLimiter:
    """Counts hits per key inside fixed windows."""

    def hit(self, key: str, limit: int, window_seconds: int) -> Optional[int]:
        """Register one hit; return the seconds to wait when the limit is exceeded, else None."""
        raise NotImplementedError


class InMemoryRateLimiter(RateLimiter):
    """Single-process limiter. Multi-instance deployments need a shared counter store instead."""

    PRUNE_THRESHOLD = 2000

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._buckets: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def _prune(self, now):
        if len(self._buckets) < self.PRUNE_THRESHOLD:
            return
        for key in [k for k, (_, reset_at) in self._buckets.items() if reset_at <= now]:
            del self._buckets[key]

    def hit(self, key, limit, window_seconds):
        now = self._clock()
        with self._lock:
            self._prune(now)
            count, reset_at = self._buckets.get(key, (0, 0.0))
            if reset_at <= now:
                self._buckets[key] = (1, now + window_seconds)
                return None
            count += 1
            self._buckets[key] = (count, reset_at)
            if count <= limit:
                return None
            return max(1, math.ceil(reset_at - now))


class RateLimit:
    """Flask extension holding the limiter used by @rate_limited routes."""

    def __init__(self, limiter: Optional[RateLimiter] = None):
        self.limiter = limiter

    def init_app(self, app, limiter: Optional[RateLimiter] = None):
        # each app keeps its own limiter
        app.extensions["rate_limit"] = limiter or self.limiter or InMemoryRateLimiter()


def client_ip():
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip() or "unknown"
    real_ip = request.headers.get("X-Real-IP", "").strip()
    return real_ip or request.remote_addr or "unknown"


def rate_limited(prefix, limit, window_seconds=60):
    """Reject the request with 429 once a client exceeds `limit` hits per window."""
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_app.config.get("RATE_LIMIT_ENABLED", True):
                limiter = current_app.extensions["rate_limit"]
                retry_after = limiter.hit(f"{prefix}:{client_ip()}", limit, window_seconds)
                if retry_after is not None:
                    raise RateLimited(retry_after)
            return view(*args, **kwargs)
        return wrapper
    return decorator
