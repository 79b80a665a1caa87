"""
In-memory fixed-window rate limiter for the public forms (per process).
"""
import math
import time

from fastapi import HTTPException, Request

CLEANUP_INTERVAL = 60.0
HOUR = 60 * 60


class RateLimiter:
    def __init__(self):
        self._store: dict[str, list[float]] = {}    # key -> [count, reset_at]
        self._last_cleanup = time.time()

    def _cleanup(self, now: float):
        if now - self._last_cleanup < CLEANUP_INTERVAL:
            return
        self._last_cleanup = now
        for key in [k for k, (_, reset_at) in self._store.items() if now >= reset_at]:
            del self._store[key]

    def hit(self, key: str, max_requests: int, window: float) -> tuple[bool, int]:
        """Count one request. Returns (allowed, retry_after_seconds)."""
        now = time.time()
        self._cleanup(now)
        entry = self._store.get(key)
        if entry is None or now >= entry[1]:
            self._store[key] = [1, now + window]
            return True, 0
        if entry[0] < max_requests:
            entry[0] += 1
            return True, 0
        return False, math.ceil(entry[1] - now)

    def reset(self):
        self._store.clear()


limiter = RateLimiter()


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip()
    if not ip and request.client:
        ip = request.client.host
    return ip or "unknown"


def enforce(request: Request, scope: str, max_requests: int = 5, window: float = HOUR):
    allowed, retry_after = limiter.hit(f"{scope}:{client_key(request)}", max_requests, window)
    if not allowed:
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please try again later.",
            headers={"Retry-After": str(retry_after)},
        )
