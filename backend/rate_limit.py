"""Per-identifier request counter guarding the AI endpoints.

Each identifier ("<endpoint>:<client-ip>") gets a window that opens on its
first request and lasts `window_ms`. Up to `max_requests` requests are
allowed inside the window; after that check() denies until the window
resets. Expired entries are swept on every check, so there is no background
timer. State lives in memory only and resets on restart.

check() is not atomic with the AI call it guards: two concurrent requests
can both pass at the edge of a budget. That is acceptable for one local
player and is left as is.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitConfig:
    max_requests: int
    window_ms: int = 60_000


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float  # epoch ms

    def retry_after(self, now_ms: float) -> int:
        """Whole seconds until the window resets (rounded up)."""
        return max(0, math.ceil((self.reset_at - now_ms) / 1000))


@dataclass
class _Entry:
    count: int
    reset_at: float


DEFAULT_RATE_LIMITS: dict[str, RateLimitConfig] = {
    "interact": RateLimitConfig(max_requests=60),
    "jacobs_react": RateLimitConfig(max_requests=10),
    "jacobs_review": RateLimitConfig(max_requests=10),
    "jacobs_chat": RateLimitConfig(max_requests=20),
}


def _now_ms() -> float:
    return time.time() * 1000


class RateLimiter:
    def __init__(self, clock: Callable[[], float] = _now_ms) -> None:
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def now(self) -> float:
        return self._clock()

    def _cleanup(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.reset_at <= now]
        for key in expired:
            del self._entries[key]

    def check(self, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        now = self._clock()
        self._cleanup(now)
        entry = self._entries.get(identifier)

        if entry is None:
            reset_at = now + config.window_ms
            self._entries[identifier] = _Entry(count=1, reset_at=reset_at)
            return RateLimitResult(True, config.max_requests - 1, reset_at)

        if entry.count >= config.max_requests:
            return RateLimitResult(False, 0, entry.reset_at)

        entry.count += 1
        return RateLimitResult(True, config.max_requests - entry.count, entry.reset_at)

    def __len__(self) -> int:
        return len(self._entries)


def client_identity(forwarded_for: str | None) -> str:
    """First address in X-Forwarded-For, or "anonymous"."""
    if not forwarded_for:
        return "anonymous"
    first = forwarded_for.split(",")[0].strip()
    return first or "anonymous"
