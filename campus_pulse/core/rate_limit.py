"""Fixed-window request throttling for the login and register routes."""

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request, Response

from campus_pulse.core.config import Settings
from campus_pulse.core.errors import RateLimitExceededError


@dataclass
class Window:
    """Hit counter for one client within one window."""

    started_at: float
    hits: int = 0


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int


def client_ip(request: Request) -> str:
    """Default key: the peer address of the connection."""
    if request.client is None:
        return "unknown"
    return request.client.host


class FixedWindowRateLimiter:
    """
    Allow at most max_hits per client key in each window_seconds window.

    The window for a key starts on its first hit; once it elapses the count
    resets. State is in-process and guarded by a lock because sync routes run
    on FastAPI's worker threads. Expired windows are pruned lazily so idle
    clients do not accumulate.
    """

    def __init__(
        self,
        max_hits: int,
        window_seconds: float,
        key_func: Callable[[Request], str] = client_ip,
        clock: Callable[[], float] = time.monotonic,
        message: str | None = None,
    ) -> None:
        self.max_hits = max_hits
        self.window_seconds = window_seconds
        self.key_func = key_func
        self.message = message
        self._clock = clock
        self._windows: dict[str, Window] = {}
        self._lock = threading.Lock()
        self._last_prune = clock()

    @classmethod
    def for_auth(cls, settings: Settings) -> "FixedWindowRateLimiter":
        minutes = max(1, settings.AUTH_RATE_LIMIT_WINDOW_SEC // 60)
        return cls(
            max_hits=settings.AUTH_RATE_LIMIT_MAX,
            window_seconds=settings.AUTH_RATE_LIMIT_WINDOW_SEC,
            message=(
                "Too many login/register attempts from this IP, "
                f"please try again after {minutes} minutes"
            ),
        )

    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for key and report whether it may proceed."""
        now = self._clock()
        with self._lock:
            self._prune(now)
            window = self._windows.get(key)
            if window is None or now - window.started_at >= self.window_seconds:
                window = Window(started_at=now)
                self._windows[key] = window
            reset_after = max(0, math.ceil(window.started_at + self.window_seconds - now))
            if window.hits >= self.max_hits:
                return RateLimitDecision(False, self.max_hits, 0, reset_after)
            window.hits += 1
            return RateLimitDecision(
                True, self.max_hits, self.max_hits - window.hits, reset_after
            )

    def _prune(self, now: float) -> None:
        if now - self._last_prune < self.window_seconds:
            return
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]
        self._last_prune = now

    def __call__(self, request: Request, response: Response) -> None:
        """FastAPI dependency: set RateLimit-* headers or raise 429."""
        decision = self.hit(self.key_func(request))
        if not decision.allowed:
            raise RateLimitExceededError(self.message, retry_after=decision.reset_after)
        response.headers["RateLimit-Limit"] = str(decision.limit)
        response.headers["RateLimit-Remaining"] = str(decision.remaining)
        response.headers["RateLimit-Reset"] = str(decision.reset_after)


def auth_rate_limit(request: Request, response: Response) -> None:
    """Dependency applying the application's auth limiter."""
    limiter: FixedWindowRateLimiter = request.app.state.auth_rate_limiter
    limiter(request, response)
