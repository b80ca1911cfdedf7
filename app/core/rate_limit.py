# File: app/core/rate_limit.py
"""
In-process rate limiting for the public registration endpoint.

The limiter only depends on a keyed, windowed counter (``CounterStore``).
The in-memory store below resets on restart and is not shared between
workers; swap in a distributed store to change that without touching the
call sites.
"""
import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional
from fastapi import Request

logger = logging.getLogger(__name__)


@dataclass
class WindowState:
    count: int
    reset_at: float


@dataclass
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        return max(1, math.ceil(self.reset_at - now))


class CounterStore(ABC):
    @abstractmethod
    def hit(self, key: str, window_seconds: int, now: float) -> WindowState:
        """Count one attempt for ``key`` and return the window it landed in"""

    @abstractmethod
    def purge(self, now: float) -> int:
        """Drop expired windows, returning how many were removed"""


class InMemoryCounterStore(CounterStore):
    def __init__(self):
        self._windows: Dict[str, WindowState] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, window_seconds: int, now: float) -> WindowState:
        with self._lock:
            state = self._windows.get(key)
            if state is None or now > state.reset_at:
                state = WindowState(count=0, reset_at=now + window_seconds)
                self._windows[key] = state
            state.count += 1
            return WindowState(count=state.count, reset_at=state.reset_at)

    def purge(self, now: float) -> int:
        with self._lock:
            expired = [key for key, state in self._windows.items() if now > state.reset_at]
            for key in expired:
                del self._windows[key]
            return len(expired)

    def __len__(self) -> int:
        return len(self._windows)


class RateLimiter:
    def __init__(self, store: Optional[CounterStore] = None, clock: Callable[[], float] = time.time):
        self.store = store or InMemoryCounterStore()
        self.clock = clock

    def check(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        """
        Fixed-window check: the first attempt opens a window of
        ``window_seconds``; attempts beyond ``limit`` inside it are refused
        until the window resets.
        """
        now = self.clock()
        state = self.store.hit(key, window_seconds, now)
        if state.count > limit:
            return RateLimitResult(success=False, remaining=0, reset_at=state.reset_at)
        return RateLimitResult(success=True, remaining=limit - state.count, reset_at=state.reset_at)

    def purge_expired(self) -> int:
        removed = self.store.purge(self.clock())
        if removed:
            logger.info(f"Purged {removed} expired rate-limit windows")
        return removed


def get_client_identifier(request: Request) -> str:
    """Best-effort client address, honouring common proxy headers"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


# Process-wide default, exposed to endpoints through a dependency
rate_limiter = RateLimiter()


def get_rate_limiter() -> RateLimiter:
    return rate_limiter
