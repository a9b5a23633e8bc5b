"""
Per-tenant generation quota, fixed window.

The in-memory limiter is only correct for a single running process. Anything
that runs several instances needs a ``RateLimiter`` backed by a shared
counter store (atomic increment + TTL).
"""

import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict

from flowgen.config import RATE_LIMIT_MAX_REQUESTS, RATE_LIMIT_WINDOW_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_in_seconds: int


@dataclass
class RateLimitState:
    count: int
    reset_at: float


class RateLimiter(ABC):
    @abstractmethod
    def check(self, tenant_id: str) -> RateLimitDecision:
        """Consume one unit of quota for the tenant if any is left."""
        pass

    @abstractmethod
    def reset(self, tenant_id: str) -> None:
        pass


class InMemoryRateLimiter(RateLimiter):
    """
    Expired windows are swept at most once per window length, so the state
    map holds only tenants seen during roughly the last two windows.
    """

    def __init__(
        self,
        max_requests: int = RATE_LIMIT_MAX_REQUESTS,
        window_seconds: int = RATE_LIMIT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._states: Dict[str, RateLimitState] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + window_seconds

    def _sweep_expired(self, now: float) -> None:
        if now < self._next_sweep:
            return
        expired = [t for t, s in self._states.items() if now > s.reset_at]
        for tenant_id in expired:
            del self._states[tenant_id]
        self._next_sweep = now + self.window_seconds
        if expired:
            logger.debug("Dropped %d expired quota windows", len(expired))

    def check(self, tenant_id: str) -> RateLimitDecision:
        with self._lock:
            now = self._clock()
            self._sweep_expired(now)
            state = self._states.get(tenant_id)

            # New tenant or expired window
            if state is None or now > state.reset_at:
                self._states[tenant_id] = RateLimitState(
                    count=1, reset_at=now + self.window_seconds
                )
                return RateLimitDecision(
                    allowed=True,
                    remaining=self.max_requests - 1,
                    reset_in_seconds=self.window_seconds,
                )

            if state.count >= self.max_requests:
                logger.warning("Generation quota exhausted for tenant %s", tenant_id)
                # At reset_at exactly the window is still closed for one more tick
                return RateLimitDecision(
                    allowed=False,
                    remaining=0,
                    reset_in_seconds=max(1, math.ceil(state.reset_at - now)),
                )

            state.count += 1
            return RateLimitDecision(
                allowed=True,
                remaining=self.max_requests - state.count,
                reset_in_seconds=max(0, math.ceil(state.reset_at - now)),
            )

    def reset(self, tenant_id: str) -> None:
        with self._lock:
            self._states.pop(tenant_id, None)

    @property
    def tenant_count(self) -> int:
        with self._lock:
            return len(self._states)
