"""Gatekeeper for catalog list requests: one in flight, and a cooldown after HTTP 429."""
from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable

from jobboard.errors import NetworkError, RateLimited

logger = logging.getLogger(__name__)

RATE_LIMIT_COOLDOWN_SECONDS = 30.0


class RequestGovernor:
    def __init__(
        self,
        cooldown_seconds: float = RATE_LIMIT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._in_flight = False
        self._blocked_until: float | None = None
        self.retry_count = 0

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def rate_limited(self) -> bool:
        if self._blocked_until is None:
            return False
        if self._clock() >= self._blocked_until:
            self._blocked_until = None
            logger.info("rate-limit cooldown expired")
            return False
        return True

    @property
    def cooldown_remaining(self) -> float:
        if not self.rate_limited:
            return 0.0
        return self._blocked_until - self._clock()

    async def run(self, call: Callable[[], Awaitable[Any]]) -> Any | None:
        """
        Run ``call`` under the guard.

        Returns None without calling when another request is outstanding; the
        caller has to trigger again later. Raises RateLimited without calling
        while the cooldown window is open.
        """
        if self.rate_limited:
            raise RateLimited(
                "Too many requests. Please wait before trying again.",
                retry_after=self.cooldown_remaining,
            )
        if self._in_flight:
            logger.debug("list request dropped: another one is in flight")
            return None

        self._in_flight = True
        try:
            result = await call()
        except RateLimited:
            self.retry_count += 1
            self._blocked_until = self._clock() + self.cooldown_seconds
            logger.warning("rate limited; blocking list requests for %.0fs", self.cooldown_seconds)
            raise
        except NetworkError:
            self.retry_count += 1
            raise
        finally:
            self._in_flight = False

        self.retry_count = 0
        return result

    def retry(self) -> bool:
        """User-initiated retry: clears the block once the window has passed."""
        if self.rate_limited:
            return False
        self._blocked_until = None
        return True
