import time
from collections import defaultdict, deque

from jobboard.config import settings
from jobboard.errors import RateLimited


class ListThrottle:
    """Per-user sliding window over job listing requests."""

    def __init__(self, window_seconds: float = 60.0, clock=time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._last_sweep = clock()

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        """Drop users whose newest hit has left the window; runs at most once per window."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        idle = [key for key, hits in self._hits.items() if not hits or now - hits[-1] >= self.window_seconds]
        for key in idle:
            del self._hits[key]

    def check(self, key: str, limit: int | None = None) -> None:
        limit = settings.list_requests_per_minute if limit is None else limit
        if limit <= 0:
            return
        now = self._clock()
        self._sweep(now)
        hits = self._hits[key]
        while hits and now - hits[0] >= self.window_seconds:
            hits.popleft()
        if len(hits) >= limit:
            retry_after = self.window_seconds - (now - hits[0])
            raise RateLimited("Too many job listing requests", retry_after=retry_after)
        hits.append(now)

    def reset(self):
        self._hits.clear()
        self._last_sweep = self._clock()


list_throttle = ListThrottle()
