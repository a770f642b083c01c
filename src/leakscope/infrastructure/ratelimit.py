"""Pacing for outbound probe requests."""

from aiolimiter import AsyncLimiter


class RateLimiter:
    """Spaces out probe attempts with a token bucket.

    ``max_rate`` attempts are allowed per ``time_period`` seconds; callers
    ``await acquire()`` before each request.
    """

    def __init__(self, max_rate: float, time_period: float = 1.0) -> None:
        self._limiter = AsyncLimiter(max_rate, time_period)

    @classmethod
    def min_interval(cls, seconds: float) -> "RateLimiter | None":
        """One attempt per ``seconds``; ``None`` when no pacing is configured."""
        if seconds <= 0:
            return None
        return cls(1, seconds)

    async def acquire(self) -> None:
        await self._limiter.acquire()
