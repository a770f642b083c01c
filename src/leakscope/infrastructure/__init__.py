"""Infrastructure: HTTP client and rate limiting."""

from leakscope.infrastructure.http import HTTPClient
from leakscope.infrastructure.ratelimit import RateLimiter

__all__ = ["HTTPClient", "RateLimiter"]
