"""
Rate limiting utilities for FastAPI application.

Limits are applied as route dependencies rather than middleware so that
``RateLimitException`` flows through the registered exception handlers.
"""
import time
from collections import deque
from typing import Callable, Dict

from fastapi import Request

from launchline.core.exceptions import RateLimitException
from launchline.core.logger import get_logger

logger = get_logger(__name__)


class SlidingWindowCounter:
    """Sliding window counter for rate limiting."""

    def __init__(self, window_size: int, max_requests: int):
        """
        Initialize sliding window counter.

        Args:
            window_size: Window size in seconds
            max_requests: Maximum requests allowed in the window
        """
        self.window_size = window_size
        self.max_requests = max_requests
        self.requests = deque()

    def is_allowed(self) -> bool:
        """Record a request if it fits in the current window."""
        now = time.time()

        while self.requests and self.requests[0] <= now - self.window_size:
            self.requests.popleft()

        if len(self.requests) < self.max_requests:
            self.requests.append(now)
            return True

        return False


class RateLimiter:
    """In-process registry of sliding window counters keyed by client."""

    def __init__(self, cleanup_interval: int = 300):
        self.counters: Dict[str, SlidingWindowCounter] = {}
        self.cleanup_interval = cleanup_interval
        self.last_cleanup = time.time()

    def _cleanup_old_entries(self):
        now = time.time()
        if now - self.last_cleanup < self.cleanup_interval:
            return

        stale = [
            key for key, counter in self.counters.items()
            if not counter.requests or now - counter.requests[-1] > counter.window_size
        ]
        for key in stale:
            del self.counters[key]

        self.last_cleanup = now

    def check_rate_limit_window(
        self,
        identifier: str,
        window_size: int,
        max_requests: int
    ) -> bool:
        """
        Check rate limit using sliding window algorithm.

        Args:
            identifier: Unique identifier for the rate limit
            window_size: Window size in seconds
            max_requests: Maximum requests in the window

        Returns:
            True if request is allowed, False otherwise
        """
        self._cleanup_old_entries()

        if identifier not in self.counters:
            self.counters[identifier] = SlidingWindowCounter(window_size, max_requests)

        return self.counters[identifier].is_allowed()

    def reset(self) -> None:
        self.counters.clear()


# Global rate limiter instance
rate_limiter = RateLimiter()


def get_client_identifier(request: Request) -> str:
    """Identify the caller by forwarded or peer IP address."""
    client_ip = request.client.host if request.client else "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        client_ip = real_ip

    return f"ip:{client_ip}"


def rate_limit(scope: str, requests_per_minute: int, window_size: int = 60) -> Callable:
    """
    Build a dependency enforcing a per-client limit for one route group.

    Args:
        scope: Name shared by the routes that draw from the same quota
        requests_per_minute: Requests allowed per window
        window_size: Window size in seconds

    Example:
        @router.get("/invitations/{token}", dependencies=[Depends(rate_limit("invitations", 30))])
    """
    async def dependency(request: Request) -> None:
        client_id = get_client_identifier(request)
        key = f"{scope}:{client_id}"

        if not rate_limiter.check_rate_limit_window(
            identifier=key,
            window_size=window_size,
            max_requests=requests_per_minute
        ):
            logger.warning(
                "Endpoint rate limit exceeded",
                key=key,
                path=request.url.path,
                method=request.method
            )
            raise RateLimitException(
                f"Rate limit exceeded. Maximum {requests_per_minute} requests "
                f"per {window_size} seconds allowed."
            )

    return dependency
