"""Per-address rate limiting for signup submissions.

Backed by the ``limits`` moving-window strategy with in-process memory
storage: counters reset on restart and are not shared between instances.
Swap in another ``RateLimiter`` implementation (e.g. one built on
``limits.storage.RedisStorage``) to share counts across a fleet.
"""

import logging
from collections.abc import Mapping
from typing import Protocol

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import MovingWindowRateLimiter as _MovingWindowStrategy
from starlette.requests import Request

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


class RateLimiter(Protocol):
    """Gate that decides whether a client address may submit again."""

    def allow(self, address: str) -> bool: ...

    def reset(self) -> None: ...


class MovingWindowRateLimiter:
    """Allow at most ``max_requests`` per address within a trailing window.

    Each allowed call is recorded; rejected calls are not, so a client that
    keeps hammering the endpoint is let back in as soon as its oldest
    accepted request leaves the window.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: int = 15 * 60,
        storage: Storage | None = None,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_requests, window_seconds, namespace="signup")
        self._storage = storage or MemoryStorage()
        self._strategy = _MovingWindowStrategy(self._storage)

    def allow(self, address: str) -> bool:
        if self._strategy.hit(self._item, address):
            return True
        logger.warning(
            "Rate limit exceeded for %s: %d requests in %ds window",
            address,
            self.max_requests,
            self.window_seconds,
        )
        return False

    def remaining(self, address: str) -> int:
        """Number of submissions the address has left in the current window."""
        stats = self._strategy.get_window_stats(self._item, address)
        return int(stats.remaining)

    def reset(self) -> None:
        self._storage.reset()


def client_ip_from_headers(headers: Mapping[str, str], peer: str | None = None) -> str:
    """Resolve the client address from proxy headers, falling back to the socket peer."""
    lowered = {key.lower(): value for key, value in headers.items()}
    forwarded = lowered.get("x-forwarded-for", "").split(",")[0].strip()
    return (
        forwarded
        or lowered.get("x-real-ip", "").strip()
        or lowered.get("client-ip", "").strip()
        or peer
        or UNKNOWN_CLIENT
    )


def get_client_ip(request: Request) -> str:
    """Extract the real client IP behind a reverse proxy."""
    return client_ip_from_headers(
        request.headers,
        request.client.host if request.client else None,
    )
