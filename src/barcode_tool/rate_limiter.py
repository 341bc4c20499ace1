"""Rate limiting for Entrez calls with a token bucket gate."""

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

# NCBI allows 3 requests/s per client without an API key
NCBI_MIN_INTERVAL = 0.34

# Slack when comparing refilled tokens against a whole token
TOKEN_EPSILON = 1e-9


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""
    min_interval: float = NCBI_MIN_INTERVAL
    burst_size: int = 1  # Max tokens in bucket

    def __post_init__(self):
        if self.min_interval <= 0:
            raise ValueError("min_interval must be positive")
        if self.burst_size < 1:
            raise ValueError("burst_size must be at least 1")

    @property
    def requests_per_second(self) -> float:
        return 1.0 / self.min_interval


class TokenBucket:
    """Token bucket gate shared by every remote call of a client.

    With the default burst size of one, two successive acquisitions are
    never closer than ``min_interval`` seconds apart.
    """

    def __init__(self, config: Optional[RateLimitConfig] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """Initialize token bucket."""
        self.config = config or RateLimitConfig()
        self.tokens = float(self.config.burst_size)
        self._clock = clock
        self._sleep = sleep
        self.last_update = clock()
        self.lock = Lock()

        # Stats
        self.total_requests = 0
        self.total_wait_time = 0.0
        self.blocked_count = 0

    def acquire(self, blocking: bool = True) -> bool:
        """
        Acquire one token from the bucket.

        Args:
            blocking: Wait if no token is available

        Returns:
            True if acquired, False if non-blocking and not available
        """
        with self.lock:
            self._refill()

            if self.tokens < 1 - TOKEN_EPSILON and not blocking:
                self.blocked_count += 1
                return False

            while self.tokens < 1 - TOKEN_EPSILON:
                wait_time = (1 - self.tokens) * self.config.min_interval
                logger.debug(f"Rate limit: waiting {wait_time:.3f}s")
                self.total_wait_time += wait_time
                self._sleep(wait_time)
                self._refill()

            self.tokens -= 1
            self.total_requests += 1
            return True

    def call(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Acquire a token, then invoke ``func``."""
        self.acquire()
        return func(*args, **kwargs)

    def _refill(self):
        """Refill tokens based on elapsed time."""
        now = self._clock()
        elapsed = now - self.last_update

        new_tokens = elapsed * self.config.requests_per_second
        self.tokens = min(float(self.config.burst_size), self.tokens + new_tokens)
        self.last_update = now

    def get_stats(self) -> Dict[str, Any]:
        """Get rate limiter statistics."""
        with self.lock:
            return {
                'total_requests': self.total_requests,
                'total_wait_time': self.total_wait_time,
                'blocked_count': self.blocked_count,
                'average_wait_time': self.total_wait_time / self.total_requests if self.total_requests > 0 else 0,
                'current_tokens': self.tokens,
                'max_tokens': self.config.burst_size,
                'min_interval': self.config.min_interval
            }
