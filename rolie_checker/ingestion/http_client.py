"""
HTTP transport for the checker.

Provides rate limiting and TLS bookkeeping on top of a requests session.
Requests are attempted once; the checker judges what a publisher serves,
so failed fetches are reported rather than retried.
"""
import logging
import time
from typing import Any, Dict, Optional, Set
from urllib.parse import urlsplit

import requests

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "rolie-checker/0.1"


class RateLimiter:
    """Simple token bucket rate limiter."""

    def __init__(self, rate_per_minute: Optional[int], burst: Optional[int]):
        self.rate_per_minute = rate_per_minute
        self.burst = burst
        self._tokens = burst if burst else 0
        self._last_refill = time.monotonic()

    def acquire(self) -> None:
        if not self.rate_per_minute or not self.burst:
            return

        self._refill()
        if self._tokens < 1:
            wait_seconds = (1 - self._tokens) / (self.rate_per_minute / 60.0)
            time.sleep(wait_seconds)
            self._refill()

        self._tokens -= 1

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        refill_rate = self.rate_per_minute / 60.0
        self._tokens = min(self.burst, self._tokens + elapsed * refill_rate)
        self._last_refill = now


class HttpClient:
    """HTTP client with rate limiting and non-HTTPS URL tracking."""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_seconds: float = 30.0,
        rate_limit_per_minute: Optional[int] = None,
        rate_limit_burst: Optional[int] = None,
        verify_tls: bool = True,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent
        if headers:
            self.session.headers.update(headers)
        self.session.verify = verify_tls
        self.timeout_seconds = timeout_seconds
        self.rate_limiter = RateLimiter(rate_limit_per_minute, rate_limit_burst)
        self.non_tls_urls: Set[str] = set()

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "HttpClient":
        """Build a client from the ``http`` section of the checker config."""
        config = config or {}
        return cls(
            user_agent=config.get("user_agent", DEFAULT_USER_AGENT),
            timeout_seconds=config.get("timeout_seconds", 30.0),
            rate_limit_per_minute=config.get("rate_limit_per_minute"),
            rate_limit_burst=config.get("rate_limit_burst"),
            verify_tls=bool(config.get("verify_tls", True)),
            headers=config.get("headers"),
        )

    def check_tls(self, url: str) -> None:
        """Remember ``url`` if it is not served over HTTPS."""
        if urlsplit(url).scheme.lower() != "https":
            self.non_tls_urls.add(url)

    def get(self, url: str) -> requests.Response:
        """
        Fetch ``url``.

        HTTP error statuses are returned to the caller, which decides how
        to grade them.

        Raises:
            requests.RequestException: On transport failures
        """
        self.rate_limiter.acquire()
        logger.debug("GET %s", url)
        return self.session.get(url, timeout=self.timeout_seconds)
