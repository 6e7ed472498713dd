"""
Blocking HTTP client for page fetching.

Built on httpx with:
- Browser-like user-agent rotation and German Accept-Language
- Separate connect and total timeouts
- Optional per-domain politeness delay
- Optional retry on transport errors (disabled by default)

Transport failures and HTTP errors never raise out of ``fetch``; they are
reported on the returned ``FetchResult`` so one broken page cannot abort
a crawl.
"""

import time
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

import httpx
import structlog
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

logger = structlog.get_logger(__name__)


# User agents for rotation
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64; rv:125.0) Gecko/20100101 Firefox/125.0",
]

ACCEPT_LANGUAGE = "de-DE,de;q=0.9,en-US;q=0.8,en;q=0.7"


@dataclass
class FetchResult:
    """Outcome of a single GET request."""
    url: str
    content: Optional[bytes] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.content is not None and self.error is None


@dataclass
class RateLimiter:
    """Per-domain politeness delay."""
    requests_per_second: float = 0.0
    last_request: float = field(default=0.0)

    def acquire(self) -> None:
        """Block until the next request slot."""
        if self.requests_per_second <= 0:
            return

        now = time.monotonic()
        min_interval = 1.0 / self.requests_per_second
        elapsed = now - self.last_request

        if elapsed < min_interval:
            time.sleep(min_interval - elapsed)

        self.last_request = time.monotonic()


class HttpClient:
    """
    Synchronous HTTP client used by the navigators and parsers.

    Usage:
        with HttpClient() as client:
            result = client.fetch("https://www.12gewinn.de")
            if result.ok:
                html = result.content
    """

    def __init__(
        self,
        connect_timeout: float = 10.0,
        timeout: float = 30.0,
        requests_per_second: float = 0.0,
        max_retries: int = 1,
        accept_language: str = ACCEPT_LANGUAGE,
        verify: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            connect_timeout: Connect timeout in seconds
            timeout: Total request timeout in seconds
            requests_per_second: Politeness limit per domain (0 disables)
            max_retries: Attempts per request; 1 means no retry
            accept_language: Accept-Language header value
            verify: Verify TLS certificates
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.connect_timeout = connect_timeout
        self.timeout = timeout
        self.requests_per_second = requests_per_second
        self.max_retries = max(1, max_retries)
        self.accept_language = accept_language
        self.verify = verify
        self.transport = transport

        self._client: Optional[httpx.Client] = None
        self._rate_limiters: dict[str, RateLimiter] = {}
        self._user_agent_index = 0

    def __enter__(self) -> "HttpClient":
        """Open the underlying connection pool."""
        self._client = httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=self.connect_timeout),
            follow_redirects=True,
            verify=self.verify,
            headers={"Accept-Language": self.accept_language},
            transport=self.transport,
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the connection pool."""
        if self._client:
            self._client.close()
            self._client = None

    def _get_rate_limiter(self, url: str) -> RateLimiter:
        """Get or create rate limiter for domain."""
        domain = urlparse(url).netloc
        if domain not in self._rate_limiters:
            self._rate_limiters[domain] = RateLimiter(
                requests_per_second=self.requests_per_second
            )
        return self._rate_limiters[domain]

    def _get_user_agent(self) -> str:
        """Get next user agent in rotation."""
        ua = USER_AGENTS[self._user_agent_index % len(USER_AGENTS)]
        self._user_agent_index += 1
        return ua

    def _do_request(self, url: str) -> httpx.Response:
        """Execute GET, retrying transport errors up to ``max_retries`` attempts."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'with' context.")

        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                headers = {"User-Agent": self._get_user_agent()}
                return self._client.get(url, headers=headers)

    def fetch(self, url: str) -> FetchResult:
        """
        GET a page.

        Args:
            url: URL to fetch

        Returns:
            FetchResult with content on success, error description otherwise
        """
        self._get_rate_limiter(url).acquire()

        logger.debug("http_get", url=url)

        try:
            response = self._do_request(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            error = f"{e.__class__.__name__}: {e}"
            logger.warning("fetch_failed", url=url, error=error)
            return FetchResult(url=url, error=error)

        if response.status_code >= 400:
            error = f"HTTP {response.status_code}"
            logger.warning("fetch_failed", url=url, error=error)
            return FetchResult(url=url, status_code=response.status_code, error=error)

        return FetchResult(
            url=url,
            content=response.content,
            status_code=response.status_code,
        )
