"""
Page Fetchers

A fetcher turns a product URL into a RawRecord or raises FetchError. The
lifecycle checker only depends on the BaseFetcher interface, so browser
based fetchers can be dropped in without touching it.

Failure kinds:
- network: connection refused / reset, DNS, retries exhausted on 5xx
- timeout: connect or read timeout
- blocked: 403 / 429 or a bot-wall page

A 404 / 410 is not a failure: the page answered that the product is gone,
so the fetcher returns an empty record and the lifecycle tracker ends the
listing.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

import requests
from bs4 import BeautifulSoup

from standardization.schema import RawRecord

from .config import CatalogConfig
from .core.retry_handler import RetryExhausted, RetryHandler
from .extractor import extract_record

logger = logging.getLogger(__name__)

BLOCKED_STATUS_CODES = (401, 403, 429)
GONE_STATUS_CODES = (404, 410)

BOT_WALL_MARKERS = (
    "just a moment...",
    "attention required!",
    "access denied",
    "pardon our interruption",
)


class FetchError(Exception):
    """A page could not be fetched."""

    KINDS = ("network", "timeout", "blocked")

    def __init__(self, kind: str, url: str, message: str = ""):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown fetch error kind: {kind}")
        self.kind = kind
        self.url = url
        super().__init__(f"{kind}: {url} {message}".strip())


class BaseFetcher(ABC):
    """Fetches one product page."""

    @abstractmethod
    def fetch(self, url: str, adapter=None) -> RawRecord:
        """
        Returns:
            RawRecord (possibly empty when the product is gone)

        Raises:
            FetchError
        """


class HttpFetcher(BaseFetcher):
    """
    Plain HTTP fetcher: requests + retry with jitter + JSON-LD extraction.
    """

    def __init__(self, config: Optional[CatalogConfig] = None, session: Optional[requests.Session] = None,
                 retry: Optional[RetryHandler] = None):
        self.config = config or CatalogConfig()
        self._shared_session = self._prepare(session) if session is not None else None
        self._local = threading.local()
        self.retry = retry or RetryHandler(
            self.config.retry,
            retryable_exceptions=(requests.ConnectionError, requests.Timeout),
        )

    def _prepare(self, session):
        session.headers.update({
            "User-Agent": self.config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-GB,en;q=0.9",
        })
        return session

    @property
    def session(self) -> requests.Session:
        """The injected session, else one session per worker thread."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = self._prepare(requests.Session())
        return session

    def _get(self, url: str) -> requests.Response:
        timeouts = self.config.timeouts
        return self.session.get(url, timeout=(timeouts.connect, timeouts.read), allow_redirects=True)

    def fetch(self, url: str, adapter=None) -> RawRecord:
        try:
            response = self.retry.execute(self._get, url)
        except RetryExhausted as e:
            if isinstance(e.last_exception, requests.Timeout):
                raise FetchError("timeout", url, str(e.last_exception)) from e
            raise FetchError("network", url, str(e)) from e
        except requests.RequestException as e:
            raise FetchError("network", url, str(e)) from e

        if response.status_code in BLOCKED_STATUS_CODES:
            raise FetchError("blocked", url, f"HTTP {response.status_code}")
        if response.status_code in GONE_STATUS_CODES:
            logger.info(f"Product page gone (HTTP {response.status_code}): {url}")
            return RawRecord(url=url)
        if response.status_code >= 400:
            raise FetchError("network", url, f"HTTP {response.status_code}")

        soup = BeautifulSoup(response.text, "html.parser")
        title = soup.title.get_text(strip=True).lower() if soup.title else ""
        if any(marker in title for marker in BOT_WALL_MARKERS):
            raise FetchError("blocked", url, f"bot wall: {title!r}")

        store_name = self.config.store_for(url).name
        return extract_record(soup, response.url or url, adapter, store_name)
