import logging
import threading
from typing import Callable, Dict, Optional

import requests
from bs4 import BeautifulSoup

from eex_scraper.config.settings import EEX_CONFIG
from eex_scraper.exceptions import FetchInterrupted, TransportError
from eex_scraper.scraper.utils import ScraperUtils

logger = logging.getLogger(__name__)


class PageFetcher:
    """
    Retrieves the EEX results page with bounded retries and exponential backoff
    """

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None,
                 max_retries: Optional[int] = None, backoff_base: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 sleep: Optional[Callable[[float], bool]] = None):
        """
        Initialize the fetcher

        Args:
            url: Page to retrieve
            timeout: Request timeout in seconds
            max_retries: Total number of attempts
            backoff_base: Delay after the first failed attempt, doubled each time
            session: requests session to use
            sleep: Wait function; returns True if the wait was interrupted
        """
        self.url = url or EEX_CONFIG['url']
        self.timeout = timeout if timeout is not None else EEX_CONFIG['timeout']
        self.max_retries = max_retries if max_retries is not None else EEX_CONFIG['max_retries']
        self.backoff_base = backoff_base if backoff_base is not None else EEX_CONFIG['backoff_base']
        self.session = session or requests.Session()
        self._interrupted = threading.Event()
        self._sleep = sleep or self._interrupted.wait

    def build_headers(self) -> Dict[str, str]:
        """Browser-like request headers"""
        if EEX_CONFIG['user_agent_rotation']:
            user_agent = ScraperUtils.get_random_user_agent()
        else:
            user_agent = EEX_CONFIG['user_agent']

        return {
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.9',
        }

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the given failed attempt: 30s, 60s, 120s, 240s..."""
        return self.backoff_base * 2 ** (attempt - 1)

    def interrupt(self):
        """Abort a pending backoff wait; the fetch then fails immediately"""
        logger.info("Fetch interrupt requested")
        self._interrupted.set()

    def fetch(self, url: Optional[str] = None) -> BeautifulSoup:
        """
        Fetch and parse the page

        Args:
            url: Page to retrieve, defaults to the configured EEX URL

        Returns:
            Parsed document

        Raises:
            TransportError: Every attempt failed
            FetchInterrupted: A backoff wait was interrupted
        """
        url = url or self.url
        self._interrupted.clear()
        last_error = None

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.info(f"Fetching {url} (attempt {attempt}/{self.max_retries})")
                response = self.session.get(
                    url,
                    headers=self.build_headers(),
                    timeout=self.timeout,
                    allow_redirects=True
                )
                response.raise_for_status()
                logger.info("Successfully connected to EEX website")
                # Parse raw bytes so the declared charset is honoured
                return BeautifulSoup(response.content, 'html.parser')

            except requests.RequestException as e:
                last_error = e
                logger.warning(f"Attempt {attempt} failed: {e}")

            if attempt < self.max_retries:
                delay = self.backoff_delay(attempt)
                logger.info(f"Retrying in {delay:.0f} seconds...")
                if self._sleep(delay):
                    logger.warning("Backoff wait interrupted, giving up")
                    raise FetchInterrupted(url, attempt, last_error)

        logger.error(f"All {self.max_retries} attempts to fetch {url} failed")
        raise TransportError(url, self.max_retries, last_error)
