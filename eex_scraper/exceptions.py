"""
Scraper exceptions.

Every failure the pipeline can hit is one of these. They are raised inside
the run and caught at the orchestrator boundary, so none of them ever
reaches the scheduler.
"""


class ScraperError(Exception):
    """Base class for scraper failures"""


class TransportError(ScraperError):
    """Raised when the page could not be retrieved after all retries."""

    def __init__(self, url, attempts, last_error=None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to fetch {url} after {attempts} attempt(s): {last_error}"
        )


class FetchInterrupted(TransportError):
    """Raised when a backoff wait is interrupted before the next attempt."""

    def __init__(self, url, attempts, last_error=None):
        super().__init__(url, attempts, last_error)
        self.args = (f"Fetch of {url} interrupted after {attempts} attempt(s)",)


class StructureNotFound(ScraperError):
    """Raised when the results section cannot be located on the page."""


class DuplicateAuctionError(ScraperError):
    """Raised when an auction with the same natural key is already stored."""

    def __init__(self, auction_date, production_month):
        self.auction_date = auction_date
        self.production_month = production_month
        super().__init__(
            f"Auction for {auction_date} (production: {production_month}) already exists"
        )
