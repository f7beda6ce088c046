import logging
import threading
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from eex_scraper.database.db_manager import DatabaseManager
from eex_scraper.database.models import Auction, AuctionRegion, AuctionTechnology
from eex_scraper.exceptions import DuplicateAuctionError, StructureNotFound, TransportError
from eex_scraper.scraper.extractor import (
    AuctionMetadata, AuctionRow, TableKind, extract_metadata, extract_rows
)
from eex_scraper.scraper.fetcher import PageFetcher
from eex_scraper.scraper.locator import ResultsSectionLocator, locate_tables

logger = logging.getLogger(__name__)


class ScrapeState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    LOCATING = "locating"
    EXTRACTING_METADATA = "extracting_metadata"
    EXTRACTING_TABLES = "extracting_tables"
    CHECKING_DUPLICATE = "checking_duplicate"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class EEXAuctionScraper:
    """Scrapes the EEX French auction results page and stores new auctions"""

    def __init__(self, db_manager: Optional[DatabaseManager] = None,
                 fetcher: Optional[PageFetcher] = None,
                 locator: Optional[ResultsSectionLocator] = None,
                 today: Optional[Callable[[], date]] = None):
        """
        Initialize the scraper

        Args:
            db_manager: Repository used for the duplicate check and saving
            fetcher: Page fetcher with retry/backoff
            locator: Results-section locator
            today: Returns the scrape date, used as the auction date
        """
        self.db_manager = db_manager or DatabaseManager()
        self.fetcher = fetcher or PageFetcher()
        self.today = today or date.today
        self.locator = locator or ResultsSectionLocator(today=self.today)
        self.state = ScrapeState.IDLE
        # One run at a time: the duplicate check and the insert must not interleave
        self._run_lock = threading.Lock()

    def _transition(self, state: ScrapeState):
        logger.debug(f"Scrape state: {self.state.value} -> {state.value}")
        self.state = state

    def interrupt(self):
        """Abort a run waiting between fetch retries"""
        self.fetcher.interrupt()

    def run(self) -> Dict[str, Any]:
        """
        Run the complete scraping process

        Never raises: every failure is logged and reported in the result.

        Returns:
            Summary of the run
        """
        with self._run_lock:
            results = {
                'status': None,
                'saved': False,
                'region_count': 0,
                'technology_count': 0,
                'auction_id': None,
                'auction_date': None,
                'production_month': None,
                'reserve_price': None,
                'error': None,
            }

            logger.info("Starting EEX auction data scraping...")
            self._transition(ScrapeState.IDLE)

            try:
                self._scrape(results)
                self._transition(ScrapeState.DONE)
                logger.info(f"EEX auction data scraping completed: {results['status']}")

            except TransportError as e:
                self._fail(results, f"Fetch failed: {e}")

            except StructureNotFound as e:
                self._fail(results, str(e), level=logging.WARNING)

            except Exception as e:
                logger.error(f"Failed to scrape EEX auction data: {e}", exc_info=True)
                self._fail(results, f"Scraping failed: {e}", level=None)

            return results

    def run_once(self) -> Dict[str, Any]:
        """Manual trigger: run synchronously and hand the result to the caller"""
        logger.info("Manual scraping triggered")
        return self.run()

    def _fail(self, results: Dict[str, Any], message: str, level: Optional[int] = logging.ERROR):
        if level is not None:
            logger.log(level, message)
        results['status'] = 'failed'
        results['saved'] = False
        results['error'] = message
        self._transition(ScrapeState.FAILED)

    def _scrape(self, results: Dict[str, Any]):
        self._transition(ScrapeState.FETCHING)
        soup = self.fetcher.fetch()

        self._transition(ScrapeState.LOCATING)
        section = self.locator.locate(soup)
        if section is None:
            raise StructureNotFound("Could not find Results section on EEX page")

        self._transition(ScrapeState.EXTRACTING_METADATA)
        metadata = extract_metadata(section, today=self.today())
        results['auction_date'] = metadata.auction_date.isoformat()
        results['production_month'] = metadata.production_month
        results['reserve_price'] = str(metadata.reserve_price)

        self._transition(ScrapeState.EXTRACTING_TABLES)
        regional_table, technology_table = locate_tables(section)
        region_rows = extract_rows(regional_table, TableKind.REGION)
        technology_rows = extract_rows(technology_table, TableKind.TECHNOLOGY)
        results['region_count'] = len(region_rows)
        results['technology_count'] = len(technology_rows)

        self._transition(ScrapeState.CHECKING_DUPLICATE)
        existing = self.db_manager.find_by_natural_key(
            metadata.auction_date, metadata.production_month
        )
        if existing:
            logger.info(f"Auction for {metadata.auction_date} (production: "
                        f"{metadata.production_month}) already exists, skipping")
            results['status'] = 'duplicate'
            results['auction_id'] = existing['auction_id']
            return

        if not region_rows and not technology_rows:
            logger.warning("No auction data found to save")
            results['status'] = 'nothing_to_save'
            return

        self._transition(ScrapeState.PERSISTING)
        auction = self.build_auction(metadata, region_rows, technology_rows)
        try:
            saved = self.db_manager.save_auction(auction)
        except DuplicateAuctionError as e:
            logger.info(f"{e}, skipping")
            results['status'] = 'duplicate'
            return

        results['status'] = 'saved'
        results['saved'] = True
        results['auction_id'] = saved['auction_id']
        logger.info(f"Saved new auction: {len(region_rows)} regions, "
                    f"{len(technology_rows)} technologies")

    @staticmethod
    def build_auction(metadata: AuctionMetadata, region_rows: List[AuctionRow],
                      technology_rows: List[AuctionRow]) -> Auction:
        """Assemble the Auction aggregate from extracted metadata and rows"""
        auction = Auction(
            auction_date=metadata.auction_date,
            production_month=metadata.production_month,
            reserve_price=metadata.reserve_price,
        )
        for row in region_rows:
            auction.regions.append(AuctionRegion(
                region_name=row.label,
                volume_offered=row.volume_offered,
                volume_allocated=row.volume_allocated,
                weighted_avg_price=row.weighted_avg_price,
            ))
        for row in technology_rows:
            auction.technologies.append(AuctionTechnology(
                technology_type=row.label,
                volume_offered=row.volume_offered,
                volume_allocated=row.volume_allocated,
                weighted_avg_price=row.weighted_avg_price,
            ))
        return auction
