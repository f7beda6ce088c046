import logging
from datetime import date
from typing import List, Optional, Dict, Any
from contextlib import contextmanager
from sqlalchemy import create_engine, desc, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker, selectinload
from sqlalchemy.pool import StaticPool

from eex_scraper.config.settings import DATABASE_CONFIG
from eex_scraper.database.models import Base, Auction, AuctionRegion, AuctionTechnology
from eex_scraper.exceptions import DuplicateAuctionError

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> Dict[str, Any]:
    if not database_url.startswith('sqlite'):
        return {}
    # The scheduler thread and a manual trigger share one engine
    options = {'connect_args': {'check_same_thread': False}}
    if database_url in ('sqlite://', 'sqlite:///:memory:'):
        options['poolclass'] = StaticPool
    return options


class DatabaseManager:
    """Manages all database operations for stored auctions"""

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        """
        Create the engine and make sure the schema exists

        Args:
            database_url: SQLAlchemy URL, defaults to DATABASE_URL from the environment
            echo: Log emitted SQL
        """
        self.database_url = database_url or DATABASE_CONFIG['url']
        if echo is None:
            echo = DATABASE_CONFIG['echo']
        self.engine = create_engine(self.database_url, echo=echo, **_engine_options(self.database_url))
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(bind=self.engine)

    @contextmanager
    def get_session(self):
        """Context manager for database sessions"""
        session = self.Session()
        try:
            yield session
            session.commit()
        except IntegrityError as e:
            # Callers decide whether a constraint violation is an error
            session.rollback()
            logger.debug(f"Integrity error, rolled back: {e}")
            raise
        except Exception as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            session.close()

    def find_by_natural_key(self, auction_date: date, production_month: str) -> Optional[Dict[str, Any]]:
        """Look up an auction by (auction_date, production_month)"""
        with self.get_session() as session:
            auction = session.query(Auction).filter_by(
                auction_date=auction_date,
                production_month=production_month
            ).first()
            return auction.to_dict(include_details=False) if auction else None

    def save_auction(self, auction: Auction) -> Dict[str, Any]:
        """
        Insert an auction together with its regions and technologies

        The aggregate is written in a single transaction, so either every
        row is committed or none is.

        Args:
            auction: New Auction with its children already attached

        Returns:
            The stored auction as a dict

        Raises:
            DuplicateAuctionError: An auction with the same natural key exists
        """
        try:
            with self.get_session() as session:
                session.add(auction)
                session.flush()
                saved = auction.to_dict()
        except IntegrityError as e:
            if self.find_by_natural_key(auction.auction_date, auction.production_month):
                raise DuplicateAuctionError(auction.auction_date, auction.production_month) from e
            raise

        logger.info(f"Stored auction {saved['auction_id']} for {saved['auction_date']} "
                    f"(production: {saved['production_month']})")
        return saved

    def get_auctions_between(self, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        """Get auctions held between two dates (inclusive), newest first"""
        with self.get_session() as session:
            auctions = session.query(Auction).options(
                selectinload(Auction.regions),
                selectinload(Auction.technologies)
            ).filter(
                Auction.auction_date.between(start_date, end_date)
            ).order_by(desc(Auction.auction_date), desc(Auction.auction_id)).all()
            # Convert to dict to avoid detached instance issues
            return [auction.to_dict() for auction in auctions]

    def get_latest_auction(self) -> Optional[Dict[str, Any]]:
        """Get the most recent auction with all its details"""
        with self.get_session() as session:
            auction = session.query(Auction).options(
                selectinload(Auction.regions),
                selectinload(Auction.technologies)
            ).order_by(desc(Auction.auction_date), desc(Auction.auction_id)).first()
            return auction.to_dict() if auction else None

    def get_all_auctions(self) -> List[Dict[str, Any]]:
        """Get every stored auction with details, newest first"""
        with self.get_session() as session:
            auctions = session.query(Auction).options(
                selectinload(Auction.regions),
                selectinload(Auction.technologies)
            ).order_by(desc(Auction.auction_date), desc(Auction.auction_id)).all()
            return [auction.to_dict() for auction in auctions]

    def get_stats(self) -> Dict[str, Any]:
        """Get basic statistics about stored auctions"""
        with self.get_session() as session:
            stats = {
                'total_auctions': session.query(func.count(Auction.auction_id)).scalar(),
                'total_regions': session.query(func.count(AuctionRegion.region_id)).scalar(),
                'total_technologies': session.query(func.count(AuctionTechnology.technology_id)).scalar(),
            }

        latest = self.get_latest_auction()
        if latest:
            stats['latest_auction_date'] = latest['auction_date']
            stats['latest_production_month'] = latest['production_month']
            stats['regions_count'] = len(latest['regions'])
            stats['technologies_count'] = len(latest['technologies'])

        return stats
