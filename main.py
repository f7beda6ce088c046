#!/usr/bin/env python3
"""
EEX French Auction Scraper - Main Entry Point
"""

import sys
import logging
import argparse
from datetime import date
from colorlog import ColoredFormatter

from eex_scraper.scraper import EEXAuctionScraper
from eex_scraper.database import DatabaseManager
from eex_scraper.config import LOGGING_CONFIG, EEX_CONFIG, SCHEDULE_CONFIG


def setup_logging(log_level: str = None):
    """Set up colored console logging"""
    if log_level is None:
        log_level = LOGGING_CONFIG['level']

    # Console handler with colors
    console_handler = logging.StreamHandler()

    colored_formatter = ColoredFormatter(
        "%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt='%Y-%m-%d %H:%M:%S',
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        }
    )

    console_handler.setFormatter(colored_formatter)

    # File handler
    file_handler = logging.FileHandler(LOGGING_CONFIG['file'])
    file_formatter = logging.Formatter(LOGGING_CONFIG['format'])
    file_handler.setFormatter(file_formatter)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level))
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)


def display_results(results: dict):
    """Display the outcome of a scrape run"""
    print("\n" + "=" * 60)
    print("SCRAPING RESULTS")
    print("=" * 60)

    print(f"\nStatus: {results['status']}")
    print(f"Saved: {'yes' if results['saved'] else 'no'}")
    if results['production_month']:
        print(f"Auction date: {results['auction_date']}")
        print(f"Production month: {results['production_month']}")
        print(f"Reserve price: €{results['reserve_price']}/MWh")
    print(f"Regions extracted: {results['region_count']}")
    print(f"Technologies extracted: {results['technology_count']}")

    if results['error']:
        print("\n" + "-" * 40)
        print(f"ERROR: {results['error']}")

    print("\n" + "=" * 60 + "\n")


def display_auction(auction: dict):
    """Print one stored auction with its regions and technologies"""
    print(f"\nAuction #{auction['auction_id']} - {auction['auction_date']} "
          f"(production: {auction['production_month']}, "
          f"reserve: €{auction['reserve_price']}/MWh)")

    if auction.get('regions'):
        print("-" * 40)
        for region in auction['regions']:
            print(f"  {region['region_name']:<35} {region['volume_offered']:>10} offered  "
                  f"{region['volume_allocated']:>10} allocated  €{region['weighted_avg_price']}")

    if auction.get('technologies'):
        print("-" * 40)
        for tech in auction['technologies']:
            print(f"  {tech['technology_type']:<35} {tech['volume_offered']:>10} offered  "
                  f"{tech['volume_allocated']:>10} allocated  €{tech['weighted_avg_price']}")


def view_stats():
    """Display summary of auctions in database"""
    db_manager = DatabaseManager()
    stats = db_manager.get_stats()

    print("\n" + "=" * 60)
    print("DATABASE SUMMARY")
    print("=" * 60)

    print(f"\nStored auctions: {stats['total_auctions']}")
    print(f"Regional results: {stats['total_regions']}")
    print(f"Technology results: {stats['total_technologies']}")

    if stats.get('latest_auction_date'):
        print(f"\nLatest auction: {stats['latest_auction_date']} "
              f"(production: {stats['latest_production_month']})")
        print(f"  {stats['regions_count']} regions, {stats['technologies_count']} technologies")

    print("\n" + "=" * 60 + "\n")


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date (expected YYYY-MM-DD): {value}")


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="EEX French Auction Scraper - Collect guarantee-of-origin auction results"
    )

    # Action arguments
    parser.add_argument(
        'action',
        choices=['scrape', 'monitor', 'latest', 'range', 'list', 'stats', 'test'],
        help='Action to perform'
    )

    # Optional arguments
    parser.add_argument(
        '--start',
        type=parse_date,
        help='Start date (YYYY-MM-DD) for range action'
    )

    parser.add_argument(
        '--end',
        type=parse_date,
        help='End date (YYYY-MM-DD) for range action'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )

    args = parser.parse_args()

    # Setup logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        if args.action == 'scrape':
            # Manual trigger
            scraper = EEXAuctionScraper()
            results = scraper.run_once()
            display_results(results)
            if results['status'] == 'failed':
                sys.exit(1)

        elif args.action == 'monitor':
            # Start the daily scheduler
            from eex_scraper.scheduler.monitor import run_monitor_service
            logger.info("Starting scheduled scraping service...")
            run_monitor_service()

        elif args.action == 'latest':
            latest = DatabaseManager().get_latest_auction()
            if latest:
                display_auction(latest)
            else:
                print("No auctions stored yet.")

        elif args.action == 'range':
            if not args.start or not args.end:
                print("Error: --start and --end required for range action")
                sys.exit(1)
            auctions = DatabaseManager().get_auctions_between(args.start, args.end)
            print(f"\n{len(auctions)} auction(s) between {args.start} and {args.end}")
            for auction in auctions:
                display_auction(auction)

        elif args.action == 'list':
            auctions = DatabaseManager().get_all_auctions()
            print(f"\n{len(auctions)} stored auction(s)")
            for auction in auctions:
                display_auction(auction)

        elif args.action == 'stats':
            view_stats()

        elif args.action == 'test':
            # Test mode - quick functionality check
            logger.info("Running in test mode...")
            print("\nConfiguration loaded successfully!")
            print(f"Source URL: {EEX_CONFIG['url']}")
            print(f"Retries: {EEX_CONFIG['max_retries']} (backoff base {EEX_CONFIG['backoff_base']:.0f}s)")
            print(f"Daily run time: {SCHEDULE_CONFIG['daily_run_time']}")

            # Test database connection
            DatabaseManager()
            print("\nDatabase connection: OK")

            EEXAuctionScraper()
            print("Scraper initialization: OK")

            print("\nAll systems ready! Run 'python main.py scrape' to start scraping.")

    except KeyboardInterrupt:
        logger.info("Scraping interrupted by user")
        sys.exit(0)

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
