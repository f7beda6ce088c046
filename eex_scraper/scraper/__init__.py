# eex_scraper/scraper/__init__.py
"""Web scraping components"""
from .eex_scraper import EEXAuctionScraper, ScrapeState
from .fetcher import PageFetcher
from .utils import ScraperUtils

__all__ = ['EEXAuctionScraper', 'ScrapeState', 'PageFetcher', 'ScraperUtils']
