# eex_scraper/database/__init__.py
"""Database components"""
from .db_manager import DatabaseManager
from .models import Auction, AuctionRegion, AuctionTechnology

__all__ = ['DatabaseManager', 'Auction', 'AuctionRegion', 'AuctionTechnology']
