# eex_scraper/__init__.py
"""EEX French Auction Scraper - Core Package"""
