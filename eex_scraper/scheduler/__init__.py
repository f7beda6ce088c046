"""Scheduling components"""
from .monitor import AuctionMonitor, run_monitor_service

__all__ = ['AuctionMonitor', 'run_monitor_service']
