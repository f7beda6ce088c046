"""Configuration"""
from .settings import EEX_CONFIG, DATABASE_CONFIG, SCHEDULE_CONFIG, LOGGING_CONFIG

__all__ = ['EEX_CONFIG', 'DATABASE_CONFIG', 'SCHEDULE_CONFIG', 'LOGGING_CONFIG']
