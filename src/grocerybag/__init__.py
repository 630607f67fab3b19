"""Grocerybag: grocery inventory scraping for nearby retailers."""

__version__ = "0.1.0"
