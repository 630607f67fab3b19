"""Integration tests for grocerybag.

These tests require network access and an installed Chromium
(`playwright install chromium`) to scrape live retailer websites.

Run with: pytest tests/integration/ -m integration -v -s
Skip with: pytest -m "not integration"
"""
