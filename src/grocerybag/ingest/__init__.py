"""Inventory ingestion from grocery retailer websites."""
