"""Browsing journey capture: page extraction, daily aggregation and retention."""
