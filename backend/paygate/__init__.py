"""Paygate: single-use payment transaction pages with merchant webhook notification."""

__version__ = "0.1.0"
