"""Bluesky search-to-feed generator."""

__version__ = "0.1.0"
