"""Fetch, preview and publish web font families."""

__version__ = "1.0.4"
