"""Keto compatibility analysis service."""

__version__ = "1.0.0"
