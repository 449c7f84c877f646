"""Structured launcher for the clipaste clipboard CLI."""

__version__ = "0.1.0"
