"""Detect documentation drift introduced by code changes."""

__version__ = "0.1.0"
