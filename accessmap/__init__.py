"""Accessible map backend: location search resolution and proximity ranking."""

__version__ = "0.1.0"
