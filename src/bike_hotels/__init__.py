"""Resolve geographic queries into hotels with indoor bikes."""

__version__ = "0.1.0"
