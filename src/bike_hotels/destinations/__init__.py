"""City catalog helpers."""

from .catalog import City, CityCatalog

__all__ = ["City", "CityCatalog"]
