"""Core processors for resecure runs."""

from .region_processor import RegionProcessor

__all__ = [
    "RegionProcessor",
]
