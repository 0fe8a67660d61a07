"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application, such as configuration and resolved streams.
"""

from .config import ResolverConfig
from .media import QUALITY_TIERS, MediaUrl
from .stats import ResolveStats

__all__ = ["QUALITY_TIERS", "MediaUrl", "ResolveStats", "ResolverConfig"]
