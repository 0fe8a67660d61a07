"""
Gaana API Layer.

This package handles all communication with the Gaana web API.
"""

from .client import GaanaAPIClient

__all__ = ["GaanaAPIClient"]
