"""
gaana-cli: resolves playable HLS stream URLs for Gaana tracks.
"""

__version__ = "1.0.0"
