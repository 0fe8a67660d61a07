"""
Core application engine for resolving streams.

The `StreamResolver` asks the API for a track's encrypted stream path at a
given quality and hands it to the decoder in `gaana_cli.crypto`.
"""

from .resolver import StreamResolver

__all__ = ["StreamResolver"]
