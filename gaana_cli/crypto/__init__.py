"""
Stream Path Crypto Layer.

This package reverses the obfuscation the Gaana API applies to stream paths.
"""

from .stream_decoder import (
    DecodeFailure,
    DecodeResult,
    decode_stream_path,
    encode_stream_path,
)

__all__ = ["DecodeFailure", "DecodeResult", "decode_stream_path", "encode_stream_path"]
