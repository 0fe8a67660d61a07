"""
Reverses the obfuscation applied to the ``stream_path`` field returned by the
Gaana stream API.

Field layout::

    <offset digit N><N + 15 framing characters><base64 ciphertext, '=' stripped>

The ciphertext is AES-128-CBC under a fixed key and IV with no padding scheme.
The decrypted bytes hold an HLS path beginning at ``hls/``, surrounded by
junk that has to be filtered out before the path can be used.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from Crypto.Cipher import AES

from gaana_cli.exceptions import StreamDecodeError

log = logging.getLogger(__name__)

# Scheme constants shared with the official web player. Not configuration.
STREAM_KEY = b"gy1t#b@jl(b$wtme"
STREAM_IV = b"xC4dmVJAq14BfntX"
HLS_BASE_URL = "https://vodhlsgaana-ebw.akamaized.net/"
HLS_MARKER = "hls/"

FRAMING_LENGTH = 16
BLOCK_SIZE = AES.block_size

_BASE64_DATA = re.compile(r"[A-Za-z0-9+/]*")
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


class DecodeFailure(Enum):
    """Reasons an encrypted stream path could not be turned into a URL."""

    MALFORMED_OFFSET = "MalformedOffset"
    TRUNCATED_PAYLOAD = "TruncatedPayload"
    INVALID_BASE64 = "InvalidBase64"
    INVALID_CIPHERTEXT_LENGTH = "InvalidCiphertextLength"
    DECRYPTION_FAILURE = "DecryptionFailure"
    MARKER_NOT_FOUND = "MarkerNotFound"


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of a decode: either ``url`` is set, or ``failure`` is."""

    url: Optional[str] = None
    failure: Optional[DecodeFailure] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> str:
        """Returns the URL, raising ``StreamDecodeError`` for a failed decode."""
        if self.failure is not None:
            raise StreamDecodeError(self.failure, self.detail)
        return self.url


def parse_offset(encrypted_field: str) -> int:
    """Reads the single leading decimal digit of the field."""
    if not encrypted_field:
        raise StreamDecodeError(DecodeFailure.MALFORMED_OFFSET, "field is empty")

    first = encrypted_field[0]
    # str.isdigit() would also accept non-ASCII digits
    if first not in "0123456789":
        raise StreamDecodeError(
            DecodeFailure.MALFORMED_OFFSET, f"leading character {first!r} is not a digit"
        )
    return int(first)


def _lenient_b64decode(payload: str) -> bytes:
    """
    Decodes base64 whose trailing padding was stripped by the server.

    '==' is always appended; anything beyond the padding implied by the data
    length is then discarded so that a strict decoder accepts the input.
    """
    data = (payload + "==").rstrip("=").translate(_URLSAFE_TO_STANDARD)
    if not _BASE64_DATA.fullmatch(data):
        raise StreamDecodeError(
            DecodeFailure.INVALID_BASE64, "payload contains non-base64 characters"
        )
    if len(data) % 4 == 1:
        raise StreamDecodeError(
            DecodeFailure.INVALID_BASE64,
            f"{len(data)} base64 characters cannot encode a whole number of bytes",
        )

    data += "=" * (-len(data) % 4)
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise StreamDecodeError(DecodeFailure.INVALID_BASE64, str(e)) from e


def extract_ciphertext(encrypted_field: str) -> bytes:
    """Skips the offset digit and framing region and decodes the ciphertext."""
    offset = parse_offset(encrypted_field)
    start = offset + FRAMING_LENGTH
    if start > len(encrypted_field):
        raise StreamDecodeError(
            DecodeFailure.TRUNCATED_PAYLOAD,
            f"ciphertext starts at index {start} but the field has "
            f"{len(encrypted_field)} characters",
        )
    return _lenient_b64decode(encrypted_field[start:])


def decrypt_ciphertext(ciphertext: bytes) -> bytes:
    """
    AES-128-CBC decrypts with the fixed key and IV. The output is returned
    block-aligned; no padding is validated or removed.
    """
    if not ciphertext or len(ciphertext) % BLOCK_SIZE:
        raise StreamDecodeError(
            DecodeFailure.INVALID_CIPHERTEXT_LENGTH,
            f"{len(ciphertext)} bytes is not a positive multiple of {BLOCK_SIZE}",
        )

    try:
        cipher = AES.new(STREAM_KEY, AES.MODE_CBC, iv=STREAM_IV)
        return cipher.decrypt(ciphertext)
    except (ValueError, TypeError) as e:
        raise StreamDecodeError(DecodeFailure.DECRYPTION_FAILURE, str(e)) from e


def sanitize_plaintext(raw: bytes) -> str:
    """
    Converts decrypted bytes to text and keeps printable ASCII (32-126) only.
    Malformed UTF-8 is replaced, and the replacement characters are then
    filtered out along with everything else outside that range.
    """
    # strip() also drops \x1c-\x1f and \x85, so a space beside them is trimmed too
    text = raw.decode("utf-8", errors="replace").replace("\x00", "").strip()
    return "".join(ch for ch in text if 32 <= ord(ch) <= 126)


def extract_stream_url(text: str) -> Optional[str]:
    """Builds the absolute HLS URL from the first ``hls/`` onward, if present."""
    index = text.find(HLS_MARKER)
    if index == -1:
        return None
    return HLS_BASE_URL + text[index:]


def decode_stream_path(encrypted_field: str) -> DecodeResult:
    """
    Turns an encrypted ``stream_path`` into an absolute stream URL.

    Malformed input never raises; the failure kind is reported on the result.
    """
    try:
        plaintext = decrypt_ciphertext(extract_ciphertext(encrypted_field))
    except StreamDecodeError as e:
        log.debug(f"Stream path decode failed: {e}")
        return DecodeResult(failure=e.failure, detail=e.detail)

    text = sanitize_plaintext(plaintext)
    url = extract_stream_url(text)
    if url is None:
        log.debug(f"No '{HLS_MARKER}' marker in decrypted text ({len(text)} chars)")
        return DecodeResult(
            failure=DecodeFailure.MARKER_NOT_FOUND,
            detail=f"no '{HLS_MARKER}' in {len(text)} decrypted characters",
        )
    return DecodeResult(url=url)


def encode_stream_path(
    path: str, offset: int = 0, framing: Optional[str] = None
) -> str:
    """
    Produces a ``stream_path`` value the way the API does. Useful for building
    fixtures; ``decode_stream_path`` inverts it.

    Args:
        path: Plaintext to hide, e.g. ``"hls/abc/def.m3u8"``.
        offset: The leading offset digit (0-9).
        framing: Filler placed between the digit and the ciphertext. Must be
            exactly ``offset + 15`` characters; defaults to ``'x'`` repeated.
    """
    if not 0 <= offset <= 9:
        raise ValueError(f"Offset must be a single digit, got {offset}.")

    framing_length = offset + FRAMING_LENGTH - 1
    if framing is None:
        framing = "x" * framing_length
    elif len(framing) != framing_length:
        raise ValueError(
            f"Framing must be {framing_length} characters for offset {offset}."
        )

    plaintext = path.encode("utf-8")
    padded_length = max(BLOCK_SIZE, -(-len(plaintext) // BLOCK_SIZE) * BLOCK_SIZE)
    plaintext = plaintext.ljust(padded_length, b"\x00")

    cipher = AES.new(STREAM_KEY, AES.MODE_CBC, iv=STREAM_IV)
    ciphertext = base64.b64encode(cipher.encrypt(plaintext)).decode("ascii")
    return f"{offset}{framing}{ciphertext.rstrip('=')}"
