import base64

import pytest

from gaana_cli.crypto import stream_decoder
from gaana_cli.crypto.stream_decoder import (
    BLOCK_SIZE,
    HLS_BASE_URL,
    DecodeFailure,
    DecodeResult,
    decode_stream_path,
    decrypt_ciphertext,
    encode_stream_path,
    extract_ciphertext,
    extract_stream_url,
    parse_offset,
    sanitize_plaintext,
)
from gaana_cli.exceptions import StreamDecodeError

FRAMING = "x" * 15


@pytest.mark.parametrize("offset", [0, 3, 9])
def test_round_trip_recovers_path(offset):
    path = "hls/ab12cd/34/index_320.m3u8?token=a1b2&exp=1700000000"
    result = decode_stream_path(encode_stream_path(path, offset=offset))
    assert result.ok
    assert result.url == HLS_BASE_URL + path


def test_junk_before_marker_is_discarded():
    result = decode_stream_path(encode_stream_path("junk###hls/abc/def.m3u8"))
    assert result.url == HLS_BASE_URL + "hls/abc/def.m3u8"


def test_framing_content_is_not_interpreted():
    field = encode_stream_path("hls/a.m3u8", offset=2, framing="9=$%^&*()_+{}\"<>?")
    assert decode_stream_path(field).url == HLS_BASE_URL + "hls/a.m3u8"


@pytest.mark.parametrize("field", ["", "x" + FRAMING + "AAAA", "٣" + FRAMING + "AAAA"])
def test_non_digit_offset_is_malformed(field):
    result = decode_stream_path(field)
    assert not result.ok
    assert result.failure is DecodeFailure.MALFORMED_OFFSET
    assert result.url is None


def test_parse_offset_reads_single_digit():
    assert parse_offset("7abc") == 7
    assert parse_offset("0") == 0


def test_slice_past_end_is_truncated():
    assert decode_stream_path("9abc").failure is DecodeFailure.TRUNCATED_PAYLOAD


def test_empty_ciphertext_is_invalid_length():
    # Slice starts exactly at the end: nothing to decrypt
    assert (
        decode_stream_path("0" + FRAMING).failure
        is DecodeFailure.INVALID_CIPHERTEXT_LENGTH
    )


def test_fifteen_byte_ciphertext_is_invalid_length():
    payload = base64.b64encode(b"a" * 15).decode().rstrip("=")
    result = decode_stream_path("0" + FRAMING + payload)
    assert result.failure is DecodeFailure.INVALID_CIPHERTEXT_LENGTH
    assert "15 bytes" in result.detail


@pytest.mark.parametrize("payload", ["abc$defg", "ab=cdefg", "abcde"])
def test_undecodable_base64(payload):
    assert decode_stream_path("0" + FRAMING + payload).failure is DecodeFailure.INVALID_BASE64


def test_existing_padding_is_tolerated():
    field = encode_stream_path("hls/x/y.m3u8", offset=1)
    ciphertext = extract_ciphertext(field)
    padded = field[:17] + base64.b64encode(ciphertext).decode()
    assert decode_stream_path(padded).url == HLS_BASE_URL + "hls/x/y.m3u8"


def test_urlsafe_alphabet_is_accepted():
    field = encode_stream_path("hls/some/longer/path/to/a/playlist.m3u8", offset=5)
    urlsafe = field[:21] + field[21:].replace("+", "-").replace("/", "_")
    assert decode_stream_path(urlsafe).url == decode_stream_path(field).url


def test_extract_ciphertext_strips_prefix():
    field = encode_stream_path("hls/abc", offset=6)
    assert len(extract_ciphertext(field)) == BLOCK_SIZE


def test_decrypt_keeps_every_block():
    # Garbage in, block-aligned garbage out; no padding validation
    assert len(decrypt_ciphertext(bytes(range(48)))) == 48


def test_decrypt_rejects_unaligned_input():
    with pytest.raises(StreamDecodeError) as exc_info:
        decrypt_ciphertext(b"\x00" * 17)
    assert exc_info.value.failure is DecodeFailure.INVALID_CIPHERTEXT_LENGTH


def test_sanitize_drops_control_and_non_ascii():
    raw = b"  \x00hls/\x01a\x1fb\x7fc\xc3\xa9d/e.m3u8\xff\xfe\x00\x00  "
    assert sanitize_plaintext(raw) == "hls/abcd/e.m3u8"


def test_sanitize_preserves_printable_order():
    text = "AZaz09 !\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"
    assert sanitize_plaintext(text.encode()) == text


def test_marker_missing_is_reported():
    result = decode_stream_path(encode_stream_path("mp4/abc/def.mp4", offset=2))
    assert result.failure is DecodeFailure.MARKER_NOT_FOUND
    assert result.url is None


def test_first_marker_occurrence_wins():
    assert extract_stream_url("x/hls/a/hls/b") == HLS_BASE_URL + "hls/a/hls/b"
    assert extract_stream_url("no marker here") is None


def test_unwrap_raises_for_failure():
    failed = DecodeResult(failure=DecodeFailure.MARKER_NOT_FOUND, detail="nothing")
    with pytest.raises(StreamDecodeError) as exc_info:
        failed.unwrap()
    assert exc_info.value.failure is DecodeFailure.MARKER_NOT_FOUND
    assert DecodeResult(url="https://x/hls/").unwrap() == "https://x/hls/"


def test_encode_validates_arguments():
    with pytest.raises(ValueError):
        encode_stream_path("hls/a", offset=10)
    with pytest.raises(ValueError):
        encode_stream_path("hls/a", offset=2, framing="short")
    assert encode_stream_path("hls/a", offset=3, framing="F" * 18).startswith("3" + "F" * 18)


def test_cipher_error_is_reported_not_raised(monkeypatch):
    field = encode_stream_path("hls/abc/def.m3u8", offset=2)

    class BrokenCipher:
        def decrypt(self, data):
            raise ValueError("Data must be padded to 16 byte boundary in CBC mode")

    monkeypatch.setattr(stream_decoder.AES, "new", lambda *args, **kwargs: BrokenCipher())

    result = decode_stream_path(field)
    assert result.failure is DecodeFailure.DECRYPTION_FAILURE
    assert result.url is None
    assert "padded" in result.detail


def test_sanitize_trims_space_next_to_separator_controls():
    assert sanitize_plaintext(b"hls/a \x1f") == "hls/a"
    assert sanitize_plaintext(b"hls/a \x01") == "hls/a "
