import pytest

from gaana_cli.crypto.stream_decoder import encode_stream_path


class FakeStreamClient:
    """Stands in for GaanaAPIClient; answers from a table instead of the network."""

    def __init__(self, responses=None, max_workers: int = 4, timeout: int = 30):
        # Keys are (track_id, quality) or just quality; values are envelopes or exceptions.
        self.responses = responses or {}
        self.max_workers = max_workers
        self.timeout = timeout
        self.calls = []
        self.closed = False

    async def fetch_stream_url(self, track_id, quality, stream_format="mp4"):
        self.calls.append((track_id, quality, stream_format))
        response = self.responses.get(
            (track_id, quality), self.responses.get(quality, {"api_status": "failure"})
        )
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def build_envelope(path="hls/abc/def.m3u8", bit_rate="320", track_format="mp4", offset=4):
    data = {"stream_path": encode_stream_path(path, offset=offset)}
    if bit_rate is not None:
        data["bit_rate"] = bit_rate
    if track_format is not None:
        data["track_format"] = track_format
    return {"api_status": "success", "data": data}


@pytest.fixture
def fake_client():
    return FakeStreamClient


@pytest.fixture
def envelope():
    return build_envelope
