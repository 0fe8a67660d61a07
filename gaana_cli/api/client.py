"""
Async client for the Gaana stream-url endpoint.
"""

import logging
import time
from typing import Any, Dict, Optional

import aiohttp

from gaana_cli.exceptions import APIResponseError

log = logging.getLogger(__name__)


class GaanaAPIClient:
    """
    Thin async transport for the Gaana web API.

    Issues one form-encoded POST per request with the headers the web player
    sends. Transport failures are raised to the caller; there is no retry.
    """

    BASE_URL = "https://gaana.com/"
    STREAM_URL_ENDPOINT = "api/stream-url"

    HEADERS = {
        "Content-Type": "application/x-www-form-urlencoded",
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
        "Accept": "application/json, text/plain, */*",
        "Origin": "https://gaana.com",
        "Referer": "https://gaana.com/",
    }

    def __init__(self, max_workers: int = 4, timeout: int = 30):
        """
        Initializes the API client.

        Args:
            max_workers: The number of concurrent requests, used to size the connection pool.
            timeout: Total timeout in seconds for a single request.
        """
        self.max_workers = max_workers
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_workers * 2,
                limit_per_host=self.max_workers,
                ttl_dns_cache=300,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers=self.HEADERS,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "GaanaAPIClient":
        await self._initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def api_call(self, endpoint: str, form: Dict[str, str]) -> Dict[str, Any]:
        """
        POSTs a url-encoded form to an API endpoint and returns the JSON body.

        Raises:
            aiohttp.ClientError: On connection problems or a non-2xx status.
            APIResponseError: If the body is not a JSON object.
        """
        await self._initialize_session()

        start_time = time.monotonic()
        async with self._session.post(self.BASE_URL + endpoint, data=form) as r:
            duration_ms = (time.monotonic() - start_time) * 1000
            log.debug(f"POST {endpoint} -> {r.status} in {duration_ms:.0f} ms")

            r.raise_for_status()
            try:
                # The API does not always label its JSON correctly
                body = await r.json(content_type=None)
            except ValueError as e:
                raise APIResponseError(
                    f"Response from {endpoint} is not valid JSON: {e}"
                ) from e

        if not isinstance(body, dict):
            raise APIResponseError(
                f"Response from {endpoint} is a {type(body).__name__}, expected an object."
            )
        return body

    async def fetch_stream_url(
        self, track_id: str, quality: str, stream_format: str = "mp4"
    ) -> Dict[str, Any]:
        """Requests the encrypted stream path envelope for one track and quality."""
        return await self.api_call(
            self.STREAM_URL_ENDPOINT,
            {
                "quality": quality,
                "track_id": str(track_id),
                "stream_format": stream_format,
            },
        )
