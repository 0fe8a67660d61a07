"""
Resolves playable stream URLs for tracks, one quality tier at a time.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

import aiohttp

from gaana_cli.api.client import GaanaAPIClient
from gaana_cli.crypto.stream_decoder import DecodeFailure, decode_stream_path
from gaana_cli.exceptions import APIResponseError, InvalidQualityError
from gaana_cli.models.config import ResolverConfig
from gaana_cli.models.media import QUALITY_TIERS, MediaUrl
from gaana_cli.models.stats import ResolveStats
from gaana_cli.utils.structured_logger import ResolveLogger

log = logging.getLogger(__name__)


class StreamResolver:
    """
    Glue between the stream API and the stream path decoder.

    Any failure (transport, envelope or decode) means "no stream for this
    quality" to callers; the reason is only logged and counted.
    """

    def __init__(
        self,
        client: GaanaAPIClient,
        config: Optional[ResolverConfig] = None,
        stats: Optional[ResolveStats] = None,
        event_logger: Optional[ResolveLogger] = None,
    ):
        self.client = client
        self.config = config or ResolverConfig()
        self.stats = stats if stats is not None else ResolveStats()
        self.event_logger = event_logger

    async def _fetch_envelope(
        self, track_id: str, quality: str
    ) -> Optional[Dict[str, Any]]:
        try:
            return await self.client.fetch_stream_url(
                track_id, quality, self.config.stream_format
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, APIResponseError) as e:
            self.stats.transport_failures += 1
            log.warning(
                f"[yellow]Stream request failed for track {track_id} ({quality}): "
                f"{e}[/yellow]"
            )
            if self.event_logger:
                self.event_logger.request_failed(track_id, quality, str(e))
            return None

    async def resolve(self, track_id: str, quality: str = "high") -> Optional[MediaUrl]:
        """
        Resolves a single quality tier of a track.

        Returns:
            The resolved stream, or None if it could not be obtained.

        Raises:
            InvalidQualityError: If ``quality`` is not a known tier.
        """
        if quality not in QUALITY_TIERS:
            raise InvalidQualityError(
                f"Invalid quality: {quality!r}. Must be one of {', '.join(QUALITY_TIERS)}."
            )

        track_id = str(track_id)
        self.stats.tracks_requested.add(track_id)

        envelope = await self._fetch_envelope(track_id, quality)
        if envelope is None:
            return None

        data = envelope.get("data")
        stream_path = data.get("stream_path") if isinstance(data, dict) else None
        if envelope.get("api_status") != "success" or not (
            isinstance(stream_path, str) and stream_path
        ):
            self.stats.unavailable += 1
            log.warning(
                f"[yellow]No stream data for track {track_id} ({quality}), "
                f"api_status={envelope.get('api_status')!r}[/yellow]"
            )
            if self.event_logger:
                self.event_logger.stream_unavailable(
                    track_id, quality, envelope.get("api_status")
                )
            return None

        result = decode_stream_path(stream_path)
        if not result.ok:
            self.stats.record_decode_failure(result.failure)
            if result.failure is DecodeFailure.MARKER_NOT_FOUND:
                log.warning(
                    f"[yellow]No HLS path in decrypted stream for track {track_id} "
                    f"({quality})[/yellow]"
                )
            else:
                log.warning(
                    f"[yellow]Could not decode stream path for track {track_id} "
                    f"({quality}): {result.failure.value} {result.detail}[/yellow]"
                )
            if self.event_logger:
                self.event_logger.decode_failed(
                    track_id, quality, result.failure.value, result.detail
                )
            return None

        media = MediaUrl(
            quality=quality,
            bit_rate=str(data.get("bit_rate") or ""),
            url=result.url,
            format=str(data.get("track_format") or "mp4"),
        )
        self.stats.resolved += 1
        log.debug(f"Resolved track {track_id} ({quality}): {media.url}")
        if self.event_logger:
            self.event_logger.stream_resolved(
                track_id, quality, media.bit_rate, media.url
            )
        return media

    async def resolve_all(
        self,
        track_id: str,
        fallback: Optional[bool] = None,
        quality: str = QUALITY_TIERS[0],
    ) -> List[MediaUrl]:
        """
        Resolves the best available stream for a track.

        Only ``quality`` (the highest tier by default) is tried unless
        ``fallback`` is enabled, in which case the tiers below it are tried in
        order. Stops at the first success.
        """
        if quality not in QUALITY_TIERS:
            raise InvalidQualityError(
                f"Invalid quality: {quality!r}. Must be one of {', '.join(QUALITY_TIERS)}."
            )
        if fallback is None:
            fallback = self.config.fallback

        start = QUALITY_TIERS.index(quality)
        tiers = QUALITY_TIERS[start:] if fallback else (quality,)
        results: List[MediaUrl] = []
        for tier in tiers:
            media = await self.resolve(track_id, tier)
            if media:
                results.append(media)
                break
        return results

    async def resolve_many(
        self,
        track_ids: Iterable[str],
        fallback: Optional[bool] = None,
        quality: str = QUALITY_TIERS[0],
    ) -> Dict[str, List[MediaUrl]]:
        """Resolves several tracks concurrently, bounded by ``max_workers``."""
        semaphore = asyncio.Semaphore(self.config.max_workers)
        unique_ids = list(dict.fromkeys(str(t) for t in track_ids))

        async def _bounded(track_id: str) -> List[MediaUrl]:
            async with semaphore:
                return await self.resolve_all(track_id, fallback, quality)

        results = await asyncio.gather(*(_bounded(t) for t in unique_ids))
        return dict(zip(unique_ids, results))
