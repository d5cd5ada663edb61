"""
HTTP playlist source.

Fetches the DevBytes playlist JSON with aiohttp and parses it into
``NetworkVideo`` records.
"""

from __future__ import annotations

import asyncio
import json
import logging

import aiohttp

from ..exceptions import FetchError, MalformedPayloadError
from ..records import NetworkVideo, NetworkVideoContainer
from .base import PlaylistSource

logger = logging.getLogger(__name__)

DEFAULT_PLAYLIST_URL = "https://android-kotlin-fun-mars-server.appspot.com/devbytes"


class HttpPlaylistSource(PlaylistSource):
    """Playlist source backed by a JSON HTTP endpoint.

    Example:
        >>> source = HttpPlaylistSource("https://example.com/devbytes")
        >>> videos = await source.fetch_collection()
        >>> await source.close()
    """

    def __init__(
        self,
        url: str = DEFAULT_PLAYLIST_URL,
        timeout: float = 30.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            url: Playlist endpoint URL
            timeout: Total request timeout in seconds
            session: Optional shared client session. A session passed in is
                not closed by ``close()``.
        """
        self.url = url
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"Accept": "application/json"})
            self._owns_session = True
        return self._session

    async def fetch_collection(self) -> list[NetworkVideo]:
        session = self._get_session()
        logger.debug(f"Fetching playlist: {self.url}")

        try:
            async with session.get(
                self.url, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(
                        f"Playlist request failed with status {response.status}",
                        url=self.url,
                    )
                body = await response.text()
        except asyncio.TimeoutError as e:
            raise FetchError(
                f"Playlist request timed out after {self.timeout}s", url=self.url, cause=e
            ) from e
        except aiohttp.ClientError as e:
            raise FetchError(f"Playlist request failed: {e}", url=self.url, cause=e) from e

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise FetchError("Playlist response is not valid JSON", url=self.url, cause=e) from e

        try:
            container = NetworkVideoContainer.from_json(payload)
        except MalformedPayloadError as e:
            e.url = self.url
            e.details["url"] = self.url
            raise

        logger.debug(f"Fetched {len(container.videos)} videos from {self.url}")
        return list(container.videos)

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None
