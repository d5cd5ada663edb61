"""
Videos repository.

Mediates between the remote playlist and the local store. Reads always come
from the store; ``refresh()`` is the only path that writes to it.
"""

from __future__ import annotations

import logging

from .config import RepositoryConfig
from .exceptions import FetchError, StoreError
from .logging_utils import RepositoryLoggerAdapter
from .network import HttpPlaylistSource, PlaylistSource
from .records import Video, as_database_model, as_domain_model
from .store import JsonFileVideoStore, Observation, SQLiteVideoStore, VideoStore

logger = logging.getLogger(__name__)


class VideosRepository:
    """Single source of truth for the video playlist.

    Example:
        >>> async with await VideosRepository.create(RepositoryConfig.from_env()) as repo:
        ...     async with repo.observe() as videos:
        ...         print(await anext(videos))  # cached playlist, maybe []
        ...         await repo.refresh()
        ...         print(await anext(videos))  # freshly fetched playlist
    """

    def __init__(
        self,
        store: VideoStore,
        source: PlaylistSource,
        owns_collaborators: bool = False,
    ) -> None:
        """Initialize the repository.

        Args:
            store: Initialized local store
            source: Remote playlist source
            owns_collaborators: Close store and source in ``close()``
        """
        self.store = store
        self.source = source
        self._owns_collaborators = owns_collaborators
        self._log = RepositoryLoggerAdapter(
            logger,
            {
                "store": type(store).__name__,
                "source_url": getattr(source, "url", type(source).__name__),
            },
        )

    @classmethod
    async def create(cls, config: RepositoryConfig | None = None) -> VideosRepository:
        """Build a repository with the configured store and an HTTP source."""
        if config is None:
            config = RepositoryConfig.from_env()

        store: VideoStore
        if config.backend == "json":
            store = JsonFileVideoStore(config.json_path)
        else:
            store = SQLiteVideoStore(config.db_path)
        await store.initialize()

        source = HttpPlaylistSource(config.playlist_url, timeout=config.fetch_timeout)
        return cls(store, source, owns_collaborators=True)

    def observe(self) -> Observation[list[Video]]:
        """Observe the cached playlist.

        The first item is the current store contents (``[]`` when empty),
        then one full list per committed refresh, in remote order.
        """
        return self.store.subscribe().map(as_domain_model)

    async def refresh(self) -> None:
        """Fetch the remote playlist and replace the cached one.

        Raises:
            FetchError: The fetch failed; the store was not touched
            StoreError: The write failed; the store keeps its own
                transactional state
        """
        self._log.debug("Refreshing videos")

        try:
            videos = await self.source.fetch_collection()
        except FetchError as e:
            self._log.warning(f"Playlist fetch failed: {e}")
            raise
        except Exception as e:
            self._log.warning(f"Playlist fetch failed: {e}")
            raise FetchError(f"Playlist fetch failed: {e}", cause=e) from e

        rows = as_database_model(videos)

        try:
            await self.store.replace_all(rows)
        except StoreError as e:
            self._log.error(f"Storing videos failed: {e}")
            raise
        except Exception as e:
            self._log.error(f"Storing videos failed: {e}")
            raise StoreError("replace_all", cause=e) from e

        self._log.info(f"Refreshed videos: {len(rows)} stored", extra={"count": len(rows)})

    async def close(self) -> None:
        """Close the store and source if this repository created them."""
        if self._owns_collaborators:
            try:
                await self.source.close()
            finally:
                await self.store.close()

    async def __aenter__(self) -> VideosRepository:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
