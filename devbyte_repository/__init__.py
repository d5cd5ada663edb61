"""
DevByte Repository

Offline-first cache for the DevBytes video playlist.

Provides:
- A repository that is the single source of truth for reads
- Reactive observation of the cached playlist
- Explicit refresh: fetch remote playlist, then atomically replace the cache
- SQLite and JSON file stores

Usage:

    >>> from devbyte_repository import RepositoryConfig, VideosRepository
    >>> async with await VideosRepository.create(RepositoryConfig.from_env()) as repo:
    ...     async with repo.observe() as videos:
    ...         cached = await anext(videos)
    ...         await repo.refresh()
    ...         fresh = await anext(videos)

Retry is left to the caller:

    >>> from devbyte_repository import RetryConfig, retry_with_backoff
    >>> await retry_with_backoff(repo.refresh, config=RetryConfig(max_retries=3))
"""

from .config import RepositoryConfig
from .exceptions import FetchError, MalformedPayloadError, RepositoryError, StoreError
from .logging_utils import configure_logging
from .network import HttpPlaylistSource, PlaylistSource
from .records import (
    DatabaseVideo,
    NetworkVideo,
    NetworkVideoContainer,
    Video,
    as_database_model,
    as_domain_model,
)
from .repository import VideosRepository
from .resilience import RetryConfig, retry_with_backoff
from .store import (
    JsonFileVideoStore,
    Observation,
    SnapshotPublisher,
    SQLiteVideoStore,
    Subscription,
    VideoStore,
)

__version__ = "0.1.0"

__all__ = [
    # Repository
    "VideosRepository",
    "RepositoryConfig",
    # Records
    "Video",
    "DatabaseVideo",
    "NetworkVideo",
    "NetworkVideoContainer",
    "as_database_model",
    "as_domain_model",
    # Stores
    "VideoStore",
    "SQLiteVideoStore",
    "JsonFileVideoStore",
    "SnapshotPublisher",
    "Subscription",
    "Observation",
    # Sources
    "PlaylistSource",
    "HttpPlaylistSource",
    # Retry
    "RetryConfig",
    "retry_with_backoff",
    # Logging
    "configure_logging",
    # Exceptions
    "RepositoryError",
    "FetchError",
    "MalformedPayloadError",
    "StoreError",
]
