"""
Local video stores.

Every store keeps the single cached playlist collection, replays it to new
subscribers and publishes the whole collection after each committed write.

Example:
    >>> from devbyte_repository.store import SQLiteVideoStore
    >>> store = await SQLiteVideoStore.create("videos.db")
    >>> async with store.subscribe() as subscription:
    ...     rows = await anext(subscription)
"""

from .base import VideoStore
from .json_file import JsonFileVideoStore
from .observable import Observation, SnapshotPublisher, Subscription
from .sqlite import SQLiteVideoStore

__all__ = [
    # Interface
    "VideoStore",
    # Implementations
    "SQLiteVideoStore",
    "JsonFileVideoStore",
    # Publish/subscribe
    "SnapshotPublisher",
    "Subscription",
    "Observation",
]
