"""
Abstract video store interface.

Defines the contract that every local store must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..records import DatabaseVideo
from .observable import SnapshotPublisher, Subscription


class VideoStore(ABC):
    """Durable storage for the single collection of cached videos.

    Implementations must:
    - replay the current collection to every new subscriber
    - publish the full collection after every committed ``replace_all``
    - apply ``replace_all`` atomically, deleting rows absent from the new list
    - keep the order of the list given to ``replace_all``
    - raise ``StoreError`` for any storage failure
    """

    def __init__(self) -> None:
        self._publisher: SnapshotPublisher[DatabaseVideo] = SnapshotPublisher()

    def subscribe(self) -> Subscription[DatabaseVideo]:
        """Subscribe to the stored collection.

        The subscription yields the current rows first, then the full
        collection after each committed change.
        """
        return self._publisher.subscribe()

    @abstractmethod
    async def initialize(self) -> None:
        """Open the underlying storage and load the current rows."""
        pass

    @abstractmethod
    async def get_all(self) -> list[DatabaseVideo]:
        """Read the stored rows in their stored order."""
        pass

    @abstractmethod
    async def replace_all(self, videos: list[DatabaseVideo]) -> None:
        """Atomically replace the whole stored collection.

        Args:
            videos: New rows, in presentation order

        Raises:
            StoreError: If the write fails. The previous rows are kept.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release storage resources and end all subscriptions."""
        pass

    async def __aenter__(self) -> VideoStore:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
