"""
Abstract playlist source interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..records import NetworkVideo


class PlaylistSource(ABC):
    """Remote source of the full video playlist.

    ``fetch_collection`` must be idempotent and return the complete current
    playlist in presentation order, never a delta.
    """

    @abstractmethod
    async def fetch_collection(self) -> list[NetworkVideo]:
        """Fetch the whole playlist.

        Raises:
            FetchError: On transport failure, timeout or malformed payload
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
        pass
