"""
Shared test configuration and fixtures.

Provides a scriptable in-process playlist source so repository tests never
touch the network, plus initialized SQLite and JSON stores.
"""

import asyncio
import logging
from pathlib import Path

import pytest

from devbyte_repository.exceptions import FetchError
from devbyte_repository.network import PlaylistSource
from devbyte_repository.records import NetworkVideo
from devbyte_repository.store import JsonFileVideoStore, SQLiteVideoStore

logger = logging.getLogger(__name__)


def make_video(url: str, title: str = "", **fields) -> NetworkVideo:
    """Build a network video with filler values for unspecified fields."""
    return NetworkVideo(
        title=title or f"Title {url}",
        description=fields.get("description", f"Description of {url}"),
        url=url,
        updated=fields.get("updated", "2018-06-07T17:09:43+00:00"),
        thumbnail=fields.get("thumbnail", f"https://img.example.com/{url}.jpg"),
        closed_captions=fields.get("closed_captions"),
    )


async def next_emission(observation, timeout: float = 1.0):
    """Await the next emission, failing instead of hanging."""
    return await asyncio.wait_for(anext(observation), timeout)


async def assert_no_emission(observation, timeout: float = 0.05) -> None:
    """Assert nothing is emitted within ``timeout`` seconds."""
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(anext(observation), timeout)


class FakePlaylistSource(PlaylistSource):
    """
    Playlist source for testing without network access.

    Each ``fetch_collection`` call consumes the next scripted response;
    the last one is repeated. A response that is an exception is raised.
    """

    def __init__(self, *responses):
        self.url = "fake://devbytes"
        self._responses = list(responses) or [[]]
        self.calls = 0
        self.closed = False

    def script(self, *responses) -> None:
        self._responses = list(responses)

    async def fetch_collection(self) -> list[NetworkVideo]:
        self.calls += 1
        response = self._responses[0] if len(self._responses) == 1 else self._responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return list(response)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_source():
    """Fixture providing an empty scripted playlist source."""
    return FakePlaylistSource()


@pytest.fixture
def timeout_error():
    """A fetch failure as raised by a timed out request."""
    return FetchError("Playlist request timed out after 30.0s", url="fake://devbytes")


@pytest.fixture
async def sqlite_store():
    """Fixture providing an initialized in-memory SQLite store."""
    store = await SQLiteVideoStore.create(":memory:")
    yield store
    await store.close()


@pytest.fixture
async def json_store(tmp_path: Path):
    """Fixture providing an initialized JSON file store in a temp directory."""
    store = await JsonFileVideoStore.create(tmp_path / "cache" / "videos.json")
    yield store
    await store.close()


@pytest.fixture(params=["sqlite", "json"])
async def store(request, tmp_path: Path):
    """Fixture running a test against every store implementation."""
    if request.param == "sqlite":
        store = await SQLiteVideoStore.create(tmp_path / "videos.db")
    else:
        store = await JsonFileVideoStore.create(tmp_path / "videos.json")
    yield store
    await store.close()
