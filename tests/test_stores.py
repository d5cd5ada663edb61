"""
Tests for the local video stores.

Uses real SQLite and real files in a temp directory.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest
from conftest import assert_no_emission, make_video, next_emission

from devbyte_repository.exceptions import StoreError
from devbyte_repository.records import DatabaseVideo, as_database_model
from devbyte_repository.store import JsonFileVideoStore, SQLiteVideoStore


def rows(*urls: str) -> list[DatabaseVideo]:
    return as_database_model([make_video(url) for url in urls])


def broken_row(url: str) -> DatabaseVideo:
    """A row neither store can persist (title is not a string)."""
    return DatabaseVideo(url=url, title=object(), description="", updated="", thumbnail="")


class TestVideoStoreContract:
    """Behaviour shared by every store implementation."""

    async def test_empty_store(self, store) -> None:
        """A fresh store reads and replays an empty collection."""
        assert await store.get_all() == []

        async with store.subscribe() as subscription:
            assert await next_emission(subscription) == []

    async def test_replace_all_keeps_order(self, store) -> None:
        """Rows come back in the order they were written."""
        await store.replace_all(rows("c", "a", "b"))

        assert [r.url for r in await store.get_all()] == ["c", "a", "b"]

    async def test_replace_all_deletes_absent_rows(self, store) -> None:
        """Rows missing from the new list are removed."""
        await store.replace_all(rows("a", "b"))

        await store.replace_all(rows("b", "c"))

        assert [r.url for r in await store.get_all()] == ["b", "c"]

    async def test_replace_all_with_empty_list_clears(self, store) -> None:
        await store.replace_all(rows("a"))

        await store.replace_all([])

        assert await store.get_all() == []

    async def test_duplicate_urls_collapse(self, store) -> None:
        """The last duplicate wins, at the first duplicate's position."""
        first, second = rows("a", "b")
        updated = DatabaseVideo(**{**first.to_dict(), "title": "Updated"})

        await store.replace_all([first, second, updated])

        stored = await store.get_all()
        assert [(r.url, r.title) for r in stored] == [("a", "Updated"), ("b", second.title)]

    async def test_subscription_receives_each_commit(self, store) -> None:
        """Every committed write is pushed as one whole snapshot."""
        async with store.subscribe() as subscription:
            assert await next_emission(subscription) == []

            await store.replace_all(rows("a", "b"))
            assert [r.url for r in await next_emission(subscription)] == ["a", "b"]

            await store.replace_all(rows("b"))
            assert [r.url for r in await next_emission(subscription)] == ["b"]

    async def test_failed_write_keeps_previous_rows(self, store) -> None:
        """A failed write raises StoreError and publishes nothing."""
        await store.replace_all(rows("a"))

        async with store.subscribe() as subscription:
            await next_emission(subscription)

            with pytest.raises(StoreError) as exc_info:
                await store.replace_all([*rows("b"), broken_row("c")])

            assert exc_info.value.operation == "replace_all"
            await assert_no_emission(subscription)

        assert [r.url for r in await store.get_all()] == ["a"]

    async def test_get_all_never_sees_partial_write(self, store) -> None:
        """Reads during a large write return the old or the new rows, nothing between."""
        await store.replace_all(rows("a", "b"))
        bulk = rows(*(f"v{i}" for i in range(20000)))

        write = asyncio.create_task(store.replace_all(bulk))
        sizes = []
        while not write.done():
            sizes.append(len(await store.get_all()))
            await asyncio.sleep(0)
        await write

        assert set(sizes) <= {2, 20000}
        assert len(await store.get_all()) == 20000

    async def test_cancelled_write_keeps_store_consistent(self, store) -> None:
        """A write cancelled mid-flight leaves old or new rows, published as stored."""
        await store.replace_all(rows("a", "b"))
        bulk = rows(*(f"v{i}" for i in range(20000)))

        write = asyncio.create_task(store.replace_all(bulk))
        await asyncio.sleep(0.001)
        write.cancel()
        try:
            await write
        except asyncio.CancelledError:
            pass

        stored = await store.get_all()
        assert len(stored) in (2, 20000)
        async with store.subscribe() as subscription:
            assert await next_emission(subscription) == stored

        await store.replace_all(rows("z"))
        assert [r.url for r in await store.get_all()] == ["z"]

    async def test_close_ends_subscriptions(self, store) -> None:
        subscription = store.subscribe()
        await next_emission(subscription)

        await store.close()

        assert [item async for item in subscription] == []

    async def test_operations_after_close_fail(self, store) -> None:
        await store.close()

        with pytest.raises(StoreError):
            await store.replace_all(rows("a"))
        with pytest.raises(StoreError):
            await store.get_all()


class TestSQLiteVideoStore:
    """SQLite-specific behaviour."""

    async def test_create_in_memory(self) -> None:
        store = await SQLiteVideoStore.create()
        assert store._initialized is True
        await store.close()

    async def test_persists_across_reopen(self, tmp_path: Path) -> None:
        """Rows and their order survive closing the database."""
        db_path = tmp_path / "nested" / "videos.db"
        store = await SQLiteVideoStore.create(db_path)
        await store.replace_all(rows("z", "y"))
        await store.close()

        reopened = await SQLiteVideoStore.create(db_path)
        try:
            async with reopened.subscribe() as subscription:
                assert [r.url for r in await next_emission(subscription)] == ["z", "y"]
        finally:
            await reopened.close()

    async def test_initialize_failure_raises_store_error(self, tmp_path: Path) -> None:
        """A database path that cannot be opened fails with StoreError."""
        not_a_dir = tmp_path / "file"
        not_a_dir.write_text("")

        store = SQLiteVideoStore(not_a_dir / "videos.db")

        with pytest.raises(StoreError) as exc_info:
            await store.initialize()
        assert exc_info.value.operation == "initialize"

    async def test_not_initialized(self) -> None:
        store = SQLiteVideoStore()

        with pytest.raises(StoreError) as exc_info:
            await store.replace_all(rows("a"))
        assert "Not initialized" in exc_info.value.details["cause"]

    async def test_store_usable_after_failed_write(self, sqlite_store) -> None:
        """A rolled back write leaves the connection ready for the next one."""
        with pytest.raises(StoreError):
            await sqlite_store.replace_all([broken_row("x")])

        await sqlite_store.replace_all(rows("a"))

        assert [r.url for r in await sqlite_store.get_all()] == ["a"]


class TestJsonFileVideoStore:
    """JSON file specific behaviour."""

    async def test_file_format(self, json_store) -> None:
        """The file holds a versioned, ordered list of videos."""
        await json_store.replace_all(rows("b", "a"))

        data = json.loads(json_store.path.read_text(encoding="utf-8"))

        assert data["version"] == 1
        assert [v["url"] for v in data["videos"]] == ["b", "a"]

    async def test_persists_across_reopen(self, tmp_path: Path) -> None:
        path = tmp_path / "videos.json"
        store = await JsonFileVideoStore.create(path)
        await store.replace_all(rows("a", "b"))
        await store.close()

        reopened = await JsonFileVideoStore.create(path)
        try:
            assert [r.url for r in await reopened.get_all()] == ["a", "b"]
        finally:
            await reopened.close()

    async def test_failed_write_leaves_no_temp_files(self, json_store) -> None:
        await json_store.replace_all(rows("a"))

        with pytest.raises(StoreError):
            await json_store.replace_all([broken_row("b")])

        assert [p.name for p in json_store.path.parent.iterdir()] == ["videos.json"]

    async def test_corrupt_file_raises_store_error(self, tmp_path: Path) -> None:
        path = tmp_path / "videos.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreError) as exc_info:
            await JsonFileVideoStore.create(path)
        assert exc_info.value.operation == "parse"

    async def test_empty_file_is_empty_store(self, tmp_path: Path) -> None:
        path = tmp_path / "videos.json"
        path.write_text("", encoding="utf-8")

        store = await JsonFileVideoStore.create(path)

        assert await store.get_all() == []
        await store.close()
