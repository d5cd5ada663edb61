"""
JSON file video store.

Keeps the cached playlist as one JSON document:

    {"version": 1, "videos": [{...}, ...]}

Writes go to a temp file in the same directory which is then renamed over
the target, so a failed write never leaves a half-written file behind.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from ..exceptions import StoreError
from ..records import DatabaseVideo, dedupe_by_url
from .base import VideoStore

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class JsonFileVideoStore(VideoStore):
    """Video store persisted to a single JSON file."""

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self.path = Path(path).expanduser()
        self._initialized = False
        self._lock = asyncio.Lock()

    @classmethod
    async def create(cls, path: str | Path) -> JsonFileVideoStore:
        """Create and initialize a JSON file store."""
        store = cls(path)
        await store.initialize()
        return store

    async def initialize(self) -> None:
        if self._initialized:
            return

        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
        except OSError as e:
            raise StoreError("initialize", str(self.path), e) from e

        rows = await self._read()
        self._publisher.publish(rows)
        self._initialized = True
        logger.info(f"JSON video store initialized: {self.path} ({len(rows)} videos)")

    async def close(self) -> None:
        self._publisher.close()
        self._initialized = False

    async def get_all(self) -> list[DatabaseVideo]:
        self._require_initialized("get_all")
        async with self._lock:
            return await self._read()

    async def replace_all(self, videos: list[DatabaseVideo]) -> None:
        self._require_initialized("replace_all")
        rows = dedupe_by_url(videos)

        async with self._lock:
            try:
                await self._write_atomic(
                    {"version": FORMAT_VERSION, "videos": [row.to_dict() for row in rows]}
                )
            except asyncio.CancelledError:
                # The rename may already have happened
                stored = await self._read()
                if stored != self._publisher.current:
                    self._publisher.publish(stored)
                logger.warning(f"replace_all cancelled, {len(stored)} videos stored")
                raise
            self._publisher.publish(rows)

        logger.debug(f"Replaced stored videos with {len(rows)} rows")

    def _require_initialized(self, operation: str) -> None:
        if not self._initialized:
            raise StoreError(operation, str(self.path), RuntimeError("Not initialized"))

    async def _read(self) -> list[DatabaseVideo]:
        try:
            if not await aiofiles.os.path.exists(self.path):
                return []
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            raise StoreError("read", str(self.path), e) from e

        if not content.strip():
            return []

        try:
            data = json.loads(content)
            return [DatabaseVideo.from_dict(item) for item in data.get("videos", [])]
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError) as e:
            raise StoreError("parse", str(self.path), e) from e

    async def _write_atomic(self, data: dict[str, Any]) -> None:
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=".tmp_",
            suffix=".json",
        )
        try:
            os.close(fd)
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(data, indent=2))
                await f.flush()
                os.fsync(f.fileno())

            # The rename runs in a worker thread and finishes even if we are
            # cancelled, so wait for it before the caller re-reads the file
            rename = asyncio.ensure_future(aiofiles.os.replace(temp_path, self.path))
            try:
                await asyncio.shield(rename)
            except asyncio.CancelledError:
                await asyncio.wait([rename])
                raise
        except asyncio.CancelledError:
            await _discard(temp_path)
            raise
        except Exception as e:
            await _discard(temp_path)
            logger.error(f"Failed to write {self.path}: {e}")
            raise StoreError("replace_all", str(self.path), e) from e


async def _discard(temp_path: str) -> None:
    try:
        await aiofiles.os.remove(temp_path)
    except OSError:
        pass
