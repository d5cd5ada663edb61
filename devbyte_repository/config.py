"""
Repository configuration.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path

from .network.http import DEFAULT_PLAYLIST_URL

STORE_BACKENDS = ("sqlite", "json")


@dataclass
class RepositoryConfig:
    """Configuration for ``VideosRepository.create()``.

    Environment Variables:
        DEVBYTES_PLAYLIST_URL: Playlist endpoint URL
        DEVBYTES_STORE_BACKEND: "sqlite" (default) or "json"
        DEVBYTES_DB_PATH: SQLite database path (default: :memory:)
        DEVBYTES_JSON_PATH: JSON store path (default: ~/.devbytes/videos.json)
        DEVBYTES_FETCH_TIMEOUT: Request timeout in seconds (default: 30)
    """

    playlist_url: str = DEFAULT_PLAYLIST_URL
    backend: str = "sqlite"
    db_path: str | Path = ":memory:"
    json_path: str | Path = Path.home() / ".devbytes" / "videos.json"
    fetch_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.backend not in STORE_BACKENDS:
            raise ValueError(
                f"Unknown store backend '{self.backend}', expected one of {STORE_BACKENDS}"
            )
        if not math.isfinite(self.fetch_timeout) or self.fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be a finite positive number, got {self.fetch_timeout}")

    @classmethod
    def from_env(cls) -> RepositoryConfig:
        """Create config from environment variables."""
        timeout_str = os.environ.get("DEVBYTES_FETCH_TIMEOUT", "30")
        try:
            fetch_timeout = float(timeout_str)
        except ValueError as e:
            raise ValueError(f"DEVBYTES_FETCH_TIMEOUT is not a number: {timeout_str!r}") from e

        return cls(
            playlist_url=os.environ.get("DEVBYTES_PLAYLIST_URL", DEFAULT_PLAYLIST_URL),
            backend=os.environ.get("DEVBYTES_STORE_BACKEND", "sqlite").lower(),
            db_path=os.environ.get("DEVBYTES_DB_PATH", ":memory:"),
            json_path=os.environ.get(
                "DEVBYTES_JSON_PATH", str(Path.home() / ".devbytes" / "videos.json")
            ),
            fetch_timeout=fetch_timeout,
        )
