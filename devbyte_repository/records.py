"""
Record types for the video playlist and the translations between them.

Three shapes of the same video exist:

- ``NetworkVideo``: what the playlist endpoint sends
- ``DatabaseVideo``: what the local store persists
- ``Video``: what consumers read

Consumers only ever get ``Video`` objects built from ``DatabaseVideo`` rows,
so the store stays the single source of truth for reads.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .exceptions import MalformedPayloadError

SHORT_DESCRIPTION_LENGTH = 200

_REQUIRED_FIELDS = ("title", "description", "url", "updated", "thumbnail")


def smart_truncate(text: str, length: int, suffix: str = "...") -> str:
    """Truncate text at a word boundary so the result fits in ``length`` chars."""
    if len(text) <= length:
        return text
    cut = text[: max(length - len(suffix), 0)]
    head, sep, _ = cut.rpartition(" ")
    if sep and head:
        cut = head
    return cut.rstrip() + suffix


@dataclass(frozen=True)
class Video:
    """A video as exposed to consumers."""

    url: str
    title: str
    description: str
    updated: str
    thumbnail: str
    closed_captions: str | None = None

    @property
    def short_description(self) -> str:
        return smart_truncate(self.description, SHORT_DESCRIPTION_LENGTH)


@dataclass(frozen=True)
class DatabaseVideo:
    """A video row owned by a local store. ``url`` is the primary key."""

    url: str
    title: str
    description: str
    updated: str
    thumbnail: str
    closed_captions: str | None = None

    def to_row(self, position: int) -> tuple[Any, ...]:
        """Serialize to an SQL parameter tuple, see ``ROW_COLUMNS``."""
        return (
            self.url,
            position,
            self.title,
            self.description,
            self.updated,
            self.thumbnail,
            self.closed_captions,
        )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> DatabaseVideo:
        """Deserialize from a row selected with ``ROW_COLUMNS``."""
        url, _position, title, description, updated, thumbnail, closed_captions = row
        return cls(
            url=url,
            title=title,
            description=description,
            updated=updated,
            thumbnail=thumbnail,
            closed_captions=closed_captions,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "updated": self.updated,
            "thumbnail": self.thumbnail,
            "closed_captions": self.closed_captions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DatabaseVideo:
        return cls(
            url=data["url"],
            title=data["title"],
            description=data["description"],
            updated=data["updated"],
            thumbnail=data["thumbnail"],
            closed_captions=data.get("closed_captions"),
        )


# Column order shared by DatabaseVideo.to_row() / from_row()
ROW_COLUMNS = (
    "url",
    "position",
    "title",
    "description",
    "updated",
    "thumbnail",
    "closed_captions",
)


@dataclass(frozen=True)
class NetworkVideo:
    """A video as sent by the playlist endpoint."""

    title: str
    description: str
    url: str
    updated: str
    thumbnail: str
    closed_captions: str | None = None

    @classmethod
    def from_json(cls, data: Any, index: int = 0) -> NetworkVideo:
        """Parse one entry of the ``videos`` array.

        Raises:
            MalformedPayloadError: If the entry is not an object or a field
                is missing or not a string.
        """
        where = f"videos[{index}]"
        if not isinstance(data, dict):
            raise MalformedPayloadError(where, "expected an object")

        for name in _REQUIRED_FIELDS:
            if name not in data:
                raise MalformedPayloadError(f"{where}.{name}", "missing field")
            if not isinstance(data[name], str):
                raise MalformedPayloadError(f"{where}.{name}", "expected a string")

        closed_captions = data.get("closedCaptions")
        if closed_captions is not None and not isinstance(closed_captions, str):
            raise MalformedPayloadError(f"{where}.closedCaptions", "expected a string")

        return cls(
            title=data["title"],
            description=data["description"],
            url=data["url"],
            updated=data["updated"],
            thumbnail=data["thumbnail"],
            closed_captions=closed_captions,
        )


@dataclass(frozen=True)
class NetworkVideoContainer:
    """The top-level playlist payload: ``{"videos": [...]}``."""

    videos: tuple[NetworkVideo, ...]

    @classmethod
    def from_json(cls, payload: Any) -> NetworkVideoContainer:
        if not isinstance(payload, dict):
            raise MalformedPayloadError("$", "expected an object")
        if "videos" not in payload:
            raise MalformedPayloadError("videos", "missing field")
        entries = payload["videos"]
        if not isinstance(entries, list):
            raise MalformedPayloadError("videos", "expected an array")
        return cls(videos=tuple(NetworkVideo.from_json(entry, i) for i, entry in enumerate(entries)))


def as_database_model(
    videos: NetworkVideoContainer | Iterable[NetworkVideo],
) -> list[DatabaseVideo]:
    """Translate network videos into store rows, keeping their order."""
    if isinstance(videos, NetworkVideoContainer):
        videos = videos.videos
    return [
        DatabaseVideo(
            url=video.url,
            title=video.title,
            description=video.description,
            updated=video.updated,
            thumbnail=video.thumbnail,
            closed_captions=video.closed_captions,
        )
        for video in videos
    ]


def as_domain_model(rows: Iterable[DatabaseVideo]) -> list[Video]:
    """Translate store rows into domain videos, keeping their order."""
    return [
        Video(
            url=row.url,
            title=row.title,
            description=row.description,
            updated=row.updated,
            thumbnail=row.thumbnail,
            closed_captions=row.closed_captions,
        )
        for row in rows
    ]


def dedupe_by_url(rows: Iterable[DatabaseVideo]) -> list[DatabaseVideo]:
    """Collapse rows sharing a url.

    The last occurrence wins and takes the position of the first one.
    """
    by_url: dict[str, DatabaseVideo] = {}
    for row in rows:
        by_url[row.url] = row
    return list(by_url.values())
