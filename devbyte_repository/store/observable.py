"""
Publish/subscribe channel for whole-collection snapshots.

A store owns one ``SnapshotPublisher``. Every committed change publishes the
complete new collection; subscribers receive it as a single item, so they
never observe a partially applied write.

Example:
    >>> publisher = SnapshotPublisher[int]()
    >>> async with publisher.subscribe() as subscription:
    ...     current = await anext(subscription)  # replayed on subscribe
    ...     publisher.publish([1, 2, 3])
    ...     assert await anext(subscription) == [1, 2, 3]
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class Subscription(Generic[T]):
    """A live view over a publisher's snapshots.

    Iterating yields the snapshot current at subscription time, then the
    latest snapshot after each committed change. A subscriber that falls
    behind skips intermediate snapshots and only ever receives the newest
    one. Iteration ends after ``close()`` or when the publisher is closed.
    """

    def __init__(self, publisher: SnapshotPublisher[T]) -> None:
        self._publisher = publisher
        self._pending: tuple[T, ...] | None = None
        self._ready = asyncio.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _push(self, snapshot: tuple[T, ...]) -> None:
        if not self._closed:
            # Overwrite any unread snapshot
            self._pending = snapshot
            self._ready.set()

    def _end(self) -> None:
        if not self._closed:
            self._closed = True
            self._ready.set()

    def close(self) -> None:
        """Unsubscribe and drop any unread snapshot. Safe to call more than once."""
        if self._closed:
            return
        self._publisher._discard(self)
        self._pending = None
        self._end()

    def map(self, fn: Callable[[list[T]], R]) -> Observation[R]:
        """Return an observation applying ``fn`` to every snapshot."""
        return Observation(self, fn)

    def __aiter__(self) -> Subscription[T]:
        return self

    async def __anext__(self) -> list[T]:
        while self._pending is None:
            if self._closed:
                raise StopAsyncIteration
            self._ready.clear()
            await self._ready.wait()
        snapshot, self._pending = self._pending, None
        return list(snapshot)

    async def __aenter__(self) -> Subscription[T]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


class Observation(Generic[R]):
    """A subscription whose snapshots are passed through a mapping function."""

    def __init__(self, subscription: Subscription[Any], fn: Callable[[list[Any]], R]) -> None:
        self._subscription = subscription
        self._fn = fn

    @property
    def closed(self) -> bool:
        return self._subscription.closed

    def close(self) -> None:
        self._subscription.close()

    def __aiter__(self) -> Observation[R]:
        return self

    async def __anext__(self) -> R:
        snapshot = await self._subscription.__anext__()
        return self._fn(snapshot)

    async def __aenter__(self) -> Observation[R]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()


class SnapshotPublisher(Generic[T]):
    """Holds the current snapshot and fans it out to subscriptions."""

    def __init__(self, initial: Iterable[T] = ()) -> None:
        self._current: tuple[T, ...] = tuple(initial)
        self._subscriptions: set[Subscription[T]] = set()

    @property
    def current(self) -> list[T]:
        return list(self._current)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self) -> Subscription[T]:
        """Create a subscription primed with the current snapshot."""
        subscription = Subscription(self)
        subscription._push(self._current)
        self._subscriptions.add(subscription)
        return subscription

    def publish(self, items: Iterable[T]) -> None:
        """Replace the current snapshot and push it to every subscriber."""
        self._current = tuple(items)
        for subscription in list(self._subscriptions):
            subscription._push(self._current)
        logger.debug(
            f"Published snapshot of {len(self._current)} items "
            f"to {len(self._subscriptions)} subscribers"
        )

    def close(self) -> None:
        """End every subscription."""
        subscriptions, self._subscriptions = self._subscriptions, set()
        for subscription in subscriptions:
            subscription._end()

    def _discard(self, subscription: Subscription[T]) -> None:
        self._subscriptions.discard(subscription)
