"""Caller-side retry for repository refreshes.

``VideosRepository.refresh()`` never retries on its own. Callers that want
retries wrap it:

    >>> await retry_with_backoff(repository.refresh, config=RetryConfig(max_retries=3))
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from .exceptions import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry with exponential backoff."""

    max_retries: int = 3
    backoff_base: float = 1.0  # seconds
    backoff_max: float = 60.0  # cap
    backoff_multiplier: float = 2.0
    retryable_exceptions: tuple[type[Exception], ...] = (FetchError,)

    def delay_for(self, attempt: int) -> float:
        """Backoff delay before retrying after ``attempt`` (0-indexed)."""
        return min(self.backoff_base * (self.backoff_multiplier**attempt), self.backoff_max)


async def retry_with_backoff(
    fn: Callable[..., Coroutine[Any, Any, T]],
    *args: Any,
    config: RetryConfig | None = None,
    context_msg: str = "",
    **kwargs: Any,
) -> T:
    """Execute an async function, retrying retryable failures with backoff.

    Args:
        fn: Async callable to execute
        *args: Positional args for fn
        config: Retry configuration (uses defaults if None)
        context_msg: Extra context for log messages
        **kwargs: Keyword args for fn

    Returns:
        Result of fn

    Raises:
        Exception: The last exception once retries are exhausted, or the
            first non-retryable one
    """
    cfg = config or RetryConfig()
    ctx = f" [{context_msg}]" if context_msg else ""

    for attempt in range(cfg.max_retries + 1):
        try:
            result = await fn(*args, **kwargs)
        except cfg.retryable_exceptions as exc:
            if attempt >= cfg.max_retries:
                logger.error(
                    "RETRY_EXHAUSTED: attempt=%d/%d%s: %s",
                    attempt + 1,
                    cfg.max_retries + 1,
                    ctx,
                    exc,
                )
                raise

            delay = cfg.delay_for(attempt)
            logger.warning(
                "RETRYING: attempt=%d/%d delay=%.1fs%s: %s",
                attempt + 1,
                cfg.max_retries + 1,
                delay,
                ctx,
                exc,
            )
            await asyncio.sleep(delay)
        else:
            if attempt > 0:
                logger.warning(
                    "RETRY_RECOVERED: succeeded on attempt %d/%d%s",
                    attempt + 1,
                    cfg.max_retries + 1,
                    ctx,
                )
            return result

    # Unreachable, but satisfies type checker
    raise RuntimeError("retry_with_backoff exhausted without raising")  # pragma: no cover
