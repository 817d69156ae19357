"""Bounded retry wrapper for asynchronous operations."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryHook = Callable[[int, Exception], None]


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Retry budget and backoff schedule.

    ``delays`` is indexed by attempt number; attempts past the end of the
    schedule reuse its last value.
    """

    max_retries: int = 3
    delays: tuple[float, ...] = (1.0, 2.0, 4.0)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if any(delay < 0 for delay in self.delays):
            raise ValueError(f"Retry delays must be >= 0, got {self.delays!r}")

    def delay_for(self, attempt: int) -> float:
        if not self.delays:
            return 0.0
        return self.delays[min(attempt, len(self.delays) - 1)]


DEFAULT_RETRY_CONFIG = RetryConfig()


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    on_retry: RetryHook | None = None,
) -> T:
    """Await ``operation`` and retry failures up to ``config.max_retries`` times.

    Every ``Exception`` is treated as retryable. Once the budget is spent the
    last exception is re-raised unchanged. ``BaseException`` subclasses such as
    ``asyncio.CancelledError`` are never retried.
    """

    cfg = config or DEFAULT_RETRY_CONFIG
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as error:
            if attempt >= cfg.max_retries:
                if cfg.max_retries:
                    logger.warning(
                        "Operation failed after %d retries: %s",
                        cfg.max_retries,
                        error,
                    )
                raise

            if on_retry is not None:
                on_retry(attempt + 1, error)

            delay = cfg.delay_for(attempt)
            logger.debug(
                "Retrying after attempt %d failed (%s); sleeping %.3fs",
                attempt,
                error,
                delay,
            )
            if delay > 0:
                await asyncio.sleep(delay)

            attempt += 1
