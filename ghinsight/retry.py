"""Retrying of API operations with exponential backoff."""

from __future__ import annotations

import logging
from asyncio import sleep
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ghinsight.errors import NonRetryableError, RateLimitError, RetryableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRY_COUNT = 15
RATE_LIMIT_BASE_DELAY_MS = 1000
RETRYABLE_BASE_DELAY_MS = 500
_MAX_DELAY_MS = 2**64 - 1


def _backoff_seconds(base_ms: int, attempt: int) -> float:
    """Return the delay before retry number ``attempt`` (counted from 1)."""
    delay_ms = min(base_ms * 2 ** (attempt - 1), _MAX_DELAY_MS)
    return delay_ms / 1000


async def retry_with_backoff(
    operation_name: str,
    max_retry_count: int | None,
    operation: Callable[[], Awaitable[T]],
) -> T:
    """Run ``operation`` until it succeeds, retrying transient failures.

    Rate-limit failures back off from one second, other retryable failures
    from half a second, doubling on each attempt. Non-retryable failures and
    failures after the last retry are raised unchanged.
    """
    max_retries = DEFAULT_MAX_RETRY_COUNT if max_retry_count is None else max_retry_count
    attempt = 0

    while True:
        try:
            result = await operation()
        except NonRetryableError as exc:
            logger.warning(
                "Operation %s returned non-retryable error, failing immediately: %s",
                operation_name,
                exc,
            )
            raise
        except (RateLimitError, RetryableError) as exc:
            logger.warning(
                "Operation %s failed on attempt %d: %s", operation_name, attempt + 1, exc
            )
            rate_limited = isinstance(exc, RateLimitError)
            kind = "Rate limit" if rate_limited else "Retryable error"
            if attempt >= max_retries:
                logger.warning(
                    "%s retries exhausted for %s after %d attempts",
                    kind,
                    operation_name,
                    attempt + 1,
                )
                raise
            attempt += 1
            base = RATE_LIMIT_BASE_DELAY_MS if rate_limited else RETRYABLE_BASE_DELAY_MS
            delay = _backoff_seconds(base, attempt)
            logger.warning(
                "%s for %s, attempt %d/%d, backing off for %.3fs",
                kind,
                operation_name,
                attempt,
                max_retries,
                delay,
            )
            await sleep(delay)
        else:
            logger.debug("Operation %s succeeded on attempt %d", operation_name, attempt + 1)
            return result