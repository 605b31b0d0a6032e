"""Retry with exponential backoff for classifier API calls."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_HTTP_CODES = {408, 429, 500, 502, 503, 504}
TRANSIENT_SDK_ERRORS = {
    "RateLimitError",
    "InternalServerError",
    "APIConnectionError",
    "APITimeoutError",
}


async def retry_async(
    fn: Callable[..., T],
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    label: str = "api_call",
    **kwargs,
) -> T:
    """Run a blocking SDK call in a worker thread, retrying transient failures.

    Non-retryable errors (auth, bad request) are raised immediately.
    """
    last_exc = None
    for attempt in range(max_retries + 1):
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except Exception as exc:
            last_exc = exc
            if not _is_retryable(exc) or attempt == max_retries:
                raise
            delay = min(base_delay * (2 ** attempt), max_delay)
            logger.warning(
                "%s failed (attempt %d/%d): %s. Retrying in %.1fs",
                label, attempt + 1, max_retries + 1, exc, delay,
            )
            await asyncio.sleep(delay)

    raise last_exc  # type: ignore[misc]


def _is_retryable(exc: Exception) -> bool:
    """Check if an exception is transient and worth retrying."""
    exc_type = type(exc).__name__

    # Anthropic and OpenAI SDKs share these class names
    if exc_type in TRANSIENT_SDK_ERRORS:
        return True
    if exc_type == "APIStatusError" and hasattr(exc, "status_code"):
        return exc.status_code in TRANSIENT_HTTP_CODES  # type: ignore[union-attr]

    if isinstance(exc, (ConnectionError, TimeoutError)):
        return True

    return False
