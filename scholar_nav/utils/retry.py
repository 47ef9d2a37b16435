"""Exponential backoff for Semantic Scholar requests.

The public API answers bursts with 429 (sometimes carrying Retry-After) and
has occasional 5xx blips; both are worth another attempt. Any other 4xx means
the request itself is wrong and is raised immediately.
"""

from __future__ import annotations

import asyncio
import functools
import random
from typing import Any, Callable, TypeVar

import httpx

from scholar_nav.utils.logging import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def should_retry(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


def retry_after_seconds(exc: BaseException) -> float | None:
    """Server-requested wait from a Retry-After header in seconds, if any."""
    if not isinstance(exc, httpx.HTTPStatusError):
        return None
    value = exc.response.headers.get("Retry-After")
    try:
        return max(float(value), 0.0) if value is not None else None
    except ValueError:
        # HTTP-date form; fall back to computed backoff.
        return None


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
    return delay + random.uniform(0, delay * 0.5)


def async_retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    retry_if: Callable[[BaseException], bool] = should_retry,
) -> Callable[[F], F]:
    """Retry an async callable while ``retry_if`` accepts the raised exception."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as exc:
                    if not retry_if(exc) or attempt >= max_attempts:
                        raise
                    requested = retry_after_seconds(exc)
                    delay = (
                        min(requested, max_delay)
                        if requested is not None
                        else backoff_delay(attempt, base_delay, max_delay)
                    )
                    logger.warning(
                        "retry_attempt",
                        func=func.__name__,
                        attempt=attempt,
                        delay=round(delay, 2),
                        error=str(exc),
                    )
                    await asyncio.sleep(delay)
                    attempt += 1

        return wrapper  # type: ignore[return-value]

    return decorator
