"""Retry a provider call when the provider reports it is rate limiting us."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from .errors import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RATE_LIMIT_RETRIES = 2
RATE_LIMIT_BACKOFF = 5.0  # seconds


async def call_with_retry(
    fn: Callable[..., Awaitable[T]],
    *args: Any,
    retries: int = RATE_LIMIT_RETRIES,
    delay: float = RATE_LIMIT_BACKOFF,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    **kwargs: Any,
) -> T:
    """Await ``fn(*args, **kwargs)``, retrying only on rate-limit errors.

    A ``ProviderError`` with a 429 status is retried after a fixed ``delay``
    up to ``retries`` times. Anything else, or the last rate-limit error,
    is re-raised at once.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await fn(*args, **kwargs)
        except ProviderError as exc:
            if not exc.is_rate_limited or attempt > retries:
                raise
            logger.warning(
                "Provider rate limit hit (attempt %d/%d), retrying in %.1fs",
                attempt,
                retries + 1,
                delay,
            )
            await sleep(delay)
