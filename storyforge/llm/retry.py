"""Retry utilities for synthesis calls.

Exponential backoff with jitter for transient provider failures.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from storyforge.llm.exceptions import ProviderError, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_retries: Maximum number of retry attempts.
        initial_delay: Initial delay in seconds.
        max_delay: Maximum delay between retries.
        exponential_base: Base for exponential backoff.
        jitter: Whether to add random jitter.
    """

    max_retries: int = 2
    initial_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True


async def with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: RetryConfig | None = None,
    **kwargs: Any,
) -> T:
    """Execute an async synthesis call, retrying transient failures.

    Rate limits and retryable provider errors (5xx) are retried.
    Authentication, policy and bad-request errors propagate immediately.

    Args:
        func: Async function to execute.
        *args: Positional arguments for func.
        config: Retry configuration.
        **kwargs: Keyword arguments for func.

    Returns:
        Result from the first successful call.

    Raises:
        The last exception if all retries fail.
    """
    config = config or RetryConfig()

    for attempt in range(config.max_retries + 1):
        try:
            return await func(*args, **kwargs)
        except RateLimitError as e:
            if attempt == config.max_retries:
                raise
            delay = _calculate_delay(attempt, config, e.retry_after)
        except ProviderError as e:
            if not e.is_retryable or attempt == config.max_retries:
                raise
            delay = _calculate_delay(attempt, config)
        logger.debug(f"Retrying synthesis call in {delay:.2f}s (attempt {attempt + 1})")
        await asyncio.sleep(delay)

    raise RuntimeError("Max retries exceeded without error")


def _calculate_delay(
    attempt: int,
    config: RetryConfig,
    retry_after: float | None = None,
) -> float:
    """Calculate delay for the next retry attempt.

    Args:
        attempt: Current attempt number (0-indexed).
        config: Retry configuration.
        retry_after: Optional server-specified retry delay.

    Returns:
        Delay in seconds.
    """
    delay = min(config.initial_delay * (config.exponential_base ** attempt), config.max_delay)

    if retry_after is not None:
        delay = max(delay, retry_after)

    if config.jitter:
        # Up to 25% extra
        delay += random.uniform(0, delay * 0.25)

    return delay
