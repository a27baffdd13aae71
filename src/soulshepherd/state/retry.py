from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff and no jitter.

    The wait before retry n (1-based) is base_delay * 2 ** (n - 1), so the
    defaults wait 0.1s then 0.2s across three attempts.
    """

    max_attempts: int = 3
    base_delay: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")


def _log_attempt(description: str, policy: RetryPolicy) -> Callable[[RetryCallState], None]:
    def before_sleep(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        delay = state.next_action.sleep if state.next_action else 0.0
        logger.warning(
            "%s failed (attempt %d/%d): %s; retrying in %.2fs",
            description,
            state.attempt_number,
            policy.max_attempts,
            exc,
            delay,
        )

    return before_sleep


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = RetryPolicy(),
    *,
    sleep: Sleep = asyncio.sleep,
    description: str = "operation",
) -> T:
    """Run an async operation, retrying any exception per policy.

    Returns the operation's result, or re-raises the error of the final
    attempt once the attempts are exhausted.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(multiplier=policy.base_delay, min=0),
        retry=retry_if_exception_type(Exception),
        before_sleep=_log_attempt(description, policy),
        reraise=True,
        sleep=sleep,
    )

    async def attempt() -> T:
        # tenacity only awaits coroutine functions, not callables returning awaitables
        return await operation()

    return await retrying(attempt)
