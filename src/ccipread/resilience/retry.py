"""
Retry strategies using Tenacity.

Only transport failures of the call primitive are retried. Contract
reverts and ERC-3668 protocol errors always propagate on the first try.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ccipread.core.exceptions import NetworkError
from ccipread.core.logging import get_logger

logger = get_logger("resilience.retry")


def is_transient_error(exception: BaseException) -> bool:
    """Check if exception is a transient network/infrastructure error."""
    if not isinstance(exception, NetworkError):
        return False
    if exception.is_rate_limited() or exception.is_server_error():
        return True
    if exception.status_code is not None:
        return False
    msg = str(exception).lower()
    return any(
        x in msg
        for x in [
            "timeout",
            "timed out",
            "connection",
            "network error",
        ]
    )


def _log_retry(retry_state: Any) -> None:
    logger.warning(
        f"Retrying RPC call after transient error (attempt {retry_state.attempt_number}): "
        f"{retry_state.outcome.exception()}"
    )


async def execute_with_retry(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    attempts: int = 3,
    wait_min: float = 0.5,
    wait_max: float = 8.0,
    **kwargs: Any,
) -> Any:
    """Execute an async function, retrying transient errors with exponential backoff."""
    async for attempt in AsyncRetrying(
        retry=retry_if_exception(is_transient_error),
        wait=wait_exponential(multiplier=wait_min, min=wait_min, max=wait_max),
        stop=stop_after_attempt(attempts),
        before_sleep=_log_retry,
        reraise=True,
    ):
        with attempt:
            return await func(*args, **kwargs)
