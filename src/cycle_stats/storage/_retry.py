import logging
import time
from collections.abc import Callable
from typing import Any

from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from cycle_stats.storage.protocol import StoreUnavailableError

logger = logging.getLogger(__name__)


def storage_retry(
    label: str,
    *,
    attempts: int,
    initial_delay: float,
    max_delay: float,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Return a tenacity retry decorator for key-value store calls.

    Waits ``initial_delay * 2**(n-1)`` seconds between attempts, capped at
    ``max_delay``, and re-raises the last ``StoreUnavailableError``.
    """

    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning("Retrying %s (attempt %d): %s", label, retry_state.attempt_number, error)

    return retry(
        stop=stop_after_attempt(max(attempts, 1)),
        wait=wait_exponential(multiplier=initial_delay, max=max_delay),
        retry=retry_if_exception_type(StoreUnavailableError),
        before_sleep=_log_retry,
        reraise=True,
        sleep=sleep,
    )
