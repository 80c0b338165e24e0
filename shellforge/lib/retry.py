from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ..errors import RetryableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay_s: float = 5.0


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, RetryableError)


def retry(
    fn: Callable[[], T],
    *,
    policy: RetryPolicy,
    what: str,
    should_retry: Callable[[BaseException], bool] = _is_retryable,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[int, BaseException], None]] = None,
) -> T:
    """Call fn until it succeeds or the policy is exhausted.

    Errors rejected by should_retry propagate immediately. After the last
    attempt the final error propagates unchanged.
    """

    attempts = max(1, policy.max_attempts)
    attempt = 1
    while True:
        try:
            return fn()
        except Exception as e:
            if not should_retry(e):
                raise
            if attempt >= attempts:
                logger.error("%s: all %d attempts failed (%s)", what, attempts, e)
                raise
            logger.warning(
                "%s: attempt %d/%d failed (%s); retrying in %ss",
                what,
                attempt,
                attempts,
                e,
                policy.delay_s,
            )
            if on_retry is not None:
                on_retry(attempt, e)
            sleep(policy.delay_s)
            attempt += 1
