from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float, max_delay: float | None = None) -> float:
    """Delay before retry number `attempt` (1-based): base, 2*base, 4*base... capped."""
    delay = base_delay * (2 ** max(attempt - 1, 0))
    if max_delay is not None:
        delay = min(delay, max_delay)
    return delay


def retry_with_backoff(
    fn: Callable[[], T],
    *,
    attempts: int,
    base_delay: float,
    max_delay: float | None = None,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    should_retry: Optional[Callable[[BaseException], bool]] = None,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "operation",
) -> T:
    """
    Runs `fn` up to `attempts` times. Only exceptions in `retry_on` (and
    accepted by `should_retry`, when given) are retried; the last one is
    re-raised once attempts run out.
    """
    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as exc:
            if attempt >= attempts or (should_retry is not None and not should_retry(exc)):
                raise
            delay = backoff_delay(attempt, base_delay, max_delay)
            log.warning("retry label=%s attempt=%s/%s wait=%.2f error=%s", label, attempt, attempts, delay, exc)
            sleep(delay)

    raise AssertionError("unreachable")
