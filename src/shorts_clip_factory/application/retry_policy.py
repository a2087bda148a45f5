from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


def retry(
    operation: Callable[[], T],
    retries: int,
    delay_sec: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    logger=None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``operation`` up to ``retries + 1`` times with a linear backoff.

    Only exceptions listed in ``retry_on`` are retried; anything else
    propagates immediately. The last error is re-raised once attempts run out.
    """
    attempt = 0
    while True:
        try:
            return operation()
        except retry_on as exc:
            if attempt >= retries:
                raise
            attempt += 1
            if logger is not None:
                logger.warning("retry.scheduled", attempt=attempt, retries=retries, error=str(exc))
            sleep(delay_sec * attempt)
