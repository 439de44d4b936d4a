# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/utils/retry.py

import functools
import logging
import time
from typing import Callable, Optional

log = logging.getLogger("addonctl")


class RetryError(RuntimeError):
    def __init__(self, operation: str, attempts: int, last_error: BaseException):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"{operation} failed after {attempts} attempt(s): {last_error}")


def retry(
    *,
    attempts: int,
    delay: float,
    backoff: float = 1.0,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable[[int, Exception], None]] = None,
):
    """
    Retry an idempotent cluster operation (server-side apply).

    attempts: total number of calls, at least 1
    delay: seconds before the second call, multiplied by ``backoff`` after each failure
    on_retry: callback(attempt, exception); defaults to a warning on the addonctl logger

    Exceptions outside ``retry_on`` propagate immediately. Exhaustion raises
    RetryError chained to the last failure.
    """
    attempts = max(1, attempts)

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            wait = delay
            last_exc: Optional[Exception] = None
            for attempt in range(1, attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    last_exc = exc
                    if attempt == attempts:
                        break
                    if on_retry:
                        on_retry(attempt, exc)
                    else:
                        log.warning("%s attempt %d/%d failed: %s", fn.__name__, attempt, attempts, exc)
                    if wait > 0:
                        time.sleep(wait)
                    wait *= backoff
            raise RetryError(fn.__name__, attempts, last_exc) from last_exc
        return wrapper
    return decorator
