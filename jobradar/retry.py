"""Retry decorator with exponential backoff for source and LLM calls."""
from __future__ import annotations

import functools
import random
import time
from typing import Any, Callable, Tuple, Type

from jobradar.log import get_logger

log = get_logger(__name__)

# HTTP statuses worth another attempt; other 4xx responses fail immediately.
RETRYABLE_STATUSES: frozenset[int] = frozenset({408, 425, 429, 500, 502, 503, 504})


def _status_of(exc: BaseException) -> int | None:
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


def is_retryable(exc: BaseException) -> bool:
    """False for HTTP errors whose status says a retry cannot help."""
    status = _status_of(exc)
    if status is None:
        return True
    return status in RETRYABLE_STATUSES


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] | None = None,
) -> Callable:
    """Decorator: retries the wrapped function with exponential backoff.

    Only exceptions matching ``retryable`` are retried, and of those, HTTP
    errors carrying a non-retryable status (e.g. 404) are re-raised at once.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, max_attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if attempt == max_attempts or not is_retryable(exc):
                        log.debug(
                            "%s giving up after %d attempt(s): %s",
                            fn.__qualname__,
                            attempt,
                            exc,
                        )
                        raise
                    delay = min(base_delay * (backoff_factor ** (attempt - 1)), max_delay)
                    if jitter:
                        delay *= 0.5 + random.random()
                    log.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        fn.__qualname__,
                        attempt,
                        max_attempts,
                        exc,
                        delay,
                    )
                    (sleep or time.sleep)(delay)
            raise AssertionError("unreachable")  # pragma: no cover

        return wrapper

    return decorator
