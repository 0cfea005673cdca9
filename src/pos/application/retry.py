"""Retry a whole use case after a transient store failure.

Only ``TransientStoreError`` is retried: the failed attempt rolled back
completely, so running the operation again cannot double-apply anything.
Every other error propagates on the first attempt.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from pos.domain.exceptions import TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3


def run_with_retry(
    operation: Callable[[], T],
    attempts: int = DEFAULT_ATTEMPTS,
    backoff_seconds: float = 0.05,
) -> T:
    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except TransientStoreError as exc:
            if attempt == attempts:
                raise
            logger.warning(
                "transient_store_failure_retry",
                extra={"attempt": attempt, "max_attempts": attempts, "reason": str(exc)},
            )
            time.sleep(backoff_seconds * attempt)
    raise AssertionError("unreachable")
