"""Unit tests for the transient-failure retry helper."""

import pytest

from pos.application.retry import run_with_retry
from pos.domain.exceptions import ConflictError, TransientStoreError


class _Flaky:

    def __init__(self, failures: int, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error or TransientStoreError("lock timeout")
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class TestRunWithRetry:

    def test_succeeds_first_time(self):
        op = _Flaky(0)
        assert run_with_retry(op, backoff_seconds=0) == "ok"
        assert op.calls == 1

    def test_retries_transient_failures(self):
        op = _Flaky(2)
        assert run_with_retry(op, attempts=3, backoff_seconds=0) == "ok"
        assert op.calls == 3

    def test_gives_up_after_attempts(self):
        op = _Flaky(5)
        with pytest.raises(TransientStoreError):
            run_with_retry(op, attempts=3, backoff_seconds=0)
        assert op.calls == 3

    def test_other_errors_are_not_retried(self):
        op = _Flaky(1, ConflictError("already cancelled"))
        with pytest.raises(ConflictError):
            run_with_retry(op, attempts=3, backoff_seconds=0)
        assert op.calls == 1

    def test_transient_error_is_flagged_retryable(self):
        assert TransientStoreError.retryable is True
        assert ConflictError.retryable is False

    def test_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            run_with_retry(lambda: None, attempts=0)
