"""
Tests for the fixed-count retry helper.
"""

import pytest

from simplifyhr.services.retry import RetryExhaustedError, call_with_retries


class Flaky:
    def __init__(self, failures: int, error=RuntimeError):
        self.failures = failures
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(f"boom {self.calls}")
        return "ok"


def test_succeeds_after_failures_with_linear_backoff():
    delays = []
    func = Flaky(failures=2)

    assert call_with_retries(func, attempts=3, base_delay=1.5, sleep=delays.append) == "ok"
    assert func.calls == 3
    assert delays == [1.5, 3.0]


def test_exhausted_after_all_attempts():
    delays = []
    func = Flaky(failures=5)

    with pytest.raises(RetryExhaustedError) as exc:
        call_with_retries(func, attempts=3, base_delay=1.0, sleep=delays.append)

    assert func.calls == 3
    assert delays == [1.0, 2.0]
    assert exc.value.attempts == 3
    assert str(exc.value.last_error) == "boom 3"


def test_other_exceptions_propagate_immediately():
    func = Flaky(failures=1, error=KeyError)

    with pytest.raises(KeyError):
        call_with_retries(func, attempts=3, retry_on=(RuntimeError,), sleep=lambda s: None)
    assert func.calls == 1


def test_attempts_must_be_positive():
    with pytest.raises(ValueError):
        call_with_retries(lambda: 1, attempts=0)


def test_exhausted_error_chains_last_failure():
    func = Flaky(failures=2, error=ConnectionError)

    with pytest.raises(RetryExhaustedError) as exc:
        call_with_retries(func, attempts=2, retry_on=(ConnectionError,), sleep=lambda s: None)

    assert isinstance(exc.value.__cause__, ConnectionError)
    assert func.calls == 2
