"""
Name: Durable Write Retry Unit Tests

Responsibilities:
  - Transient vs permanent I/O error classification
  - tenacity decorator retries only transient failures
"""

import errno

import pytest

from access_engine.infrastructure.services.retry import (
    create_retry_decorator,
    is_transient_error,
)


@pytest.mark.unit
class TestIsTransientError:
    @pytest.mark.parametrize(
        "exc",
        [
            TimeoutError("slow disk"),
            OSError(errno.EAGAIN, "try again"),
            OSError(errno.EIO, "io"),
            OSError("ad-hoc"),
        ],
    )
    def test_transient(self, exc):
        assert is_transient_error(exc) is True

    @pytest.mark.parametrize(
        "exc",
        [
            PermissionError(errno.EACCES, "denied"),
            IsADirectoryError(errno.EISDIR, "dir"),
            FileNotFoundError(errno.ENOENT, "missing"),
            OSError(errno.EBADF, "bad fd"),
            ValueError("not io"),
        ],
    )
    def test_permanent(self, exc):
        assert is_transient_error(exc) is False


@pytest.mark.unit
class TestCreateRetryDecorator:
    def test_retries_transient_then_succeeds(self):
        calls = {"n": 0}

        @create_retry_decorator(max_attempts=3, base_delay=0, max_delay=0.01)
        def flaky():
            calls["n"] += 1
            if calls["n"] < 3:
                raise OSError(errno.EAGAIN, "busy")
            return "ok"

        assert flaky() == "ok"
        assert calls["n"] == 3

    def test_permanent_error_fails_fast(self):
        calls = {"n": 0}

        @create_retry_decorator(max_attempts=3, base_delay=0, max_delay=0.01)
        def broken():
            calls["n"] += 1
            raise PermissionError(errno.EACCES, "denied")

        with pytest.raises(PermissionError):
            broken()
        assert calls["n"] == 1

    def test_reraises_after_last_attempt(self):
        @create_retry_decorator(max_attempts=2, base_delay=0, max_delay=0.01)
        def always_busy():
            raise TimeoutError("still busy")

        with pytest.raises(TimeoutError):
            always_busy()

    @pytest.mark.parametrize(
        "kwargs",
        [{"max_attempts": 0}, {"base_delay": -1}, {"max_delay": 0}],
    )
    def test_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            create_retry_decorator(**kwargs)
