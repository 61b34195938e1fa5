"""
Tests for the retry framework.
"""

from unittest.mock import MagicMock

import pytest

from catalogpdf.exceptions import RenderError, RetryError
from catalogpdf.retry import DEFAULT_RENDER_RETRY_POLICY, NO_RETRY_POLICY, RetryManager, RetryPolicy


@pytest.fixture
def manager():
    return RetryManager(sleep=lambda delay: None)


class TestRetryPolicy:
    """Tests for RetryPolicy configuration."""

    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 2
        assert policy.initial_delay == 1.0
        assert policy.jitter is True

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": -1},
            {"initial_delay": 0},
            {"initial_delay": 5.0, "max_delay": 1.0},
            {"exponential_base": 0.5},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_delay_without_jitter(self):
        policy = RetryPolicy(initial_delay=1.0, max_delay=5.0, jitter=False)
        assert [policy.get_delay(a) for a in range(4)] == [1.0, 2.0, 4.0, 5.0]

    def test_delay_with_jitter_bounds(self):
        policy = RetryPolicy(initial_delay=2.0, max_delay=100.0)
        for _ in range(20):
            assert 1.5 <= policy.get_delay(0) <= 2.5

    def test_should_retry_respects_max_attempts(self):
        policy = RetryPolicy(max_attempts=1)
        assert policy.should_retry(Exception("x"), 0) is True
        assert policy.should_retry(Exception("x"), 1) is False

    def test_retryable_exceptions(self):
        policy = RetryPolicy(retryable_exceptions=(RenderError,))
        assert policy.should_retry(RenderError("PDF generation", 503, ""), 0) is True
        assert policy.should_retry(ValueError("x"), 0) is False

    @pytest.mark.parametrize(
        "status,expected",
        [(None, True), (500, True), (503, True), (429, True), (400, False), (404, False)],
    )
    def test_default_render_policy_transient_only(self, status, expected):
        error = RenderError("PDF generation", status, "body")
        assert DEFAULT_RENDER_RETRY_POLICY.should_retry(error, 0) is expected

    def test_from_config(self):
        policy = RetryPolicy.from_config({"max_attempts": 4, "initial_delay": 0.5, "jitter": False})
        assert policy.max_attempts == 4
        assert policy.initial_delay == 0.5
        assert policy.should_retry(RenderError("Screenshot", 502, ""), 0) is True
        assert policy.should_retry(RenderError("Screenshot", 422, ""), 0) is False

    def test_from_empty_config(self):
        assert RetryPolicy.from_config(None).max_attempts == 2


class TestRetryManager:
    """Tests for RetryManager.execute_sync."""

    def test_success_first_try(self, manager):
        func = MagicMock(return_value=b"%PDF")
        assert manager.execute_sync(func, "html", name="render") == b"%PDF"
        func.assert_called_once_with("html")

    def test_retries_transient_then_succeeds(self, manager):
        func = MagicMock(side_effect=[RenderError("PDF generation", 503, "busy"), b"%PDF"])
        assert manager.execute_sync(func, name="render") == b"%PDF"
        assert func.call_count == 2

    def test_non_retryable_raised_unchanged(self, manager):
        error = RenderError("PDF generation", 400, "bad form")
        func = MagicMock(side_effect=error)
        with pytest.raises(RenderError) as exc_info:
            manager.execute_sync(func, name="render")
        assert exc_info.value is error
        func.assert_called_once()

    def test_exhausted_raises_retry_error(self, manager):
        func = MagicMock(side_effect=RenderError("PDF generation", 500, "boom"))
        with pytest.raises(RetryError, match="render failed after 3 attempts") as exc_info:
            manager.execute_sync(func, name="render")
        assert exc_info.value.details == {"attempts": 3}
        assert isinstance(exc_info.value.__cause__, RenderError)
        assert func.call_count == 3

    def test_no_retry_policy(self, manager):
        func = MagicMock(side_effect=RenderError("PDF generation", 500, "boom"))
        with pytest.raises(RenderError):
            manager.execute_sync(func, policy=NO_RETRY_POLICY)
        func.assert_called_once()

    def test_sleeps_between_attempts(self):
        delays = []
        manager = RetryManager(sleep=delays.append)
        policy = RetryPolicy(max_attempts=2, initial_delay=1.0, jitter=False)
        func = MagicMock(side_effect=[OSError("a"), OSError("b"), "ok"])
        assert manager.execute_sync(func, policy=policy) == "ok"
        assert delays == [1.0, 2.0]

    def test_kwargs_forwarded(self, manager):
        func = MagicMock(return_value=1)
        manager.execute_sync(func, "a", header="h", name="render")
        func.assert_called_once_with("a", header="h")
