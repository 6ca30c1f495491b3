"""Test retry policy and backoff"""

from unittest.mock import Mock, call

import pytest

from show_sync.core.exceptions import RetryExhaustedError
from show_sync.sync.retry import RetryPolicy


class TestRetryPolicy:
    """Test RetryPolicy.run() and its backoff schedule"""

    def test_backoff_schedule_doubles(self):
        """Delays double between attempts and none follows the last one"""
        sleep = Mock()
        policy = RetryPolicy(attempts=4, initial_delay=0.1, max_delay=0.8, sleep=sleep)
        operation = Mock(side_effect=ConnectionError("down"))

        with pytest.raises(RetryExhaustedError) as exc_info:
            policy.run(operation)

        assert operation.call_count == 4
        assert sleep.call_args_list == [call(0.1), call(0.2), call(0.4)]
        assert exc_info.value.attempts == 4

    def test_delays_are_capped(self):
        policy = RetryPolicy(attempts=6, initial_delay=1.0, max_delay=3.0)
        assert policy.delays() == [1.0, 2.0, 3.0, 3.0, 3.0]

    def test_success_on_first_attempt_does_not_sleep(self):
        """An empty result is a success, not a reason to retry"""
        sleep = Mock()
        policy = RetryPolicy(attempts=5, initial_delay=0.1, max_delay=1.0, sleep=sleep)
        operation = Mock(return_value="")

        assert policy.run(operation) == ""
        operation.assert_called_once()
        sleep.assert_not_called()

    def test_success_after_failures(self):
        sleep = Mock()
        policy = RetryPolicy(attempts=5, initial_delay=0.1, max_delay=1.0, sleep=sleep)
        operation = Mock(side_effect=[TimeoutError(), TimeoutError(), "media-1"])

        assert policy.run(operation) == "media-1"
        assert operation.call_count == 3
        assert sleep.call_args_list == [call(0.1), call(0.2)]

    def test_exhausted_error_chains_last_error(self):
        policy = RetryPolicy(attempts=2, initial_delay=0, max_delay=0, sleep=Mock())
        last = ValueError("second")
        operation = Mock(side_effect=[ValueError("first"), last])

        with pytest.raises(RetryExhaustedError) as exc_info:
            policy.run(operation, description="update of show 1")

        assert exc_info.value.last_error is last
        assert exc_info.value.__cause__ is last
        assert "update of show 1" in str(exc_info.value)
        assert "all 2 retry attempts failed" in str(exc_info.value)

    def test_single_attempt_never_sleeps(self):
        sleep = Mock()
        policy = RetryPolicy(attempts=1, initial_delay=0.5, max_delay=1.0, sleep=sleep)

        with pytest.raises(RetryExhaustedError):
            policy.run(Mock(side_effect=OSError()))
        sleep.assert_not_called()

    def test_invalid_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(attempts=0, initial_delay=0.1, max_delay=1.0)
