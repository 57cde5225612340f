"""
Unit tests for the retry helper.
"""

import pytest
from unittest.mock import AsyncMock, patch

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.retry import RetryConfig, RetryError, _calculate_delay, call_with_retry


class TestCallWithRetry:
    """Test cases for call_with_retry."""

    @pytest.fixture
    def config(self):
        return RetryConfig(max_attempts=3, base_delay=0, jitter=False)

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, config):
        func = AsyncMock(return_value="ok")

        assert await call_with_retry(func, "pikachu", config=config) == "ok"
        func.assert_awaited_once_with("pikachu")

    @pytest.mark.asyncio
    async def test_recovers_after_failures(self, config):
        func = AsyncMock(side_effect=[ConnectionError("down"), ConnectionError("down"), "ok"])

        assert await call_with_retry(func, exceptions=(ConnectionError,), config=config) == "ok"
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_retry_error(self, config):
        failure = ConnectionError("down")
        func = AsyncMock(side_effect=failure)

        with pytest.raises(RetryError) as exc_info:
            await call_with_retry(func, exceptions=(ConnectionError,), config=config)

        assert exc_info.value.attempts == 3
        assert exc_info.value.last_exception is failure
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_unlisted_exceptions_propagate_immediately(self, config):
        func = AsyncMock(side_effect=KeyError("missing"))

        with pytest.raises(KeyError):
            await call_with_retry(func, exceptions=(ConnectionError,), config=config)

        func.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_sleeps_between_attempts(self):
        config = RetryConfig(max_attempts=3, base_delay=0.5, jitter=False)
        func = AsyncMock(side_effect=[ValueError("bad"), ValueError("bad"), "ok"])

        with patch("shared.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            await call_with_retry(func, exceptions=(ValueError,), config=config)

        assert [call.args[0] for call in sleep.await_args_list] == [0.5, 1.0]

    def test_zero_attempts_still_calls_once(self):
        assert RetryConfig(max_attempts=0).max_attempts == 1


class TestCalculateDelay:
    """Test cases for backoff calculation."""

    def test_exponential(self):
        config = RetryConfig(base_delay=1.0, jitter=False)
        assert [_calculate_delay(attempt, config) for attempt in (1, 2, 3)] == [1.0, 2.0, 4.0]

    def test_linear(self):
        config = RetryConfig(base_delay=1.0, jitter=False, backoff_strategy="linear")
        assert [_calculate_delay(attempt, config) for attempt in (1, 2, 3)] == [1.0, 2.0, 3.0]

    def test_fixed(self):
        config = RetryConfig(base_delay=0.3, jitter=False, backoff_strategy="fixed")
        assert _calculate_delay(5, config) == 0.3

    def test_capped_at_max_delay(self):
        config = RetryConfig(base_delay=1.0, max_delay=2.0, jitter=False)
        assert _calculate_delay(10, config) == 2.0

    def test_jitter_stays_within_ten_percent(self):
        config = RetryConfig(base_delay=1.0, jitter=True)
        for _ in range(50):
            assert 0.9 <= _calculate_delay(1, config) <= 1.1
