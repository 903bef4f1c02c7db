"""
Tests for the bounded retry policy.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, patch

from infographix.core.exceptions import (
    ConfigurationError,
    GenerationFailedError,
    MalformedOutputError,
    TransientBackendError,
)
from infographix.core.retry import RetryPolicy, default_retry_policy


# ============== Fixtures ==============

@pytest.fixture
def mock_sleep():
    """Backoff sleep that returns immediately."""
    return AsyncMock()


@pytest.fixture
def policy(mock_sleep):
    return RetryPolicy(max_attempts=3, base_delay=1.0, name="test", sleep=mock_sleep)


# ============== Tests ==============

class TestRetryPolicy:
    """Tests for RetryPolicy.run."""

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, policy, mock_sleep):
        operation = AsyncMock(return_value={"title": "T"})

        result = await policy.run(operation)

        assert result == {"title": "T"}
        operation.assert_awaited_once_with(1)
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_after_failures(self, policy, mock_sleep):
        """Transient failures are retried until an attempt succeeds."""
        operation = AsyncMock(side_effect=[
            TransientBackendError("boom", status_code=500),
            MalformedOutputError(),
            {"title": "T"},
        ])

        result = await policy.run(operation)

        assert result == {"title": "T"}
        assert [c.args[0] for c in operation.await_args_list] == [1, 2, 3]
        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_exactly_three_attempts_then_terminal_error(self, policy, mock_sleep):
        """An always-failing operation is tried three times."""
        operation = AsyncMock(side_effect=TransientBackendError("network down"))

        with pytest.raises(GenerationFailedError) as exc_info:
            await policy.run(operation)

        assert operation.await_count == 3
        error = exc_info.value
        assert error.attempts == 3
        assert error.provider == "test"
        assert isinstance(error.last_error, TransientBackendError)
        assert error.message == "Failed after 3 attempts. Last error: network down"
        assert error.code == "GENERATION_FAILED"

    @pytest.mark.asyncio
    async def test_backoff_grows_linearly(self, policy, mock_sleep):
        """Delay before retry n is n * base_delay; no pause after the last attempt."""
        operation = AsyncMock(side_effect=RuntimeError("fail"))

        with pytest.raises(GenerationFailedError):
            await policy.run(operation)

        assert [c.args[0] for c in mock_sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_base_delay_scales(self, mock_sleep):
        policy = RetryPolicy(max_attempts=4, base_delay=0.5, sleep=mock_sleep)
        operation = AsyncMock(side_effect=RuntimeError("fail"))

        with pytest.raises(GenerationFailedError):
            await policy.run(operation)

        assert [c.args[0] for c in mock_sleep.await_args_list] == [0.5, 1.0, 1.5]

    @pytest.mark.asyncio
    async def test_configuration_error_not_retried(self, policy, mock_sleep):
        """Fatal errors surface unchanged on the first attempt."""
        operation = AsyncMock(side_effect=ConfigurationError("no key", provider="openai"))

        with pytest.raises(ConfigurationError):
            await policy.run(operation)

        operation.assert_awaited_once()
        mock_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancellation_not_retried(self, policy, mock_sleep):
        operation = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await policy.run(operation)

        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_single_attempt_policy(self, mock_sleep):
        policy = RetryPolicy(max_attempts=1, sleep=mock_sleep)
        operation = AsyncMock(side_effect=MalformedOutputError())

        with pytest.raises(GenerationFailedError) as exc_info:
            await policy.run(operation)

        assert exc_info.value.attempts == 1
        mock_sleep.assert_not_awaited()

    def test_delay_for(self):
        policy = RetryPolicy(base_delay=2.0)
        assert policy.delay_for(1) == 2.0
        assert policy.delay_for(3) == 6.0

    @pytest.mark.parametrize("kwargs", [{"max_attempts": 0}, {"base_delay": -1.0}])
    def test_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_default_policy_from_settings(self):
        with patch("infographix.core.retry.settings") as mock_settings:
            mock_settings.GENERATION_MAX_ATTEMPTS = 5
            mock_settings.GENERATION_RETRY_BASE_DELAY = 0.25
            policy = default_retry_policy("deepseek")

        assert policy.max_attempts == 5
        assert policy.base_delay == 0.25
        assert policy.name == "deepseek"
        assert default_retry_policy("gemini", max_attempts=1).max_attempts == 1
