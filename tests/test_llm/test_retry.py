"""Tests for synthesis retry utilities."""

import pytest
from unittest.mock import AsyncMock, patch

from storyforge.llm.exceptions import (
    AuthenticationError,
    ContentPolicyError,
    ProviderError,
    RateLimitError,
)
from storyforge.llm.retry import RetryConfig, _calculate_delay, with_retry


class TestRetryConfig:
    """Tests for RetryConfig dataclass."""

    def test_default_config(self):
        """Test default retry configuration."""
        config = RetryConfig()
        assert config.max_retries == 2
        assert config.initial_delay == 1.0
        assert config.max_delay == 30.0
        assert config.exponential_base == 2.0
        assert config.jitter is True


class TestCalculateDelay:
    """Tests for backoff delay calculation."""

    def test_exponential_growth(self):
        """Test delay doubles per attempt without jitter."""
        config = RetryConfig(initial_delay=0.5, jitter=False)
        assert _calculate_delay(0, config) == 0.5
        assert _calculate_delay(1, config) == 1.0
        assert _calculate_delay(2, config) == 2.0

    def test_capped_at_max_delay(self):
        """Test delay never exceeds max_delay before jitter."""
        config = RetryConfig(initial_delay=10.0, max_delay=15.0, jitter=False)
        assert _calculate_delay(3, config) == 15.0

    def test_retry_after_wins_when_longer(self):
        """Test server retry_after raises the delay."""
        config = RetryConfig(initial_delay=0.1, jitter=False)
        assert _calculate_delay(0, config, retry_after=4.0) == 4.0

    def test_jitter_adds_at_most_a_quarter(self):
        """Test jitter stays within 25% of the base delay."""
        config = RetryConfig(initial_delay=1.0, jitter=True)
        for _ in range(20):
            delay = _calculate_delay(0, config)
            assert 1.0 <= delay <= 1.25


class TestWithRetry:
    """Tests for with_retry function."""

    @pytest.mark.asyncio
    async def test_successful_call_no_retry(self):
        """Test that successful calls don't retry."""
        mock_func = AsyncMock(return_value="ok")

        result = await with_retry(mock_func)

        assert result == "ok"
        assert mock_func.call_count == 1

    @pytest.mark.asyncio
    async def test_retry_on_rate_limit(self):
        """Test retry on rate limit error."""
        mock_func = AsyncMock(side_effect=[RateLimitError("Rate limited"), "ok"])
        config = RetryConfig(initial_delay=0.01, jitter=False)

        result = await with_retry(mock_func, config=config)

        assert result == "ok"
        assert mock_func.call_count == 2

    @pytest.mark.asyncio
    async def test_retry_on_server_error(self):
        """Test retry on a retryable 5xx provider error."""
        mock_func = AsyncMock(
            side_effect=[ProviderError("Bad gateway", is_retryable=True, status_code=502), "ok"]
        )
        config = RetryConfig(initial_delay=0.01, jitter=False)

        assert await with_retry(mock_func, config=config) == "ok"
        assert mock_func.call_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            AuthenticationError("Invalid key"),
            ContentPolicyError("Blocked"),
            ProviderError("Bad request", is_retryable=False, status_code=400),
        ],
    )
    async def test_non_retryable_errors_propagate(self, error):
        """Test permanent errors are raised on the first attempt."""
        mock_func = AsyncMock(side_effect=error)
        config = RetryConfig(initial_delay=0.01, jitter=False)

        with pytest.raises(type(error)):
            await with_retry(mock_func, config=config)

        assert mock_func.call_count == 1

    @pytest.mark.asyncio
    async def test_max_retries_exceeded(self):
        """Test the last error propagates after all retries."""
        mock_func = AsyncMock(side_effect=RateLimitError("Rate limited"))
        config = RetryConfig(max_retries=2, initial_delay=0.01, jitter=False)

        with pytest.raises(RateLimitError):
            await with_retry(mock_func, config=config)

        # Initial call + 2 retries
        assert mock_func.call_count == 3

    @pytest.mark.asyncio
    async def test_zero_retries(self):
        """Test max_retries=0 makes exactly one attempt."""
        mock_func = AsyncMock(side_effect=RateLimitError("Rate limited"))

        with pytest.raises(RateLimitError):
            await with_retry(mock_func, config=RetryConfig(max_retries=0))

        assert mock_func.call_count == 1

    @pytest.mark.asyncio
    async def test_sleeps_between_attempts(self):
        """Test the computed delay is awaited before retrying."""
        mock_func = AsyncMock(side_effect=[RateLimitError("Rate limited", retry_after=2.0), "ok"])
        config = RetryConfig(initial_delay=0.5, jitter=False)

        with patch("storyforge.llm.retry.asyncio.sleep", new=AsyncMock()) as mock_sleep:
            await with_retry(mock_func, config=config)

        mock_sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_passes_arguments(self):
        """Test that arguments are passed to the function."""
        mock_func = AsyncMock(return_value="ok")

        await with_retry(mock_func, "arg1", kwarg1="value1")

        mock_func.assert_called_once_with("arg1", kwarg1="value1")
