"""Tests for synthesis response types."""

import pytest

from storyforge.llm.response_types import LLMResponse, UsageStats


class TestUsageStats:
    """Tests for UsageStats."""

    def test_fields(self):
        """Test usage counters are stored."""
        usage = UsageStats(prompt_tokens=100, completion_tokens=50, total_tokens=150)
        assert usage.prompt_tokens == 100
        assert usage.completion_tokens == 50
        assert usage.total_tokens == 150

    def test_immutable(self):
        """Test usage cannot be modified."""
        usage = UsageStats(prompt_tokens=1, completion_tokens=1, total_tokens=2)
        with pytest.raises(AttributeError):
            usage.total_tokens = 3


class TestLLMResponse:
    """Tests for LLMResponse."""

    def test_defaults(self):
        """Test a bare response."""
        response = LLMResponse(content="Hello")
        assert response.finish_reason == "stop"
        assert response.model == ""
        assert response.usage is None
        assert response.raw_response is None

    def test_tokens_used(self):
        """Test tokens_used reports the usage total."""
        response = LLMResponse(
            content="{}",
            usage=UsageStats(prompt_tokens=80, completion_tokens=20, total_tokens=100),
        )
        assert response.tokens_used == 100

    def test_tokens_used_without_usage(self):
        """Test tokens_used is zero when usage is unknown."""
        assert LLMResponse(content="{}").tokens_used == 0
