"""Tests for the audit-logging synthesizer wrapper."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from storyforge.llm.audit_logger import reset_audit_context, set_audit_context
from storyforge.llm.exceptions import RateLimitError
from storyforge.llm.logging_provider import LoggingProvider
from storyforge.llm.message_types import Message
from storyforge.llm.response_types import LLMResponse, UsageStats


@pytest.fixture
def mock_provider():
    """Create a mock synthesizer."""
    provider = MagicMock()
    provider.provider_name = "mock"
    provider.default_model = "mock-model"
    provider.complete = AsyncMock(
        return_value=LLMResponse(content="Plain text", usage=UsageStats(10, 5, 15))
    )
    provider.complete_json = AsyncMock(
        return_value=LLMResponse(content='{"headline": "Hi"}', usage=UsageStats(15, 8, 23))
    )
    return provider


@pytest.fixture
def mock_logger():
    """Create a mock audit logger."""
    logger = MagicMock()
    logger.log = AsyncMock()
    return logger


class TestLoggingProvider:
    """Tests for LoggingProvider wrapper."""

    def test_properties_delegated(self, mock_provider, mock_logger):
        """Test provider name and default model come from the wrapped synthesizer."""
        wrapped = LoggingProvider(mock_provider, mock_logger)
        assert wrapped.provider_name == "mock"
        assert wrapped.default_model == "mock-model"

    @pytest.mark.asyncio
    async def test_complete_delegates_and_logs(self, mock_provider, mock_logger):
        """Test complete() returns the wrapped response and logs one entry."""
        wrapped = LoggingProvider(mock_provider, mock_logger)

        response = await wrapped.complete([Message.user("Hello")], max_tokens=500, temperature=0.3)

        assert response.content == "Plain text"
        mock_provider.complete.assert_awaited_once()
        entry = mock_logger.log.call_args.args[0]
        assert entry.method == "complete"
        assert entry.model == "mock-model"
        assert entry.parameters == {"max_tokens": 500, "temperature": 0.3}
        assert entry.messages == [{"role": "user", "content": "Hello"}]
        assert entry.response is response
        assert entry.error is None

    @pytest.mark.asyncio
    async def test_complete_json_passes_schema(self, mock_provider, mock_logger):
        """Test complete_json() forwards the schema and records the method."""
        wrapped = LoggingProvider(mock_provider, mock_logger)
        schema = {"type": "object"}

        await wrapped.complete_json(
            [Message.user("Hello")],
            json_schema=schema,
            model="other-model",
            system_prompt="Be brief.",
        )

        kwargs = mock_provider.complete_json.call_args.kwargs
        assert kwargs["json_schema"] == schema
        assert kwargs["system_prompt"] == "Be brief."
        entry = mock_logger.log.call_args.args[0]
        assert entry.method == "complete_json"
        assert entry.model == "other-model"
        assert entry.system_prompt == "Be brief."

    @pytest.mark.asyncio
    async def test_error_logged_and_reraised(self, mock_provider, mock_logger):
        """Test a failing call is logged with its error and then re-raised."""
        mock_provider.complete_json = AsyncMock(side_effect=RateLimitError("Slow down"))
        wrapped = LoggingProvider(mock_provider, mock_logger)

        with pytest.raises(RateLimitError):
            await wrapped.complete_json([Message.user("Hello")])

        entry = mock_logger.log.call_args.args[0]
        assert entry.error == "Slow down"
        assert entry.response is None

    @pytest.mark.asyncio
    async def test_uses_current_audit_context(self, mock_provider, mock_logger):
        """Test the entry carries the active audit context."""
        wrapped = LoggingProvider(mock_provider, mock_logger)
        token = set_audit_context(run_id="r1", section_id="section-2-solution", call_type="section_content")
        try:
            await wrapped.complete([Message.user("Hello")])
        finally:
            reset_audit_context(token)

        entry = mock_logger.log.call_args.args[0]
        assert entry.context.run_id == "r1"
        assert entry.context.section_id == "section-2-solution"
        assert entry.context.call_type == "section_content"
