"""Text synthesis abstraction layer.

The pipeline talks to an injected ``TextSynthesizer``. Concrete providers
wrap the Anthropic and OpenAI SDKs (including OpenAI-compatible endpoints).

Quick Start:
    from storyforge.llm import get_synthesizer, request_json

    synthesizer = get_synthesizer()  # Uses SYNTHESIZER from settings
    result = await request_json(synthesizer, "Summarize ...", response_model=MyModel)
    if result.ok:
        print(result.value)
"""

# Message types
from storyforge.llm.message_types import Message, MessageRole

# Response types
from storyforge.llm.response_types import LLMResponse, UsageStats

# Protocol
from storyforge.llm.base import TextSynthesizer

# Providers
from storyforge.llm.anthropic_provider import AnthropicProvider
from storyforge.llm.openai_provider import OpenAIProvider

# Factory
from storyforge.llm.factory import get_synthesizer

# Retry utilities
from storyforge.llm.retry import RetryConfig, with_retry

# Structured requests
from storyforge.llm.structured import (
    FailureReason,
    GenerationFailure,
    SynthesisOptions,
    SynthesisResult,
    extract_json_object,
    request_json,
)

# Audit logging
from storyforge.llm.audit_logger import (
    LLMAuditContext,
    LLMAuditEntry,
    LLMAuditLogger,
    get_audit_context,
    get_audit_logger,
    reset_audit_context,
    set_audit_context,
)
from storyforge.llm.logging_provider import LoggingProvider

# Exceptions
from storyforge.llm.exceptions import (
    LLMError,
    ProviderError,
    RateLimitError,
    AuthenticationError,
    ContentPolicyError,
    ContextLengthError,
    UnsupportedProviderError,
    StructuredOutputError,
)

__all__ = [
    # Message types
    "Message",
    "MessageRole",
    # Response types
    "LLMResponse",
    "UsageStats",
    # Protocol
    "TextSynthesizer",
    # Providers
    "AnthropicProvider",
    "OpenAIProvider",
    # Factory
    "get_synthesizer",
    # Retry
    "RetryConfig",
    "with_retry",
    # Structured requests
    "FailureReason",
    "GenerationFailure",
    "SynthesisOptions",
    "SynthesisResult",
    "extract_json_object",
    "request_json",
    # Audit logging
    "LLMAuditContext",
    "LLMAuditEntry",
    "LLMAuditLogger",
    "get_audit_context",
    "get_audit_logger",
    "reset_audit_context",
    "set_audit_context",
    "LoggingProvider",
    # Exceptions
    "LLMError",
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "ContentPolicyError",
    "ContextLengthError",
    "UnsupportedProviderError",
    "StructuredOutputError",
]
