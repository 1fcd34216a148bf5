"""Synthesis response type definitions.

Immutable dataclasses for completions and token usage.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UsageStats:
    """Token usage statistics.

    Attributes:
        prompt_tokens: Tokens in the input.
        completion_tokens: Tokens in the output.
        total_tokens: Combined total.
    """

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class LLMResponse:
    """Response from a synthesis completion.

    Attributes:
        content: Text content. JSON text for ``complete_json`` calls.
        finish_reason: Why generation stopped.
        model: Model that generated the response.
        usage: Token usage statistics.
        raw_response: Provider's raw response (for debugging).
    """

    content: str
    finish_reason: str = "stop"
    model: str = ""
    usage: UsageStats | None = None
    raw_response: Any = None

    @property
    def tokens_used(self) -> int:
        """Total tokens billed for this response, 0 when unknown."""
        return self.usage.total_tokens if self.usage else 0
