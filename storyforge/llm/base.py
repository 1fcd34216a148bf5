"""Text synthesizer protocol definition.

Defines the interface the pipeline expects from the external synthesis
service. Implementations are constructed explicitly and injected into the
agents; there is no module-level client.
"""

from typing import Any, Protocol, Sequence, runtime_checkable

from storyforge.llm.message_types import Message
from storyforge.llm.response_types import LLMResponse


@runtime_checkable
class TextSynthesizer(Protocol):
    """Protocol for text synthesis providers."""

    @property
    def provider_name(self) -> str:
        """Return provider identifier (e.g., 'anthropic', 'openai')."""
        ...

    @property
    def default_model(self) -> str:
        """Return default model for this provider."""
        ...

    async def complete(
        self,
        messages: Sequence[Message],
        model: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.7,
        system_prompt: str | None = None,
    ) -> LLMResponse:
        """Generate a free-text completion.

        Args:
            messages: Prompt messages.
            model: Model to use (defaults to provider's default).
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature (0.0-1.0).
            system_prompt: System-level instructions.

        Returns:
            LLMResponse with text and metadata.
        """
        ...

    async def complete_json(
        self,
        messages: Sequence[Message],
        json_schema: dict[str, Any] | None = None,
        model: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.7,
        system_prompt: str | None = None,
    ) -> LLMResponse:
        """Generate a completion whose content is a single JSON object.

        The schema is a description for the model, not a guarantee. Callers
        must parse and validate ``LLMResponse.content`` themselves.

        Args:
            messages: Prompt messages.
            json_schema: JSON schema describing the expected object.
            model: Model to use (defaults to provider's default).
            max_tokens: Maximum tokens to generate.
            temperature: Sampling temperature.
            system_prompt: System-level instructions.

        Returns:
            LLMResponse whose content is expected to be JSON text.
        """
        ...
