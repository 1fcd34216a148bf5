"""Audit-logging wrapper for text synthesizers."""

import time
from datetime import datetime
from typing import Any, Sequence

from storyforge.llm.audit_logger import LLMAuditEntry, LLMAuditLogger, get_audit_context
from storyforge.llm.base import TextSynthesizer
from storyforge.llm.message_types import Message
from storyforge.llm.response_types import LLMResponse


class LoggingProvider:
    """Wrapper that records every call of the wrapped synthesizer.

    Args:
        provider: The synthesizer to wrap.
        logger: The audit logger to use (uses the global one if omitted).
    """

    def __init__(
        self,
        provider: TextSynthesizer,
        logger: LLMAuditLogger | None = None,
    ) -> None:
        self._provider = provider
        self._logger = logger

    @property
    def provider_name(self) -> str:
        """Return provider identifier."""
        return self._provider.provider_name

    @property
    def default_model(self) -> str:
        """Return default model for this provider."""
        return self._provider.default_model

    def _get_logger(self) -> LLMAuditLogger:
        if self._logger is not None:
            return self._logger
        from storyforge.llm.audit_logger import get_audit_logger

        return get_audit_logger()

    async def _logged(
        self,
        method: str,
        messages: Sequence[Message],
        model: str | None,
        system_prompt: str | None,
        parameters: dict[str, Any],
        **kwargs: Any,
    ) -> LLMResponse:
        start_time = time.perf_counter()
        timestamp = datetime.now()
        context = get_audit_context()

        response = None
        error = None
        try:
            response = await getattr(self._provider, method)(
                messages=messages,
                model=model,
                system_prompt=system_prompt,
                **parameters,
                **kwargs,
            )
            return response
        except Exception as e:
            error = str(e)
            raise
        finally:
            await self._get_logger().log(
                LLMAuditEntry(
                    timestamp=timestamp,
                    context=context,
                    provider=self._provider.provider_name,
                    model=model or self._provider.default_model,
                    method=method,
                    system_prompt=system_prompt,
                    messages=[m.to_dict() for m in messages],
                    parameters=parameters,
                    response=response,
                    error=error,
                    duration_seconds=time.perf_counter() - start_time,
                )
            )

    async def complete(
        self,
        messages: Sequence[Message],
        model: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.7,
        system_prompt: str | None = None,
    ) -> LLMResponse:
        """Generate a completion with audit logging."""
        return await self._logged(
            "complete",
            messages,
            model,
            system_prompt,
            {"max_tokens": max_tokens, "temperature": temperature},
        )

    async def complete_json(
        self,
        messages: Sequence[Message],
        json_schema: dict[str, Any] | None = None,
        model: str | None = None,
        max_tokens: int = 2000,
        temperature: float = 0.7,
        system_prompt: str | None = None,
    ) -> LLMResponse:
        """Generate a JSON completion with audit logging."""
        return await self._logged(
            "complete_json",
            messages,
            model,
            system_prompt,
            {"max_tokens": max_tokens, "temperature": temperature},
            json_schema=json_schema,
        )
