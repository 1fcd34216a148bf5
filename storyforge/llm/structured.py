"""JSON synthesis requests with explicit success/failure results.

Every synthesis call in the pipeline goes through ``request_json``. It
applies the timeout and retry policy, parses the JSON text, optionally
validates it against a pydantic model, and returns a ``SynthesisResult``.
Failures never propagate as exceptions; callers branch on ``result.ok``
and take their deterministic fallback path.
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from storyforge.config import Settings, get_settings
from storyforge.llm.base import TextSynthesizer
from storyforge.llm.exceptions import LLMError, StructuredOutputError
from storyforge.llm.message_types import Message
from storyforge.llm.retry import RetryConfig, with_retry

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class FailureReason(str, Enum):
    """Why a synthesis call did not yield usable output."""

    PROVIDER_ERROR = "provider_error"
    TIMEOUT = "timeout"
    MALFORMED_JSON = "malformed_json"
    SCHEMA_MISMATCH = "schema_mismatch"


@dataclass(frozen=True)
class GenerationFailure:
    """A failed unit of synthesis work."""

    reason: FailureReason
    message: str


@dataclass(frozen=True)
class SynthesisResult(Generic[T]):
    """Outcome of one synthesis request.

    Attributes:
        value: Validated model instance, or the parsed dict when no model
            was requested. None on failure.
        tokens_used: Tokens billed, also reported for schema mismatches.
        failure: Populated iff the call failed.
    """

    value: T | None = None
    tokens_used: int = 0
    failure: GenerationFailure | None = None

    @property
    def ok(self) -> bool:
        """Whether the request produced a usable value."""
        return self.failure is None and self.value is not None


@dataclass
class SynthesisOptions:
    """Per-call policy for synthesis requests.

    Attributes:
        timeout_seconds: Hard limit for one call including retries.
        retry: Retry policy for transient provider errors.
        model: Model override; None uses the synthesizer default.
    """

    timeout_seconds: float = 60.0
    retry: RetryConfig = field(default_factory=RetryConfig)
    model: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SynthesisOptions":
        """Build options from application settings."""
        settings = settings or get_settings()
        return cls(
            timeout_seconds=settings.synthesis_timeout_seconds,
            retry=RetryConfig(max_retries=settings.synthesis_max_retries),
        )


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object out of model output.

    Tolerates markdown code fences and leading/trailing prose around a
    single top-level object.

    Raises:
        StructuredOutputError: If no JSON object can be parsed.
    """
    candidate = text.strip()
    fenced = _FENCE_RE.match(candidate)
    if fenced:
        candidate = fenced.group(1)

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        start, end = candidate.find("{"), candidate.rfind("}")
        if start == -1 or end <= start:
            raise StructuredOutputError("No JSON object in response", raw_output=text)
        try:
            parsed = json.loads(candidate[start : end + 1])
        except json.JSONDecodeError as e:
            raise StructuredOutputError(f"Invalid JSON: {e}", raw_output=text) from e

    if not isinstance(parsed, dict):
        raise StructuredOutputError("Response JSON is not an object", raw_output=text)
    return parsed


async def request_json(
    synthesizer: TextSynthesizer,
    prompt: str,
    *,
    system_prompt: str | None = None,
    response_model: type[BaseModel] | None = None,
    json_schema: dict[str, Any] | None = None,
    max_tokens: int = 2000,
    temperature: float = 0.7,
    options: SynthesisOptions | None = None,
) -> SynthesisResult[Any]:
    """Request a JSON object from the synthesizer.

    Args:
        synthesizer: Injected text synthesizer.
        prompt: User prompt.
        system_prompt: System-level instructions.
        response_model: Pydantic model to validate against. Its JSON schema
            is sent as the schema description when ``json_schema`` is None.
        json_schema: Explicit schema description.
        max_tokens: Maximum tokens to generate.
        temperature: Sampling temperature.
        options: Timeout/retry policy.

    Returns:
        SynthesisResult with the validated value or a GenerationFailure.
    """
    options = options or SynthesisOptions()
    if json_schema is None and response_model is not None:
        json_schema = response_model.model_json_schema(by_alias=True)

    try:
        response = await asyncio.wait_for(
            with_retry(
                synthesizer.complete_json,
                messages=[Message.user(prompt)],
                json_schema=json_schema,
                model=options.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system_prompt=system_prompt,
                config=options.retry,
            ),
            timeout=options.timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning(f"Synthesis call timed out after {options.timeout_seconds}s")
        return SynthesisResult(
            failure=GenerationFailure(FailureReason.TIMEOUT, "synthesis call timed out")
        )
    except LLMError as e:
        logger.warning(f"Synthesis provider error: {e}")
        return SynthesisResult(failure=GenerationFailure(FailureReason.PROVIDER_ERROR, str(e)))
    except Exception as e:
        # Synthesizers are external collaborators; anything they raise is a provider failure
        logger.warning(f"Synthesis call failed: {e}", exc_info=True)
        return SynthesisResult(failure=GenerationFailure(FailureReason.PROVIDER_ERROR, str(e)))

    tokens = response.tokens_used

    try:
        payload = extract_json_object(response.content)
    except StructuredOutputError as e:
        logger.warning(f"Malformed synthesis output: {e}")
        return SynthesisResult(
            tokens_used=tokens,
            failure=GenerationFailure(FailureReason.MALFORMED_JSON, str(e)),
        )

    if response_model is None:
        return SynthesisResult(value=payload, tokens_used=tokens)

    try:
        value = response_model.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Synthesis output failed {response_model.__name__} validation: {e}")
        return SynthesisResult(
            tokens_used=tokens,
            failure=GenerationFailure(FailureReason.SCHEMA_MISMATCH, str(e)),
        )
    return SynthesisResult(value=value, tokens_used=tokens)
