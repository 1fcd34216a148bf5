"""Text synthesis exception definitions.

Providers translate SDK errors into this hierarchy. The pipeline never lets
these escape a synthesis call site; they are converted into
``GenerationFailure`` results by ``storyforge.llm.structured``.
"""


class LLMError(Exception):
    """Base exception for text synthesis operations."""

    pass


class ProviderError(LLMError):
    """Error reported by the synthesis provider.

    Attributes:
        is_retryable: Whether this error can be retried.
        status_code: HTTP status code if applicable.
    """

    def __init__(
        self,
        message: str,
        is_retryable: bool = False,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.is_retryable = is_retryable
        self.status_code = status_code


class RateLimitError(ProviderError):
    """Quota or rate limit exceeded.

    Attributes:
        retry_after: Seconds to wait before retrying.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, is_retryable=True, status_code=429)
        self.retry_after = retry_after


class AuthenticationError(ProviderError):
    """Invalid API key."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, is_retryable=False, status_code=401)


class ContentPolicyError(ProviderError):
    """Prompt or output rejected by the provider's usage policies."""

    def __init__(self, message: str = "Content policy violation") -> None:
        super().__init__(message, is_retryable=False)


class ContextLengthError(ProviderError):
    """Prompt exceeds the model's context window."""

    def __init__(self, message: str, max_tokens: int | None = None) -> None:
        super().__init__(message, is_retryable=False)
        self.max_tokens = max_tokens


class UnsupportedProviderError(LLMError):
    """Requested provider is not supported."""

    pass


class StructuredOutputError(LLMError):
    """Response text could not be parsed as the requested JSON object.

    Attributes:
        raw_output: The raw output that failed to parse.
    """

    def __init__(self, message: str, raw_output: str | None = None) -> None:
        super().__init__(message)
        self.raw_output = raw_output
