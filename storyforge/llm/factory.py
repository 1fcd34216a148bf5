"""Text synthesizer factory."""

from storyforge.config import ProviderConfig, Settings, get_settings
from storyforge.llm.anthropic_provider import AnthropicProvider
from storyforge.llm.base import TextSynthesizer
from storyforge.llm.exceptions import UnsupportedProviderError
from storyforge.llm.openai_provider import OpenAIProvider


def _create_provider(config: ProviderConfig, settings: Settings) -> TextSynthesizer:
    """Create a synthesizer from a ProviderConfig.

    Raises:
        UnsupportedProviderError: If provider type is not supported.
    """
    if config.provider == "anthropic":
        provider: TextSynthesizer = AnthropicProvider(
            api_key=settings.anthropic_api_key,
            default_model=config.model,
        )
    elif config.provider == "openai":
        provider = OpenAIProvider(
            api_key=settings.openai_api_key,
            default_model=config.model,
            base_url=settings.openai_base_url,
        )
    else:
        raise UnsupportedProviderError(f"Provider '{config.provider}' is not supported")

    if settings.log_llm_calls:
        from storyforge.llm.audit_logger import get_audit_logger
        from storyforge.llm.logging_provider import LoggingProvider

        provider = LoggingProvider(provider, get_audit_logger())

    return provider


def get_synthesizer(
    spec: str | None = None,
    settings: Settings | None = None,
) -> TextSynthesizer:
    """Build the synthesizer configured by SYNTHESIZER (or an explicit spec).

    Args:
        spec: Optional 'provider:model' override.
        settings: Settings to read keys from (defaults to cached settings).

    Returns:
        A freshly constructed synthesizer. Callers own and inject it.
    """
    settings = settings or get_settings()
    config = settings.synthesizer_config
    if spec:
        from storyforge.config import parse_provider_config

        config = parse_provider_config(spec)
    return _create_provider(config, settings)
