"""Application configuration using pydantic-settings."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


ProviderType = Literal["anthropic", "openai"]


@dataclass
class ProviderConfig:
    """Parsed provider:model configuration."""

    provider: ProviderType
    model: str


def parse_provider_config(value: str, default_provider: ProviderType = "openai") -> ProviderConfig:
    """Parse 'provider:model' format into ProviderConfig.

    Args:
        value: String in format 'provider:model' or just 'model'.
        default_provider: Provider to use if only model is specified.

    Returns:
        ProviderConfig with provider and model.

    Examples:
        >>> parse_provider_config("anthropic:claude-3-5-haiku-20241022")
        ProviderConfig(provider='anthropic', model='claude-3-5-haiku-20241022')

        >>> parse_provider_config("gpt-4o-mini")  # No provider prefix
        ProviderConfig(provider='openai', model='gpt-4o-mini')
    """
    valid_providers = ("anthropic", "openai")

    if ":" in value:
        first_part = value.split(":")[0]
        if first_part in valid_providers:
            model = value[len(first_part) + 1 :]
            return ProviderConfig(provider=first_part, model=model)  # type: ignore

    return ProviderConfig(provider=default_provider, model=value)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # API Keys
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    openai_base_url: str | None = None  # OpenAI-compatible endpoints

    # ==========================================================================
    # Text synthesis (provider:model format)
    # ==========================================================================
    # Examples:
    #   SYNTHESIZER=openai:gpt-4-turbo-preview
    #   SYNTHESIZER=anthropic:claude-3-5-haiku-20241022

    synthesizer: str = "openai:gpt-4-turbo-preview"
    synthesis_timeout_seconds: float = Field(default=60.0, gt=0)
    synthesis_max_retries: int = Field(default=2, ge=0)

    # ==========================================================================
    # Knowledge fetching
    # ==========================================================================
    min_entity_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    storyline_fact_limit: int = Field(default=100, gt=0)
    content_fact_limit: int = Field(default=200, gt=0)
    kb_fact_limit: int = Field(default=50, gt=0)

    # Debug
    debug: bool = False
    log_level: str = "WARNING"
    log_llm_calls: bool = False
    llm_log_dir: str = "logs/llm"

    # ==========================================================================
    # Parsed Configuration Properties
    # ==========================================================================

    @property
    def synthesizer_config(self) -> ProviderConfig:
        """Get parsed synthesizer provider config."""
        return parse_provider_config(self.synthesizer)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience alias
settings = get_settings()
