"""Core test fixtures for storyforge tests."""

from typing import Any

import pytest

from storyforge.config import Settings
from storyforge.knowledge import BrandVoice, InMemoryKnowledgeStore, KnowledgeEntity, Persona
from storyforge.llm.exceptions import ProviderError
from tests.factories import WORKSPACE_ID, FakeSynthesizer, create_entity


@pytest.fixture
def entities() -> list[KnowledgeEntity]:
    """A small but stage-complete set of workspace facts."""
    return [
        create_entity("e-vp", "value_proposition", "Close your books in a day",
                      "Automated reconciliation that keeps finance teams ahead of month end.", 0.95),
        create_entity("e-pain-1", "pain_point", "Manual reconciliation",
                      "Teams spend days matching transactions by hand.", 0.9),
        create_entity("e-pain-2", "pain_point", "Late month-end close",
                      "Reports arrive after the decisions they should inform.", 0.85),
        create_entity("e-feat-1", "feature", "Live ledger sync",
                      "Transactions flow in from every bank account in real time.", 0.9, icon="sync"),
        create_entity("e-feat-2", "feature", "Audit trail",
                      "Every change is recorded with who made it and why.", 0.88),
        create_entity("e-feat-3", "feature", "Smart matching",
                      "Rules and machine learning pair transactions automatically.", 0.8),
        create_entity("e-benefit", "benefit", "Faster close",
                      "Finish the monthly close in one day instead of five.", 0.8),
        create_entity("e-test", "testimonial", "Dana from Northwind",
                      "Northwind cut their close from six days to one.", 0.9,
                      quote="We cut our monthly close from six days to one. "
                            "The team finally has time for analysis.",
                      author="Dana Reyes", role="Controller", company="Northwind", rating=5),
        create_entity("e-stat", "statistic", "80% less manual work",
                      "Average reduction across customers.", 0.85, value="80%", metric="less manual work"),
        create_entity("e-cta", "cta", "Start your trial", "Try it free for 14 days.", 0.9,
                      action="Start Free Trial", targetUrl="/signup"),
        create_entity("e-price", "pricing", "Growth plan", "For teams up to 20 people.", 0.9,
                      tier="Growth", amount="$99", period="/month",
                      features=["Unlimited accounts", "Audit trail", "Priority support"], highlighted=True),
    ]


@pytest.fixture
def personas() -> list[Persona]:
    return [
        Persona(
            id="p-cfo",
            name="Executive buyer",
            communication_style="executive",
            buyer_journey_stage="decision",
            pain_points=["Slow reporting", "Audit risk"],
            goals=["Faster decisions", "Lower costs"],
            decision_criteria=["ROI", "Security"],
        ),
        Persona(
            id="p-dev",
            name="Technical evaluator",
            communication_style="technical",
            buyer_journey_stage="awareness",
            pain_points=["Brittle integrations"],
            goals=["Reliable APIs"],
            decision_criteria=["API coverage"],
        ),
    ]


@pytest.fixture
def brand() -> BrandVoice:
    return BrandVoice(
        id="brand-1",
        name="Ledgerly",
        tone="confident",
        personality="helpful",
        industry="fintech",
        target_audience="Finance teams",
    )


@pytest.fixture
def store(entities, personas, brand) -> InMemoryKnowledgeStore:
    """In-memory store holding the fixture workspace."""
    return InMemoryKnowledgeStore(
        entities={WORKSPACE_ID: entities},
        personas=personas,
        brand_voices=[brand],
    )


@pytest.fixture
def empty_store() -> InMemoryKnowledgeStore:
    return InMemoryKnowledgeStore()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no retries, a short timeout and no .env file."""
    return Settings(
        _env_file=None,
        synthesis_max_retries=0,
        synthesis_timeout_seconds=5.0,
        log_llm_calls=False,
    )


@pytest.fixture
def failing_synthesizer() -> FakeSynthesizer:
    """Synthesizer whose every call raises a provider error."""
    return FakeSynthesizer(lambda call: ProviderError("service unavailable"))


@pytest.fixture
def workspace_payload(entities, personas, brand) -> dict[str, Any]:
    """JSON workspace file contents for the fixture workspace."""
    return {
        "workspaceId": WORKSPACE_ID,
        "entities": [e.model_dump(by_alias=True) for e in entities],
        "personas": [p.model_dump(by_alias=True) for p in personas],
        "brandVoices": [brand.model_dump(by_alias=True)],
    }
