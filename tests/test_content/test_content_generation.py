"""Tests for synthesis-backed section content generation."""

import pytest
from unittest.mock import AsyncMock

from storyforge.content.generation import (
    FALLBACK_MODEL,
    ContentGenerationAgent,
    calculate_confidence,
    fallback_content,
    fallback_page_metadata,
    generate_content,
    plan_sections,
    source_content,
)
from storyforge.content.prompts import (
    COPYWRITER_SYSTEM_PROMPT,
    PERSONA_SYSTEM_PROMPT,
    SEO_SYSTEM_PROMPT,
)
from storyforge.content.slots import get_required_slots
from storyforge.content.types import (
    ContentGenerationInput,
    ContentHints,
    CTAContent,
    PopulatedContent,
    PricingTier,
    SectionRequest,
)
from storyforge.exceptions import SlotSchemaNotFoundError
from storyforge.llm.exceptions import ProviderError
from storyforge.storyline.generation import StorylineGenerationAgent
from storyforge.storyline.personas import persona_emotional_tone, select_cta_strategy
from storyforge.storyline.types import CTAStrategy, NarrativeRole, PageType, StorylineGenerationInput
from tests.factories import WORKSPACE_ID, FakeSynthesizer, create_entity

H, P, S, PR, A = (
    NarrativeRole.HOOK,
    NarrativeRole.PROBLEM,
    NarrativeRole.SOLUTION,
    NarrativeRole.PROOF,
    NarrativeRole.ACTION,
)

BASE_CONTENT = {
    "headline": "Close faster",
    "description": "Reconcile every account automatically.",
    "primaryCTA": {"text": "Start", "link": "#start"},
    "image": {"src": "hero.png", "alt": "Dashboard"},
}

SEO_CONTENT = {
    "title": "Ledgerly | Close faster",
    "description": "Automated reconciliation for finance teams.",
    "keywords": ["reconciliation", 7],
}


def _script(persona_item=None):
    """Route calls by system prompt."""
    persona_item = persona_item if persona_item is not None else {"headline": "Adapted for you"}

    def respond(call):
        if call["system_prompt"] == COPYWRITER_SYSTEM_PROMPT:
            return BASE_CONTENT
        if call["system_prompt"] == PERSONA_SYSTEM_PROMPT:
            return persona_item
        if call["system_prompt"] == SEO_SYSTEM_PROMPT:
            return SEO_CONTENT
        raise AssertionError(f"unexpected call: {call['system_prompt']}")

    return respond


def _request(sections=None, **overrides) -> ContentGenerationInput:
    values = dict(
        workspace_id=WORKSPACE_ID,
        page_id="page-1",
        page_type=PageType.LANDING,
        sections=sections or [SectionRequest("hero", "hero-split", H, 0)],
        brand_config_id="brand-1",
    )
    values.update(overrides)
    return ContentGenerationInput(**values)


def _agent(store, synthesizer, settings) -> ContentGenerationAgent:
    return ContentGenerationAgent(store, store, store, synthesizer, settings=settings)


def _sourced(entities, role):
    return [s for s in source_content(entities) if s.suggested_stage == role]


async def _landing_storyline(store, settings, synthesizer):
    agent = StorylineGenerationAgent(store, store, store, synthesizer, settings=settings)
    return await agent.generate_storyline(
        StorylineGenerationInput(workspace_id=WORKSPACE_ID, page_type=PageType.LANDING)
    )


class TestFallbackContent:
    """Tests for the per-stage fallback templates."""

    def test_hook_from_entity(self, entities):
        """Test the hook uses the first sourced entity."""
        content = fallback_content(H, _sourced(entities, H))

        assert content.headline == "Close your books in a day"
        assert content.subheadline == "Automated reconciliation that keeps finance teams ahead of month end."
        assert content.primary_cta == CTAContent(text="Get Started", link="#contact", variant="primary")
        assert content.secondary_cta == CTAContent(text="Learn More", link="#features", variant="secondary")

    def test_hook_without_entities(self):
        """Test the hook has generic copy with nothing sourced."""
        content = fallback_content(H, [])

        assert content.headline == "Transform Your Business"
        assert content.subheadline == "Discover a better way forward"

    def test_problem(self, entities):
        """Test pain points become feature items."""
        content = fallback_content(P, _sourced(entities, P))

        assert content.section_title == "Common Challenges"
        assert [f.title for f in content.features] == ["Manual reconciliation", "Late month-end close"]
        assert content.features[0].description == "Teams spend days matching transactions by hand."

    def test_solution_caps_features(self):
        """Test at most six solution features are listed."""
        features = [create_entity(f"f{i}", "feature", f"Feature {i}") for i in range(8)]

        content = fallback_content(S, source_content(features))

        assert content.section_title == "Our Solution"
        assert len(content.features) == 6

    def test_proof(self, entities):
        """Test testimonials and statistics come from their entities."""
        content = fallback_content(PR, _sourced(entities, PR))

        assert content.section_title == "Trusted by Industry Leaders"
        assert content.testimonials[0].author == "Dana Reyes"
        assert content.testimonials[0].quote.startswith("We cut our monthly close")
        assert content.statistics[0].value == "80%"
        assert content.statistics[0].label == "less manual work"

    def test_proof_without_entities(self):
        """Test empty proof lists are left unset."""
        content = fallback_content(PR, [])

        assert content.testimonials is None
        assert content.statistics is None

    def test_action(self):
        """Test the action template."""
        content = fallback_content(A, [])

        assert content.headline == "Ready to Get Started?"
        assert content.primary_cta.text == "Start Free Trial"
        assert content.secondary_cta.link == "#demo"


class TestCalculateConfidence:
    """Tests for calculate_confidence."""

    def test_share_of_required_slots(self):
        """Test three of four required hero-split slots give 0.75."""
        content = fallback_content(H, [])
        assert calculate_confidence(content, get_required_slots("hero-split")) == 0.75

    def test_no_required_slots(self):
        """Test content without requirements is all or nothing."""
        assert calculate_confidence(PopulatedContent(), []) == 0.0
        assert calculate_confidence(PopulatedContent(headline="Hi"), []) == 1.0

    def test_empty_values_not_counted(self):
        """Test empty lists do not fill a required slot."""
        content = PopulatedContent(section_title="Features", features=[])
        assert calculate_confidence(content, ["sectionTitle", "features"]) == 0.5


class TestFallbackPageMetadata:
    """Tests for fallback_page_metadata."""

    def test_from_headline(self):
        """Test title and description are truncated from the hook copy."""
        metadata = fallback_page_metadata("landing", "H" * 80, "D" * 200, "Ledgerly", ["fintech"])

        assert metadata.title == "H" * 60
        assert metadata.description == "D" * 160
        assert metadata.keywords == ["fintech"]

    def test_without_hook(self):
        """Test brand-based defaults apply without hook copy."""
        metadata = fallback_page_metadata("landing", "", "", "Ledgerly", [])

        assert metadata.title == "Ledgerly - landing"
        assert metadata.description == "Discover what Ledgerly can do for you."
        assert metadata.keywords == ["Ledgerly", "landing"]


class TestContentGenerationAgent:
    """Tests for ContentGenerationAgent.generate_content."""

    @pytest.mark.asyncio
    async def test_synthesized_section(self, store, test_settings):
        """Test synthesized content, persona variations and SEO metadata."""
        synthesizer = FakeSynthesizer(_script())

        result = await _agent(store, synthesizer, test_settings).generate_content(
            _request(persona_ids=["p-cfo", "p-dev"])
        )

        section = result.sections[0]
        assert section.content.headline == "Close faster"
        assert section.content.primary_cta.variant == "primary"
        assert section.metadata.used_fallback is False
        assert section.metadata.model_used == "fake-model"
        assert section.metadata.confidence_score == 1.0
        assert section.metadata.tokens_used == 90
        assert section.metadata.source_entity_ids == ["e-vp"]

        assert set(section.persona_variations) == {"p-cfo", "p-dev"}
        cfo = section.persona_variations["p-cfo"]
        assert cfo.adapted is True
        assert cfo.content.headline == "Adapted for you"
        assert cfo.cta_approach == CTAStrategy.DIRECT_OFFER

        assert result.page_metadata.title == "Ledgerly | Close faster"
        assert result.page_metadata.keywords == ["reconciliation"]
        assert result.generation_stats.total_tokens_used == 120
        assert result.generation_stats.fallbacks_used == 0
        assert result.generation_stats.persona_fallbacks_used == 0

    @pytest.mark.asyncio
    async def test_section_prompt(self, store, test_settings):
        """Test the section prompt carries sourced facts, brand and slot schema."""
        synthesizer = FakeSynthesizer(_script())

        await _agent(store, synthesizer, test_settings).generate_content(_request())

        call = next(c for c in synthesizer.calls if c["system_prompt"] == COPYWRITER_SYSTEM_PROMPT)
        assert "Close your books in a day" in call["prompt"]
        assert "Brand: Ledgerly" in call["prompt"]
        assert "headline (REQUIRED) [0-80 chars]: Main Headline" in call["prompt"]
        assert call["temperature"] == 0.7
        assert call["max_tokens"] == 2000

    @pytest.mark.asyncio
    async def test_synthesis_failure_uses_fallback(self, store, test_settings, failing_synthesizer):
        """Test a failing synthesizer still fills the hero."""
        result = await _agent(store, failing_synthesizer, test_settings).generate_content(_request())

        section = result.sections[0]
        assert section.content.headline
        assert section.content.description
        assert section.content.primary_cta is not None
        assert section.metadata.used_fallback is True
        assert section.metadata.model_used == FALLBACK_MODEL
        assert section.metadata.confidence_score == 0.75
        assert result.generation_stats.fallbacks_used == 1
        assert result.generation_stats.sections_generated == 1
        assert result.generation_stats.total_tokens_used == 0

    @pytest.mark.asyncio
    async def test_page_metadata_fallback(self, store, test_settings, failing_synthesizer):
        """Test SEO metadata falls back to the hook copy and hint keywords."""
        request = _request(hints=ContentHints(focus_keywords=["close"]))

        result = await _agent(store, failing_synthesizer, test_settings).generate_content(request)

        assert result.page_metadata.title == "Close your books in a day"
        assert result.page_metadata.keywords == ["close", "fintech"]

    @pytest.mark.asyncio
    async def test_persona_fallback(self, store, test_settings, personas):
        """Test failed persona adaptations keep the base content and are counted."""
        synthesizer = FakeSynthesizer(_script(persona_item=ProviderError("overloaded")))

        result = await _agent(store, synthesizer, test_settings).generate_content(
            _request(persona_ids=["p-cfo", "p-dev"])
        )

        section = result.sections[0]
        for persona in personas:
            variation = section.persona_variations[persona.id]
            assert variation.adapted is False
            assert variation.content == section.content
            assert variation.emotional_tone == persona_emotional_tone(persona, H)
            assert variation.cta_approach == select_cta_strategy(persona)
        assert result.generation_stats.persona_fallbacks_used == 2
        assert result.generation_stats.fallbacks_used == 0
        assert result.generation_stats.total_tokens_used == 60

    @pytest.mark.asyncio
    async def test_malformed_pricing_keeps_every_section(self, store, test_settings):
        """Test a pricing tier with non-list features does not abort the page."""

        def respond(call):
            if call["system_prompt"] == COPYWRITER_SYSTEM_PROMPT:
                return {"pricingTiers": [{"name": "Pro", "features": 5}]}
            return ProviderError("overloaded")

        sections = [
            SectionRequest("plans", "pricing-tiers", S, 0),
            SectionRequest("signup", "cta-centered", A, 1),
        ]

        result = await _agent(store, FakeSynthesizer(respond), test_settings).generate_content(
            _request(sections, page_type=PageType.PRICING, persona_ids=["p-cfo"])
        )

        assert [s.section_id for s in result.sections] == ["plans", "signup"]
        plans = result.sections[0]
        assert plans.content.pricing_tiers == [PricingTier(name="Pro")]
        assert plans.metadata.used_fallback is False
        assert plans.persona_variations["p-cfo"].adapted is False
        assert result.generation_stats.sections_generated == 2
        assert result.generation_stats.fallbacks_used == 0

    @pytest.mark.asyncio
    async def test_fact_fetch_failure(self, store, test_settings, failing_synthesizer):
        """Test a failing fact store yields generic fallback copy."""
        store.fetch_entities = AsyncMock(side_effect=ConnectionError("database down"))

        result = await _agent(store, failing_synthesizer, test_settings).generate_content(_request())

        assert result.sections[0].content.headline == "Transform Your Business"
        assert result.sections[0].metadata.source_entity_ids == []

    @pytest.mark.asyncio
    async def test_unknown_component(self, store, test_settings):
        """Test an unregistered component raises before any synthesis."""
        synthesizer = FakeSynthesizer(_script())
        sections = [
            SectionRequest("hero", "hero-split", H, 0),
            SectionRequest("mystery", "hero-holographic", H, 1),
        ]

        with pytest.raises(SlotSchemaNotFoundError):
            await _agent(store, synthesizer, test_settings).generate_content(_request(sections))

        assert synthesizer.calls == []


class TestPlanSections:
    """Tests for building section requests from a storyline."""

    @pytest.mark.asyncio
    async def test_one_section_per_stage(self, store, test_settings, failing_synthesizer):
        """Test each stage contributes its highest-priority block."""
        storyline = await _landing_storyline(store, test_settings, failing_synthesizer)
        sections = plan_sections(storyline)

        assert [s.section_id for s in sections] == [
            "section-1-hook",
            "section-2-problem",
            "section-3-solution",
            "section-4-proof",
            "section-5-action",
        ]
        assert [s.component_id for s in sections] == [
            "hero-centered",
            "features-grid",
            "features-grid",
            "testimonials-carousel",
            "cta-centered",
        ]
        assert [s.content_block.id for s in sections] == [
            "hook-e-vp",
            "problem-e-pain-1",
            "solution-e-feat-1",
            "proof-e-test",
            "action-e-cta",
        ]
        assert [s.order for s in sections] == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_component_override(self, store, test_settings, failing_synthesizer):
        """Test explicit components win over suggestions."""
        storyline = await _landing_storyline(store, test_settings, failing_synthesizer)
        sections = plan_sections(storyline, {H: "hero-split"})
        assert sections[0].component_id == "hero-split"

    @pytest.mark.asyncio
    async def test_planned_page_generates(self, store, test_settings, failing_synthesizer):
        """Test a planned page fills every section from fallbacks."""
        storyline = await _landing_storyline(store, test_settings, failing_synthesizer)
        result = await generate_content(
            _request(plan_sections(storyline)),
            fact_store=store,
            persona_store=store,
            brand_store=store,
            synthesizer=failing_synthesizer,
            settings=test_settings,
        )

        assert len(result.sections) == 5
        assert result.generation_stats.sections_generated == 5
        assert result.generation_stats.fallbacks_used == 5
        assert result.generation_stats.average_confidence == 1.0
        assert result.sections[1].content.section_title == "Common Challenges"
