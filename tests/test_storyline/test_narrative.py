"""Tests for core narrative identification."""

import pytest

from storyforge.llm.retry import RetryConfig
from storyforge.llm.structured import SynthesisOptions
from storyforge.storyline.narrative import (
    FALLBACK_AFTER,
    FALLBACK_AUDIENCE,
    FALLBACK_BEFORE,
    FALLBACK_THEME,
    FALLBACK_VALUE_PROPOSITION,
    NarrativeIdentifier,
    describe_brand,
    fallback_narrative,
    summarize_entities,
)
from storyforge.storyline.classifier import group_by_type
from storyforge.storyline.prompts import NARRATIVE_SYSTEM_PROMPT, NO_BRAND_CONTEXT
from tests.factories import NARRATIVE_RESPONSE, FakeSynthesizer, create_entity

NO_RETRY = SynthesisOptions(timeout_seconds=2.0, retry=RetryConfig(max_retries=0))


class TestFallbackNarrative:
    """Tests for the entity-derived narrative."""

    def test_from_entities(self, entities, brand):
        """Test fallback fields come from entity groups."""
        narrative = fallback_narrative(entities, brand)

        assert narrative.central_theme == FALLBACK_THEME
        assert narrative.value_proposition == "Live ledger sync"
        assert narrative.differentiators == ["Live ledger sync", "Audit trail", "Smart matching"]
        assert narrative.target_audience == "Finance teams"
        assert narrative.transformation.before == "Manual reconciliation"
        assert narrative.transformation.after == "Faster close"
        assert narrative.pain_points == ["Manual reconciliation", "Late month-end close"]
        assert narrative.benefits == ["Faster close"]

    def test_proof_elements(self, entities):
        """Test one proof element per present proof type."""
        narrative = fallback_narrative(entities)
        proof = {p.type: (p.count, p.strength) for p in narrative.proof_elements}
        assert proof == {"testimonial": (1, "medium"), "statistic": (1, "medium")}

    def test_many_testimonials_are_high_strength(self):
        """Test more than five items of a proof type yields high strength."""
        testimonials = [create_entity(f"t{i}", "testimonial", f"Quote {i}") for i in range(6)]
        narrative = fallback_narrative(testimonials)
        assert narrative.proof_elements[0].strength == "high"

    def test_without_entities(self):
        """Test defaults fill every field when nothing is known."""
        narrative = fallback_narrative([])

        assert narrative.value_proposition == FALLBACK_VALUE_PROPOSITION
        assert narrative.target_audience == FALLBACK_AUDIENCE
        assert narrative.transformation.before == FALLBACK_BEFORE
        assert narrative.transformation.after == FALLBACK_AFTER
        assert narrative.differentiators == []
        assert narrative.proof_elements == []


class TestPromptContext:
    """Tests for prompt context rendering."""

    def test_summarize_caps_items_per_type(self):
        """Test at most five items per type are listed."""
        features = [create_entity(f"f{i}", "feature", f"Feature {i}") for i in range(7)]
        summary = summarize_entities(group_by_type(features))
        assert summary.startswith("FEATURE (7 items):")
        assert "Feature 4" in summary
        assert "Feature 5" not in summary

    def test_summarize_empty(self):
        """Test an empty workspace has a placeholder summary."""
        assert summarize_entities({}) == "No knowledge base content available."

    def test_describe_brand(self, brand):
        """Test brand voice rendering."""
        text = describe_brand(brand)
        assert "Brand Voice: confident, helpful" in text
        assert "Industry: fintech" in text
        assert describe_brand(None) == NO_BRAND_CONTEXT


class TestNarrativeIdentifier:
    """Tests for NarrativeIdentifier.identify."""

    @pytest.mark.asyncio
    async def test_uses_synthesized_narrative(self, entities, brand):
        """Test a valid response is used as-is."""
        synthesizer = FakeSynthesizer([NARRATIVE_RESPONSE])

        outcome = await NarrativeIdentifier(synthesizer, NO_RETRY).identify(entities, brand)

        assert outcome.used_fallback is False
        assert outcome.tokens_used == 30
        assert outcome.narrative.central_theme == "Ship reports in minutes, not days"
        assert outcome.narrative.proof_elements[0].type == "testimonial"

    @pytest.mark.asyncio
    async def test_prompt_contents(self, entities, brand):
        """Test the prompt carries entity summaries and brand context."""
        synthesizer = FakeSynthesizer([NARRATIVE_RESPONSE])

        await NarrativeIdentifier(synthesizer, NO_RETRY).identify(entities, brand)

        call = synthesizer.calls[0]
        assert call["system_prompt"] == NARRATIVE_SYSTEM_PROMPT
        assert "Live ledger sync" in call["prompt"]
        assert "Industry: fintech" in call["prompt"]
        assert call["max_tokens"] == 1500

    @pytest.mark.asyncio
    async def test_falls_back_on_provider_error(self, entities, failing_synthesizer):
        """Test provider failure yields the entity-derived narrative."""
        outcome = await NarrativeIdentifier(failing_synthesizer, NO_RETRY).identify(entities)

        assert outcome.used_fallback is True
        assert outcome.tokens_used == 0
        assert outcome.narrative == fallback_narrative(entities)

    @pytest.mark.asyncio
    async def test_falls_back_on_invalid_narrative(self, entities):
        """Test a response failing validation yields the fallback."""
        synthesizer = FakeSynthesizer([{"centralTheme": "", "valueProposition": "x"}])

        outcome = await NarrativeIdentifier(synthesizer, NO_RETRY).identify(entities)

        assert outcome.used_fallback is True
        assert outcome.tokens_used == 30
        assert outcome.narrative.central_theme == FALLBACK_THEME
