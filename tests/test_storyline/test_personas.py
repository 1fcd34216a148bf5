"""Tests for persona adaptation."""

import pytest

from storyforge.knowledge import ContentPreferences, Persona
from storyforge.storyline.personas import (
    DEFAULT_PROOF_PRIORITY,
    PersonaAdaptationEngine,
    emotional_adjustments,
    persona_cta_text,
    persona_emotional_tone,
    persona_emphasis,
    select_content_density,
    select_cta_strategy,
    select_hook_strategy,
    select_proof_priority,
)
from storyforge.storyline.templates import HOOK_STRATEGY_PROMPTS, get_default_story_flow
from storyforge.storyline.types import (
    ContentType,
    CoreNarrative,
    CTAStrategy,
    EmotionalTone,
    HookStrategy,
    NarrativeRole,
    PageType,
)
from tests.factories import NARRATIVE_RESPONSE, create_block


@pytest.fixture
def executive(personas) -> Persona:
    return personas[0]


@pytest.fixture
def technical(personas) -> Persona:
    return personas[1]


@pytest.fixture
def business() -> Persona:
    return Persona(id="p-ops", name="Operations manager", goals=["Reliable processes"])


@pytest.fixture
def narrative() -> CoreNarrative:
    return CoreNarrative.model_validate(NARRATIVE_RESPONSE)


class TestStrategySelection:
    """Tests for the pure strategy selectors."""

    def test_executive_decision(self, executive):
        """Test an executive at decision stage."""
        assert select_hook_strategy(executive) == HookStrategy.SOCIAL_PROOF_LEAD
        assert select_cta_strategy(executive) == CTAStrategy.DIRECT_OFFER
        assert select_proof_priority(executive) == (ContentType.CASE_STUDY, ContentType.STATISTIC, "award")
        assert select_content_density(executive) == "concise"

    def test_technical_awareness(self, technical):
        """Test a technical reader at awareness stage."""
        assert select_hook_strategy(technical) == HookStrategy.SURPRISING_STATISTIC
        assert select_cta_strategy(technical) == CTAStrategy.SOFT_COMMITMENT
        assert select_content_density(technical) == "detailed"

    def test_business_consideration(self, business):
        """Test the default business persona."""
        assert select_hook_strategy(business) == HookStrategy.BOLD_STATEMENT
        assert select_cta_strategy(business) == CTAStrategy.VALUE_RECAP
        assert select_proof_priority(business) == DEFAULT_PROOF_PRIORITY
        assert select_content_density(business) == "balanced"

    @pytest.mark.parametrize(
        "stage,expected",
        [
            ("awareness", HookStrategy.PROBLEM_AGITATION),
            ("decision", HookStrategy.TRANSFORMATION_PREVIEW),
        ],
    )
    def test_business_hook_by_journey_stage(self, stage, expected):
        """Test business personas pick hooks by journey stage."""
        persona = Persona(id="p", name="P", buyer_journey_stage=stage)
        assert select_hook_strategy(persona) == expected

    def test_preferred_format_overrides_density(self, technical):
        """Test an explicit format preference wins over style."""
        persona = technical.model_copy(update={"content_preferences": ContentPreferences(preferred_format="summary")})
        assert select_content_density(persona) == "concise"

    def test_emotional_adjustments(self, executive, business):
        """Test multipliers depend on the journey stage."""
        assert emotional_adjustments(executive) == {NarrativeRole.ACTION: 1.4, NarrativeRole.PROOF: 1.3}
        assert emotional_adjustments(business) == {NarrativeRole.SOLUTION: 1.3, NarrativeRole.PROOF: 1.2}

    def test_cta_text(self, executive, technical, business):
        """Test CTA wording per persona."""
        assert persona_cta_text(executive) == "Schedule Executive Briefing"
        assert persona_cta_text(technical) == "Learn More"
        assert persona_cta_text(business) == "See How It Works"
        assert persona_cta_text(Persona(id="d", name="D", buyer_journey_stage="decision")) == "Start Free Trial"

    def test_emotional_tone(self, executive, technical, business):
        """Test tone selection per communication style."""
        assert persona_emotional_tone(executive, NarrativeRole.PROOF) == EmotionalTone.CONFIDENCE
        assert persona_emotional_tone(executive, NarrativeRole.HOOK) == EmotionalTone.TRUST
        assert persona_emotional_tone(technical, NarrativeRole.SOLUTION) == EmotionalTone.CURIOSITY
        assert persona_emotional_tone(business, NarrativeRole.PROBLEM) == EmotionalTone.EMPATHY

    def test_emphasis(self, executive):
        """Test per-stage talking points."""
        assert persona_emphasis(executive, NarrativeRole.HOOK) == ["Faster decisions", "Lower costs"]
        assert persona_emphasis(executive, NarrativeRole.PROBLEM) == ["Slow reporting", "Audit risk"]
        assert persona_emphasis(executive, NarrativeRole.PROOF) == ["ROI", "reliability", "peer validation"]


class TestPersonaAdaptationEngine:
    """Tests for building persona variations."""

    def test_build_adaptation(self, executive, narrative):
        """Test the adaptation bundles every strategy choice."""
        adaptation = PersonaAdaptationEngine().build_adaptation(executive, narrative)

        assert adaptation.persona_id == "p-cfo"
        assert adaptation.problem_framing.emphasis == ("Slow reporting", "Audit risk")
        assert adaptation.problem_framing.quantification == "executive"
        # "Faster decisions" matches the "Faster close" benefit on its first word
        assert adaptation.solution_emphasis == ("Faster close",)

    def test_solution_emphasis_defaults_to_benefits(self, business, narrative):
        """Test personas with no matching goals emphasize the top benefits."""
        adaptation = PersonaAdaptationEngine().build_adaptation(business, narrative)
        assert adaptation.solution_emphasis == ("Faster close", "Fewer errors")

    def test_adapt_flow_descriptions(self, executive, narrative):
        """Test stage descriptions reflect the persona's strategies."""
        engine = PersonaAdaptationEngine()
        adaptation = engine.build_adaptation(executive, narrative)

        flow = engine.adapt_flow(get_default_story_flow(PageType.HOME), adaptation)

        descriptions = {stage.narrative_role: stage.description for stage in flow.stages}
        assert descriptions[NarrativeRole.HOOK].startswith(HOOK_STRATEGY_PROMPTS[HookStrategy.SOCIAL_PROOF_LEAD])
        assert descriptions[NarrativeRole.PROOF] == "Prioritize: case_study, statistic, award"
        assert flow.roles == get_default_story_flow(PageType.HOME).roles

    def test_adapt_blocks_promotes_preferred_proof(self, executive, narrative):
        """Test preferred proof types move up while others keep their priority."""
        engine = PersonaAdaptationEngine()
        adaptation = engine.build_adaptation(executive, narrative)
        blocks = [
            create_block("quote", NarrativeRole.PROOF, ContentType.TESTIMONIAL, priority=1),
            create_block("case", NarrativeRole.PROOF, ContentType.CASE_STUDY, priority=25),
            create_block("stat", NarrativeRole.PROOF, ContentType.STATISTIC, priority=50),
            create_block("feature", NarrativeRole.SOLUTION, ContentType.STATISTIC, priority=50),
        ]

        adapted = {b.id: b for b in engine.adapt_blocks(blocks, adaptation)}

        assert adapted["quote"].priority == 1
        assert adapted["case"].priority == 1
        assert adapted["stat"].priority == 30
        assert adapted["feature"].priority == 50
        assert all(b.target_personas == ("p-cfo",) for b in adapted.values())

    def test_create_variation(self, executive, narrative):
        """Test a full variation carries overrides and targeted blocks."""
        engine = PersonaAdaptationEngine()
        blocks = [create_block("hook", NarrativeRole.HOOK)]

        variation = engine.create_variation(
            executive, narrative, get_default_story_flow(PageType.HOME), blocks
        )

        assert variation.persona_id == "p-cfo"
        assert variation.section_overrides[NarrativeRole.ACTION].cta_text == "Schedule Executive Briefing"
        assert variation.section_overrides[NarrativeRole.SOLUTION].emphasis == ("ROI", "Security")
        assert variation.content_blocks[0].target_personas == ("p-cfo",)

    def test_overrides_fall_back_to_narrative(self, narrative):
        """Test empty persona lists fall back to narrative pain points and benefits."""
        persona = Persona(id="p", name="Blank")

        overrides = PersonaAdaptationEngine().section_overrides(persona, narrative)

        assert overrides[NarrativeRole.PROBLEM].emphasis == ("Manual reconciliation", "Late close")
        assert overrides[NarrativeRole.SOLUTION].emphasis == ("Faster close", "Fewer errors")
