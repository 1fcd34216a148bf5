"""Tests for content block generation."""

from storyforge.storyline.blocks import (
    PLACEHOLDER_PRIORITY_BASE,
    ContentBlockGenerator,
    apply_hints,
    entity_block,
    placeholder_block,
    suggest_components,
)
from storyforge.storyline.classifier import classify_entities
from storyforge.storyline.narrative import fallback_narrative
from storyforge.storyline.templates import get_template
from storyforge.storyline.types import (
    ContentType,
    CoreNarrative,
    NarrativeRole,
    PageType,
    StorylineHints,
)
from tests.factories import NARRATIVE_RESPONSE, create_entity


def _landing_generator() -> ContentBlockGenerator:
    return ContentBlockGenerator(get_template(PageType.LANDING))


class TestSuggestComponents:
    """Tests for component suggestions."""

    def test_content_type_specific(self):
        """Test a known content type selects its own components."""
        assert suggest_components(NarrativeRole.SOLUTION, ContentType.BENEFIT) == (
            "benefits-list",
            "benefits-cards",
        )

    def test_default_for_stage(self):
        """Test unknown or missing content types use the stage default."""
        assert suggest_components(NarrativeRole.ACTION) == ("cta-centered", "cta-split")
        assert suggest_components(NarrativeRole.ACTION, ContentType.FAQ) == ("cta-centered", "cta-split")


class TestEntityBlock:
    """Tests for entity-backed blocks."""

    def test_fields(self, entities):
        """Test an entity becomes a sourced block."""
        feature = entities[3]
        block = entity_block(NarrativeRole.SOLUTION, feature, 0)

        assert block.id == "solution-e-feat-1"
        assert block.priority == 1
        assert block.content.headline == "Live ledger sync"
        assert block.content.content_type == ContentType.FEATURE
        assert block.content.entity_ids == ("e-feat-1",)
        assert not block.is_placeholder

    def test_metadata_title_and_bullets(self):
        """Test metadata title and bullets are used when present."""
        entity = create_entity("e1", "benefit", "Benefit", title="Save time", bullets=["Fast", "Easy"])
        block = entity_block(NarrativeRole.SOLUTION, entity, 2)

        assert block.content.headline == "Save time"
        assert block.content.bullets == ("Fast", "Easy")
        assert block.priority == 3

    def test_description_falls_back_to_name(self):
        """Test entities without description use their name."""
        block = entity_block(NarrativeRole.ACTION, create_entity("e1", "cta", "Book a demo"), 0)
        assert block.content.description == "Book a demo"


class TestPlaceholderBlock:
    """Tests for narrative-derived placeholder blocks."""

    def test_placeholder_has_no_sources(self):
        """Test placeholders carry no entity ids and high priority numbers."""
        narrative = CoreNarrative.model_validate(NARRATIVE_RESPONSE)
        block = placeholder_block(NarrativeRole.HOOK, narrative, 0)

        assert block.is_placeholder
        assert block.content.entity_ids == ()
        assert block.priority == PLACEHOLDER_PRIORITY_BASE
        assert block.id == "hook-placeholder-0"
        assert block.content.headline == "Automated reporting for finance teams"
        assert "Spreadsheet chaos" in block.content.description

    def test_problem_placeholder_uses_pain_points(self):
        """Test problem placeholders walk the narrative pain points."""
        narrative = CoreNarrative.model_validate(NARRATIVE_RESPONSE)

        second = placeholder_block(NarrativeRole.PROBLEM, narrative, 1)
        third = placeholder_block(NarrativeRole.PROBLEM, narrative, 2)

        assert second.content.headline == "Late close"
        assert third.content.headline == "Common Challenge"
        assert third.priority == PLACEHOLDER_PRIORITY_BASE + 2


class TestApplyHints:
    """Tests for focus and avoid hints."""

    def test_avoid_topics(self, entities):
        """Test entities mentioning avoided topics are dropped."""
        kept = apply_hints(entities, StorylineHints(avoid_topics=["MANUAL"]))
        ids = {e.id for e in kept}
        assert "e-pain-1" not in ids
        assert "e-stat" not in ids

    def test_focus_areas_first(self, entities):
        """Test focus matches move first, keeping relative order otherwise."""
        features = entities[3:6]
        kept = apply_hints(features, StorylineHints(focus_areas=["audit"]))
        assert [e.id for e in kept] == ["e-feat-2", "e-feat-1", "e-feat-3"]

    def test_no_hints(self, entities):
        """Test None hints leave entities unchanged."""
        assert apply_hints(entities, None) is entities


class TestContentBlockGenerator:
    """Tests for ContentBlockGenerator.generate."""

    def test_landing_with_entities(self, entities):
        """Test entities fill stages up to their recommended counts."""
        narrative = fallback_narrative(entities)

        blocks = _landing_generator().generate(classify_entities(entities), narrative)

        assert [b.id for b in blocks] == [
            "hook-e-vp",
            "problem-e-pain-1",
            "solution-e-feat-1",
            "solution-e-feat-2",
            "solution-e-feat-3",
            "proof-e-test",
            "proof-e-stat",
            "action-e-cta",
            "action-e-price",
        ]
        assert not any(b.is_placeholder for b in blocks)

    def test_landing_without_entities(self):
        """Test every required stage still gets at least one block."""
        narrative = fallback_narrative([])
        template = get_template(PageType.LANDING)

        blocks = _landing_generator().generate(classify_entities([]), narrative)

        assert all(b.is_placeholder for b in blocks)
        for stage in template.required_stages:
            assert any(b.stage == stage for b in blocks)
        assert len(blocks) == sum(r.recommended for r in template.content_distribution.values())

    def test_top_up_with_placeholders(self):
        """Test a stage short of entities is topped up after the real ones."""
        entities = [create_entity("e-f", "feature", "Only feature")]
        narrative = fallback_narrative(entities)

        blocks = _landing_generator().generate(classify_entities(entities), narrative)

        solution = [b for b in blocks if b.stage == NarrativeRole.SOLUTION]
        assert [b.is_placeholder for b in solution] == [False, True, True]
        assert solution[0].priority < solution[1].priority < solution[2].priority

    def test_stages_outside_template_ignored(self, entities):
        """Test entities of stages the page does not use produce no blocks."""
        generator = ContentBlockGenerator(get_template(PageType.LEGAL))

        blocks = generator.generate(classify_entities(entities), fallback_narrative(entities))

        assert {b.stage for b in blocks} == {NarrativeRole.HOOK, NarrativeRole.SOLUTION}

    def test_max_blocks_trims_tail(self, entities):
        """Test max_blocks drops trailing blocks."""
        blocks = _landing_generator().generate(
            classify_entities(entities), fallback_narrative(entities), max_blocks=4
        )

        assert [b.id for b in blocks] == [
            "hook-e-vp",
            "problem-e-pain-1",
            "solution-e-feat-1",
            "action-e-cta",
        ]

    def test_max_blocks_keeps_required_stages(self):
        """Test trimming never removes the last block of a required stage."""
        blocks = _landing_generator().generate(classify_entities([]), fallback_narrative([]), max_blocks=1)

        assert [b.stage for b in blocks] == [
            NarrativeRole.HOOK,
            NarrativeRole.SOLUTION,
            NarrativeRole.ACTION,
        ]
