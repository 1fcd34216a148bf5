"""Content block generation.

Turns classified entities into an ordered, stage-tagged block list that
follows a page template. Stages short of their recommended block count are
topped up with placeholder blocks built from the core narrative; placeholder
blocks never carry entity ids.
"""

import logging
from collections.abc import Callable

from storyforge.knowledge.entities import KnowledgeEntity
from storyforge.storyline.classifier import map_to_content_type
from storyforge.storyline.templates import NarrativeTemplate
from storyforge.storyline.types import (
    DEFAULT_STAGE_TONES,
    BlockContent,
    ContentBlock,
    ContentType,
    CoreNarrative,
    NarrativeRole,
    StorylineHints,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_PRIORITY_BASE = 100
DESCRIPTION_LIMIT = 300

_DEFAULT = "default"

SUGGESTED_COMPONENTS: dict[NarrativeRole, dict[str, tuple[str, ...]]] = {
    NarrativeRole.HOOK: {
        _DEFAULT: ("hero-centered", "hero-split", "hero-video"),
        ContentType.VALUE_PROPOSITION.value: ("hero-centered", "hero-split"),
        ContentType.STATISTIC.value: ("hero-stats", "stats-grid"),
    },
    NarrativeRole.PROBLEM: {
        _DEFAULT: ("pain-points", "problem-solution"),
        ContentType.PAIN_POINT.value: ("pain-points", "problem-agitation"),
        ContentType.STATISTIC.value: ("stats-impact", "stats-grid"),
    },
    NarrativeRole.SOLUTION: {
        _DEFAULT: ("features-grid", "features-alternating"),
        ContentType.FEATURE.value: ("features-grid", "features-cards", "features-tabs"),
        ContentType.BENEFIT.value: ("benefits-list", "benefits-cards"),
        ContentType.PROCESS.value: ("process-steps", "timeline-vertical"),
        ContentType.COMPARISON.value: ("comparison-table", "comparison-cards"),
    },
    NarrativeRole.PROOF: {
        _DEFAULT: ("testimonials-grid", "social-proof"),
        ContentType.TESTIMONIAL.value: (
            "testimonials-carousel", "testimonials-grid", "testimonials-featured"),
        ContentType.CASE_STUDY.value: ("case-study-card", "case-study-featured"),
        ContentType.STATISTIC.value: ("stats-grid", "stats-counter"),
    },
    NarrativeRole.ACTION: {
        _DEFAULT: ("cta-centered", "cta-split"),
        ContentType.CTA.value: ("cta-centered", "cta-banner", "cta-floating"),
    },
}


def suggest_components(stage: NarrativeRole, content_type: ContentType | str | None = None) -> tuple[str, ...]:
    """Component variants suited to a stage and content type."""
    table = SUGGESTED_COMPONENTS[stage]
    key = content_type.value if isinstance(content_type, ContentType) else content_type
    return table.get(key or _DEFAULT, table[_DEFAULT])


def _mentions(entity: KnowledgeEntity, topics: list[str]) -> bool:
    text = f"{entity.name} {entity.description or ''}".lower()
    return any(topic.lower() in text for topic in topics if topic)


def apply_hints(entities: list[KnowledgeEntity], hints: StorylineHints | None) -> list[KnowledgeEntity]:
    """Drop entities mentioning avoided topics and move focus matches first."""
    if hints is None:
        return entities
    kept = [e for e in entities if not _mentions(e, hints.avoid_topics)]
    if hints.focus_areas:
        kept.sort(key=lambda e: 0 if _mentions(e, hints.focus_areas) else 1)
    return kept


def entity_block(stage: NarrativeRole, entity: KnowledgeEntity, position: int) -> ContentBlock:
    """Convert one entity into a content block at ``position`` within its stage."""
    meta = entity.meta
    content_type = map_to_content_type(entity.entity_type)
    bullets = meta.strings("bullets")
    return ContentBlock(
        id=f"{stage.value}-{entity.id}",
        stage=stage,
        priority=position + 1,
        content=BlockContent(
            headline=meta.first_text("name", "title", default=entity.name) or f"{stage.value} content",
            description=entity.description or meta.text("description") or entity.name[:DESCRIPTION_LIMIT],
            content_type=content_type,
            entity_ids=(entity.id,),
            bullets=tuple(bullets) if bullets else None,
        ),
        emotional_tone=DEFAULT_STAGE_TONES[stage],
        suggested_components=suggest_components(stage, content_type),
    )


def _hook_placeholder(narrative: CoreNarrative, index: int) -> tuple[str, str, ContentType]:
    return (
        narrative.value_proposition,
        f'Transform from "{narrative.transformation.before}" to "{narrative.transformation.after}"',
        ContentType.VALUE_PROPOSITION,
    )


def _problem_placeholder(narrative: CoreNarrative, index: int) -> tuple[str, str, ContentType]:
    pain_point = narrative.pain_points[index] if index < len(narrative.pain_points) else None
    return (
        pain_point or "Common Challenge",
        f"Many organizations struggle with {pain_point or 'efficiency'}.",
        ContentType.PAIN_POINT,
    )


def _solution_placeholder(narrative: CoreNarrative, index: int) -> tuple[str, str, ContentType]:
    benefit = narrative.benefits[index] if index < len(narrative.benefits) else None
    differentiator = (
        narrative.differentiators[index] if index < len(narrative.differentiators) else None
    )
    return (
        benefit or differentiator or "Key Feature",
        f"Our solution provides {benefit or 'significant value'}.",
        ContentType.BENEFIT if index < 2 else ContentType.FEATURE,
    )


def _proof_placeholder(narrative: CoreNarrative, index: int) -> tuple[str, str, ContentType]:
    return (
        "Trusted by Industry Leaders",
        "See how organizations have achieved success.",
        ContentType.TESTIMONIAL,
    )


def _action_placeholder(narrative: CoreNarrative, index: int) -> tuple[str, str, ContentType]:
    return (
        "Ready to Get Started?",
        "Take the first step towards transformation.",
        ContentType.CTA,
    )


PLACEHOLDER_BUILDERS: dict[
    NarrativeRole, Callable[[CoreNarrative, int], tuple[str, str, ContentType]]
] = {
    NarrativeRole.HOOK: _hook_placeholder,
    NarrativeRole.PROBLEM: _problem_placeholder,
    NarrativeRole.SOLUTION: _solution_placeholder,
    NarrativeRole.PROOF: _proof_placeholder,
    NarrativeRole.ACTION: _action_placeholder,
}


def placeholder_block(stage: NarrativeRole, narrative: CoreNarrative, index: int) -> ContentBlock:
    """Narrative-derived block for slot ``index`` of a stage with too few entities."""
    headline, description, content_type = PLACEHOLDER_BUILDERS[stage](narrative, index)
    return ContentBlock(
        id=f"{stage.value}-placeholder-{index}",
        stage=stage,
        priority=PLACEHOLDER_PRIORITY_BASE + index,
        content=BlockContent(headline=headline, description=description, content_type=content_type),
        emotional_tone=DEFAULT_STAGE_TONES[stage],
        suggested_components=suggest_components(stage, content_type),
    )


class ContentBlockGenerator:
    """Builds the template-conformant block list for a page.

    Args:
        template: Narrative template of the page type.
    """

    def __init__(self, template: NarrativeTemplate) -> None:
        self.template = template

    def generate_stage_blocks(
        self,
        stage: NarrativeRole,
        entities: list[KnowledgeEntity],
        narrative: CoreNarrative,
    ) -> list[ContentBlock]:
        """Blocks for one stage: entities first, then placeholders up to the target."""
        distribution = self.template.content_distribution[stage]
        target = distribution.recommended
        if target == 0 and entities:
            # Optional stage with material available: use it, within the maximum
            target = min(len(entities), distribution.max)
        if stage in self.template.required_stages:
            target = max(target, 1)

        blocks = [entity_block(stage, entity, i) for i, entity in enumerate(entities[:target])]
        for index in range(len(blocks), target):
            blocks.append(placeholder_block(stage, narrative, index))
        return blocks

    def generate(
        self,
        classified: dict[NarrativeRole, list[KnowledgeEntity]],
        narrative: CoreNarrative,
        hints: StorylineHints | None = None,
        max_blocks: int | None = None,
    ) -> list[ContentBlock]:
        """Generate blocks for every stage in the template's stage order.

        Args:
            classified: Entities partitioned by stage.
            narrative: Core narrative used for placeholder copy.
            hints: Optional focus/avoid hints.
            max_blocks: Optional cap on the total number of blocks.

        Returns:
            Blocks in stage order.
        """
        blocks: list[ContentBlock] = []
        for stage in self.template.stage_order:
            entities = apply_hints(classified.get(stage, []), hints)
            if self.template.content_distribution[stage].recommended == 0 and not entities:
                continue
            blocks.extend(self.generate_stage_blocks(stage, entities, narrative))

        placeholders = sum(1 for b in blocks if b.is_placeholder)
        logger.debug(
            f"Generated {len(blocks)} blocks for {self.template.page_type.value} "
            f"({placeholders} placeholders)"
        )

        if max_blocks is not None and len(blocks) > max_blocks:
            blocks = self._trim(blocks, max_blocks)
        return blocks

    def _trim(self, blocks: list[ContentBlock], max_blocks: int) -> list[ContentBlock]:
        """Drop trailing blocks until under the cap, keeping one block per required stage."""
        kept = list(blocks)
        for block in reversed(blocks):
            if len(kept) <= max_blocks:
                break
            same_stage = sum(1 for b in kept if b.stage == block.stage)
            if block.stage in self.template.required_stages and same_stage == 1:
                continue
            kept.remove(block)
        return kept
