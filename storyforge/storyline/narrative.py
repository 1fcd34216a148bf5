"""Core narrative identification.

Asks the synthesizer for a ``CoreNarrative`` and falls back to a narrative
derived directly from the entities when the call fails or the response does
not validate.
"""

import logging
from dataclasses import dataclass

from storyforge.knowledge.entities import BrandVoice, KnowledgeEntity
from storyforge.llm.base import TextSynthesizer
from storyforge.llm.structured import SynthesisOptions, request_json
from storyforge.storyline.classifier import group_by_type
from storyforge.storyline.prompts import NARRATIVE_PROMPT, NARRATIVE_SYSTEM_PROMPT, NO_BRAND_CONTEXT
from storyforge.storyline.types import CoreNarrative, ProofElement, Transformation

logger = logging.getLogger(__name__)

SUMMARY_ITEMS_PER_TYPE = 5

FALLBACK_THEME = "Transform your business with our innovative solution"
FALLBACK_VALUE_PROPOSITION = "Comprehensive solution for your needs"
FALLBACK_AUDIENCE = "Business professionals seeking efficiency and growth"
FALLBACK_BEFORE = "Manual, time-consuming processes"
FALLBACK_AFTER = "Streamlined, automated workflows"

PAIN_POINT_TYPES = ("pain_point", "challenge", "problem")
PROOF_TYPES = ("testimonial", "case_study", "statistic")
HIGH_STRENGTH_THRESHOLD = 5


@dataclass(frozen=True)
class NarrativeOutcome:
    narrative: CoreNarrative
    used_fallback: bool
    tokens_used: int = 0


def summarize_entities(grouped: dict[str, list[KnowledgeEntity]]) -> str:
    """Render up to five entities per type as prompt context."""
    sections = []
    for entity_type, items in grouped.items():
        lines = [f"- {entity.summary()}" for entity in items[:SUMMARY_ITEMS_PER_TYPE]]
        sections.append(f"{entity_type.upper()} ({len(items)} items):\n" + "\n".join(lines))
    return "\n\n".join(sections) or "No knowledge base content available."


def describe_brand(brand: BrandVoice | None) -> str:
    if brand is None:
        return NO_BRAND_CONTEXT
    voice = ", ".join(v for v in (brand.tone, brand.personality) if v) or "Not specified"
    return (
        f"Brand Voice: {voice}\n"
        f"Target Audience: {brand.target_audience or 'Not specified'}\n"
        f"Industry: {brand.industry or 'Not specified'}"
    )


def fallback_narrative(
    entities: list[KnowledgeEntity],
    brand: BrandVoice | None = None,
) -> CoreNarrative:
    """Derive a usable narrative from entity groups alone."""
    grouped = group_by_type(entities)
    features = [e.name for e in grouped.get("feature", [])]
    benefits = [e.name for e in grouped.get("benefit", [])]
    pain_points = [e.name for t in PAIN_POINT_TYPES for e in grouped.get(t, [])]

    proof_elements = []
    for proof_type in PROOF_TYPES:
        count = len(grouped.get(proof_type, []))
        if count > 0:
            strength = "high" if count > HIGH_STRENGTH_THRESHOLD else "medium"
            proof_elements.append(ProofElement(type=proof_type, count=count, strength=strength))

    return CoreNarrative(
        central_theme=FALLBACK_THEME,
        value_proposition=features[0] if features else FALLBACK_VALUE_PROPOSITION,
        differentiators=features[:3],
        target_audience=(brand.target_audience if brand and brand.target_audience else FALLBACK_AUDIENCE),
        transformation=Transformation(
            before=pain_points[0] if pain_points else FALLBACK_BEFORE,
            after=benefits[0] if benefits else FALLBACK_AFTER,
        ),
        pain_points=pain_points[:5],
        benefits=benefits[:5],
        proof_elements=proof_elements,
    )


class NarrativeIdentifier:
    """Identifies the core narrative for a set of knowledge entities.

    Args:
        synthesizer: Injected text synthesizer.
        options: Timeout/retry policy for the synthesis call.
    """

    def __init__(
        self,
        synthesizer: TextSynthesizer,
        options: SynthesisOptions | None = None,
    ) -> None:
        self.synthesizer = synthesizer
        self.options = options or SynthesisOptions()

    async def identify(
        self,
        entities: list[KnowledgeEntity],
        brand: BrandVoice | None = None,
    ) -> NarrativeOutcome:
        prompt = NARRATIVE_PROMPT.format(
            content_summary=summarize_entities(group_by_type(entities)),
            brand_context=describe_brand(brand),
        )
        result = await request_json(
            self.synthesizer,
            prompt,
            system_prompt=NARRATIVE_SYSTEM_PROMPT,
            response_model=CoreNarrative,
            max_tokens=1500,
            temperature=0.7,
            options=self.options,
        )
        if result.ok:
            return NarrativeOutcome(narrative=result.value, used_fallback=False, tokens_used=result.tokens_used)

        logger.warning(
            f"Narrative identification fell back to entity-derived narrative "
            f"({result.failure.reason.value})"
        )
        return NarrativeOutcome(
            narrative=fallback_narrative(entities, brand),
            used_fallback=True,
            tokens_used=result.tokens_used,
        )
