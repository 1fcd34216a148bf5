"""Persona adaptation engine.

Strategy selection is a set of pure functions of a persona's communication
style and buyer journey stage. ``PersonaAdaptationEngine`` combines them into
a ``PersonaStoryVariation``: adapted flow descriptions, re-weighted blocks and
per-stage section overrides.
"""

from dataclasses import replace

from storyforge.knowledge.entities import Persona
from storyforge.storyline.templates import CTA_STRATEGY_PROMPTS, HOOK_STRATEGY_PROMPTS
from storyforge.storyline.types import (
    ContentBlock,
    ContentType,
    CoreNarrative,
    CTAStrategy,
    EmotionalTone,
    HookStrategy,
    NarrativeRole,
    PersonaNarrativeAdaptation,
    PersonaStoryVariation,
    ProblemFraming,
    SectionOverride,
    StoryFlow,
    DEFAULT_STAGE_TONES,
)

MIN_ADJUSTMENT = 0.5
MAX_ADJUSTMENT = 1.5
PROOF_PROMOTION_STEP = 10

EMOTIONAL_ADJUSTMENTS: dict[str, dict[NarrativeRole, float]] = {
    "awareness": {NarrativeRole.PROBLEM: 1.3, NarrativeRole.HOOK: 1.2},
    "consideration": {NarrativeRole.SOLUTION: 1.3, NarrativeRole.PROOF: 1.2},
    "decision": {NarrativeRole.ACTION: 1.4, NarrativeRole.PROOF: 1.3},
}

PROOF_PRIORITIES: dict[str, tuple[ContentType | str, ...]] = {
    "executive": (ContentType.CASE_STUDY, ContentType.STATISTIC, "award"),
    "technical": (ContentType.STATISTIC, "certification", ContentType.CASE_STUDY),
}
DEFAULT_PROOF_PRIORITY = (ContentType.TESTIMONIAL, ContentType.CASE_STUDY, ContentType.STATISTIC)

DEFAULT_DENSITY = {"technical": "detailed", "executive": "concise"}
FORMAT_DENSITY = {"detailed": "detailed", "summary": "concise"}

STAGE_EMPHASIS_DEFAULTS: dict[NarrativeRole, tuple[str, ...]] = {
    NarrativeRole.PROOF: ("ROI", "reliability", "peer validation"),
    NarrativeRole.ACTION: ("low risk", "quick start", "support"),
}


def select_hook_strategy(persona: Persona) -> HookStrategy:
    if persona.communication_style == "executive":
        return HookStrategy.SOCIAL_PROOF_LEAD
    if persona.communication_style == "technical":
        return HookStrategy.SURPRISING_STATISTIC
    if persona.buyer_journey_stage == "awareness":
        return HookStrategy.PROBLEM_AGITATION
    if persona.buyer_journey_stage == "decision":
        return HookStrategy.TRANSFORMATION_PREVIEW
    return HookStrategy.BOLD_STATEMENT


def select_cta_strategy(persona: Persona) -> CTAStrategy:
    if persona.buyer_journey_stage == "decision":
        return CTAStrategy.DIRECT_OFFER
    if persona.buyer_journey_stage == "awareness":
        return CTAStrategy.SOFT_COMMITMENT
    return CTAStrategy.VALUE_RECAP


def select_proof_priority(persona: Persona) -> tuple[ContentType | str, ...]:
    """Proof types in preference order.

    Awards and certifications are not block content types, so they appear
    as plain strings and never match a block.
    """
    return PROOF_PRIORITIES.get(persona.communication_style, DEFAULT_PROOF_PRIORITY)


def select_content_density(persona: Persona) -> str:
    preferred = persona.content_preferences.preferred_format
    if preferred in FORMAT_DENSITY:
        return FORMAT_DENSITY[preferred]
    return DEFAULT_DENSITY.get(persona.communication_style, "balanced")


def emotional_adjustments(persona: Persona) -> dict[NarrativeRole, float]:
    """Per-stage intensity multipliers, clamped to [0.5, 1.5]."""
    adjustments = EMOTIONAL_ADJUSTMENTS.get(persona.buyer_journey_stage, {})
    return {
        stage: min(MAX_ADJUSTMENT, max(MIN_ADJUSTMENT, factor))
        for stage, factor in adjustments.items()
    }


def persona_emotional_tone(persona: Persona, stage: NarrativeRole) -> EmotionalTone:
    """Tone a section should take for a persona."""
    if persona.communication_style == "executive":
        return EmotionalTone.CONFIDENCE if stage == NarrativeRole.PROOF else EmotionalTone.TRUST
    if persona.communication_style == "technical":
        return EmotionalTone.CURIOSITY if stage == NarrativeRole.SOLUTION else EmotionalTone.CONFIDENCE
    return DEFAULT_STAGE_TONES[stage]


def persona_emphasis(persona: Persona, stage: NarrativeRole) -> list[str]:
    """Talking points a section should stress for a persona."""
    if stage == NarrativeRole.HOOK:
        return persona.goals[:2]
    if stage == NarrativeRole.PROBLEM:
        return persona.pain_points[:3]
    if stage == NarrativeRole.SOLUTION:
        return persona.decision_criteria[:3]
    return list(STAGE_EMPHASIS_DEFAULTS[stage])


def persona_cta_text(persona: Persona) -> str:
    if persona.buyer_journey_stage == "decision":
        if persona.communication_style == "executive":
            return "Schedule Executive Briefing"
        return "Start Free Trial"
    if persona.buyer_journey_stage == "awareness":
        return "Learn More"
    if persona.communication_style == "technical":
        return "View Documentation"
    return "See How It Works"


def _solution_emphasis(persona: Persona, narrative: CoreNarrative) -> tuple[str, ...]:
    emphasis: list[str] = []
    for goal in persona.goals:
        words = goal.lower().split()
        if not words:
            continue
        match = next((b for b in narrative.benefits if words[0] in b.lower()), None)
        if match and match not in emphasis:
            emphasis.append(match)
    if persona.communication_style == "technical":
        emphasis.extend(d for d in narrative.differentiators if "tech" in d.lower() and d not in emphasis)
    return tuple(emphasis) if emphasis else tuple(narrative.benefits[:3])


class PersonaAdaptationEngine:
    """Builds persona story variations from a base storyline."""

    def build_adaptation(self, persona: Persona, narrative: CoreNarrative) -> PersonaNarrativeAdaptation:
        language_style = persona.language_style or "business"
        return PersonaNarrativeAdaptation(
            persona_id=persona.id,
            hook_strategy=select_hook_strategy(persona),
            problem_framing=ProblemFraming(
                emphasis=tuple(persona.pain_points[:3]),
                language_style=language_style,
                quantification="executive" if persona.communication_style == "executive" else "business",
            ),
            solution_emphasis=_solution_emphasis(persona, narrative),
            proof_priority=select_proof_priority(persona),
            cta_strategy=select_cta_strategy(persona),
            content_density=select_content_density(persona),
            emotional_adjustments=emotional_adjustments(persona),
        )

    def adapt_flow(self, flow: StoryFlow, adaptation: PersonaNarrativeAdaptation) -> StoryFlow:
        """Rewrite stage descriptions with the persona's strategies."""
        descriptions = {
            NarrativeRole.HOOK: (
                f"{HOOK_STRATEGY_PROMPTS[adaptation.hook_strategy]} "
                f"({adaptation.problem_framing.language_style} tone)"
            ),
            NarrativeRole.PROBLEM: "Focus on: " + ", ".join(adaptation.problem_framing.emphasis),
            NarrativeRole.SOLUTION: "Emphasize: " + ", ".join(adaptation.solution_emphasis),
            NarrativeRole.PROOF: "Prioritize: " + ", ".join(
                p.value if isinstance(p, ContentType) else p for p in adaptation.proof_priority
            ),
            NarrativeRole.ACTION: CTA_STRATEGY_PROMPTS[adaptation.cta_strategy],
        }
        return StoryFlow(
            stages=tuple(
                replace(stage, description=descriptions[stage.narrative_role])
                for stage in flow.stages
            )
        )

    def adapt_blocks(
        self,
        blocks: list[ContentBlock],
        adaptation: PersonaNarrativeAdaptation,
    ) -> list[ContentBlock]:
        """Target blocks at the persona and promote preferred proof types."""
        adapted = []
        for block in blocks:
            priority = block.priority
            if block.stage == NarrativeRole.PROOF and block.content.content_type in adaptation.proof_priority:
                index = adaptation.proof_priority.index(block.content.content_type)
                priority = max(1, priority - (3 - index) * PROOF_PROMOTION_STEP)
            adapted.append(replace(block, priority=priority, target_personas=(adaptation.persona_id,)))
        return adapted

    def section_overrides(
        self,
        persona: Persona,
        narrative: CoreNarrative,
    ) -> dict[NarrativeRole, SectionOverride]:
        return {
            NarrativeRole.HOOK: SectionOverride(emphasis=tuple(persona.goals[:2])),
            NarrativeRole.PROBLEM: SectionOverride(
                emphasis=tuple(persona.pain_points[:3] or narrative.pain_points)
            ),
            NarrativeRole.SOLUTION: SectionOverride(
                emphasis=tuple(persona.decision_criteria[:3] or narrative.benefits)
            ),
            NarrativeRole.ACTION: SectionOverride(cta_text=persona_cta_text(persona)),
        }

    def create_variation(
        self,
        persona: Persona,
        narrative: CoreNarrative,
        flow: StoryFlow,
        blocks: list[ContentBlock],
    ) -> PersonaStoryVariation:
        adaptation = self.build_adaptation(persona, narrative)
        return PersonaStoryVariation(
            persona_id=persona.id,
            flow=self.adapt_flow(flow, adaptation),
            adaptation=adaptation,
            content_blocks=tuple(self.adapt_blocks(blocks, adaptation)),
            section_overrides=self.section_overrides(persona, narrative),
        )
