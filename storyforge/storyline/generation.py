"""Storyline generation agent.

Orchestrates one storyline run: fetch facts, personas and brand voice
concurrently, identify the core narrative, build the story flow and content
blocks, score and reorder them, derive persona variations and the emotional
journey. Fetch failures reduce the input; synthesis failures fall back to
deterministic output. Only configuration errors (unknown page type) raise.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from storyforge.config import Settings, get_settings
from storyforge.knowledge.entities import BrandVoice, KnowledgeEntity, Persona
from storyforge.knowledge.stores import BrandStore, FactStore, PersonaStore
from storyforge.llm.audit_logger import reset_audit_context, set_audit_context
from storyforge.llm.base import TextSynthesizer
from storyforge.llm.structured import SynthesisOptions
from storyforge.storyline.blocks import ContentBlockGenerator
from storyforge.storyline.classifier import classify_entities
from storyforge.storyline.narrative import NarrativeIdentifier
from storyforge.storyline.optimizer import NarrativeFlowOptimizer
from storyforge.storyline.personas import PersonaAdaptationEngine
from storyforge.storyline.templates import (
    CTA_STRATEGY_PROMPTS,
    HOOK_STRATEGY_PROMPTS,
    build_journey,
    generate_emotional_journey,
    get_default_story_flow,
    get_template,
)
from storyforge.storyline.types import (
    DEFAULT_STAGE_TONES,
    ROLE_ORDER,
    CoreNarrative,
    EmotionalJourney,
    EmotionalTone,
    GenerationMetadata,
    NarrativeRole,
    PageType,
    StorylineConstraints,
    StorylineGenerationInput,
    StorylineGenerationResult,
    StoryFlow,
    StoryStage,
)

logger = logging.getLogger(__name__)

JOURNEY_BOOST = 10
MAX_INTENSITY = 100
MULTIPLE_PAIN_POINTS = 3


def _stage_description(stage: StoryStage, narrative: CoreNarrative) -> str:
    role = stage.narrative_role
    if role == NarrativeRole.HOOK:
        return f'Capture attention with: "{narrative.value_proposition}"'
    if role == NarrativeRole.PROBLEM:
        return "Address pain points: " + ", ".join(narrative.pain_points[:2])
    if role == NarrativeRole.SOLUTION:
        return f'Present solution leading to: "{narrative.transformation.after}"'
    if role == NarrativeRole.PROOF:
        return "Build credibility with " + ", ".join(p.type for p in narrative.proof_elements)
    return "Drive action with clear next steps"


def build_story_flow(
    narrative: CoreNarrative,
    page_type: PageType | str,
    constraints: StorylineConstraints | None = None,
) -> StoryFlow:
    """Default flow for a page type, enhanced with narrative details.

    Stages required by ``constraints`` but absent from the template are
    inserted in canonical role order. A constrained hook or CTA strategy is
    appended to the hook or action description.
    """
    template = get_template(page_type)
    stages = list(get_default_story_flow(page_type).stages)

    if constraints and constraints.required_stages:
        present = {stage.narrative_role for stage in stages}
        for role in constraints.required_stages:
            if role in present:
                continue
            stages.append(
                StoryStage(
                    name=role.value,
                    narrative_role=role,
                    emotional_tone=DEFAULT_STAGE_TONES[role],
                    description=template.stage_guidance[role].purpose,
                )
            )
            present.add(role)
        stages.sort(key=lambda s: ROLE_ORDER.index(s.narrative_role))

    enhanced = []
    for stage in stages:
        description = _stage_description(stage, narrative)
        if constraints and constraints.hook_strategy and stage.narrative_role == NarrativeRole.HOOK:
            description = f"{description}. {HOOK_STRATEGY_PROMPTS[constraints.hook_strategy]}"
        if constraints and constraints.cta_strategy and stage.narrative_role == NarrativeRole.ACTION:
            description = f"{description}. {CTA_STRATEGY_PROMPTS[constraints.cta_strategy]}"
        enhanced.append(replace(stage, description=description))
    return StoryFlow(stages=tuple(enhanced))


def _boost(journey: EmotionalJourney, emotion: EmotionalTone) -> EmotionalJourney:
    points = tuple(
        replace(point, intensity=min(MAX_INTENSITY, point.intensity + JOURNEY_BOOST))
        if point.emotion == emotion
        else point
        for point in journey.points
    )
    return build_journey(journey.arc, points)


def build_emotional_journey(page_type: PageType | str, narrative: CoreNarrative) -> EmotionalJourney:
    """Page journey adjusted for narrative strength.

    High-strength proof boosts confidence points; three or more pain points
    boost empathy points. Intensities stay capped at 100.
    """
    journey = generate_emotional_journey(page_type)
    if any(p.strength == "high" for p in narrative.proof_elements):
        journey = _boost(journey, EmotionalTone.CONFIDENCE)
    if len(narrative.pain_points) >= MULTIPLE_PAIN_POINTS:
        journey = _boost(journey, EmotionalTone.EMPATHY)
    return journey


class StorylineGenerationAgent:
    """Generates a complete storyline for one page.

    Args:
        fact_store: Source of knowledge entities.
        persona_store: Source of personas.
        brand_store: Source of brand voice records.
        synthesizer: Injected text synthesizer.
        settings: Application settings (defaults to cached settings).
        options: Synthesis policy; defaults to one derived from settings.
    """

    def __init__(
        self,
        fact_store: FactStore,
        persona_store: PersonaStore,
        brand_store: BrandStore,
        synthesizer: TextSynthesizer,
        settings: Settings | None = None,
        options: SynthesisOptions | None = None,
    ) -> None:
        self.fact_store = fact_store
        self.persona_store = persona_store
        self.brand_store = brand_store
        self.synthesizer = synthesizer
        self.settings = settings or get_settings()
        self.options = options or SynthesisOptions.from_settings(self.settings)
        self.narrative_identifier = NarrativeIdentifier(synthesizer, self.options)
        self.optimizer = NarrativeFlowOptimizer()
        self.persona_engine = PersonaAdaptationEngine()

    # ==========================================================================
    # Data fetching
    # ==========================================================================

    async def _fetch_entities(self, workspace_id: str) -> list[KnowledgeEntity]:
        try:
            return await self.fact_store.fetch_entities(
                workspace_id,
                min_confidence=self.settings.min_entity_confidence,
                limit=self.settings.storyline_fact_limit,
            )
        except Exception as e:
            logger.warning(f"Fact fetch failed for workspace {workspace_id}, continuing without facts: {e}")
            return []

    async def _fetch_personas(self, persona_ids: list[str]) -> list[Persona]:
        if not persona_ids:
            return []
        try:
            return await self.persona_store.fetch_personas(persona_ids)
        except Exception as e:
            logger.warning(f"Persona fetch failed, continuing without personas: {e}")
            return []

    async def _fetch_brand(self, brand_config_id: str | None) -> BrandVoice | None:
        if not brand_config_id:
            return None
        try:
            return await self.brand_store.fetch_brand_voice(brand_config_id)
        except Exception as e:
            logger.warning(f"Brand fetch failed for {brand_config_id}, continuing without brand: {e}")
            return None

    # ==========================================================================
    # Generation
    # ==========================================================================

    async def generate_storyline(self, request: StorylineGenerationInput) -> StorylineGenerationResult:
        """Run the storyline pipeline for one page.

        Raises:
            TemplateNotFoundError: If the page type has no template.
        """
        template = get_template(request.page_type)
        started = time.monotonic()
        token = set_audit_context(run_id=uuid.uuid4().hex[:12], call_type="storyline")
        try:
            entities, personas, brand = await asyncio.gather(
                self._fetch_entities(request.workspace_id),
                self._fetch_personas(request.persona_ids),
                self._fetch_brand(request.brand_config_id),
            )
            logger.info(
                f"Generating {template.page_type.value} storyline from {len(entities)} entities, "
                f"{len(personas)} personas"
            )

            outcome = await self.narrative_identifier.identify(entities, brand)
            narrative = outcome.narrative
            constraints = request.constraints

            flow = build_story_flow(narrative, template.page_type, constraints)

            classified = classify_entities(entities)
            generator = ContentBlockGenerator(template)
            blocks = generator.generate(
                classified,
                narrative,
                hints=request.hints,
                max_blocks=constraints.max_content_blocks if constraints else None,
            )

            optimization = self.optimizer.optimize(
                blocks, template.page_type, auto_fix=request.auto_optimize
            )
            if optimization.optimized_blocks is not None:
                blocks = list(optimization.optimized_blocks)

            variations = tuple(
                self.persona_engine.create_variation(persona, narrative, flow, blocks)
                for persona in personas
            )
            journey = build_emotional_journey(template.page_type, narrative)
        finally:
            reset_audit_context(token)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"Storyline ready: {len(blocks)} blocks, score {optimization.score}, "
            f"{len(variations)} persona variations in {elapsed_ms}ms"
        )

        return StorylineGenerationResult(
            core_narrative=narrative,
            default_flow=flow,
            persona_variations=variations,
            content_blocks=tuple(blocks),
            emotional_journey=journey,
            optimization_score=optimization.score,
            metadata=GenerationMetadata(
                generated_at=datetime.now(timezone.utc),
                model_used=self.options.model or self.synthesizer.default_model,
                tokens_used=outcome.tokens_used,
                generation_time_ms=elapsed_ms,
                knowledge_items_used=len(entities),
                narrative_fallback_used=outcome.used_fallback,
            ),
        )


async def generate_storyline(
    request: StorylineGenerationInput,
    *,
    fact_store: FactStore,
    persona_store: PersonaStore,
    brand_store: BrandStore,
    synthesizer: TextSynthesizer,
    settings: Settings | None = None,
) -> StorylineGenerationResult:
    """Generate a complete storyline for a page."""
    agent = StorylineGenerationAgent(fact_store, persona_store, brand_store, synthesizer, settings)
    return await agent.generate_storyline(request)
