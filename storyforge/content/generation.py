"""Synthesis-backed section content generation.

For each requested section: source the knowledge entities staged for its
narrative role, ask the synthesizer for slot content, and fall back to a
deterministic per-stage template when that fails. Persona variations fan
out concurrently per section. Every section keeps its own counters, merged
into the page statistics at the end.
"""

import asyncio
import json
import logging
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone

from storyforge.config import Settings, get_settings
from storyforge.content.normalize import normalize_content
from storyforge.content.prompts import (
    COPYWRITER_SYSTEM_PROMPT,
    HINTS_CONTEXT,
    NO_BRAND_GUIDELINES,
    NO_SOURCED_CONTENT,
    PERSONA_PROMPT,
    PERSONA_SYSTEM_PROMPT,
    SECTION_PROMPT,
    SEO_PROMPT,
    SEO_SYSTEM_PROMPT,
    STAGE_GUIDANCE,
    STORYLINE_BLOCK_CONTEXT,
)
from storyforge.content.slots import (
    COMPONENT_SLOT_DEFINITIONS,
    get_component_slots,
    get_required_slots,
    is_filled,
)
from storyforge.content.stats import GenerationAccumulator
from storyforge.content.types import (
    ContentGenerationInput,
    ContentGenerationResult,
    ContentHints,
    ContentSlot,
    CTAContent,
    FeatureItem,
    PageMetadata,
    PersonaContentVariation,
    PopulatedContent,
    PopulatedSection,
    SectionMetadata,
    SectionRequest,
    SourcedContent,
    StatisticItem,
    TestimonialItem,
)
from storyforge.knowledge.entities import BrandVoice, KnowledgeEntity, Persona
from storyforge.knowledge.stores import BrandStore, FactStore, PersonaStore
from storyforge.llm.audit_logger import reset_audit_context, set_audit_context
from storyforge.llm.base import TextSynthesizer
from storyforge.llm.structured import SynthesisOptions, request_json
from storyforge.storyline.classifier import stage_for_entity_type
from storyforge.storyline.personas import (
    persona_emotional_tone,
    persona_emphasis,
    select_cta_strategy,
)
from storyforge.storyline.types import (
    ROLE_ORDER,
    ContentBlock,
    NarrativeRole,
    PageType,
    StorylineGenerationResult,
)

logger = logging.getLogger(__name__)

CONTEXT_ITEMS = 10
CONTEXT_DESCRIPTION_LIMIT = 200
FALLBACK_DESCRIPTION_LIMIT = 150
FALLBACK_QUOTE_LIMIT = 200
SEO_TITLE_LIMIT = 60
SEO_DESCRIPTION_LIMIT = 160
FALLBACK_MODEL = "fallback"

DEFAULT_COMPONENTS: dict[NarrativeRole, str] = {
    NarrativeRole.HOOK: "hero-centered",
    NarrativeRole.PROBLEM: "features-grid",
    NarrativeRole.SOLUTION: "features-grid",
    NarrativeRole.PROOF: "testimonials-grid",
    NarrativeRole.ACTION: "cta-centered",
}


# =============================================================================
# Sourcing and prompt context
# =============================================================================


def source_content(entities: list[KnowledgeEntity]) -> list[SourcedContent]:
    """Stage every entity by its primary narrative role."""
    return [
        SourcedContent(entity=entity, suggested_stage=stage_for_entity_type(entity.entity_type))
        for entity in entities
    ]


def _entity_title(entity: KnowledgeEntity) -> str:
    return entity.meta.first_text("name", "title", default=entity.name)


def _entity_description(entity: KnowledgeEntity, limit: int) -> str:
    return entity.meta.first_text("description", default=(entity.description or "")[:limit])


def describe_sourced_content(sourced: list[SourcedContent]) -> str:
    if not sourced:
        return NO_SOURCED_CONTENT
    return "\n".join(
        f"- [{item.entity_type}] {_entity_title(item.entity)}: "
        f"{_entity_description(item.entity, CONTEXT_DESCRIPTION_LIMIT)}"
        for item in sourced[:CONTEXT_ITEMS]
    )


def describe_brand_guidelines(brand: BrandVoice | None) -> str:
    if brand is None:
        return NO_BRAND_GUIDELINES
    return (
        f"Brand: {brand.name}\n"
        f"Voice: {brand.tone or 'professional'} tone, {brand.personality or 'approachable'} personality\n"
        f"Industry: {brand.industry or 'general'}\n"
        f"Target Audience: {brand.target_audience or 'business professionals'}"
    )


def _slot_bounds(slot: ContentSlot) -> str:
    if slot.min_length is not None or slot.max_length is not None:
        return f" [{slot.min_length or 0}-{slot.max_length or '∞'} chars]"
    if slot.min_items is not None or slot.max_items is not None:
        return f" [{slot.min_items or 0}-{slot.max_items or '∞'} items]"
    return ""


def describe_slots(slots: tuple[ContentSlot, ...]) -> str:
    return "\n".join(
        f"- {slot.name} {'(REQUIRED)' if slot.required else '(optional)'}{_slot_bounds(slot)}: {slot.label}"
        for slot in slots
    )


def describe_hints(hints: ContentHints | None) -> str:
    if hints is None:
        return ""
    return HINTS_CONTEXT.format(
        focus_keywords=", ".join(hints.focus_keywords) or "none",
        avoid_terms=", ".join(hints.avoid_terms) or "none",
        tone_override=hints.tone_override or "default",
        include_stats="yes" if hints.include_stats else "no",
        cta_preference=hints.cta_preference or "default",
    )


def describe_block(block: ContentBlock | None) -> str:
    if block is None:
        return ""
    return STORYLINE_BLOCK_CONTEXT.format(
        headline=block.content.headline,
        description=block.content.description,
    )


# =============================================================================
# Deterministic fallback
# =============================================================================


def fallback_content(role: NarrativeRole, sourced: list[SourcedContent]) -> PopulatedContent:
    """Per-stage template content built from the sourced entities."""
    if role == NarrativeRole.HOOK:
        first = sourced[0].entity if sourced else None
        subheadline = first.meta.first_text("description", default=first.description) if first else None
        return PopulatedContent(
            headline=_entity_title(first) if first else "Transform Your Business",
            subheadline=subheadline or "Discover a better way forward",
            description="Take the next step towards efficiency and growth with our proven solution.",
            primary_cta=CTAContent(text="Get Started", link="#contact", variant="primary"),
            secondary_cta=CTAContent(text="Learn More", link="#features", variant="secondary"),
        )

    if role == NarrativeRole.PROBLEM:
        return PopulatedContent(
            section_title="Common Challenges",
            section_description="We understand the obstacles you face. Here's what we help you overcome.",
            features=[
                FeatureItem(
                    title=item.entity.meta.first_text("name", "title", default=item.entity.name) or "Challenge",
                    description=_entity_description(item.entity, FALLBACK_DESCRIPTION_LIMIT),
                )
                for item in sourced[:4]
            ],
        )

    if role == NarrativeRole.SOLUTION:
        return PopulatedContent(
            section_title="Our Solution",
            section_description="See how we address your challenges.",
            features=[
                FeatureItem(
                    title=item.entity.meta.first_text("name", "title", default=item.entity.name) or "Feature",
                    description=_entity_description(item.entity, FALLBACK_DESCRIPTION_LIMIT),
                )
                for item in sourced[:6]
            ],
        )

    if role == NarrativeRole.PROOF:
        testimonials = [s.entity for s in sourced if s.entity_type == "testimonial"][:3]
        statistics = [s.entity for s in sourced if s.entity_type == "statistic"][:4]
        return PopulatedContent(
            section_title="Trusted by Industry Leaders",
            section_description="See what our customers have achieved.",
            testimonials=[
                TestimonialItem(
                    quote=e.meta.text("quote") or (e.description or e.name)[:FALLBACK_QUOTE_LIMIT],
                    author=e.meta.text("author", "Customer"),
                    role=e.meta.text("role", ""),
                    company=e.meta.text("company", ""),
                )
                for e in testimonials
            ]
            or None,
            statistics=[
                StatisticItem(
                    value=e.meta.text("value", "95%"),
                    label=e.meta.first_text("label", "metric", default="Success Rate"),
                )
                for e in statistics
            ]
            or None,
        )

    return PopulatedContent(
        headline="Ready to Get Started?",
        description="Take the first step towards transformation.",
        primary_cta=CTAContent(text="Start Free Trial", link="#signup", variant="primary"),
        secondary_cta=CTAContent(text="Schedule Demo", link="#demo", variant="secondary"),
    )


def calculate_confidence(content: PopulatedContent, required_slots: list[str]) -> float:
    """Share of required slots that are filled.

    With no required slots, 1.0 if anything at all is filled, else 0.0.
    """
    slots = content.to_slots()
    if not required_slots:
        return 1.0 if any(is_filled(v) for v in slots.values()) else 0.0
    filled = sum(1 for name in required_slots if is_filled(slots.get(name)))
    return filled / len(required_slots)


def fallback_page_metadata(
    page_type: str,
    headline: str,
    description: str,
    brand_name: str,
    keywords: list[str],
) -> PageMetadata:
    return PageMetadata(
        title=headline[:SEO_TITLE_LIMIT] or f"{brand_name} - {page_type}",
        description=description[:SEO_DESCRIPTION_LIMIT] or f"Discover what {brand_name} can do for you.",
        keywords=keywords or [brand_name, page_type],
    )


# =============================================================================
# Section planning from a storyline
# =============================================================================


def _pick_component(block: ContentBlock) -> str:
    for component_id in block.suggested_components:
        if component_id in COMPONENT_SLOT_DEFINITIONS:
            return component_id
    return DEFAULT_COMPONENTS[block.stage]


def plan_sections(
    storyline: StorylineGenerationResult,
    components: Mapping[NarrativeRole, str] | None = None,
) -> list[SectionRequest]:
    """One section per storyline stage, built from that stage's winning block.

    The winning block is the one with the lowest priority value. Components
    come from ``components`` when given, else the block's first suggestion
    that has a slot schema, else the stage default.
    """
    components = components or {}
    roles = storyline.default_flow.roles or list(ROLE_ORDER)
    sections = []
    for role in roles:
        candidates = [b for b in storyline.content_blocks if b.stage == role]
        if not candidates:
            continue
        block = min(candidates, key=lambda b: b.priority)
        order = len(sections)
        sections.append(
            SectionRequest(
                section_id=f"section-{order + 1}-{role.value}",
                component_id=components.get(role) or _pick_component(block),
                narrative_role=role,
                order=order,
                content_block=block,
            )
        )
    return sections


# =============================================================================
# Agent
# =============================================================================


@dataclass(frozen=True)
class _SectionOutcome:
    section: PopulatedSection
    stats: GenerationAccumulator


class ContentGenerationAgent:
    """Populates page sections with synthesized, persona-adapted content.

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

    @property
    def model_name(self) -> str:
        return self.options.model or self.synthesizer.default_model

    # ==========================================================================
    # Data fetching
    # ==========================================================================

    async def _fetch_entities(self, workspace_id: str) -> list[KnowledgeEntity]:
        try:
            return await self.fact_store.fetch_entities(
                workspace_id,
                min_confidence=self.settings.min_entity_confidence,
                limit=self.settings.content_fact_limit,
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
    # Base content
    # ==========================================================================

    async def _base_content(
        self,
        section: SectionRequest,
        sourced: list[SourcedContent],
        brand: BrandVoice | None,
        hints: ContentHints | None,
    ) -> tuple[PopulatedContent, bool, int]:
        """Synthesized content, or the stage template when synthesis fails.

        Returns:
            Tuple of (content, used_fallback, tokens_used).
        """
        role = section.narrative_role
        prompt = SECTION_PROMPT.format(
            stage=role.value,
            stage_guidance=STAGE_GUIDANCE[role],
            content_context=describe_sourced_content(sourced),
            brand_context=describe_brand_guidelines(brand),
            slot_context=describe_slots(get_component_slots(section.component_id)),
            hints_context=describe_hints(hints),
            block_context=describe_block(section.content_block),
        )
        result = await request_json(
            self.synthesizer,
            prompt,
            system_prompt=COPYWRITER_SYSTEM_PROMPT,
            max_tokens=2000,
            temperature=0.7,
            options=self.options,
        )
        if result.ok:
            return normalize_content(result.value), False, result.tokens_used

        logger.warning(
            f"Section {section.section_id} ({section.component_id}) using {role.value} fallback "
            f"content ({result.failure.reason.value})"
        )
        return fallback_content(role, sourced), True, result.tokens_used

    # ==========================================================================
    # Persona variations
    # ==========================================================================

    async def _persona_variation(
        self,
        base: PopulatedContent,
        persona: Persona,
        role: NarrativeRole,
    ) -> tuple[PersonaContentVariation, GenerationAccumulator]:
        prompt = PERSONA_PROMPT.format(
            name=persona.name,
            communication_style=persona.communication_style,
            journey_stage=persona.buyer_journey_stage,
            pain_points=", ".join(persona.pain_points) or "general challenges",
            goals=", ".join(persona.goals) or "growth and efficiency",
            decision_criteria=", ".join(persona.decision_criteria) or "value and ROI",
            stage=role.value,
            base_content=json.dumps(base.to_slots(), indent=2),
        )
        result = await request_json(
            self.synthesizer,
            prompt,
            system_prompt=PERSONA_SYSTEM_PROMPT,
            max_tokens=1500,
            temperature=0.6,
            options=self.options,
        )
        adapted = result.ok
        if not adapted:
            logger.warning(
                f"Persona adaptation for {persona.id} kept base content ({result.failure.reason.value})"
            )

        variation = PersonaContentVariation(
            persona_id=persona.id,
            content=normalize_content(result.value) if adapted else base,
            emotional_tone=persona_emotional_tone(persona, role),
            emphasis=persona_emphasis(persona, role),
            cta_approach=select_cta_strategy(persona),
            adapted=adapted,
        )
        stats = GenerationAccumulator(
            tokens_used=result.tokens_used,
            persona_fallbacks_used=0 if adapted else 1,
        )
        return variation, stats

    # ==========================================================================
    # Sections
    # ==========================================================================

    async def _generate_section(
        self,
        section: SectionRequest,
        sourced: list[SourcedContent],
        personas: list[Persona],
        brand: BrandVoice | None,
        hints: ContentHints | None,
    ) -> _SectionOutcome:
        required = get_required_slots(section.component_id)
        base, used_fallback, tokens = await self._base_content(section, sourced, brand, hints)

        adaptations = await asyncio.gather(
            *(self._persona_variation(base, persona, section.narrative_role) for persona in personas)
        )
        confidence = calculate_confidence(base, required)
        stats = GenerationAccumulator.combine(
            [
                GenerationAccumulator(
                    tokens_used=tokens,
                    fallbacks_used=1 if used_fallback else 0,
                    confidence_sum=confidence,
                    sections_generated=1,
                ),
                *(acc for _, acc in adaptations),
            ]
        )

        populated = PopulatedSection(
            section_id=section.section_id,
            component_id=section.component_id,
            narrative_role=section.narrative_role,
            order=section.order,
            content=base,
            persona_variations={variation.persona_id: variation for variation, _ in adaptations},
            metadata=SectionMetadata(
                generated_at=datetime.now(timezone.utc),
                model_used=FALLBACK_MODEL if used_fallback else self.model_name,
                tokens_used=stats.tokens_used,
                confidence_score=confidence,
                source_entity_ids=[item.entity_id for item in sourced],
                used_fallback=used_fallback,
            ),
        )
        return _SectionOutcome(section=populated, stats=stats)

    # ==========================================================================
    # Page metadata
    # ==========================================================================

    async def _page_metadata(
        self,
        page_type: PageType | str,
        sections: list[PopulatedSection],
        brand: BrandVoice | None,
        hints: ContentHints | None,
    ) -> tuple[PageMetadata, int]:
        page_type = page_type.value if isinstance(page_type, PageType) else page_type
        hook = next((s for s in sections if s.narrative_role == NarrativeRole.HOOK), None)
        headline = (hook.content.headline if hook else None) or ""
        description = (hook.content.description if hook else None) or ""
        brand_name = brand.name if brand else ""
        keywords = list(hints.focus_keywords if hints else [])
        if brand and brand.industry:
            keywords.append(brand.industry)

        result = await request_json(
            self.synthesizer,
            SEO_PROMPT.format(
                page_type=page_type,
                headline=headline,
                description=description,
                brand=brand_name,
                keywords=", ".join(keywords),
            ),
            system_prompt=SEO_SYSTEM_PROMPT,
            max_tokens=500,
            temperature=0.5,
            options=self.options,
        )
        if not result.ok:
            logger.warning(f"Page metadata using fallback ({result.failure.reason.value})")
            return fallback_page_metadata(page_type, headline, description, brand_name, keywords), result.tokens_used

        value = result.value
        title = value.get("title") if isinstance(value.get("title"), str) else None
        meta_description = value.get("description") if isinstance(value.get("description"), str) else None
        raw_keywords = value.get("keywords")
        returned_keywords = (
            [k for k in raw_keywords if isinstance(k, str)] if isinstance(raw_keywords, list) else []
        )
        metadata = PageMetadata(
            title=(title or headline)[:SEO_TITLE_LIMIT],
            description=(meta_description or description)[:SEO_DESCRIPTION_LIMIT],
            keywords=returned_keywords or keywords,
        )
        return metadata, result.tokens_used

    # ==========================================================================
    # Entry point
    # ==========================================================================

    async def generate_content(self, request: ContentGenerationInput) -> ContentGenerationResult:
        """Populate every requested section of a page.

        Raises:
            SlotSchemaNotFoundError: If a section names an unknown component.
        """
        for section in request.sections:
            get_component_slots(section.component_id)

        started = time.monotonic()
        run_id = uuid.uuid4().hex[:12]
        entities, personas, brand = await asyncio.gather(
            self._fetch_entities(request.workspace_id),
            self._fetch_personas(request.persona_ids),
            self._fetch_brand(request.brand_config_id),
        )
        sourced = source_content(entities)
        logger.info(
            f"Generating {len(request.sections)} sections for page {request.page_id} "
            f"from {len(sourced)} sourced entities, {len(personas)} personas"
        )

        outcomes = []
        for section in request.sections:
            section_sourced = [s for s in sourced if s.suggested_stage == section.narrative_role]
            token = set_audit_context(run_id=run_id, section_id=section.section_id, call_type="section_content")
            try:
                outcomes.append(
                    await self._generate_section(section, section_sourced, personas, brand, request.hints)
                )
            finally:
                reset_audit_context(token)

        sections = [outcome.section for outcome in outcomes]
        token = set_audit_context(run_id=run_id, call_type="page_metadata")
        try:
            page_metadata, metadata_tokens = await self._page_metadata(
                request.page_type, sections, brand, request.hints
            )
        finally:
            reset_audit_context(token)

        totals = GenerationAccumulator.combine(outcome.stats for outcome in outcomes).merge(
            GenerationAccumulator(tokens_used=metadata_tokens)
        )
        elapsed_ms = int((time.monotonic() - started) * 1000)
        stats = totals.to_stats(total_sections=len(request.sections), total_time_ms=elapsed_ms)
        logger.info(
            f"Content ready for page {request.page_id}: {stats.sections_generated} sections, "
            f"{stats.fallbacks_used} fallbacks, avg confidence {stats.average_confidence:.2f}"
        )

        return ContentGenerationResult(
            page_id=request.page_id,
            sections=sections,
            page_metadata=page_metadata,
            generation_stats=stats,
        )


async def generate_content(
    request: ContentGenerationInput,
    *,
    fact_store: FactStore,
    persona_store: PersonaStore,
    brand_store: BrandStore,
    synthesizer: TextSynthesizer,
    settings: Settings | None = None,
) -> ContentGenerationResult:
    """Generate content for every section of a page."""
    agent = ContentGenerationAgent(fact_store, persona_store, brand_store, synthesizer, settings)
    return await agent.generate_content(request)
