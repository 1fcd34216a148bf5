"""Knowledge-grounded section content without synthesis.

Fills a section's fields directly from knowledge entities relevant to its
narrative role and records which entities produced each field. When no
entity contributes, the section gets a generic per-role template and is
flagged as a generic fallback with zero confidence.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from storyforge.config import Settings, get_settings
from storyforge.content.slots import get_component_slots, max_items_for
from storyforge.content.types import (
    CTAContent,
    FAQItem,
    FeatureItem,
    KBGroundedHints,
    KBGroundedSectionContent,
    KBGroundedSectionInput,
    KBTraceability,
    PopulatedContent,
    PricingTier,
    StatisticItem,
    TestimonialItem,
)
from storyforge.knowledge.entities import KnowledgeEntity
from storyforge.knowledge.stores import FactStore
from storyforge.storyline.classifier import entity_types_for_role, group_by_type
from storyforge.storyline.types import NarrativeRole

logger = logging.getLogger(__name__)

H, P, S, PR, A = (
    NarrativeRole.HOOK,
    NarrativeRole.PROBLEM,
    NarrativeRole.SOLUTION,
    NarrativeRole.PROOF,
    NarrativeRole.ACTION,
)

ROLE_ENTITY_PRIORITY: dict[NarrativeRole, tuple[str, ...]] = {
    H: ("company_tagline", "benefit", "statistic", "company_description"),
    P: ("use_case", "benefit", "faq"),
    S: ("feature", "product", "service", "process_step", "benefit"),
    PR: ("testimonial", "statistic", "company", "person", "integration"),
    A: ("cta", "pricing", "faq", "contact"),
}

HEADLINE_SOURCES: dict[NarrativeRole, tuple[str, ...]] = {
    H: ("company_tagline", "benefit", "company_description"),
    P: ("use_case", "benefit"),
    S: ("feature", "product", "service"),
    PR: ("testimonial", "statistic"),
    A: ("cta", "benefit"),
}

DESCRIPTION_SOURCES = ("company_description", "mission_statement", "benefit", "use_case")

ROLE_DEFAULT_CTA: dict[NarrativeRole, str] = {
    H: "Learn More",
    P: "See How We Help",
    S: "Explore Features",
    PR: "Read Case Studies",
    A: "Get Started",
}

# (headline, description, CTA text, CTA variant)
GENERIC_FALLBACKS: dict[NarrativeRole, tuple[str, str, str, str]] = {
    H: (
        "Transform Your Business Today",
        "Discover how our solutions can help you achieve your goals.",
        "Learn More",
        "primary",
    ),
    P: (
        "Facing These Challenges?",
        "Many businesses struggle with common obstacles that prevent growth.",
        "See Solutions",
        "secondary",
    ),
    S: (
        "Our Approach",
        "We provide comprehensive solutions tailored to your needs.",
        "Explore Features",
        "primary",
    ),
    PR: (
        "Trusted by Industry Leaders",
        "See how we've helped businesses like yours succeed.",
        "View Case Studies",
        "secondary",
    ),
    A: (
        "Ready to Get Started?",
        "Join thousands of satisfied customers today.",
        "Start Free Trial",
        "primary",
    ),
}

MAX_FEATURES = 6
MAX_TESTIMONIALS = 4
MAX_STATISTICS = 4
MAX_FAQS = 8
MAX_PRICING_TIERS = 4

Grouped = dict[str, list[KnowledgeEntity]]


@dataclass(frozen=True)
class FieldResult:
    """A populated field and the entities it came from."""

    value: Any
    entity_ids: list[str]


def relevant_entity_types(role: NarrativeRole) -> list[str]:
    """Priority types for a role followed by every other type mapped to it."""
    types = list(ROLE_ENTITY_PRIORITY[role])
    types.extend(t for t in entity_types_for_role(role) if t not in types)
    return types


# =============================================================================
# Field builders
# =============================================================================


def build_headline(grouped: Grouped, role: NarrativeRole) -> FieldResult | None:
    for entity_type in HEADLINE_SOURCES[role]:
        entities = grouped.get(entity_type)
        if not entities:
            continue
        entity = entities[0]
        if entity_type == "company_tagline":
            text = entity.meta.text("slogan", entity.name)
        else:
            text = entity.name
        if text:
            return FieldResult(text, [entity.id])
    return None


def build_description(grouped: Grouped, max_length: int | None = None) -> FieldResult | None:
    for entity_type in DESCRIPTION_SOURCES:
        entities = grouped.get(entity_type)
        if not entities:
            continue
        entity = entities[0]
        if entity_type == "company_description":
            text = entity.meta.text("aboutText", entity.description)
        elif entity_type == "mission_statement":
            text = entity.meta.text("missionText", entity.description)
        else:
            text = entity.description
        if text:
            return FieldResult(text[:max_length] if max_length else text, [entity.id])
    return None


def build_features(grouped: Grouped, limit: int) -> FieldResult | None:
    entities = grouped.get("feature", [])[:limit]
    if not entities:
        return None
    features = [
        FeatureItem(
            title=e.name,
            description=e.description or e.meta.text("benefit", ""),
            icon=e.meta.text("icon"),
        )
        for e in entities
    ]
    return FieldResult(features, [e.id for e in entities])


def build_testimonials(grouped: Grouped, limit: int) -> FieldResult | None:
    entities = grouped.get("testimonial", [])[:limit]
    if not entities:
        return None
    testimonials = [
        TestimonialItem(
            quote=e.meta.text("quote") or e.description or e.name,
            author=e.meta.text("author", "Customer"),
            role=e.meta.text("role", ""),
            company=e.meta.text("company", ""),
            rating=e.meta.number("rating"),
        )
        for e in entities
    ]
    return FieldResult(testimonials, [e.id for e in entities])


def build_statistics(grouped: Grouped, limit: int) -> FieldResult | None:
    entities = grouped.get("statistic", [])[:limit]
    if not entities:
        return None
    statistics = [
        StatisticItem(
            value=e.meta.text("value", e.name),
            label=e.meta.text("metric", e.name),
            description=e.meta.text("context") or e.description,
        )
        for e in entities
    ]
    return FieldResult(statistics, [e.id for e in entities])


def build_faqs(grouped: Grouped, limit: int) -> FieldResult | None:
    entities = grouped.get("faq", [])[:limit]
    if not entities:
        return None
    faqs = [
        FAQItem(
            question=e.meta.text("question", e.name),
            answer=e.meta.text("answer") or e.description or "",
        )
        for e in entities
    ]
    return FieldResult(faqs, [e.id for e in entities])


def build_pricing(grouped: Grouped, limit: int) -> FieldResult | None:
    entities = grouped.get("pricing", [])[:limit]
    if not entities:
        return None
    tiers = [
        PricingTier(
            name=e.meta.text("tier", e.name),
            price=e.meta.text("amount", "$0"),
            period=e.meta.text("period", "/month"),
            description=e.description or "",
            features=e.meta.strings("features"),
            cta=CTAContent(text="Get Started", link="#", variant="primary"),
            highlighted=e.meta.flag("highlighted"),
        )
        for e in entities
    ]
    return FieldResult(tiers, [e.id for e in entities])


def build_cta(grouped: Grouped, role: NarrativeRole) -> FieldResult:
    """CTA from the first cta entity, else the role default with no sources."""
    entities = grouped.get("cta")
    if entities:
        entity = entities[0]
        cta = CTAContent(
            text=entity.meta.text("action", entity.name),
            link=entity.meta.text("targetUrl", "#"),
            variant="primary",
        )
        return FieldResult(cta, [entity.id])
    cta = CTAContent(
        text=ROLE_DEFAULT_CTA[role],
        link="#",
        variant="primary" if role == A else "secondary",
    )
    return FieldResult(cta, [])


# Content field -> (slot name, default cap, builder)
ARRAY_BUILDERS: tuple[tuple[str, str, int, Callable[[Grouped, int], FieldResult | None]], ...] = (
    ("features", "features", MAX_FEATURES, build_features),
    ("testimonials", "testimonials", MAX_TESTIMONIALS, build_testimonials),
    ("statistics", "statistics", MAX_STATISTICS, build_statistics),
    ("faqs", "faqs", MAX_FAQS, build_faqs),
    ("pricing_tiers", "pricingTiers", MAX_PRICING_TIERS, build_pricing),
)


# =============================================================================
# Assembly
# =============================================================================


def _focus_first(entities: list[KnowledgeEntity], keywords: list[str]) -> list[KnowledgeEntity]:
    if not keywords:
        return entities

    def mentions(entity: KnowledgeEntity) -> bool:
        text = f"{entity.name} {entity.description or ''}".lower()
        return any(keyword.lower() in text for keyword in keywords if keyword)

    return sorted(entities, key=lambda e: not mentions(e))


def build_traceability(entities: list[KnowledgeEntity], used_ids: list[str]) -> KBTraceability:
    used = [e for e in entities if e.id in used_ids]
    confidence = sum(e.confidence for e in used) / len(used) if used else 0.0
    types: list[str] = []
    for entity in used:
        if entity.entity_type not in types:
            types.append(entity.entity_type)
    return KBTraceability(
        source_entity_ids=used_ids,
        confidence=confidence,
        is_generic_fallback=not used_ids,
        entity_types_used=types,
    )


def generic_fallback(role: NarrativeRole) -> KBGroundedSectionContent:
    headline, description, cta_text, variant = GENERIC_FALLBACKS[role]
    return KBGroundedSectionContent(
        content=PopulatedContent(
            headline=headline,
            description=description,
            primary_cta=CTAContent(text=cta_text, link="#", variant=variant),
        ),
        traceability=KBTraceability(
            source_entity_ids=[],
            confidence=0.0,
            is_generic_fallback=True,
            entity_types_used=[],
        ),
        field_sources={},
    )


def assemble_section(
    component_id: str,
    role: NarrativeRole,
    entities: list[KnowledgeEntity],
    hints: KBGroundedHints | None = None,
) -> KBGroundedSectionContent:
    """Build grounded content from already fetched entities."""
    hints = hints or KBGroundedHints()
    grouped = {
        entity_type: _focus_first(items, hints.focus_keywords)
        for entity_type, items in group_by_type(entities).items()
    }

    fields: dict[str, Any] = {}
    field_sources: dict[str, list[str]] = {}
    used_ids: list[str] = []

    def record(field_name: str, slot_name: str, result: FieldResult | None) -> None:
        if result is None:
            return
        fields[field_name] = result.value
        field_sources[slot_name] = result.entity_ids
        used_ids.extend(i for i in result.entity_ids if i not in used_ids)

    record("headline", "headline", build_headline(grouped, role))
    record("description", "description", build_description(grouped, hints.max_length))
    for field_name, slot_name, default_cap, builder in ARRAY_BUILDERS:
        slot_cap = max_items_for(component_id, slot_name)
        limit = min(default_cap, slot_cap) if slot_cap is not None else default_cap
        record(field_name, slot_name, builder(grouped, limit))
    record("primary_cta", "primaryCTA", build_cta(grouped, role))

    if not used_ids:
        logger.info(f"No entities contributed to {component_id} ({role.value}); using generic fallback")
        return generic_fallback(role)

    return KBGroundedSectionContent(
        content=PopulatedContent(**fields),
        traceability=build_traceability(entities, used_ids),
        field_sources=field_sources,
    )


async def generate_kb_grounded_section_content(
    request: KBGroundedSectionInput,
    *,
    fact_store: FactStore,
    settings: Settings | None = None,
) -> KBGroundedSectionContent:
    """Populate one section directly from the knowledge base.

    Raises:
        SlotSchemaNotFoundError: If the component id is not registered.
    """
    settings = settings or get_settings()
    get_component_slots(request.component_id)

    try:
        entities = await fact_store.fetch_entities(
            request.workspace_id,
            entity_types=relevant_entity_types(request.narrative_role),
            min_confidence=settings.min_entity_confidence,
            limit=settings.kb_fact_limit,
        )
    except Exception as e:
        logger.warning(f"Fact fetch failed for workspace {request.workspace_id}, using generic content: {e}")
        entities = []

    if not entities:
        return generic_fallback(request.narrative_role)
    return assemble_section(request.component_id, request.narrative_role, entities, request.hints)
