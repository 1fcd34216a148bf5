"""Entity classification into narrative stages.

Pure lookup tables. Each entity type maps to the stages it can serve, most
relevant first; the first stage is where the storyline places it. Types
with no entry (or an empty entry) fall into ``solution``, and content types
default to ``feature``.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable

from storyforge.knowledge.entities import KnowledgeEntity
from storyforge.storyline.types import ContentType, NarrativeRole

logger = logging.getLogger(__name__)

H, P, S, PR, A = (
    NarrativeRole.HOOK,
    NarrativeRole.PROBLEM,
    NarrativeRole.SOLUTION,
    NarrativeRole.PROOF,
    NarrativeRole.ACTION,
)

DEFAULT_STAGE = NarrativeRole.SOLUTION
DEFAULT_CONTENT_TYPE = ContentType.FEATURE

ENTITY_STAGE_MAP: dict[str, tuple[NarrativeRole, ...]] = {
    # Hook
    "value_proposition": (H,),
    "headline": (H,),
    "tagline": (H,),
    "company_name": (H,),
    "company_tagline": (H,),
    "company_description": (H, S),
    "mission_statement": (H, PR),
    "company": (H, PR),
    # Problem
    "pain_point": (P,),
    "challenge": (P,),
    "problem": (P,),
    "use_case": (P, S),
    # Solution
    "product": (S, H),
    "service": (S, H),
    "feature": (S, PR),
    "benefit": (S, P),
    "process": (S,),
    "process_step": (S,),
    "comparison": (S,),
    "integration": (S, PR),
    # Proof
    "testimonial": (PR,),
    "case_study": (PR,),
    "statistic": (PR, H),
    "metric": (PR,),
    "award": (PR,),
    "certification": (PR,),
    "person": (PR,),
    # Action
    "cta": (A,),
    "offer": (A,),
    "pricing": (A, S),
    "faq": (A, S),
    "contact": (A,),
    "social_link": (A,),
    # Global content, not part of the narrative
    "nav_category": (),
    "brand_voice": (),
}

ENTITY_CONTENT_TYPE_MAP: dict[str, ContentType] = {
    "value_proposition": ContentType.VALUE_PROPOSITION,
    "headline": ContentType.VALUE_PROPOSITION,
    "tagline": ContentType.VALUE_PROPOSITION,
    "company_tagline": ContentType.VALUE_PROPOSITION,
    "feature": ContentType.FEATURE,
    "benefit": ContentType.BENEFIT,
    "pain_point": ContentType.PAIN_POINT,
    "challenge": ContentType.PAIN_POINT,
    "problem": ContentType.PAIN_POINT,
    "testimonial": ContentType.TESTIMONIAL,
    "case_study": ContentType.CASE_STUDY,
    "statistic": ContentType.STATISTIC,
    "metric": ContentType.STATISTIC,
    "comparison": ContentType.COMPARISON,
    "process": ContentType.PROCESS,
    "process_step": ContentType.PROCESS,
    "faq": ContentType.FAQ,
    "cta": ContentType.CTA,
    "offer": ContentType.CTA,
}


def roles_for_entity_type(entity_type: str) -> tuple[NarrativeRole, ...]:
    """Stages an entity type can serve, most relevant first."""
    return ENTITY_STAGE_MAP.get(entity_type, ())


def stage_for_entity_type(entity_type: str) -> NarrativeRole:
    """Primary stage for an entity type."""
    roles = roles_for_entity_type(entity_type)
    return roles[0] if roles else DEFAULT_STAGE


def stage_priority(entity_type: str, stage: NarrativeRole) -> int | None:
    """Priority (0 = best) of an entity type within a stage, None if unrelated."""
    roles = roles_for_entity_type(entity_type)
    return roles.index(stage) if stage in roles else None


def entity_types_for_role(role: NarrativeRole) -> list[str]:
    """Entity types that list ``role`` among their stages."""
    return [entity_type for entity_type, roles in ENTITY_STAGE_MAP.items() if role in roles]


def map_to_content_type(entity_type: str) -> ContentType:
    return ENTITY_CONTENT_TYPE_MAP.get(entity_type, DEFAULT_CONTENT_TYPE)


def classify_entities(
    entities: Iterable[KnowledgeEntity],
) -> dict[NarrativeRole, list[KnowledgeEntity]]:
    """Partition entities by primary stage, preserving input order.

    Every stage is present in the result, possibly with an empty list.
    """
    classified: dict[NarrativeRole, list[KnowledgeEntity]] = {role: [] for role in NarrativeRole}
    unknown = 0
    for entity in entities:
        if not entity.is_known_type:
            unknown += 1
        classified[stage_for_entity_type(entity.entity_type)].append(entity)

    if unknown:
        logger.debug(f"{unknown} entities had unrecognized types and default to {DEFAULT_STAGE.value}")
    return classified


def group_by_type(entities: Iterable[KnowledgeEntity]) -> dict[str, list[KnowledgeEntity]]:
    grouped: dict[str, list[KnowledgeEntity]] = defaultdict(list)
    for entity in entities:
        grouped[entity.entity_type].append(entity)
    return dict(grouped)
