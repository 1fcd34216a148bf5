"""Section content population: slot schemas, synthesis-backed and KB-grounded paths."""

from storyforge.content.copy import (
    CopyResult,
    CopyStrategy,
    DescriptionOptions,
    HeadlineOptions,
    generate_cta,
    generate_description,
    generate_headline,
)
from storyforge.content.generation import (
    ContentGenerationAgent,
    calculate_confidence,
    fallback_content,
    generate_content,
    plan_sections,
    source_content,
)
from storyforge.content.kb_grounded import (
    ROLE_ENTITY_PRIORITY,
    assemble_section,
    generate_kb_grounded_section_content,
    relevant_entity_types,
)
from storyforge.content.normalize import normalize_content
from storyforge.content.slots import (
    COMPONENT_SLOT_DEFINITIONS,
    get_component_requirements,
    get_component_slots,
    get_optional_slots,
    get_required_slots,
    get_slot_constraints,
    get_suggested_content_structure,
    validate_content,
)
from storyforge.content.stats import GenerationAccumulator
from storyforge.content.types import (
    ContentGenerationInput,
    ContentGenerationResult,
    ContentHints,
    ContentSlot,
    KBGroundedHints,
    KBGroundedSectionContent,
    KBGroundedSectionInput,
    KBTraceability,
    PopulatedContent,
    PopulatedSection,
    SectionRequest,
    ValidationResult,
)

__all__ = [
    "CopyResult",
    "CopyStrategy",
    "DescriptionOptions",
    "HeadlineOptions",
    "generate_cta",
    "generate_description",
    "generate_headline",
    "ContentGenerationAgent",
    "calculate_confidence",
    "fallback_content",
    "generate_content",
    "plan_sections",
    "source_content",
    "ROLE_ENTITY_PRIORITY",
    "assemble_section",
    "generate_kb_grounded_section_content",
    "relevant_entity_types",
    "normalize_content",
    "COMPONENT_SLOT_DEFINITIONS",
    "get_component_requirements",
    "get_component_slots",
    "get_optional_slots",
    "get_required_slots",
    "get_slot_constraints",
    "get_suggested_content_structure",
    "validate_content",
    "GenerationAccumulator",
    "ContentGenerationInput",
    "ContentGenerationResult",
    "ContentHints",
    "ContentSlot",
    "KBGroundedHints",
    "KBGroundedSectionContent",
    "KBGroundedSectionInput",
    "KBTraceability",
    "PopulatedContent",
    "PopulatedSection",
    "SectionRequest",
    "ValidationResult",
]
