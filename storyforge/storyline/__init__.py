"""Storyline pipeline: classification, narrative, blocks, optimization, personas."""

from storyforge.storyline.blocks import ContentBlockGenerator
from storyforge.storyline.classifier import (
    classify_entities,
    entity_types_for_role,
    map_to_content_type,
    roles_for_entity_type,
)
from storyforge.storyline.generation import (
    StorylineGenerationAgent,
    build_emotional_journey,
    build_story_flow,
    generate_storyline,
)
from storyforge.storyline.narrative import NarrativeIdentifier, fallback_narrative
from storyforge.storyline.optimizer import (
    NarrativeFlowOptimizer,
    OptimizationResult,
    OptimizationViolation,
    Severity,
    analyze_content_distribution,
    optimize_persona_variations,
    sort_content_blocks,
    validate_storyline,
)
from storyforge.storyline.personas import PersonaAdaptationEngine
from storyforge.storyline.templates import (
    NARRATIVE_TEMPLATES,
    NarrativeTemplate,
    generate_emotional_journey,
    get_default_story_flow,
    get_template,
)
from storyforge.storyline.types import (
    ContentBlock,
    CoreNarrative,
    NarrativeRole,
    PageType,
    StorylineConstraints,
    StorylineGenerationInput,
    StorylineGenerationResult,
    StorylineHints,
)

__all__ = [
    "ContentBlockGenerator",
    "classify_entities",
    "entity_types_for_role",
    "map_to_content_type",
    "roles_for_entity_type",
    "StorylineGenerationAgent",
    "build_emotional_journey",
    "build_story_flow",
    "generate_storyline",
    "NarrativeIdentifier",
    "fallback_narrative",
    "NarrativeFlowOptimizer",
    "OptimizationResult",
    "OptimizationViolation",
    "Severity",
    "analyze_content_distribution",
    "optimize_persona_variations",
    "sort_content_blocks",
    "validate_storyline",
    "PersonaAdaptationEngine",
    "NARRATIVE_TEMPLATES",
    "NarrativeTemplate",
    "generate_emotional_journey",
    "get_default_story_flow",
    "get_template",
    "ContentBlock",
    "CoreNarrative",
    "NarrativeRole",
    "PageType",
    "StorylineConstraints",
    "StorylineGenerationInput",
    "StorylineGenerationResult",
    "StorylineHints",
]
