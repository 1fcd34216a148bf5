"""Storyline type definitions.

Enums and records shared by the storyline stages. ``CoreNarrative`` is a
pydantic model because it is validated from synthesis output; everything
else is built by the pipeline itself and uses dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NarrativeRole(str, Enum):
    """Five-part persuasion arc a page is organized around."""

    HOOK = "hook"
    PROBLEM = "problem"
    SOLUTION = "solution"
    PROOF = "proof"
    ACTION = "action"


ROLE_ORDER: tuple[NarrativeRole, ...] = tuple(NarrativeRole)


class EmotionalTone(str, Enum):
    CURIOSITY = "curiosity"
    EMPATHY = "empathy"
    URGENCY = "urgency"
    HOPE = "hope"
    CONFIDENCE = "confidence"
    EXCITEMENT = "excitement"
    TRUST = "trust"
    RELIEF = "relief"


DEFAULT_STAGE_TONES: dict[NarrativeRole, EmotionalTone] = {
    NarrativeRole.HOOK: EmotionalTone.CURIOSITY,
    NarrativeRole.PROBLEM: EmotionalTone.EMPATHY,
    NarrativeRole.SOLUTION: EmotionalTone.HOPE,
    NarrativeRole.PROOF: EmotionalTone.CONFIDENCE,
    NarrativeRole.ACTION: EmotionalTone.EXCITEMENT,
}


class PageType(str, Enum):
    HOME = "home"
    LANDING = "landing"
    PRODUCT = "product"
    PRICING = "pricing"
    ABOUT = "about"
    CONTACT = "contact"
    BLOG = "blog"
    BLOG_POST = "blog-post"
    CASE_STUDY = "case-study"
    FEATURES = "features"
    SOLUTIONS = "solutions"
    RESOURCES = "resources"
    CAREERS = "careers"
    LEGAL = "legal"
    CUSTOM = "custom"


class ContentType(str, Enum):
    """Kind of content a block carries."""

    VALUE_PROPOSITION = "value_proposition"
    FEATURE = "feature"
    BENEFIT = "benefit"
    PAIN_POINT = "pain_point"
    TESTIMONIAL = "testimonial"
    CASE_STUDY = "case_study"
    STATISTIC = "statistic"
    COMPARISON = "comparison"
    PROCESS = "process"
    FAQ = "faq"
    CTA = "cta"


class HookStrategy(str, Enum):
    SURPRISING_STATISTIC = "surprising_statistic"
    PROVOCATIVE_QUESTION = "provocative_question"
    BOLD_STATEMENT = "bold_statement"
    STORY_OPENER = "story_opener"
    PROBLEM_AGITATION = "problem_agitation"
    TRANSFORMATION_PREVIEW = "transformation_preview"
    SOCIAL_PROOF_LEAD = "social_proof_lead"
    CONTRARIAN_VIEW = "contrarian_view"


class CTAStrategy(str, Enum):
    DIRECT_OFFER = "direct_offer"
    SOFT_COMMITMENT = "soft_commitment"
    SCARCITY_URGENCY = "scarcity_urgency"
    VALUE_RECAP = "value_recap"
    MULTIPLE_OPTIONS = "multiple_options"
    SOCIAL_MOMENTUM = "social_momentum"


class EmotionalArc(str, Enum):
    STANDARD = "standard"
    DRAMATIC = "dramatic"
    REASSURING = "reassuring"
    URGENT = "urgent"


class Pacing(str, Enum):
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"


# =============================================================================
# Core narrative (validated from synthesis output)
# =============================================================================


class _NarrativeModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class Transformation(_NarrativeModel):
    before: str
    after: str


class ProofElement(_NarrativeModel):
    type: str
    count: int = Field(ge=0)
    strength: str = Field(default="medium", pattern="^(high|medium|low)$")


class CoreNarrative(_NarrativeModel):
    """Compact narrative summary produced once per generation run."""

    central_theme: str = Field(min_length=1)
    value_proposition: str = Field(min_length=1)
    differentiators: list[str] = Field(default_factory=list)
    target_audience: str = ""
    transformation: Transformation
    pain_points: list[str] = Field(default_factory=list)
    benefits: list[str] = Field(default_factory=list)
    proof_elements: list[ProofElement] = Field(default_factory=list)


# =============================================================================
# Story flow and content blocks
# =============================================================================


@dataclass(frozen=True)
class StoryStage:
    name: str
    narrative_role: NarrativeRole
    emotional_tone: EmotionalTone
    description: str


@dataclass(frozen=True)
class StoryFlow:
    stages: tuple[StoryStage, ...]

    @property
    def roles(self) -> list[NarrativeRole]:
        return [stage.narrative_role for stage in self.stages]


@dataclass(frozen=True)
class BlockContent:
    """Copy carried by a content block.

    Attributes:
        headline: Block headline.
        description: Block body text.
        content_type: Kind of content.
        entity_ids: Source entity ids. Empty for placeholder blocks.
        bullets: Optional bullet points.
    """

    headline: str
    description: str
    content_type: ContentType
    entity_ids: tuple[str, ...] = ()
    bullets: tuple[str, ...] | None = None


@dataclass(frozen=True)
class ContentBlock:
    """One unit of stage-tagged content, fact-sourced or placeholder."""

    id: str
    stage: NarrativeRole
    priority: int
    content: BlockContent
    emotional_tone: EmotionalTone
    target_personas: tuple[str, ...] = ()
    suggested_components: tuple[str, ...] = ()

    @property
    def is_placeholder(self) -> bool:
        """True when no knowledge entity backs this block."""
        return not self.content.entity_ids


# =============================================================================
# Emotional journey
# =============================================================================


@dataclass(frozen=True)
class EmotionalPoint:
    position: int
    emotion: EmotionalTone
    intensity: int
    pacing: Pacing


@dataclass(frozen=True)
class PacingZone:
    start: int
    end: int
    pacing: Pacing
    purpose: str


@dataclass(frozen=True)
class EmotionalJourney:
    arc: EmotionalArc
    points: tuple[EmotionalPoint, ...]
    peak_position: int
    pacing_zones: tuple[PacingZone, ...]


# =============================================================================
# Persona adaptation
# =============================================================================


@dataclass(frozen=True)
class ProblemFraming:
    emphasis: tuple[str, ...]
    language_style: str
    quantification: str


@dataclass(frozen=True)
class PersonaNarrativeAdaptation:
    """Deterministic strategy choices for one persona."""

    persona_id: str
    hook_strategy: HookStrategy
    problem_framing: ProblemFraming
    solution_emphasis: tuple[str, ...]
    proof_priority: tuple[ContentType | str, ...]
    cta_strategy: CTAStrategy
    content_density: str
    emotional_adjustments: dict[NarrativeRole, float]


@dataclass(frozen=True)
class SectionOverride:
    headline: str | None = None
    description: str | None = None
    cta_text: str | None = None
    emphasis: tuple[str, ...] | None = None


@dataclass(frozen=True)
class PersonaStoryVariation:
    persona_id: str
    flow: StoryFlow
    adaptation: PersonaNarrativeAdaptation
    content_blocks: tuple[ContentBlock, ...]
    section_overrides: dict[NarrativeRole, SectionOverride]


# =============================================================================
# Generation input / output
# =============================================================================


@dataclass
class StorylineConstraints:
    """Caller constraints on the generated storyline.

    Attributes:
        required_stages: Stages that must appear in the story flow.
        max_content_blocks: Upper bound on generated blocks.
        hook_strategy: Hook strategy for the default flow.
        cta_strategy: CTA strategy for the default flow.
    """

    required_stages: list[NarrativeRole] = field(default_factory=list)
    max_content_blocks: int | None = None
    hook_strategy: HookStrategy | None = None
    cta_strategy: CTAStrategy | None = None


@dataclass
class StorylineHints:
    """Soft guidance for entity selection.

    Entities mentioning a focus area are used first; entities mentioning an
    avoided topic are skipped. Matching is case-insensitive on name and
    description.
    """

    focus_areas: list[str] = field(default_factory=list)
    avoid_topics: list[str] = field(default_factory=list)


@dataclass
class StorylineGenerationInput:
    workspace_id: str
    page_type: PageType
    persona_ids: list[str] = field(default_factory=list)
    brand_config_id: str | None = None
    constraints: StorylineConstraints | None = None
    hints: StorylineHints | None = None
    auto_optimize: bool = True


@dataclass(frozen=True)
class GenerationMetadata:
    generated_at: datetime
    model_used: str
    tokens_used: int
    generation_time_ms: int
    knowledge_items_used: int
    narrative_fallback_used: bool


@dataclass(frozen=True)
class StorylineGenerationResult:
    core_narrative: CoreNarrative
    default_flow: StoryFlow
    persona_variations: tuple[PersonaStoryVariation, ...]
    content_blocks: tuple[ContentBlock, ...]
    emotional_journey: EmotionalJourney
    optimization_score: int
    metadata: GenerationMetadata
