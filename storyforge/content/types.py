"""Content population type definitions.

``PopulatedContent`` and its item records are pydantic models because they
are produced from synthesis output and serialized for display layers; JSON
field names are camelCase (``primaryCTA``/``secondaryCTA`` keep their
upper-case suffix). Request and result records are dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from storyforge.knowledge.entities import KnowledgeEntity
from storyforge.storyline.types import (
    ContentBlock,
    CTAStrategy,
    EmotionalTone,
    NarrativeRole,
    PageType,
)

CTAVariant = Literal["primary", "secondary", "ghost", "outline"]


# =============================================================================
# Slots
# =============================================================================


class SlotType(str, Enum):
    TEXT = "text"
    RICHTEXT = "richtext"
    IMAGE = "image"
    VIDEO = "video"
    LINK = "link"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class ContentSlot:
    """A named, typed field a component variant expects to be filled."""

    name: str
    label: str
    type: SlotType
    required: bool
    min_length: int | None = None
    max_length: int | None = None
    min_items: int | None = None
    max_items: int | None = None
    children: tuple["ContentSlot", ...] = ()


@dataclass(frozen=True)
class Bounds:
    min: int | None = None
    max: int | None = None


@dataclass(frozen=True)
class ComponentRequirements:
    component_id: str
    required: list[str]
    optional: list[str]
    slots: tuple[ContentSlot, ...]
    length_constraints: dict[str, Bounds]
    count_constraints: dict[str, Bounds]


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


# =============================================================================
# Populated content
# =============================================================================


class _ContentModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class CTAContent(_ContentModel):
    text: str
    link: str = "#"
    variant: CTAVariant | None = None
    icon: str | None = None


class ImageContent(_ContentModel):
    src: str = ""
    alt: str = ""
    width: int | None = None
    height: int | None = None
    caption: str | None = None


class VideoContent(_ContentModel):
    src: str = ""
    poster: str | None = None
    title: str | None = None
    duration: float | None = None


class FeatureItem(_ContentModel):
    title: str
    description: str = ""
    icon: str | None = None
    image: ImageContent | None = None
    link: str | None = None


class TestimonialItem(_ContentModel):
    quote: str
    author: str = ""
    role: str = ""
    company: str = ""
    avatar: ImageContent | None = None
    rating: float | None = None
    logo: ImageContent | None = None


class StatisticItem(_ContentModel):
    value: str
    label: str = ""
    description: str | None = None
    icon: str | None = None
    prefix: str | None = None
    suffix: str | None = None


class FAQItem(_ContentModel):
    question: str
    answer: str = ""


class PricingTier(_ContentModel):
    name: str
    price: str = ""
    period: str | None = None
    description: str = ""
    features: list[str] = Field(default_factory=list)
    cta: CTAContent = Field(default_factory=lambda: CTAContent(text="Get Started", variant="primary"))
    highlighted: bool | None = None
    badge: str | None = None

    @field_validator("cta")
    @classmethod
    def _default_cta_variant(cls, cta: CTAContent) -> CTAContent:
        if cta.variant is None:
            return cta.model_copy(update={"variant": "primary"})
        return cta


class ProcessStep(_ContentModel):
    step: int
    title: str
    description: str = ""
    icon: str | None = None
    image: ImageContent | None = None


class LogoItem(_ContentModel):
    name: str
    image: ImageContent = Field(default_factory=ImageContent)
    link: str | None = None


class PopulatedContent(_ContentModel):
    """Sparse record of copy for one section. Unset fields are None.

    CTAs without a variant take their slot's default: ``primary`` for
    ``primaryCTA`` and ``secondary`` for ``secondaryCTA``.
    """

    headline: str | None = None
    subheadline: str | None = None
    description: str | None = None
    bullets: list[str] | None = None
    primary_cta: CTAContent | None = Field(default=None, alias="primaryCTA")
    secondary_cta: CTAContent | None = Field(default=None, alias="secondaryCTA")
    image: ImageContent | None = None
    background_image: ImageContent | None = None
    video: VideoContent | None = None
    features: list[FeatureItem] | None = None
    testimonials: list[TestimonialItem] | None = None
    statistics: list[StatisticItem] | None = None
    faqs: list[FAQItem] | None = None
    pricing_tiers: list[PricingTier] | None = None
    process_steps: list[ProcessStep] | None = None
    logos: list[LogoItem] | None = None
    section_title: str | None = None
    section_description: str | None = None
    custom: dict[str, Any] | None = None

    @model_validator(mode="after")
    def _default_cta_variants(self) -> "PopulatedContent":
        if self.primary_cta is not None and self.primary_cta.variant is None:
            self.primary_cta = self.primary_cta.model_copy(update={"variant": "primary"})
        if self.secondary_cta is not None and self.secondary_cta.variant is None:
            self.secondary_cta = self.secondary_cta.model_copy(update={"variant": "secondary"})
        return self

    def to_slots(self) -> dict[str, Any]:
        """Slot-keyed dict (camelCase names) of the populated fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# Synthesis-backed population
# =============================================================================


@dataclass
class ContentHints:
    """User hints passed to the synthesis prompt."""

    focus_keywords: list[str] = field(default_factory=list)
    avoid_terms: list[str] = field(default_factory=list)
    tone_override: Literal["formal", "conversational", "bold"] | None = None
    include_stats: bool = False
    cta_preference: str | None = None


@dataclass
class SectionRequest:
    """One section to populate.

    Attributes:
        section_id: Caller-assigned section id.
        component_id: Component variant whose slots are filled.
        narrative_role: Stage the section serves.
        order: Position on the page.
        content_block: Optional storyline block the section should expand.
    """

    section_id: str
    component_id: str
    narrative_role: NarrativeRole
    order: int
    content_block: ContentBlock | None = None


@dataclass
class ContentGenerationInput:
    workspace_id: str
    page_id: str
    page_type: PageType
    sections: list[SectionRequest]
    persona_ids: list[str] = field(default_factory=list)
    brand_config_id: str | None = None
    hints: ContentHints | None = None


@dataclass(frozen=True)
class SourcedContent:
    """A knowledge entity staged for a section."""

    entity: KnowledgeEntity
    suggested_stage: NarrativeRole
    relevance_score: float = 0.8

    @property
    def entity_id(self) -> str:
        return self.entity.id

    @property
    def entity_type(self) -> str:
        return self.entity.entity_type


@dataclass(frozen=True)
class PersonaContentVariation:
    """Persona-specific copy for a section.

    ``adapted`` is False when synthesis failed and ``content`` is the
    unmodified base content; the persona metadata is set either way.
    """

    persona_id: str
    content: PopulatedContent
    emotional_tone: EmotionalTone
    emphasis: list[str]
    cta_approach: CTAStrategy
    adapted: bool = True


@dataclass(frozen=True)
class SectionMetadata:
    generated_at: datetime
    model_used: str
    tokens_used: int
    confidence_score: float
    source_entity_ids: list[str]
    used_fallback: bool = False


@dataclass(frozen=True)
class PopulatedSection:
    section_id: str
    component_id: str
    narrative_role: NarrativeRole
    order: int
    content: PopulatedContent
    persona_variations: dict[str, PersonaContentVariation]
    metadata: SectionMetadata


class PageMetadata(_ContentModel):
    """SEO metadata for a page."""

    title: str
    description: str
    keywords: list[str] = Field(default_factory=list)
    og_image: str | None = None


@dataclass(frozen=True)
class ContentGenerationStats:
    total_sections: int
    sections_generated: int
    total_tokens_used: int
    total_time_ms: int
    average_confidence: float
    fallbacks_used: int
    persona_fallbacks_used: int = 0


@dataclass(frozen=True)
class ContentGenerationResult:
    page_id: str
    sections: list[PopulatedSection]
    page_metadata: PageMetadata
    generation_stats: ContentGenerationStats


# =============================================================================
# KB-grounded population
# =============================================================================


@dataclass
class KBGroundedHints:
    focus_keywords: list[str] = field(default_factory=list)
    tone: Literal["formal", "conversational", "bold"] | None = None
    max_length: int | None = None


@dataclass
class KBGroundedSectionInput:
    workspace_id: str
    component_id: str
    narrative_role: NarrativeRole
    hints: KBGroundedHints | None = None


@dataclass(frozen=True)
class KBTraceability:
    """Which facts produced a section and how confident they were.

    ``is_generic_fallback`` is True exactly when ``source_entity_ids`` is
    empty, in which case ``confidence`` is 0.
    """

    source_entity_ids: list[str]
    confidence: float
    is_generic_fallback: bool
    entity_types_used: list[str]


@dataclass(frozen=True)
class KBGroundedSectionContent:
    content: PopulatedContent
    traceability: KBTraceability
    field_sources: dict[str, list[str]]
