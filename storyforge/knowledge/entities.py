"""Knowledge entity and audience records.

These are owned by the external knowledge store and are read-only to the
pipeline. JSON field names are camelCase.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storyforge.knowledge.metadata import EntityMetadata


class EntityType(str, Enum):
    """Known knowledge entity types.

    Entities of other types are still accepted; they classify into the
    default ``solution`` stage.
    """

    PRODUCT = "product"
    SERVICE = "service"
    FEATURE = "feature"
    BENEFIT = "benefit"
    PRICING = "pricing"
    TESTIMONIAL = "testimonial"
    COMPANY = "company"
    PERSON = "person"
    STATISTIC = "statistic"
    FAQ = "faq"
    CTA = "cta"
    PROCESS_STEP = "process_step"
    USE_CASE = "use_case"
    INTEGRATION = "integration"
    CONTACT = "contact"
    COMPANY_NAME = "company_name"
    COMPANY_TAGLINE = "company_tagline"
    COMPANY_DESCRIPTION = "company_description"
    MISSION_STATEMENT = "mission_statement"
    SOCIAL_LINK = "social_link"
    NAV_CATEGORY = "nav_category"
    BRAND_VOICE = "brand_voice"
    VALUE_PROPOSITION = "value_proposition"
    HEADLINE = "headline"
    TAGLINE = "tagline"
    PAIN_POINT = "pain_point"
    CHALLENGE = "challenge"
    PROBLEM = "problem"
    PROCESS = "process"
    COMPARISON = "comparison"
    CASE_STUDY = "case_study"
    AWARD = "award"
    CERTIFICATION = "certification"
    METRIC = "metric"
    OFFER = "offer"


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class KnowledgeEntity(_Record):
    """A single extracted fact about the business."""

    id: str
    entity_type: str
    name: str
    description: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)

    @property
    def meta(self) -> EntityMetadata:
        """Typed view over ``metadata``."""
        return EntityMetadata(self.entity_type, self.metadata)

    @property
    def is_known_type(self) -> bool:
        return self.entity_type in EntityType._value2member_map_

    def summary(self, max_description: int = 200) -> str:
        """One-line ``name: description`` rendering for prompts."""
        if self.description:
            return f"{self.name}: {self.description[:max_description]}"
        return self.name


class ContentPreferences(_Record):
    preferred_format: str | None = None


class Persona(_Record):
    """An audience segment profile."""

    id: str
    name: str
    communication_style: Literal["technical", "business", "executive"] = "business"
    buyer_journey_stage: Literal["awareness", "consideration", "decision"] = "consideration"
    pain_points: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    decision_criteria: list[str] = Field(default_factory=list)
    language_style: str | None = None
    content_preferences: ContentPreferences = Field(default_factory=ContentPreferences)


class BrandVoice(_Record):
    """Brand voice and identity record."""

    id: str
    name: str
    tone: str | None = None
    personality: str | None = None
    industry: str | None = None
    target_audience: str | None = None
