"""Normalization of synthesized section content.

Synthesis output is untrusted JSON. ``normalize_content`` keeps well-typed
fields, drops unknown or malformed ones, filters arrays down to items that
validate, and fills CTA variants. Numbers in text item fields become
strings; any other non-string value fails the item. Empty strings are kept
as they are. Normalizing the JSON dump of a valid ``PopulatedContent``
reproduces an equal model.
"""

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from storyforge.content.types import (
    FAQItem,
    FeatureItem,
    ImageContent,
    LogoItem,
    PopulatedContent,
    PricingTier,
    ProcessStep,
    StatisticItem,
    TestimonialItem,
    VideoContent,
)
from storyforge.llm.structured import extract_json_object

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("headline", "subheadline", "description", "sectionTitle", "sectionDescription")
CTA_VARIANTS = ("primary", "secondary", "ghost", "outline")

# Array slot -> (item model, keys coerced to str)
ARRAY_FIELDS: dict[str, tuple[type[BaseModel], tuple[str, ...]]] = {
    "features": (FeatureItem, ("title", "description")),
    "testimonials": (TestimonialItem, ("quote", "author", "role", "company")),
    "statistics": (StatisticItem, ("value", "label")),
    "faqs": (FAQItem, ("question", "answer")),
    "pricingTiers": (PricingTier, ("name", "price", "description")),
    "processSteps": (ProcessStep, ("title", "description")),
    "logos": (LogoItem, ("name",)),
}


def _normalize_cta(value: Any, default_variant: str) -> dict[str, Any] | None:
    if not isinstance(value, dict):
        return None
    text, link = value.get("text"), value.get("link")
    if not isinstance(text, str) or not isinstance(link, str) or not link:
        return None
    variant = value.get("variant")
    cta = {
        "text": text,
        "link": link,
        "variant": variant if variant in CTA_VARIANTS else default_variant,
    }
    if isinstance(value.get("icon"), str):
        cta["icon"] = value["icon"]
    return cta


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _prepare_item(slot: str, index: int, item: dict[str, Any], keys: tuple[str, ...]) -> dict[str, Any]:
    prepared = dict(item)
    for key in keys:
        if _is_number(prepared.get(key)):
            prepared[key] = str(prepared[key])

    if slot == "pricingTiers":
        features = prepared.get("features")
        prepared["features"] = [f for f in features if isinstance(f, str)] if isinstance(features, list) else []
        cta = _normalize_cta(prepared.get("cta"), "primary")
        if cta is None:
            prepared.pop("cta", None)
        else:
            prepared["cta"] = cta
    elif slot == "processSteps":
        if not isinstance(prepared.get("step"), int) or isinstance(prepared.get("step"), bool):
            prepared["step"] = index + 1
    elif slot == "logos":
        if not isinstance(prepared.get("image"), dict):
            prepared["image"] = {"src": "", "alt": ""}
    return prepared


def _normalize_items(slot: str, value: Any) -> list[BaseModel] | None:
    if not isinstance(value, list):
        return None
    model, keys = ARRAY_FIELDS[slot]
    items = []
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            continue
        try:
            items.append(model.model_validate(_prepare_item(slot, index, item, keys)))
        except ValidationError as e:
            logger.debug(f"Dropping malformed {slot} item {index}: {e.error_count()} errors")
    return items


def _normalize_media(model: type[BaseModel], value: Any) -> BaseModel | None:
    if not isinstance(value, dict):
        return None
    try:
        return model.model_validate(value)
    except ValidationError:
        return None


def normalize_content(raw: str | dict[str, Any]) -> PopulatedContent:
    """Convert raw synthesis output into ``PopulatedContent``.

    Args:
        raw: JSON text or an already parsed object, keyed by slot name.

    Raises:
        StructuredOutputError: If ``raw`` is text with no JSON object in it.
    """
    data = extract_json_object(raw) if isinstance(raw, str) else raw
    fields: dict[str, Any] = {}

    for name in TEXT_FIELDS:
        value = data.get(name)
        if isinstance(value, str):
            fields[name] = value

    if isinstance(data.get("bullets"), list):
        fields["bullets"] = [b for b in data["bullets"] if isinstance(b, str)]

    primary = _normalize_cta(data.get("primaryCTA"), "primary")
    if primary:
        fields["primaryCTA"] = primary
    secondary = _normalize_cta(data.get("secondaryCTA"), "secondary")
    if secondary:
        fields["secondaryCTA"] = secondary

    for slot in ARRAY_FIELDS:
        items = _normalize_items(slot, data.get(slot))
        if items is not None:
            fields[slot] = items

    for name, model in (("image", ImageContent), ("backgroundImage", ImageContent), ("video", VideoContent)):
        media = _normalize_media(model, data.get(name))
        if media is not None:
            fields[name] = media

    if isinstance(data.get("custom"), dict):
        fields["custom"] = data["custom"]

    return PopulatedContent.model_validate(fields)
