"""Component slot schema registry and content validation.

Static slot definitions per component variant. Lookups for an unknown
component id raise ``SlotSchemaNotFoundError``; ``validate_content`` instead
reports the unknown id as a validation error and never raises.
"""

from collections.abc import Mapping
from typing import Any

from storyforge.content.types import (
    Bounds,
    ComponentRequirements,
    ContentSlot,
    PopulatedContent,
    SlotType,
    ValidationResult,
)
from storyforge.exceptions import SlotSchemaNotFoundError

TEXT = SlotType.TEXT
RICHTEXT = SlotType.RICHTEXT
IMAGE = SlotType.IMAGE
VIDEO = SlotType.VIDEO
LINK = SlotType.LINK
ARRAY = SlotType.ARRAY
OBJECT = SlotType.OBJECT


def _slot(name: str, label: str, type: SlotType, required: bool = False, **constraints: Any) -> ContentSlot:
    children = tuple(constraints.pop("children", ()))
    return ContentSlot(name=name, label=label, type=type, required=required, children=children, **constraints)


def _cta_slot(name: str, label: str, required: bool) -> ContentSlot:
    return _slot(name, label, OBJECT, required, children=(
        _slot("text", "Button Text", TEXT, True, max_length=30),
        _slot("link", "Button Link", LINK, True),
    ))


HERO_SLOTS: dict[str, tuple[ContentSlot, ...]] = {
    "hero-centered": (
        _slot("headline", "Main Headline", TEXT, True, max_length=100),
        _slot("subheadline", "Subheadline", TEXT, max_length=150),
        _slot("description", "Description", RICHTEXT, max_length=300),
        _cta_slot("primaryCTA", "Primary CTA", True),
        _cta_slot("secondaryCTA", "Secondary CTA", False),
        _slot("image", "Hero Image", IMAGE),
        _slot("backgroundImage", "Background Image", IMAGE),
    ),
    "hero-split": (
        _slot("headline", "Main Headline", TEXT, True, max_length=80),
        _slot("subheadline", "Subheadline", TEXT, max_length=120),
        _slot("description", "Description", RICHTEXT, True, max_length=400),
        _slot("bullets", "Key Points", ARRAY, min_items=2, max_items=5),
        _cta_slot("primaryCTA", "Primary CTA", True),
        _slot("secondaryCTA", "Secondary CTA", OBJECT),
        _slot("image", "Hero Image", IMAGE, True),
    ),
    "hero-video": (
        _slot("headline", "Main Headline", TEXT, True, max_length=80),
        _slot("subheadline", "Subheadline", TEXT, max_length=120),
        _slot("description", "Description", RICHTEXT, max_length=300),
        _slot("primaryCTA", "Primary CTA", OBJECT, True),
        _slot("video", "Hero Video", VIDEO, True),
    ),
    "hero-product": (
        _slot("headline", "Product Name", TEXT, True, max_length=60),
        _slot("subheadline", "Tagline", TEXT, True, max_length=100),
        _slot("description", "Description", RICHTEXT, True, max_length=500),
        _slot("features", "Key Features", ARRAY, min_items=2, max_items=4),
        _slot("primaryCTA", "Primary CTA", OBJECT, True),
        _slot("image", "Product Image", IMAGE, True),
    ),
    "hero-gradient": (
        _slot("headline", "Main Headline", TEXT, True, max_length=100),
        _slot("subheadline", "Subheadline", TEXT, max_length=150),
        _slot("primaryCTA", "Primary CTA", OBJECT, True),
        _slot("secondaryCTA", "Secondary CTA", OBJECT),
        _slot("statistics", "Statistics", ARRAY, min_items=2, max_items=4),
    ),
}

FEATURES_SLOTS: dict[str, tuple[ContentSlot, ...]] = {
    "features-grid": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("sectionDescription", "Section Description", TEXT, max_length=200),
        _slot("features", "Features", ARRAY, True, min_items=3, max_items=12, children=(
            _slot("title", "Feature Title", TEXT, True, max_length=50),
            _slot("description", "Feature Description", TEXT, True, max_length=150),
            _slot("icon", "Icon", TEXT),
        )),
    ),
    "features-alternating": (
        _slot("sectionTitle", "Section Title", TEXT, max_length=80),
        _slot("features", "Features", ARRAY, True, min_items=2, max_items=6, children=(
            _slot("title", "Feature Title", TEXT, True, max_length=60),
            _slot("description", "Feature Description", RICHTEXT, True, max_length=300),
            _slot("image", "Feature Image", IMAGE, True),
            _slot("bullets", "Bullet Points", ARRAY, max_items=4),
        )),
    ),
    "features-cards": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("sectionDescription", "Section Description", TEXT, max_length=200),
        _slot("features", "Feature Cards", ARRAY, True, min_items=3, max_items=9, children=(
            _slot("title", "Card Title", TEXT, True, max_length=50),
            _slot("description", "Card Description", TEXT, True, max_length=200),
            _slot("icon", "Icon", TEXT),
            _slot("link", "Learn More Link", LINK),
        )),
    ),
    "features-tabs": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("features", "Tab Features", ARRAY, True, min_items=3, max_items=6, children=(
            _slot("title", "Tab Title", TEXT, True, max_length=30),
            _slot("description", "Content", RICHTEXT, True, max_length=500),
            _slot("image", "Tab Image", IMAGE),
        )),
    ),
    "features-icons": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("sectionDescription", "Section Description", TEXT, max_length=200),
        _slot("features", "Features", ARRAY, True, min_items=4, max_items=8, children=(
            _slot("title", "Feature Title", TEXT, True, max_length=40),
            _slot("description", "Feature Description", TEXT, True, max_length=100),
            _slot("icon", "Icon", TEXT, True),
        )),
    ),
}

SOCIAL_PROOF_SLOTS: dict[str, tuple[ContentSlot, ...]] = {
    "testimonials-grid": (
        _slot("sectionTitle", "Section Title", TEXT, max_length=80),
        _slot("testimonials", "Testimonials", ARRAY, True, min_items=3, max_items=9, children=(
            _slot("quote", "Quote", TEXT, True, min_length=50, max_length=300),
            _slot("author", "Author Name", TEXT, True, max_length=50),
            _slot("role", "Role/Title", TEXT, True, max_length=50),
            _slot("company", "Company", TEXT, max_length=50),
            _slot("avatar", "Avatar", IMAGE),
        )),
    ),
    "testimonials-carousel": (
        _slot("sectionTitle", "Section Title", TEXT, max_length=80),
        _slot("testimonials", "Testimonials", ARRAY, True, min_items=3, max_items=10, children=(
            _slot("quote", "Quote", TEXT, True, min_length=50, max_length=400),
            _slot("author", "Author Name", TEXT, True, max_length=50),
            _slot("role", "Role/Title", TEXT, True, max_length=50),
            _slot("company", "Company", TEXT, max_length=50),
            _slot("avatar", "Avatar", IMAGE),
            _slot("rating", "Star Rating", TEXT),
        )),
    ),
    "testimonials-featured": (
        _slot("testimonials", "Featured Testimonial", ARRAY, True, min_items=1, max_items=1, children=(
            _slot("quote", "Quote", TEXT, True, min_length=100, max_length=500),
            _slot("author", "Author Name", TEXT, True, max_length=50),
            _slot("role", "Role/Title", TEXT, True, max_length=50),
            _slot("company", "Company", TEXT, True, max_length=50),
            _slot("avatar", "Avatar", IMAGE, True),
            _slot("logo", "Company Logo", IMAGE),
        )),
    ),
    "logo-cloud": (
        _slot("sectionTitle", "Section Title", TEXT, max_length=80),
        _slot("logos", "Logos", ARRAY, True, min_items=4, max_items=12, children=(
            _slot("name", "Company Name", TEXT, True, max_length=50),
            _slot("image", "Logo Image", IMAGE, True),
            _slot("link", "Link", LINK),
        )),
    ),
    "stats-grid": (
        _slot("sectionTitle", "Section Title", TEXT, max_length=80),
        _slot("statistics", "Statistics", ARRAY, True, min_items=3, max_items=6, children=(
            _slot("value", "Value", TEXT, True, max_length=20),
            _slot("label", "Label", TEXT, True, max_length=50),
            _slot("description", "Description", TEXT, max_length=100),
        )),
    ),
    "case-study-cards": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("sectionDescription", "Section Description", TEXT, max_length=200),
        _slot("testimonials", "Case Studies", ARRAY, True, min_items=2, max_items=4, children=(
            _slot("company", "Company Name", TEXT, True, max_length=50),
            _slot("quote", "Summary", TEXT, True, max_length=200),
            _slot("author", "Contact Name", TEXT, max_length=50),
            _slot("role", "Contact Role", TEXT, max_length=50),
            _slot("logo", "Company Logo", IMAGE),
        )),
    ),
}

PRICING_SLOTS: dict[str, tuple[ContentSlot, ...]] = {
    "pricing-tiers": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("sectionDescription", "Section Description", TEXT, max_length=200),
        _slot("pricingTiers", "Pricing Tiers", ARRAY, True, min_items=2, max_items=4, children=(
            _slot("name", "Tier Name", TEXT, True, max_length=30),
            _slot("price", "Price", TEXT, True, max_length=20),
            _slot("period", "Period", TEXT, max_length=20),
            _slot("description", "Description", TEXT, True, max_length=100),
            _slot("features", "Features", ARRAY, True, min_items=3, max_items=10),
            _slot("cta", "CTA", OBJECT, True),
            _slot("highlighted", "Highlighted", TEXT),
            _slot("badge", "Badge", TEXT),
        )),
    ),
    "pricing-comparison": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("pricingTiers", "Plans to Compare", ARRAY, True, min_items=2, max_items=4),
        _slot("features", "Comparison Features", ARRAY, True, min_items=5, max_items=20),
    ),
    "pricing-simple": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("description", "Description", TEXT, max_length=200),
        _slot("pricingTiers", "Single Tier", ARRAY, True, min_items=1, max_items=1),
        _slot("primaryCTA", "CTA", OBJECT, True),
    ),
}

CTA_SLOTS: dict[str, tuple[ContentSlot, ...]] = {
    "cta-centered": (
        _slot("headline", "Headline", TEXT, True, max_length=80),
        _slot("description", "Description", TEXT, max_length=200),
        _cta_slot("primaryCTA", "Primary CTA", True),
        _slot("secondaryCTA", "Secondary CTA", OBJECT),
    ),
    "cta-split": (
        _slot("headline", "Headline", TEXT, True, max_length=80),
        _slot("description", "Description", RICHTEXT, True, max_length=300),
        _slot("bullets", "Key Points", ARRAY, max_items=4),
        _slot("primaryCTA", "Primary CTA", OBJECT, True),
        _slot("image", "Image", IMAGE),
    ),
    "cta-banner": (
        _slot("headline", "Headline", TEXT, True, max_length=60),
        _slot("primaryCTA", "CTA", OBJECT, True),
        _slot("backgroundImage", "Background", IMAGE),
    ),
    "cta-newsletter": (
        _slot("headline", "Headline", TEXT, True, max_length=60),
        _slot("description", "Description", TEXT, max_length=150),
        _slot("primaryCTA", "Submit Button", OBJECT, True),
    ),
    "cta-floating": (
        _slot("headline", "Headline", TEXT, True, max_length=40),
        _slot("primaryCTA", "CTA", OBJECT, True),
    ),
}

CONTENT_SLOTS: dict[str, tuple[ContentSlot, ...]] = {
    "process-steps": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("sectionDescription", "Section Description", TEXT, max_length=200),
        _slot("processSteps", "Steps", ARRAY, True, min_items=3, max_items=6, children=(
            _slot("step", "Step Number", TEXT, True),
            _slot("title", "Step Title", TEXT, True, max_length=50),
            _slot("description", "Step Description", TEXT, True, max_length=200),
            _slot("icon", "Icon", TEXT),
        )),
    ),
    "faq-accordion": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("sectionDescription", "Section Description", TEXT, max_length=200),
        _slot("faqs", "FAQs", ARRAY, True, min_items=3, max_items=15, children=(
            _slot("question", "Question", TEXT, True, max_length=150),
            _slot("answer", "Answer", RICHTEXT, True, max_length=500),
        )),
    ),
    "content-text": (
        _slot("headline", "Headline", TEXT, max_length=80),
        _slot("description", "Content", RICHTEXT, True),
    ),
    "timeline-vertical": (
        _slot("sectionTitle", "Section Title", TEXT, True, max_length=80),
        _slot("processSteps", "Timeline Items", ARRAY, True, min_items=3, max_items=8, children=(
            _slot("title", "Title", TEXT, True, max_length=50),
            _slot("description", "Description", TEXT, True, max_length=200),
            _slot("icon", "Icon", TEXT),
        )),
    ),
}

NAV_SLOTS: dict[str, tuple[ContentSlot, ...]] = {
    "header-simple": (_slot("custom", "Navigation Items", OBJECT, True),),
    "header-mega": (_slot("custom", "Mega Menu Config", OBJECT, True),),
    "footer-simple": (_slot("custom", "Footer Links", OBJECT, True),),
    "footer-complex": (_slot("custom", "Footer Config", OBJECT, True),),
}

COMPONENT_SLOT_DEFINITIONS: dict[str, tuple[ContentSlot, ...]] = {
    **HERO_SLOTS,
    **FEATURES_SLOTS,
    **SOCIAL_PROOF_SLOTS,
    **PRICING_SLOTS,
    **CTA_SLOTS,
    **CONTENT_SLOTS,
    **NAV_SLOTS,
}


def get_component_slots(component_id: str) -> tuple[ContentSlot, ...]:
    """Slot definitions for a component variant.

    Raises:
        SlotSchemaNotFoundError: If the component id is not registered.
    """
    try:
        return COMPONENT_SLOT_DEFINITIONS[component_id]
    except KeyError:
        raise SlotSchemaNotFoundError(component_id) from None


def get_required_slots(component_id: str) -> list[str]:
    return [slot.name for slot in get_component_slots(component_id) if slot.required]


def get_optional_slots(component_id: str) -> list[str]:
    return [slot.name for slot in get_component_slots(component_id) if not slot.required]


def get_slot_constraints(component_id: str) -> dict[str, Bounds]:
    """Length bounds for text slots and item-count bounds for array slots."""
    constraints: dict[str, Bounds] = {}
    for slot in get_component_slots(component_id):
        if slot.min_length is not None or slot.max_length is not None:
            constraints[slot.name] = Bounds(slot.min_length, slot.max_length)
        if slot.min_items is not None or slot.max_items is not None:
            constraints[slot.name] = Bounds(slot.min_items, slot.max_items)
    return constraints


def get_component_requirements(component_id: str) -> ComponentRequirements:
    slots = get_component_slots(component_id)
    return ComponentRequirements(
        component_id=component_id,
        required=get_required_slots(component_id),
        optional=get_optional_slots(component_id),
        slots=slots,
        length_constraints={
            slot.name: Bounds(slot.min_length, slot.max_length)
            for slot in slots
            if slot.min_length is not None or slot.max_length is not None
        },
        count_constraints={
            slot.name: Bounds(slot.min_items, slot.max_items)
            for slot in slots
            if slot.min_items is not None or slot.max_items is not None
        },
    )


def max_items_for(component_id: str, slot_name: str) -> int | None:
    """Item cap of an array slot, None when the slot is absent or uncapped."""
    for slot in COMPONENT_SLOT_DEFINITIONS.get(component_id, ()):
        if slot.name == slot_name:
            return slot.max_items
    return None


def is_filled(value: Any) -> bool:
    """Whether a slot value counts as present: not None, '' or an empty list."""
    if value is None or value == "":
        return False
    if isinstance(value, list) and not value:
        return False
    return True


def validate_content(
    content: PopulatedContent | Mapping[str, Any],
    component_id: str,
) -> ValidationResult:
    """Check content against a component's slot constraints.

    Required slots must be present and non-empty; populated strings must be
    within length bounds and populated arrays within item-count bounds.
    Never raises; an unknown component id is reported as an error.
    """
    if isinstance(content, PopulatedContent):
        content = content.to_slots()

    try:
        requirements = get_component_requirements(component_id)
    except SlotSchemaNotFoundError as e:
        return ValidationResult(valid=False, errors=[str(e)])

    errors = []
    for name in requirements.required:
        value = content.get(name)
        if value is None or value == "":
            errors.append(f"Missing required slot: {name}")
        elif isinstance(value, list) and not value:
            errors.append(f"Required slot is empty: {name}")

    for name, bounds in requirements.length_constraints.items():
        value = content.get(name)
        if not isinstance(value, str):
            continue
        if bounds.min and len(value) < bounds.min:
            errors.append(f"{name} is too short (min: {bounds.min})")
        if bounds.max and len(value) > bounds.max:
            errors.append(f"{name} is too long (max: {bounds.max})")

    for name, bounds in requirements.count_constraints.items():
        value = content.get(name)
        if not isinstance(value, list):
            continue
        if bounds.min and len(value) < bounds.min:
            errors.append(f"{name} has too few items (min: {bounds.min})")
        if bounds.max and len(value) > bounds.max:
            errors.append(f"{name} has too many items (max: {bounds.max})")

    return ValidationResult(valid=not errors, errors=errors)


def get_suggested_content_structure(component_id: str) -> dict[str, Any]:
    """Empty skeleton of a component's slots.

    Text slots are seeded with '', links with '#', arrays with [] and
    objects from their children. Seeded empty values still count as missing
    for required slots in ``validate_content``.
    """
    structure: dict[str, Any] = {}
    for slot in get_component_slots(component_id):
        if slot.type in (TEXT, RICHTEXT):
            structure[slot.name] = ""
        elif slot.type == LINK:
            structure[slot.name] = "#"
        elif slot.type == IMAGE:
            structure[slot.name] = {"src": "", "alt": ""}
        elif slot.type == VIDEO:
            structure[slot.name] = {"src": "", "poster": ""}
        elif slot.type == ARRAY:
            structure[slot.name] = []
        elif slot.children:
            structure[slot.name] = {
                child.name: [] if child.type == ARRAY else "" for child in slot.children
            }
        else:
            structure[slot.name] = {}
    return structure
