"""Typed access to knowledge entity metadata.

Entity metadata arrives from the knowledge store as a free-form map. The
pipeline reads it only through ``EntityMetadata``, whose lookups convert
values to the expected type or return the supplied default. The registry
below documents which keys each entity type is known to carry.
"""

from collections.abc import Iterator, Mapping
from enum import Enum
from typing import Any


class MetadataKind(str, Enum):
    """Value kinds a metadata key may hold."""

    TEXT = "text"
    NUMBER = "number"
    FLAG = "flag"
    STRINGS = "strings"


# Keys any entity type may carry
COMMON_METADATA: dict[str, MetadataKind] = {
    "name": MetadataKind.TEXT,
    "title": MetadataKind.TEXT,
    "description": MetadataKind.TEXT,
    "bullets": MetadataKind.STRINGS,
    "icon": MetadataKind.TEXT,
}

METADATA_SCHEMAS: dict[str, dict[str, MetadataKind]] = {
    "feature": {"benefit": MetadataKind.TEXT},
    "benefit": {"outcome": MetadataKind.TEXT},
    "testimonial": {
        "quote": MetadataKind.TEXT,
        "author": MetadataKind.TEXT,
        "role": MetadataKind.TEXT,
        "company": MetadataKind.TEXT,
        "rating": MetadataKind.NUMBER,
        "avatar": MetadataKind.TEXT,
    },
    "statistic": {
        "value": MetadataKind.TEXT,
        "metric": MetadataKind.TEXT,
        "context": MetadataKind.TEXT,
        "prefix": MetadataKind.TEXT,
        "suffix": MetadataKind.TEXT,
    },
    "metric": {"value": MetadataKind.TEXT, "metric": MetadataKind.TEXT},
    "faq": {"question": MetadataKind.TEXT, "answer": MetadataKind.TEXT},
    "pricing": {
        "tier": MetadataKind.TEXT,
        "amount": MetadataKind.TEXT,
        "period": MetadataKind.TEXT,
        "features": MetadataKind.STRINGS,
        "highlighted": MetadataKind.FLAG,
        "badge": MetadataKind.TEXT,
    },
    "cta": {"action": MetadataKind.TEXT, "targetUrl": MetadataKind.TEXT},
    "company_tagline": {"slogan": MetadataKind.TEXT},
    "company_description": {"aboutText": MetadataKind.TEXT},
    "mission_statement": {"missionText": MetadataKind.TEXT},
    "process_step": {"step": MetadataKind.NUMBER},
    "case_study": {"client": MetadataKind.TEXT, "result": MetadataKind.TEXT},
    "person": {"role": MetadataKind.TEXT, "avatar": MetadataKind.TEXT},
    "social_link": {"url": MetadataKind.TEXT, "platform": MetadataKind.TEXT},
    "contact": {"email": MetadataKind.TEXT, "phone": MetadataKind.TEXT},
}


def schema_for(entity_type: str) -> dict[str, MetadataKind]:
    """Return the known metadata keys for an entity type, including common keys."""
    return {**COMMON_METADATA, **METADATA_SCHEMAS.get(entity_type, {})}


class EntityMetadata(Mapping[str, Any]):
    """Read-only metadata map with typed lookups.

    Args:
        entity_type: Type of the owning entity, used for schema checks.
        values: Raw metadata values.
    """

    def __init__(self, entity_type: str, values: Mapping[str, Any] | None = None) -> None:
        self._entity_type = entity_type
        self._values = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def text(self, key: str, default: str | None = None) -> str | None:
        """Return a non-empty string value. Numbers are rendered as text."""
        value = self._values.get(key)
        if isinstance(value, str) and value.strip():
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return default

    def number(self, key: str, default: float | None = None) -> float | None:
        """Return a numeric value, parsing numeric strings."""
        value = self._values.get(key)
        if isinstance(value, bool):
            return default
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                return default
        return default

    def flag(self, key: str, default: bool = False) -> bool:
        """Return a boolean value."""
        value = self._values.get(key)
        return value if isinstance(value, bool) else default

    def strings(self, key: str) -> list[str]:
        """Return the string items of a list value, or an empty list."""
        value = self._values.get(key)
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    def first_text(self, *keys: str, default: str | None = None) -> str | None:
        """Return the first key that yields a non-empty text value."""
        for key in keys:
            value = self.text(key)
            if value is not None:
                return value
        return default

    def schema_issues(self) -> list[str]:
        """List known keys whose value does not match the registered kind.

        Unknown keys are allowed. This never raises.
        """
        issues = []
        for key, kind in schema_for(self._entity_type).items():
            if key not in self._values or self._values[key] is None:
                continue
            value = self._values[key]
            if kind == MetadataKind.TEXT and self.text(key) is None:
                issues.append(f"{key}: expected text, got {type(value).__name__}")
            elif kind == MetadataKind.NUMBER and self.number(key) is None:
                issues.append(f"{key}: expected number, got {type(value).__name__}")
            elif kind == MetadataKind.FLAG and not isinstance(value, bool):
                issues.append(f"{key}: expected flag, got {type(value).__name__}")
            elif kind == MetadataKind.STRINGS and not isinstance(value, list):
                issues.append(f"{key}: expected list of strings, got {type(value).__name__}")
        return issues
