"""Knowledge store interfaces and an in-memory implementation.

The pipeline reads facts, personas and brand voice from external stores.
Only the protocols matter to the pipeline; ``InMemoryKnowledgeStore`` backs
the CLI (via ``load_workspace``) and the tests.
"""

import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storyforge.knowledge.entities import BrandVoice, KnowledgeEntity, Persona

logger = logging.getLogger(__name__)


@runtime_checkable
class FactStore(Protocol):
    """Source of knowledge entities."""

    async def fetch_entities(
        self,
        workspace_id: str,
        entity_types: Sequence[str] | None = None,
        min_confidence: float = 0.5,
        limit: int = 100,
    ) -> list[KnowledgeEntity]:
        """Return entities ordered by confidence descending, capped at ``limit``."""
        ...


@runtime_checkable
class PersonaStore(Protocol):
    """Source of persona records."""

    async def fetch_personas(self, persona_ids: Sequence[str]) -> list[Persona]:
        ...


@runtime_checkable
class BrandStore(Protocol):
    """Source of brand voice records."""

    async def fetch_brand_voice(self, brand_config_id: str) -> BrandVoice | None:
        ...


class InMemoryKnowledgeStore:
    """Dictionary-backed fact, persona and brand store.

    Args:
        entities: Entities keyed by workspace id.
        personas: Persona records.
        brand_voices: Brand voice records.
    """

    def __init__(
        self,
        entities: dict[str, list[KnowledgeEntity]] | None = None,
        personas: Iterable[Persona] = (),
        brand_voices: Iterable[BrandVoice] = (),
    ) -> None:
        self._entities = {ws: list(items) for ws, items in (entities or {}).items()}
        self._personas = {p.id: p for p in personas}
        self._brand_voices = {b.id: b for b in brand_voices}

    def add_entities(self, workspace_id: str, entities: Iterable[KnowledgeEntity]) -> None:
        self._entities.setdefault(workspace_id, []).extend(entities)

    async def fetch_entities(
        self,
        workspace_id: str,
        entity_types: Sequence[str] | None = None,
        min_confidence: float = 0.5,
        limit: int = 100,
    ) -> list[KnowledgeEntity]:
        wanted = set(entity_types) if entity_types is not None else None
        matches = [
            entity
            for entity in self._entities.get(workspace_id, [])
            if entity.confidence >= min_confidence
            and (wanted is None or entity.entity_type in wanted)
        ]
        # sorted() is stable, so equal-confidence entities keep insertion order
        matches = sorted(matches, key=lambda e: e.confidence, reverse=True)
        return matches[:limit]

    async def fetch_personas(self, persona_ids: Sequence[str]) -> list[Persona]:
        found = [self._personas[pid] for pid in persona_ids if pid in self._personas]
        missing = [pid for pid in persona_ids if pid not in self._personas]
        if missing:
            logger.warning(f"Personas not found: {', '.join(missing)}")
        return found

    async def fetch_brand_voice(self, brand_config_id: str) -> BrandVoice | None:
        return self._brand_voices.get(brand_config_id)

    @property
    def personas(self) -> list[Persona]:
        return list(self._personas.values())


class WorkspaceFile(BaseModel):
    """On-disk JSON workspace: facts, personas and brand voices."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    workspace_id: str = "default"
    entities: list[KnowledgeEntity] = Field(default_factory=list)
    personas: list[Persona] = Field(default_factory=list)
    brand_voices: list[BrandVoice] = Field(default_factory=list)


@dataclass
class Workspace:
    """A loaded workspace ready to hand to the agents."""

    workspace_id: str
    store: InMemoryKnowledgeStore
    brand_config_id: str | None = None


def load_workspace(path: Path | str) -> Workspace:
    """Load a JSON workspace file into an in-memory store.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the file does not match ``WorkspaceFile``.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    data = WorkspaceFile.model_validate(raw)

    for entity in data.entities:
        issues = entity.meta.schema_issues()
        if issues:
            logger.debug(f"Entity {entity.id} metadata issues: {'; '.join(issues)}")

    store = InMemoryKnowledgeStore(
        entities={data.workspace_id: data.entities},
        personas=data.personas,
        brand_voices=data.brand_voices,
    )
    brand_id = data.brand_voices[0].id if data.brand_voices else None
    logger.info(
        f"Loaded workspace {data.workspace_id}: {len(data.entities)} entities, "
        f"{len(data.personas)} personas"
    )
    return Workspace(workspace_id=data.workspace_id, store=store, brand_config_id=brand_id)
