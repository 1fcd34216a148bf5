"""Knowledge entities, typed metadata and store interfaces."""

from storyforge.knowledge.entities import (
    BrandVoice,
    ContentPreferences,
    EntityType,
    KnowledgeEntity,
    Persona,
)
from storyforge.knowledge.metadata import (
    METADATA_SCHEMAS,
    EntityMetadata,
    MetadataKind,
    schema_for,
)
from storyforge.knowledge.stores import (
    BrandStore,
    FactStore,
    InMemoryKnowledgeStore,
    PersonaStore,
    Workspace,
    WorkspaceFile,
    load_workspace,
)

__all__ = [
    "BrandVoice",
    "ContentPreferences",
    "EntityType",
    "KnowledgeEntity",
    "Persona",
    "METADATA_SCHEMAS",
    "EntityMetadata",
    "MetadataKind",
    "schema_for",
    "BrandStore",
    "FactStore",
    "InMemoryKnowledgeStore",
    "PersonaStore",
    "Workspace",
    "WorkspaceFile",
    "load_workspace",
]
