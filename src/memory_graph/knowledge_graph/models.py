from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    """Python names on the inside, camelCase keys on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Entity(_WireModel):
    """A named, typed node together with the facts it owns and its tags."""

    name: str
    entity_type: str = Field(alias="entityType")
    observations: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class Relation(_WireModel):
    """A directed, typed edge between two entities.

    The full (source, target, relation_type) triple is the identity.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    relation_type: str = Field(alias="relationType")


class Tag(_WireModel):
    name: str
    category: str | None = None
    description: str | None = None


class ObservationAddition(_WireModel):
    entity_name: str = Field(alias="entityName")
    contents: list[str]


class AddedObservations(_WireModel):
    entity_name: str = Field(alias="entityName")
    added_observations: list[str] = Field(alias="addedObservations", default_factory=list)


class ObservationDeletion(_WireModel):
    entity_name: str = Field(alias="entityName")
    observations: list[str]


class TagUsage(_WireModel):
    tag: str
    entity_count: int = Field(alias="entityCount")
    observation_count: int = Field(alias="observationCount")


class KnowledgeGraph(_WireModel):
    """A (sub)graph: entities, the relations induced on them, and optionally all tags."""

    entities: list[Entity] = Field(default_factory=list)
    relations: list[Relation] = Field(default_factory=list)
    tags: list[Tag] | None = None

    def entity_names(self) -> list[str]:
        return [e.name for e in self.entities]
