from __future__ import annotations

import logging
from dataclasses import dataclass

from .helpers import entity_exists, name_filter, unique
from .models import Entity
from .observations import ObservationStore
from .rows import EntityRow
from .store import GraphStore
from .tags import TagStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EntityStore:
    store: GraphStore
    observations: ObservationStore
    tags: TagStore

    def exists(self, name: str) -> bool:
        return entity_exists(self.store, name)

    def create(self, entities: list[Entity]) -> list[Entity]:
        """Create entities whose names are new, with their observations and tags.

        Existing names are skipped. Returns what was actually stored.
        """
        created: list[Entity] = []
        for entity in entities:
            if self.exists(entity.name):
                logger.debug("Entity %s already exists", entity.name)
                continue

            self.store.query(
                "CREATE (e:Entity {name: $name, entityType: $entityType})",
                {"name": entity.name, "entityType": entity.entity_type},
            )
            observations = unique(entity.observations)
            for content in observations:
                self.observations.create(entity.name, content)

            tags = unique(entity.tags)
            for tag_name in tags:
                self.tags.ensure(tag_name)
                self.tags.link_entity(entity.name, tag_name)

            created.append(
                Entity(
                    name=entity.name,
                    entity_type=entity.entity_type,
                    observations=observations,
                    tags=tags,
                )
            )
        return created

    def delete(self, names: list[str]) -> None:
        """Cascade-delete entities, their edges and owned observations, then sweep orphans."""
        for name in names:
            self.observations.delete_owned(name)
            self.store.query("MATCH (e:Entity {name: $name}) DETACH DELETE e", {"name": name})
        self.observations.sweep_orphans()

    def rows(self, names: list[str] | None = None) -> list[EntityRow]:
        if names == []:
            return []
        q = f"""
        MATCH (e:Entity)
        {name_filter("e", names)}
        RETURN e.name AS name, e.entityType AS entityType
        ORDER BY name
        """
        rows = self.store.query(q, {"names": names} if names is not None else None)
        return [EntityRow.decode(r) for r in rows]
