from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import EntityNotFoundError
from .helpers import entity_exists, name_filter, tag_exists, unique
from .models import Tag, TagUsage
from .observations import ObservationStore
from .rows import CountRow, EntityTagRow, TagRow, TagUsageRow
from .store import GraphStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TagStore:
    """Tags are shared labels; entities and observations reference them.

    Tags are created on first use by the tagging operations. Missing
    category/description are stored as empty strings and reported as None.
    """

    store: GraphStore
    observations: ObservationStore

    def ensure(self, name: str, *, category: str = "", description: str = "") -> bool:
        """Create the tag unless it exists. Returns True when created."""
        if tag_exists(self.store, name):
            return False
        self.store.query(
            "CREATE (t:Tag {name: $name, category: $category, description: $description})",
            {"name": name, "category": category, "description": description},
        )
        return True

    def create(self, tags: list[Tag]) -> list[Tag]:
        created: list[Tag] = []
        for tag in tags:
            category, description = tag.category or "", tag.description or ""
            if self.ensure(tag.name, category=category, description=description):
                created.append(tag)
            else:
                logger.debug("Tag %s already exists", tag.name)
        return created

    def link_entity(self, entity_name: str, tag_name: str) -> bool:
        params = {"entity": entity_name, "tag": tag_name}
        rows = self.store.query(
            """
            MATCH (e:Entity {name: $entity})-[:ENTITY_TAGGED_WITH]->(t:Tag {name: $tag})
            RETURN count(*) AS n
            """,
            params,
        )
        if CountRow.first(rows):
            return False
        self.store.query(
            """
            MATCH (e:Entity {name: $entity}), (t:Tag {name: $tag})
            CREATE (e)-[:ENTITY_TAGGED_WITH]->(t)
            """,
            params,
        )
        return True

    def link_observation(self, obs_id: str, tag_name: str) -> bool:
        params = {"id": obs_id, "tag": tag_name}
        rows = self.store.query(
            """
            MATCH (o:Observation {id: $id})-[:OBSERVATION_TAGGED_WITH]->(t:Tag {name: $tag})
            RETURN count(*) AS n
            """,
            params,
        )
        if CountRow.first(rows):
            return False
        self.store.query(
            """
            MATCH (o:Observation {id: $id}), (t:Tag {name: $tag})
            CREATE (o)-[:OBSERVATION_TAGGED_WITH]->(t)
            """,
            params,
        )
        return True

    def tag_entity(self, entity_name: str, tag_names: list[str]) -> list[str]:
        if not entity_exists(self.store, entity_name):
            raise EntityNotFoundError(entity_name)

        added: list[str] = []
        for tag_name in unique(tag_names):
            self.ensure(tag_name)
            if self.link_entity(entity_name, tag_name):
                added.append(tag_name)
        return added

    def tag_observation(self, entity_name: str, content: str, tag_names: list[str]) -> list[str]:
        obs_ids = self.observations.ids_for(entity_name, content)
        if not obs_ids:
            logger.debug("No observation %r on %s; nothing tagged", content, entity_name)
            return []

        added: list[str] = []
        for tag_name in unique(tag_names):
            self.ensure(tag_name)
            linked = [self.link_observation(obs_id, tag_name) for obs_id in obs_ids]
            if any(linked):
                added.append(tag_name)
        return added

    def remove_from_entity(self, entity_name: str, tag_names: list[str]) -> list[str]:
        removed: list[str] = []
        for tag_name in unique(tag_names):
            params = {"entity": entity_name, "tag": tag_name}
            match = "MATCH (e:Entity {name: $entity})-[r:ENTITY_TAGGED_WITH]->(t:Tag {name: $tag})"
            if not CountRow.first(self.store.query(f"{match} RETURN count(*) AS n", params)):
                continue
            self.store.query(f"{match} DELETE r", params)
            removed.append(tag_name)
        return removed

    def all(self) -> list[Tag]:
        rows = self.store.query(
            """
            MATCH (t:Tag)
            RETURN t.name AS name, t.category AS category, t.description AS description
            ORDER BY name
            """
        )
        tags = []
        for row in map(TagRow.decode, rows):
            tags.append(
                Tag(
                    name=row.name,
                    category=row.category or None,
                    description=row.description or None,
                )
            )
        return tags

    def usage(self) -> list[TagUsage]:
        rows = self.store.query(
            """
            MATCH (t:Tag)
            OPTIONAL MATCH (e:Entity)-[:ENTITY_TAGGED_WITH]->(t)
            WITH t, count(DISTINCT e) AS entityCount
            OPTIONAL MATCH (o:Observation)-[:OBSERVATION_TAGGED_WITH]->(t)
            WITH t, entityCount, count(DISTINCT o) AS observationCount
            RETURN t.name AS tag, entityCount, observationCount,
                   entityCount + observationCount AS total
            ORDER BY total DESC, tag
            """
        )
        return [
            TagUsage(tag=r.tag, entity_count=r.entity_count, observation_count=r.observation_count)
            for r in map(TagUsageRow.decode, rows)
        ]

    def for_entities(self, names: list[str] | None = None) -> list[EntityTagRow]:
        if names == []:
            return []
        q = f"""
        MATCH (e:Entity)-[:ENTITY_TAGGED_WITH]->(t:Tag)
        {name_filter("e", names)}
        RETURN e.name AS entity, t.name AS tag
        ORDER BY entity, tag
        """
        rows = self.store.query(q, {"names": names} if names is not None else None)
        return [EntityTagRow.decode(r) for r in rows]
