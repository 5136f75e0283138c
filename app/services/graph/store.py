"""Graph stores: where traversal reads its incoming edges from.

``GraphStore`` is the only thing the traversal engine needs. The concrete stores
also accept writes so importers can populate them.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Protocol

from neo4j.exceptions import DriverError, Neo4jError

from app.services.graph.domain import Entity, Relationship
from app.services.graph.entities import (
    count_entities,
    create_entity,
    get_entity,
    identifier_key,
    iter_entities,
)
from app.services.graph.errors import StoreUnavailable
from app.services.graph.relationships import create_relationship, get_incoming_relationships

logger = logging.getLogger(__name__)

# Same attributes the Neo4j store coalesces on merge
MERGED_ATTRIBUTES = (
    "name", "type", "jurisdiction_code", "company_number", "address", "nationality", "dob",
)


class GraphStore(Protocol):
    def incoming_relationships(self, entity: Entity) -> List[Relationship]:
        """Relationships whose target is ``entity``, in creation order."""
        ...


class EntityStore(GraphStore, Protocol):
    def get_entity(self, entity_id: str) -> Optional[Entity]:
        ...


class InMemoryGraphStore:
    """Process-local store keeping entities by key and relationships in insertion order."""

    def __init__(self) -> None:
        self._entities: Dict[str, Entity] = {}
        self._identifier_index: Dict[str, str] = {}
        self._relationships: List[Relationship] = []
        self._relationship_index: Dict[str, int] = {}
        self._incoming: Dict[str, List[Relationship]] = {}

    def add_entity(self, entity: Entity) -> Entity:
        """Store ``entity`` and return the canonical record.

        An entity sharing any identifier with a stored one resolves to the stored
        record: non-null attributes of ``entity`` overwrite it and its
        identifiers are extended with the new ones.
        """
        keys = [identifier_key(i) for i in entity.identifiers]
        existing_id = next((self._identifier_index[k] for k in keys if k in self._identifier_index), None)
        if existing_id is None and entity.id in self._entities:
            existing_id = entity.id

        if existing_id is None:
            self._entities[entity.id] = entity
            canonical = entity
        else:
            canonical = self._entities[existing_id]
            if canonical is not entity:
                for attr in MERGED_ATTRIBUTES:
                    value = getattr(entity, attr)
                    if value is not None:
                        setattr(canonical, attr, value)
            known = {identifier_key(i) for i in canonical.identifiers}
            for ident, key in zip(entity.identifiers, keys):
                if key not in known:
                    canonical.identifiers.append(ident)
                    known.add(key)

        for key in keys:
            self._identifier_index.setdefault(key, canonical.id)
        return canonical

    def add_relationship(self, relationship: Relationship) -> Relationship:
        """Append ``relationship``; an id already stored is replaced in place."""
        relationship.source = self._canonical(relationship.source)
        relationship.target = self._canonical(relationship.target)
        if relationship.id is not None and relationship.id in self._relationship_index:
            position = self._relationship_index[relationship.id]
            replaced = self._relationships[position]
            self._relationships[position] = relationship
            for target_id in {replaced.target.id, relationship.target.id}:
                self._incoming[target_id] = [r for r in self._relationships if r.target.id == target_id]
            return relationship
        if relationship.id is not None:
            self._relationship_index[relationship.id] = len(self._relationships)
        self._relationships.append(relationship)
        self._incoming.setdefault(relationship.target.id, []).append(relationship)
        return relationship

    def get_entity(self, entity_id: str) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def entities(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def count_entities(self) -> int:
        return len(self._entities)

    def _canonical(self, entity: Entity) -> Entity:
        stored = self._entities.get(entity.id)
        return stored if stored is not None else self.add_entity(entity)

    def incoming_relationships(self, entity: Entity) -> List[Relationship]:
        return list(self._incoming.get(entity.id, []))


class Neo4jGraphStore:
    """Store backed by the shared Neo4j driver; edges are fetched per visited node."""

    def add_entity(self, entity: Entity) -> Entity:
        with _store_errors("add_entity"):
            return create_entity(entity)

    def add_relationship(self, relationship: Relationship) -> Relationship:
        with _store_errors("add_relationship"):
            return create_relationship(relationship)

    def get_entity(self, entity_id: str) -> Optional[Entity]:
        with _store_errors("get_entity"):
            return get_entity(entity_id)

    def entities(self) -> Iterator[Entity]:
        with _store_errors("entities"):
            yield from iter_entities()

    def count_entities(self) -> int:
        with _store_errors("count_entities"):
            return count_entities()

    def incoming_relationships(self, entity: Entity) -> List[Relationship]:
        with _store_errors("incoming_relationships"):
            return get_incoming_relationships(entity)


@contextmanager
def _store_errors(operation: str):
    """Re-raise driver and connection failures as StoreUnavailable."""
    try:
        yield
    except StoreUnavailable:
        raise
    except (Neo4jError, DriverError, RuntimeError) as exc:
        logger.error("Graph store %s failed: %s", operation, exc)
        raise StoreUnavailable(f"Graph store {operation} failed: {exc}") from exc


_default_store: Optional[Neo4jGraphStore] = None


def get_graph_store() -> Neo4jGraphStore:
    """Return the process-wide Neo4j-backed store."""
    global _default_store
    if _default_store is None:
        _default_store = Neo4jGraphStore()
    return _default_store
