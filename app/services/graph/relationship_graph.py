"""Ownership chain traversal.

Walks OWNS edges upwards (from an owned entity towards its owners) depth-first,
in the store's creation order, and reports each discovered path as a single
edge: the stored Relationship itself for one hop, or a ChainRelationship for
longer paths.

The cycle guard is scoped to the path being walked, not to the whole search:
an entity may appear on many independent paths but never twice on one path.
That bounds every path by the number of entities. It does not bound the
number of paths; heavily interlinked structures (many diamonds stacked on top
of each other) produce combinatorially many results, so callers that serve
untrusted queries should consume the ``iter_*`` generators with a limit.
"""
import logging
from itertools import islice
from typing import Iterator, List, Optional, Tuple

from app.services.graph.domain import ChainLink, ChainRelationship, Entity, Relationship
from app.services.graph.errors import InvalidArgument
from app.services.graph.store import EntityStore, GraphStore, get_graph_store

logger = logging.getLogger(__name__)


class RelationshipGraph:
    def __init__(self, store: GraphStore):
        self.store = store

    def find_ultimate_sources(self, start: Entity) -> List[ChainLink]:
        """Chains from every owner-less entity reachable upwards from ``start``.

        Each result has ``source`` = the ultimate owner and ``target`` = ``start``.
        Returns [] when ``start`` has no owners or every upward path ends in a loop.
        """
        results = list(self.iter_ultimate_sources(start))
        logger.debug("Found %d ultimate source relationship(s) for %s", len(results), start.id)
        return results

    def find_paths_to(self, start: Entity, target: Entity) -> List[ChainLink]:
        """Chains for every distinct upward path from ``start`` to ``target``.

        Each result has ``source`` = ``target`` and ``target`` = ``start``. A path
        may pass through ``target`` and come back to it once through a loop.
        """
        results = list(self.iter_paths_to(start, target))
        logger.debug("Found %d relationship(s) from %s to %s", len(results), start.id, target.id)
        return results

    def iter_ultimate_sources(self, start: Entity) -> Iterator[ChainLink]:
        _require(start, "start")
        return self._walk(start, None)

    def iter_paths_to(self, start: Entity, target: Entity) -> Iterator[ChainLink]:
        _require(start, "start")
        _require(target, "target")
        return self._walk(start, target)

    def _walk(self, start: Entity, target: Optional[Entity]) -> Iterator[ChainLink]:
        # With no target, emit on reaching an entity without owners.
        # With a target, emit on every edge whose owner is the target, checked
        # before the guard so a loop can lead back to it once.
        logger.debug("Walking ownership chains from %s", start.id)
        entities: List[Entity] = [start]
        relationships: List[Relationship] = []
        on_path = {start.id}
        stack = [iter(self.store.incoming_relationships(start))]

        while stack:
            relationship = next(stack[-1], None)
            if relationship is None:
                stack.pop()
                if relationships:
                    relationships.pop()
                    on_path.discard(entities.pop().id)
                continue

            owner = relationship.source
            if target is not None and owner == target:
                yield build_chain(entities + [owner], relationships + [relationship])
            if owner.id in on_path:
                continue

            incoming = self.store.incoming_relationships(owner)
            entities.append(owner)
            relationships.append(relationship)
            on_path.add(owner.id)
            if target is None and not incoming:
                yield build_chain(entities, relationships)
            stack.append(iter(incoming))


def build_chain(entities: List[Entity], relationships: List[Relationship]) -> ChainLink:
    """Summarize a walked path ``entities[0] <- ... <- entities[-1]`` as one edge.

    ``relationships[i]`` connects ``entities[i]`` and ``entities[i + 1]``.
    """
    if len(relationships) == 1:
        return relationships[0]
    return ChainRelationship(
        source=entities[-1],
        target=entities[0],
        intermediate_entities=tuple(entities[1:-1]),
        intermediate_relationships=tuple(relationships),
    )


def _require(entity: Optional[Entity], name: str) -> None:
    if entity is None:
        raise InvalidArgument(f"{name} entity is required")


def get_ultimate_source_relationships(
    entity_id: str,
    limit: Optional[int] = None,
    store: Optional[EntityStore] = None,
) -> Optional[Tuple[Entity, List[ChainLink]]]:
    """Load a stored entity and its ultimate source chains, at most ``limit`` of them.

    Returns None when the entity does not exist.
    """
    store = store or get_graph_store()
    entity = store.get_entity(entity_id)
    if entity is None:
        return None
    return entity, list(islice(RelationshipGraph(store).iter_ultimate_sources(entity), limit))


def get_relationships_to(
    entity_id: str,
    other_id: str,
    limit: Optional[int] = None,
    store: Optional[EntityStore] = None,
) -> Optional[Tuple[Entity, List[ChainLink]]]:
    """Load a stored entity and its chains up to another stored entity, at most ``limit`` of them.

    Returns None when either entity does not exist.
    """
    store = store or get_graph_store()
    entity = store.get_entity(entity_id)
    other = store.get_entity(other_id)
    if entity is None or other is None:
        return None
    return entity, list(islice(RelationshipGraph(store).iter_paths_to(entity, other), limit))
