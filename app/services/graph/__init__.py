"""Ownership graph package.

Register records, graph stores and the traversal engine are imported at
package level:

    from app.services.graph import RelationshipGraph, InMemoryGraphStore, Entity
"""
from .domain import (
    LEGAL_ENTITY,
    NATURAL_PERSON,
    ChainLink,
    ChainRelationship,
    Entity,
    Relationship,
)
from .errors import InvalidArgument, StoreUnavailable
from .store import (
    EntityStore,
    GraphStore,
    InMemoryGraphStore,
    Neo4jGraphStore,
    get_graph_store,
)
from .relationship_graph import (
    RelationshipGraph,
    build_chain,
    get_relationships_to,
    get_ultimate_source_relationships,
)

__all__ = [
    # records
    'LEGAL_ENTITY', 'NATURAL_PERSON', 'ChainLink', 'ChainRelationship', 'Entity', 'Relationship',
    # errors
    'InvalidArgument', 'StoreUnavailable',
    # stores
    'EntityStore', 'GraphStore', 'InMemoryGraphStore', 'Neo4jGraphStore', 'get_graph_store',
    # traversal
    'RelationshipGraph', 'build_chain', 'get_relationships_to', 'get_ultimate_source_relationships',
]
