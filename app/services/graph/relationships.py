import json
import uuid
from typing import Any, Dict, List

from app.db.neo4j_connector import run_cypher
from app.services.graph.domain import Entity, Relationship
from app.services.graph.entities import ENTITY_RETURN, entity_from_row


def create_relationship(relationship: Relationship) -> Relationship:
    """Create or update an OWNS edge from ``relationship.source`` to ``relationship.target``.

    The edge is merged on its id, so re-importing the same registry record updates
    provenance and dates in place and keeps its original creation order. Both
    endpoints must already exist.
    """
    rel_id = relationship.id or str(uuid.uuid4())
    query = (
        "MATCH (s:Entity {id: $source}), (t:Entity {id: $target}) "
        "MERGE (s)-[r:OWNS {id: $id}]->(t) "
        "ON CREATE SET r.created_at = timestamp() "
        "SET r.sample_date = $sample_date, "
        "    r.started_date = $started_date, "
        "    r.ended_date = $ended_date, "
        "    r.provenance = $provenance "
        "RETURN r.id AS id"
    )
    res = run_cypher(
        query,
        {
            "id": rel_id,
            "source": relationship.source.id,
            "target": relationship.target.id,
            "sample_date": relationship.sample_date,
            "started_date": relationship.started_date,
            "ended_date": relationship.ended_date,
            "provenance": json.dumps(relationship.provenance, ensure_ascii=False, default=str),
        },
    )
    if not res:
        return relationship
    relationship.id = res[0].get("id")
    return relationship


def get_incoming_relationships(entity: Entity) -> List[Relationship]:
    """Return the OWNS edges pointing at ``entity``, oldest first."""
    query = (
        "MATCH (e:Entity)-[r:OWNS]->(t:Entity {id: $id}) "
        f"RETURN {ENTITY_RETURN.replace(' AS ', ' AS source_')}, "
        "r.id AS rel_id, r.sample_date AS sample_date, r.started_date AS started_date, "
        "r.ended_date AS ended_date, r.provenance AS provenance "
        "ORDER BY r.created_at, elementId(r)"
    )
    rows = run_cypher(query, {"id": entity.id})
    return [_relationship_from_row(row, entity) for row in rows]


def _relationship_from_row(row: Dict[str, Any], target: Entity) -> Relationship:
    provenance = row.get("provenance")
    return Relationship(
        source=entity_from_row(row, prefix="source_"),
        target=target,
        id=row.get("rel_id"),
        sample_date=row.get("sample_date"),
        started_date=row.get("started_date"),
        ended_date=row.get("ended_date"),
        provenance=json.loads(provenance) if provenance else {},
    )
