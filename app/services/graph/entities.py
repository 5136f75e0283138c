import json
from typing import Any, Dict, Iterator, List, Optional

from app.db.neo4j_connector import run_cypher
from app.services.graph.domain import Entity


ENTITY_RETURN = (
    "e.id AS id, e.name AS name, e.type AS type, e.identifier_keys AS identifier_keys, "
    "e.jurisdiction_code AS jurisdiction_code, e.company_number AS company_number, "
    "e.address AS address, e.nationality AS nationality, e.dob AS dob"
)


def identifier_key(identifier: Dict[str, Any]) -> str:
    """Canonical JSON form of an identifier, used to match records across imports."""
    return json.dumps(identifier, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def entity_from_row(row: Dict[str, Any], prefix: str = "") -> Entity:
    """Build an Entity from a Cypher row whose columns may carry a prefix (e.g. ``source_``)."""
    keys = row.get(f"{prefix}identifier_keys") or []
    return Entity(
        id=row[f"{prefix}id"],
        name=row.get(f"{prefix}name"),
        type=row.get(f"{prefix}type"),
        identifiers=[json.loads(k) for k in keys],
        jurisdiction_code=row.get(f"{prefix}jurisdiction_code"),
        company_number=row.get(f"{prefix}company_number"),
        address=row.get(f"{prefix}address"),
        nationality=row.get(f"{prefix}nationality"),
        dob=row.get(f"{prefix}dob"),
    )


def create_entity(entity: Entity) -> Entity:
    """Create or update an Entity node, merging onto an existing record sharing an identifier.

    Behavior:
    - If any identifier of ``entity`` is already attached to a stored node, that node is
      updated and returned (its id wins over ``entity.id``).
    - Otherwise the node is merged on ``entity.id``.
    - Only non-null properties overwrite stored values; identifiers accumulate.
    """
    keys = [identifier_key(i) for i in entity.identifiers]
    query = (
        "OPTIONAL MATCH (existing:Entity) "
        "WHERE any(k IN coalesce(existing.identifier_keys, []) WHERE k IN $keys) "
        "WITH existing ORDER BY existing.created_at LIMIT 1 "
        "MERGE (e:Entity {id: coalesce(existing.id, $id)}) "
        "ON CREATE SET e.created_at = timestamp() "
        "SET e.name = coalesce($name, e.name), "
        "    e.type = coalesce($type, e.type), "
        "    e.jurisdiction_code = coalesce($jurisdiction_code, e.jurisdiction_code), "
        "    e.company_number = coalesce($company_number, e.company_number), "
        "    e.address = coalesce($address, e.address), "
        "    e.nationality = coalesce($nationality, e.nationality), "
        "    e.dob = coalesce($dob, e.dob), "
        "    e.identifier_keys = reduce(acc = coalesce(e.identifier_keys, []), k IN $keys | "
        "        CASE WHEN k IN acc THEN acc ELSE acc + k END) "
        f"RETURN {ENTITY_RETURN}"
    )
    res = run_cypher(
        query,
        {
            "id": entity.id,
            "keys": keys,
            "name": entity.name,
            "type": entity.type,
            "jurisdiction_code": entity.jurisdiction_code,
            "company_number": entity.company_number,
            "address": entity.address,
            "nationality": entity.nationality,
            "dob": entity.dob,
        },
    )
    return entity_from_row(res[0]) if res else entity


def get_entity(entity_id: str) -> Optional[Entity]:
    """Fetch a single Entity by id. Returns None if not found."""
    res = run_cypher(f"MATCH (e:Entity {{id: $id}}) RETURN {ENTITY_RETURN}", {"id": entity_id})
    return entity_from_row(res[0]) if res else None


def iter_entities(batch_size: int = 500) -> Iterator[Entity]:
    """Iterate over every stored entity in id order, fetching one page at a time."""
    skip = 0
    while True:
        rows: List[Dict[str, Any]] = run_cypher(
            f"MATCH (e:Entity) RETURN {ENTITY_RETURN} ORDER BY e.id SKIP $skip LIMIT $limit",
            {"skip": skip, "limit": batch_size},
        )
        for row in rows:
            yield entity_from_row(row)
        if len(rows) < batch_size:
            return
        skip += batch_size


def count_entities() -> int:
    res = run_cypher("MATCH (e:Entity) RETURN count(e) AS cnt")
    return (res[0].get("cnt") if res else 0) or 0
