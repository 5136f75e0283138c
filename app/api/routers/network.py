from fastapi import APIRouter, HTTPException, Query
from app.models.ownership import ChainListOut, ChainRelationshipOut, EntityOut
from app.services.graph import (
    InvalidArgument,
    StoreUnavailable,
    get_graph_store,
    get_relationships_to,
    get_ultimate_source_relationships,
)

router = APIRouter(tags=["network"])

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


@router.get("/entities/{entity_id}/ultimate-sources", response_model=ChainListOut)
def api_get_ultimate_sources(entity_id: str, limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)):
    """Return chains from each ultimate owner down to the entity (at most ``limit``)."""
    store = get_graph_store()
    try:
        found = get_ultimate_source_relationships(entity_id, limit=limit, store=store)
        if found is None:
            raise HTTPException(status_code=404, detail="Entity not found")
    except HTTPException:
        raise
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    entity, chains = found
    return ChainListOut(
        entity=EntityOut.from_entity(entity),
        relationships=[ChainRelationshipOut.from_chain(c) for c in chains],
    )


@router.get("/entities/{entity_id}/relationships-to/{other_id}", response_model=ChainListOut)
def api_get_relationships_to(entity_id: str, other_id: str, limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)):
    """Return every ownership chain from ``other_id`` down to ``entity_id`` (at most ``limit``)."""
    store = get_graph_store()
    try:
        found = get_relationships_to(entity_id, other_id, limit=limit, store=store)
        if found is None:
            raise HTTPException(status_code=404, detail="Entity not found")
    except HTTPException:
        raise
    except InvalidArgument as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    entity, chains = found
    return ChainListOut(
        entity=EntityOut.from_entity(entity),
        relationships=[ChainRelationshipOut.from_chain(c) for c in chains],
    )
