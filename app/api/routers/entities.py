from fastapi import APIRouter, HTTPException, Query
from typing import Optional
from app.models.ownership import (
    EntityCreate,
    EntityOut,
    RelationshipCreate,
    RelationshipOut,
)
from app.services.graph import Relationship, StoreUnavailable, get_graph_store
from app.services.transliteration_service import TransliterationService

router = APIRouter(tags=["entities"])


@router.post("/entities", status_code=201, response_model=EntityOut)
def api_create_entity(payload: EntityCreate):
    try:
        entity = get_graph_store().add_entity(payload.to_entity())
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return EntityOut.from_entity(entity)


@router.get("/entities/{entity_id}", response_model=EntityOut)
def api_get_entity(
    entity_id: str,
    transliterated: bool = Query(False, description="Romanize the name"),
    lang: Optional[str] = Query(None, description="Language of the stored name, e.g. 'uk'"),
):
    try:
        entity = get_graph_store().get_entity(entity_id)
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    if entity is None:
        raise HTTPException(status_code=404, detail="Entity not found")
    name = TransliterationService.for_language(lang).transliterate(entity.name) if transliterated else None
    return EntityOut.from_entity(entity, name=name)


@router.post("/relationships", status_code=201, response_model=RelationshipOut)
def api_create_relationship(payload: RelationshipCreate):
    store = get_graph_store()
    try:
        source = store.get_entity(payload.source_id)
        target = store.get_entity(payload.target_id)
        if source is None or target is None:
            raise HTTPException(status_code=404, detail="Source or target entity not found")
        relationship = store.add_relationship(
            Relationship(
                source=source,
                target=target,
                id=payload.id,
                sample_date=payload.sample_date,
                started_date=payload.started_date,
                ended_date=payload.ended_date,
                provenance=payload.provenance,
            )
        )
    except HTTPException:
        raise
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return RelationshipOut.from_relationship(relationship)
