from fastapi import APIRouter, HTTPException
from app.models.imports import EntityIntegrityOut, IntegrityStatsOut
from app.services.graph import StoreUnavailable, get_graph_store
from app.services.integrity_service import EntityIntegrityChecker

router = APIRouter(tags=["integrity"])


@router.post("/integrity/check", response_model=IntegrityStatsOut)
def api_check_all():
    """Run the record-level checks over every stored entity and return issue tallies."""
    try:
        stats = EntityIntegrityChecker(get_graph_store()).check_all()
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    entity_count = stats.pop("entity_count")
    processed = stats.pop("processed")
    return IntegrityStatsOut(entity_count=entity_count, processed=processed, issues=stats)


@router.get("/entities/{entity_id}/integrity", response_model=EntityIntegrityOut)
def api_check_entity(entity_id: str):
    store = get_graph_store()
    try:
        entity = store.get_entity(entity_id)
    except StoreUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    if entity is None:
        raise HTTPException(status_code=404, detail="Entity not found")
    return EntityIntegrityOut(entity_id=entity.id, issues=EntityIntegrityChecker(store).check(entity))
