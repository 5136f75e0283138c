from fastapi import APIRouter, HTTPException
from app.models.imports import ImportStatsOut, SkImportRequest
from app.services.entity_resolver import EntityResolver
from app.services.graph import get_graph_store
from app.services.sk_import_service import SkImporter

router = APIRouter(tags=["imports"])


def get_entity_resolver() -> EntityResolver:
    return EntityResolver()


@router.post("/imports/sk", status_code=201, response_model=ImportStatsOut)
def api_import_sk(payload: SkImportRequest):
    """Import RPVS records into the graph: companies, their beneficial owners and OWNS edges."""
    importer = SkImporter(get_graph_store(), entity_resolver=get_entity_resolver())
    importer.source_url = payload.source_url
    importer.source_name = payload.source_name
    importer.document_id = payload.document_id
    importer.retrieved_at = payload.retrieved_at
    try:
        stats = importer.process_records(payload.records)
    except RuntimeError as exc:
        # StoreUnavailable, or no OpenCorporates token configured
        raise HTTPException(status_code=503, detail=str(exc))
    return ImportStatsOut(**stats)
