from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class SkImportRequest(BaseModel):
    records: List[Dict[str, Any]] = Field(..., description="RPVS partner records with expanded owners")
    source_url: Optional[str] = Field("https://rpvs.gov.sk/", description="Where the records were fetched from")
    source_name: Optional[str] = "Slovakia Public Sector Partners Register"
    document_id: str = Field("Slovakia PSP Register", description="Prefix for identifiers and relationship ids")
    retrieved_at: Optional[str] = None


class ImportStatsOut(BaseModel):
    records: int = 0
    skipped_records: int = 0
    relationships: int = 0


class IntegrityStatsOut(BaseModel):
    entity_count: int
    processed: int
    issues: Dict[str, int] = Field(default_factory=dict)


class EntityIntegrityOut(BaseModel):
    entity_id: str
    issues: Dict[str, Dict[str, Any]]
