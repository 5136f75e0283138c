from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any

from app.services.graph.domain import NATURAL_PERSON, ChainLink, Entity, Relationship
from app.services.presentation import (
    google_search_uri,
    opencorporates_officers_search_uri,
    partial_date_format,
)


class EntityCreate(BaseModel):
    id: str = Field(..., description="Unique entity id")
    name: Optional[str] = None
    type: Optional[str] = Field(None, description="legal-entity | natural-person")
    identifiers: List[Dict[str, Any]] = Field(
        default_factory=list, description="Registry identifiers; records sharing one are merged"
    )
    jurisdiction_code: Optional[str] = None
    company_number: Optional[str] = None
    address: Optional[str] = None
    nationality: Optional[str] = None
    dob: Optional[str] = Field(None, description="Partial ISO 8601 date (YYYY, YYYY-MM or YYYY-MM-DD)")

    @field_validator("dob")
    @classmethod
    def normalize_dob(cls, v: Optional[str]) -> Optional[str]:
        return partial_date_format(v)

    def to_entity(self) -> Entity:
        return Entity(**self.model_dump())


class RelationshipCreate(BaseModel):
    source_id: str = Field(..., description="Owner entity id")
    target_id: str = Field(..., description="Owned entity id")
    id: Optional[str] = Field(None, description="Relationship id; generated when omitted")
    sample_date: Optional[str] = None
    started_date: Optional[str] = None
    ended_date: Optional[str] = None
    provenance: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("sample_date", "started_date", "ended_date")
    @classmethod
    def normalize_dates(cls, v: Optional[str]) -> Optional[str]:
        return partial_date_format(v)


class EntityOut(BaseModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    jurisdiction_code: Optional[str] = None
    company_number: Optional[str] = None
    address: Optional[str] = None
    nationality: Optional[str] = None
    dob: Optional[str] = None
    google_search_url: Optional[str] = Field(None, description="Web search for a natural person")
    opencorporates_search_url: Optional[str] = Field(None, description="OpenCorporates officer search")

    @classmethod
    def from_entity(cls, entity: Entity, name: Optional[str] = None) -> "EntityOut":
        display_name = name if name is not None else entity.name
        google_url = officers_url = None
        if entity.type == NATURAL_PERSON and display_name:
            google_url = google_search_uri({"q": display_name})
            params = {"q": display_name}
            if entity.jurisdiction_code:
                params["jurisdiction_code"] = entity.jurisdiction_code
            officers_url = opencorporates_officers_search_uri(params)
        return cls(
            id=entity.id,
            name=display_name,
            type=entity.type,
            jurisdiction_code=entity.jurisdiction_code,
            company_number=entity.company_number,
            address=entity.address,
            nationality=entity.nationality,
            dob=partial_date_format(entity.dob),
            google_search_url=google_url,
            opencorporates_search_url=officers_url,
        )


class RelationshipOut(BaseModel):
    id: Optional[str] = None
    source_id: str
    target_id: str
    sample_date: Optional[str] = None
    started_date: Optional[str] = None
    ended_date: Optional[str] = None

    @classmethod
    def from_relationship(cls, relationship: Relationship) -> "RelationshipOut":
        return cls(
            id=relationship.id,
            source_id=relationship.source.id,
            target_id=relationship.target.id,
            sample_date=partial_date_format(relationship.sample_date),
            started_date=partial_date_format(relationship.started_date),
            ended_date=partial_date_format(relationship.ended_date),
        )


class ChainRelationshipOut(BaseModel):
    """A direct relationship or a multi-hop chain; direct ones have no intermediate entities."""
    source: EntityOut
    target: EntityOut
    intermediate_entities: List[EntityOut]
    intermediate_relationships: List[RelationshipOut]
    started_date: Optional[str] = None
    ended_date: Optional[str] = None

    @classmethod
    def from_chain(cls, link: ChainLink) -> "ChainRelationshipOut":
        return cls(
            source=EntityOut.from_entity(link.source),
            target=EntityOut.from_entity(link.target),
            intermediate_entities=[EntityOut.from_entity(e) for e in link.intermediate_entities],
            intermediate_relationships=[
                RelationshipOut.from_relationship(r) for r in link.intermediate_relationships
            ],
            started_date=partial_date_format(link.started_date),
            ended_date=partial_date_format(link.ended_date),
        )


class ChainListOut(BaseModel):
    entity: EntityOut
    relationships: List[ChainRelationshipOut]
