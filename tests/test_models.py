import pytest
from pydantic import ValidationError

from app.models.ownership import ChainRelationshipOut, EntityCreate, EntityOut, RelationshipCreate
from app.services.graph import LEGAL_ENTITY, NATURAL_PERSON, ChainRelationship, Entity, Relationship


def test_entity_model():
    e = EntityCreate(id="E1", name="Alpha", type="legal-entity", dob="1975-3-9T00:00:00Z")
    assert e.id == "E1"
    assert e.name == "Alpha"
    assert e.dob == "1975-03-09"
    entity = e.to_entity()
    assert isinstance(entity, Entity)
    assert entity.identifiers == []


def test_entity_model_rejects_bad_dob():
    with pytest.raises(ValidationError):
        EntityCreate(id="E1", dob="yesterday")


def test_relationship_model():
    r = RelationshipCreate(source_id="E1", target_id="E2", started_date="2016-4")
    assert r.source_id == "E1"
    assert r.id is None
    assert r.started_date == "2016-04"
    assert r.provenance == {}


def test_chain_out_uses_latest_start_and_earliest_end():
    a, b, c = Entity(id="A"), Entity(id="B"), Entity(id="C")
    r1 = Relationship(id="r1", source=b, target=c, started_date="2015-01-01", ended_date="2020-06-30")
    r2 = Relationship(id="r2", source=a, target=b, started_date="2017-05", ended_date="2019")
    chain = ChainRelationship(source=a, target=c, intermediate_entities=(b,), intermediate_relationships=(r1, r2))

    out = ChainRelationshipOut.from_chain(chain)

    assert out.source.id == "A"
    assert out.target.id == "C"
    assert [e.id for e in out.intermediate_entities] == ["B"]
    assert [r.id for r in out.intermediate_relationships] == ["r1", "r2"]
    assert out.started_date == "2017-05"
    assert out.ended_date == "2019"


def test_chain_out_for_direct_relationship():
    rel = Relationship(id="r1", source=Entity(id="A"), target=Entity(id="B"))

    out = ChainRelationshipOut.from_chain(rel)

    assert out.intermediate_entities == []
    assert out.intermediate_relationships == []


def test_chain_dates_compare_partial_dates_by_the_days_they_cover():
    a, b, c = Entity(id="A"), Entity(id="B"), Entity(id="C")
    r1 = Relationship(id="r1", source=b, target=c, started_date="2019-05-01", ended_date="2019")
    r2 = Relationship(id="r2", source=a, target=b, started_date="2019", ended_date="2019-05-01")
    chain = ChainRelationship(source=a, target=c, intermediate_entities=(b,), intermediate_relationships=(r1, r2))

    assert chain.started_date == "2019-05-01"
    assert chain.ended_date == "2019-05-01"


def test_entity_out_links_natural_persons_to_searches():
    out = EntityOut.from_entity(Entity(id="P1", name="Ján Novák", type=NATURAL_PERSON))

    assert out.google_search_url == "https://www.google.com/search?q=J%C3%A1n+Nov%C3%A1k"
    assert out.opencorporates_search_url == "https://opencorporates.com/officers?q=J%C3%A1n+Nov%C3%A1k"


def test_entity_out_has_no_search_links_for_companies():
    out = EntityOut.from_entity(Entity(id="C1", name="Firma s.r.o.", type=LEGAL_ENTITY))

    assert out.google_search_url is None
    assert out.opencorporates_search_url is None
