import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.entity_resolver import EntityResolver
from app.services.graph import LEGAL_ENTITY, Entity, InMemoryGraphStore


class FakeResolver:
    def resolve(self, entity):
        entity.add_oc_identifier("sk", entity.company_number)
        return entity


RECORD = {
    "Id": 2002,
    "PartneriVerejnehoSektora": [
        {"Ico": "44556677", "ObchodneMeno": "Stavby a.s.", "PlatnostDo": None,
         "Adresa": {"MenoUlice": "Hlavná", "OrientacneCislo": "1", "Mesto": "Žilina", "Psc": "010 01"}},
    ],
    "KonecniUzivateliaVyhod": [
        {"Id": 7, "Meno": "Jana", "Priezvisko": "Malá", "DatumNarodenia": "1981-02-03T00:00:00",
         "PlatnostOd": "2018-06-01T00:00:00", "PlatnostDo": None, "StatnaPrislusnost": {"StatistickyKod": 703}},
    ],
}

FOREIGN_RECORD = {
    "Id": 2003,
    "PartneriVerejnehoSektora": [
        {"Ico": "1", "ObchodneMeno": "GmbH", "PlatnostDo": None, "Adresa": {"Psc": "D-10115"}},
    ],
}


@pytest.fixture
def store(monkeypatch):
    s = InMemoryGraphStore()
    for router in ("imports", "integrity", "network"):
        monkeypatch.setattr(f"app.api.routers.{router}.get_graph_store", lambda: s)
    monkeypatch.setattr("app.api.routers.imports.get_entity_resolver", lambda: FakeResolver())
    return s


def test_import_sk_records(store):
    client = TestClient(app)
    resp = client.post(
        "/imports/sk",
        json={"records": [RECORD, FOREIGN_RECORD], "retrieved_at": "2024-03-01T00:00:00Z"},
    )
    assert resp.status_code == 201
    assert resp.json() == {"records": 2, "skipped_records": 1, "relationships": 1}

    [company] = [e for e in store.entities() if e.type == LEGAL_ENTITY]
    resp = client.get(f"/entities/{company.id}/ultimate-sources")
    assert resp.status_code == 200
    [chain] = resp.json()["relationships"]
    owner = chain["source"]
    assert owner["name"] == "Jana Malá"
    assert owner["nationality"] == "SK"
    assert owner["dob"] == "1981-02-03"
    assert owner["google_search_url"] == "https://www.google.com/search?q=Jana+Mal%C3%A1"
    assert chain["intermediate_relationships"] == []
    assert chain["started_date"] == "2018-06-01"


def test_import_without_opencorporates_token_is_unavailable(store, monkeypatch):
    monkeypatch.setattr("app.api.routers.imports.get_entity_resolver", lambda: EntityResolver())
    monkeypatch.setattr(
        "app.services.opencorporates_client.get_opencorporates_config",
        lambda: (None, "https://api.opencorporates.test/"),
    )
    client = TestClient(app)
    resp = client.post("/imports/sk", json={"records": [RECORD]})
    assert resp.status_code == 503
    assert "OPENCORPORATES_API_TOKEN" in resp.json()["detail"]


def test_integrity_check_all(store):
    store.add_entity(Entity(id="E1", type=LEGAL_ENTITY))
    ok = Entity(id="E2", type=LEGAL_ENTITY)
    ok.add_oc_identifier("sk", "2")
    store.add_entity(ok)

    client = TestClient(app)
    resp = client.post("/integrity/check")
    assert resp.status_code == 200
    assert resp.json() == {"entity_count": 2, "processed": 2, "issues": {"no_oc_identifier": 1}}


def test_integrity_check_entity(store):
    store.add_entity(Entity(id="E1", type=LEGAL_ENTITY))
    client = TestClient(app)

    resp = client.get("/entities/E1/integrity")
    assert resp.status_code == 200
    assert resp.json() == {"entity_id": "E1", "issues": {"no_oc_identifier": {}}}

    assert client.get("/entities/ZZZ/integrity").status_code == 404
