import pytest
from fastapi.testclient import TestClient
from neo4j.exceptions import ServiceUnavailable

from app.main import app
from app.services.graph import Entity, InMemoryGraphStore, Neo4jGraphStore, Relationship


@pytest.fixture
def store(monkeypatch):
    # A owns B, B owns C, and D owns C directly
    s = InMemoryGraphStore()
    a, b, c, d = (s.add_entity(Entity(id=i, name=f"Entity {i}")) for i in "ABCD")
    s.add_relationship(Relationship(id="r-bc", source=b, target=c, started_date="2018-02-01"))
    s.add_relationship(Relationship(id="r-ab", source=a, target=b, started_date="2019"))
    s.add_relationship(Relationship(id="r-dc", source=d, target=c))
    monkeypatch.setattr("app.api.routers.network.get_graph_store", lambda: s)
    monkeypatch.setattr("app.api.routers.entities.get_graph_store", lambda: s)
    return s


def test_ultimate_sources(store):
    client = TestClient(app)
    resp = client.get("/entities/C/ultimate-sources")
    assert resp.status_code == 200
    data = resp.json()
    assert data["entity"]["id"] == "C"
    rels = data["relationships"]
    assert [r["source"]["id"] for r in rels] == ["A", "D"]
    assert [e["id"] for e in rels[0]["intermediate_entities"]] == ["B"]
    assert [r["id"] for r in rels[0]["intermediate_relationships"]] == ["r-bc", "r-ab"]
    assert rels[0]["started_date"] == "2019"
    assert rels[1]["intermediate_entities"] == []


def test_ultimate_sources_limit(store):
    client = TestClient(app)
    resp = client.get("/entities/C/ultimate-sources", params={"limit": 1})
    assert resp.status_code == 200
    assert len(resp.json()["relationships"]) == 1


def test_ultimate_sources_rejects_out_of_range_limit(store):
    client = TestClient(app)
    resp = client.get("/entities/C/ultimate-sources", params={"limit": 0})
    assert resp.status_code == 422


def test_ultimate_sources_unknown_entity(store):
    client = TestClient(app)
    resp = client.get("/entities/ZZZ/ultimate-sources")
    assert resp.status_code == 404


def test_relationships_to(store):
    client = TestClient(app)
    resp = client.get("/entities/C/relationships-to/A")
    assert resp.status_code == 200
    rels = resp.json()["relationships"]
    assert len(rels) == 1
    assert rels[0]["source"]["id"] == "A"
    assert rels[0]["target"]["id"] == "C"


def test_relationships_to_unrelated_is_empty(store):
    client = TestClient(app)
    resp = client.get("/entities/A/relationships-to/C")
    assert resp.status_code == 200
    assert resp.json()["relationships"] == []


def test_relationships_to_unknown_other(store):
    client = TestClient(app)
    resp = client.get("/entities/C/relationships-to/ZZZ")
    assert resp.status_code == 404


def test_store_unavailable_maps_to_503(monkeypatch):
    def failing(query, params=None):
        raise ServiceUnavailable("connection refused")

    monkeypatch.setattr("app.services.graph.entities.run_cypher", failing)
    monkeypatch.setattr("app.api.routers.network.get_graph_store", lambda: Neo4jGraphStore())
    client = TestClient(app)
    resp = client.get("/entities/C/ultimate-sources")
    assert resp.status_code == 503


def test_create_entity_and_relationship(store):
    client = TestClient(app)
    resp = client.post("/entities", json={"id": "E", "name": "Echo", "dob": "1980-1"})
    assert resp.status_code == 201
    assert resp.json()["dob"] == "1980-01"

    resp = client.post(
        "/relationships",
        json={"id": "r-ea", "source_id": "E", "target_id": "A", "started_date": "2021-03-04"},
    )
    assert resp.status_code == 201
    assert resp.json()["source_id"] == "E"

    resp = client.get("/entities/C/ultimate-sources")
    assert [r["source"]["id"] for r in resp.json()["relationships"]] == ["E", "D"]


def test_create_relationship_unknown_entity(store):
    client = TestClient(app)
    resp = client.post("/relationships", json={"source_id": "ZZZ", "target_id": "A"})
    assert resp.status_code == 404


def test_get_entity_transliterated(store):
    store.add_entity(Entity(id="UA1", name="Згуровий Олег"))
    client = TestClient(app)
    resp = client.get("/entities/UA1", params={"transliterated": True, "lang": "uk"})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Z·hurovyy Oleh"

    resp = client.get("/entities/UA1")
    assert resp.json()["name"] == "Згуровий Олег"


def test_entity_is_loaded_once_per_request(store, monkeypatch):
    lookups = []
    get_entity = store.get_entity

    def counting_get_entity(entity_id):
        lookups.append(entity_id)
        return get_entity(entity_id)

    monkeypatch.setattr(store, "get_entity", counting_get_entity)
    client = TestClient(app)

    assert client.get("/entities/C/ultimate-sources").status_code == 200
    assert lookups == ["C"]

    lookups.clear()
    assert client.get("/entities/C/relationships-to/A").status_code == 200
    assert lookups == ["C", "A"]
