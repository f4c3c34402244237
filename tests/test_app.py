import pytest
from fastapi.testclient import TestClient

import app as app_module
from address_recon.geocoding import GeocodingOrchestrator, ProviderRegistry


@pytest.fixture
def client():
    return TestClient(app_module.app)


def test_compare(client):
    resp = client.post("/compare", json={"addr1": "123 Main Street, Springfield, IL 62701", "addr2": "123 Main St, Springfield, IL"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["match_type"] == "exact"
    assert body["score"] == 1.0
    assert body["addr1_normalized"] == "123 MAIN ST SPRINGFIELD IL"


def test_compare_rejects_blank(client):
    resp = client.post("/compare", json={"addr1": "  ", "addr2": "1 Main St"})
    assert resp.status_code == 400


def test_match(client):
    resp = client.post("/match", json={
        "source": ["123 Main Street, Springfield, IL 62701", "9 Elm Rd", ""],
        "target": ["123 Main St, Springfield, IL", "400 Pine Blvd"],
        "property_ids": {"123 Main St, Springfield, IL": "P1"},
        "tenants": {"9 Elm Rd": "Beta"},
    })
    assert resp.status_code == 200
    records = resp.json()["records"]
    assert [r["status"] for r in records] == ["Exact Match", "Missing in Target", "Extra in Target"]
    assert records[0]["property_id"] == "P1"
    assert records[1]["tenant"] == "Beta"


def test_geocode(client, monkeypatch, fake_provider):
    provider = fake_provider("fake", answers={"1 Test Way": (40.0, -75.0)})
    geocoder = GeocodingOrchestrator(ProviderRegistry([provider]))
    monkeypatch.setattr(app_module.pipeline, "geocoder", geocoder)

    resp = client.post("/geocode", json={"address": "1 Test Way"})
    assert resp.json() == {"address": "1 Test Way", "found": True, "coordinates": [40.0, -75.0]}

    resp = client.post("/geocode", json={"address": "Nowhere", "business_name": "Xyz Holdings"})
    assert resp.json()["found"] is False
    assert provider.calls[-1] == ("Xyz Holdings Nowhere", None)

    assert client.post("/geocode", json={"address": ""}).status_code == 400


def test_providers(client, monkeypatch, fake_provider):
    geocoder = GeocodingOrchestrator(ProviderRegistry([fake_provider("a"), fake_provider("b", quota=False)]))
    monkeypatch.setattr(app_module.pipeline, "geocoder", geocoder)

    resp = client.get("/providers")
    assert [(p["name"], p["has_quota"]) for p in resp.json()["providers"]] == [("a", True), ("b", False)]
