import json

import pytest

from address_recon.config import Config, load_config
from address_recon.geocoding import GeocodingOrchestrator, ProviderRegistry
from address_recon.models import MATCH_EXACT
from address_recon.pipeline import ReconciliationPipeline, apply_verification, record_to_dict


SRC_HEADERS = ["Location Address", "Company"]
SRC_ROWS = [
    {"Location Address": "123 Main Street, Springfield, IL 62701", "Company": "Acme"},
    {"Location Address": "9 Elm Rd", "Company": "Beta"},
]
TGT_HEADERS = ["Property ID", "Address", "Tenant"]
TGT_ROWS = [
    {"Property ID": "P1", "Address": "123 Main St, Springfield, IL", "Tenant": "Acme Corp"},
    {"Property ID": "P2", "Address": "400 Pine Blvd", "Tenant": "Gamma"},
]


def _pipeline(*providers, cfg=None):
    geocoder = GeocodingOrchestrator(ProviderRegistry(providers), progress_every=10)
    return ReconciliationPipeline(cfg or Config(), geocoder=geocoder)


def test_reconcile_detects_columns_and_enriches():
    out = _pipeline().reconcile(SRC_ROWS, SRC_HEADERS, TGT_ROWS, TGT_HEADERS)

    assert out["columns"]["source_address"] == "Location Address"
    assert out["columns"]["source_tenant"] == "Company"
    assert out["columns"]["target_address"] == "Address"
    assert out["columns"]["target_property_id"] == "Property ID"
    assert (out["n_source"], out["n_target"]) == (2, 2)
    assert (out["n_exact"], out["n_fuzzy"], out["n_missing_in_target"], out["n_extra_in_target"]) == (1, 0, 1, 1)

    exact, missing, extra = out["records"]
    assert exact.match_type == MATCH_EXACT
    assert exact.target_address == "123 Main St, Springfield, IL"
    assert exact.property_id == "P1"
    assert exact.tenant == "Acme"
    assert (missing.source_address, missing.tenant, missing.status) == ("9 Elm Rd", "Beta", "Missing in Target")
    assert (extra.target_address, extra.tenant, extra.property_id) == ("400 Pine Blvd", "Gamma", "P2")
    assert extra.status == "Extra in Target"


def test_run_reads_files_and_honours_column_override(tmp_path):
    src = tmp_path / "website.csv"
    src.write_text("Name,Street\nAcme,5 Oak Avenue\n", encoding="utf-8")
    tgt = tmp_path / "listing.csv"
    tgt.write_text("Site,Street\n5 Oak Ave,x\n", encoding="utf-8")

    out = _pipeline().run(src, tgt, columns={"target_address": "Site"})
    assert out["columns"]["source_address"] == "Street"
    assert out["columns"]["target_address"] == "Site"
    assert [r.match_type for r in out["records"]] == [MATCH_EXACT]
    assert out["records"][0].tenant == "Acme"


def test_reconcile_without_headers_fails():
    with pytest.raises(ValueError):
        _pipeline().reconcile([], [], TGT_ROWS, TGT_HEADERS)


def test_compare_addresses_reports_units():
    out = _pipeline().compare_addresses("100 N Main St Suite 200", "100 North Main Street")
    assert out["match_type"] == MATCH_EXACT
    assert out["score"] == 1.0
    assert out["addr1_normalized"] == out["addr2_normalized"] == "100 N MAIN ST"
    assert out["addr1_unit"] == "SUITE 200"
    assert out["addr2_unit"] is None
    assert set(out["feature_scores"]) == {"token", "bigram"}


def test_alias_file_extends_street_types(tmp_path):
    (tmp_path / "aliases.json").write_text(json.dumps({"TER": ["TERRACE"]}), encoding="utf-8")
    (tmp_path / "config.json").write_text(json.dumps({"alias_path": "aliases.json"}), encoding="utf-8")
    cfg = load_config(tmp_path / "config.json")

    with_alias = _pipeline(cfg=cfg).compare_addresses("5 Oak Terrace", "5 Oak Ter")
    plain = _pipeline().compare_addresses("5 Oak Terrace", "5 Oak Ter")
    assert with_alias["match_type"] == MATCH_EXACT
    assert plain["match_type"] != MATCH_EXACT


def test_geocode_missing_uses_tenant_as_hint(fake_provider):
    provider = fake_provider("fake", answers={"9 Elm Rd": (41.0, -87.0)})
    pipeline = _pipeline(provider)
    records = pipeline.reconcile(SRC_ROWS, SRC_HEADERS, TGT_ROWS, TGT_HEADERS)["records"]

    coords = pipeline.geocode_missing(records)
    assert coords == {"9 Elm Rd": (41.0, -87.0), "400 Pine Blvd": None}
    # matched address never looked up; unmatched one retried with the tenant name
    assert all(addr != "123 Main St, Springfield, IL" for addr, _ in provider.calls)
    assert ("Gamma 400 Pine Blvd", None) in provider.calls


def test_extract_coordinates_prefers_explicit_cells(fake_provider):
    provider = fake_provider("fake", answers={"2 Oak Ave": (41.5, -74.0)})
    seen = []
    rows = [
        {"Address": "1 Main St", "Lat": "40.1", "Lng": "-75.2"},
        {"Address": "2 Oak Ave", "Lat": "", "Lng": None},
        {"Lat": None, "Lng": None, "tenant": "Ghost"},
    ]
    coords = _pipeline(provider).extract_coordinates(rows, "Lat", "Lng", progress=seen.append)

    assert coords == {"1 Main St": (40.1, -75.2), "2 Oak Ave": (41.5, -74.0)}
    assert provider.calls == [("2 Oak Ave", None)]
    assert [(p.processed, p.total, p.succeeded) for p in seen] == [(1, 1, 1)]


def test_apply_verification_drops_rejected_extras():
    records = _pipeline().reconcile(SRC_ROWS, SRC_HEADERS, TGT_ROWS, TGT_HEADERS)["records"]
    kept = apply_verification(records, {"400 Pine Blvd": False, "9 Elm Rd": False})
    # only target-only records are subject to review
    assert [r.source_address for r in kept] == ["123 Main Street, Springfield, IL 62701", "9 Elm Rd"]
    assert apply_verification(records, {"400 Pine Blvd": True}) == records


def test_record_to_dict_includes_status():
    records = _pipeline().reconcile(SRC_ROWS, SRC_HEADERS, TGT_ROWS, TGT_HEADERS)["records"]
    d = record_to_dict(records[0])
    assert d["status"] == "Exact Match"
    assert d["match_type"] == MATCH_EXACT
    assert d["property_id"] == "P1"


def test_provider_status(fake_provider):
    pipeline = _pipeline(fake_provider("a"), fake_provider("b", quota=False))
    names = [(s["name"], s["has_quota"]) for s in pipeline.provider_status()]
    assert names == [("a", True), ("b", False)]
