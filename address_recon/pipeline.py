from __future__ import annotations
import logging
import threading
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .base_data import load_alias_map
from .config import Config
from .geocoding import GeocodingOrchestrator, ProgressCallback, ProviderRegistry
from .matcher import enrich_records, match_addresses, summarize
from .models import MATCH_MISSING, Coordinates, MatchRecord
from .normalize import AddressNormalizer, extract_secondary_unit
from .providers import build_providers
from .scoring import Scorer
from .tables import (
    Row,
    build_address_string,
    column_values,
    detect_address_column,
    detect_property_id_column,
    detect_tenant_column,
    normalize_coordinate,
    read_table,
    side_map,
)

logger = logging.getLogger(__name__)


class ReconciliationPipeline:
    """Reconciliation flow: read -> detect columns -> match -> enrich -> (optional) geocode."""

    def __init__(self, cfg: Config, geocoder: Optional[GeocodingOrchestrator] = None):
        self.cfg = cfg
        street_aliases = load_alias_map(cfg.alias_path) if cfg.alias_path else None
        self.normalizer = AddressNormalizer(street_aliases)
        self.scorer = Scorer(cfg.weights, cfg.thresholds)
        if geocoder is None:
            geocoder = GeocodingOrchestrator(ProviderRegistry(build_providers(cfg)), cfg.progress_every)
        self.geocoder = geocoder

    def run(self, source_path: str | Path, target_path: str | Path, columns: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        src_rows, src_headers = read_table(source_path)
        tgt_rows, tgt_headers = read_table(target_path)
        return self.reconcile(src_rows, src_headers, tgt_rows, tgt_headers, columns=columns)

    def reconcile(
        self,
        src_rows: Sequence[Row],
        src_headers: Sequence[str],
        tgt_rows: Sequence[Row],
        tgt_headers: Sequence[str],
        columns: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        cols = self._resolve_columns(src_headers, tgt_headers, columns or {})
        if not cols["source_address"] or not cols["target_address"]:
            raise ValueError("Both tables need an address column")

        source = column_values(src_rows, cols["source_address"])
        target = column_values(tgt_rows, cols["target_address"])

        # source tenants first, target entries override on the same address
        tenants: Dict[str, str] = {}
        tenants.update(side_map(src_rows, cols["source_address"], cols.get("source_tenant")))
        tenants.update(side_map(tgt_rows, cols["target_address"], cols.get("target_tenant")))
        property_ids = side_map(tgt_rows, cols["target_address"], cols.get("target_property_id"))

        records = self.match(source, target, property_ids=property_ids, tenants=tenants)
        summary = summarize(records)
        logger.info("Reconciled %d source vs %d target addresses: %s", len(source), len(target), summary)
        return {
            "records": records,
            "columns": cols,
            "n_source": len(source),
            "n_target": len(target),
            **summary,
        }

    def match(
        self,
        source: Sequence[str],
        target: Sequence[str],
        property_ids: Optional[Mapping[str, str]] = None,
        tenants: Optional[Mapping[str, str]] = None,
    ) -> List[MatchRecord]:
        records = match_addresses(source, target, scorer=self.scorer, normalize=self.normalizer.normalize)
        return enrich_records(records, property_ids, tenants)

    def compare_addresses(self, addr1: str, addr2: str) -> Dict[str, Any]:
        """Score two raw addresses the same way ``match`` would."""
        n1 = self.normalizer.normalize(addr1)
        n2 = self.normalizer.normalize(addr2)
        exact = n1 == n2
        score = 1.0 if exact else self.scorer.similarity(n1, n2)
        return {
            "match_type": self.scorer.classify(score, exact=exact),
            "score": score,
            "feature_scores": self.scorer.feature_scores(n1, n2),
            "addr1_normalized": n1,
            "addr2_normalized": n2,
            "addr1_unit": extract_secondary_unit(addr1.upper()),
            "addr2_unit": extract_secondary_unit(addr2.upper()),
        }

    def geocode_missing(
        self,
        records: Sequence[MatchRecord],
        cancel: Optional[threading.Event] = None,
    ) -> Dict[str, Optional[Coordinates]]:
        """Enhanced geocoding for one-sided records, with the tenant name as business hint."""
        out: Dict[str, Optional[Coordinates]] = {}
        for r in records:
            if r.match_type != MATCH_MISSING:
                continue
            address = r.target_address or r.source_address
            if not address or address in out:
                continue
            if cancel is not None and cancel.is_set():
                break
            out[address] = self.geocoder.enhanced_geocode(address, r.tenant, cancel=cancel)
        found = sum(1 for v in out.values() if v is not None)
        logger.info("Geocoded %d of %d unmatched addresses", found, len(out))
        return out

    def extract_coordinates(
        self,
        rows: Sequence[Row],
        lat_col: Optional[str] = None,
        lng_col: Optional[str] = None,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Dict[str, Coordinates]:
        """Coordinates per row address: explicit lat/lng cells first, batch geocoding for the rest."""
        coords: Dict[str, Coordinates] = {}
        to_geocode: List[str] = []
        for idx, row in enumerate(rows):
            key = _address_key(row, idx)
            if lat_col and lng_col:
                lat = normalize_coordinate(row.get(lat_col))
                lng = normalize_coordinate(row.get(lng_col))
                if lat is not None and lng is not None:
                    coords[key] = (lat, lng)
                    continue
            # rows without any address text only get a placeholder key, nothing to look up
            if key == build_address_string(row) and key not in coords and key not in to_geocode:
                to_geocode.append(key)

        if to_geocode:
            coords.update(self.geocoder.batch_geocode(to_geocode, progress=progress, cancel=cancel))
        return coords

    def provider_status(self) -> List[Dict[str, Any]]:
        return self.geocoder.registry.states()

    def _resolve_columns(self, src_headers: Sequence[str], tgt_headers: Sequence[str], given: Dict[str, str]) -> Dict[str, Optional[str]]:
        kw = self.cfg.columns
        cols: Dict[str, Optional[str]] = {
            "source_address": detect_address_column(src_headers, kw.get("address", ("address",))),
            "source_tenant": detect_tenant_column(src_headers, kw.get("tenant", ("tenant",))),
            "target_address": detect_address_column(tgt_headers, kw.get("address", ("address",))),
            "target_tenant": detect_tenant_column(tgt_headers, kw.get("tenant", ("tenant",))),
            "target_property_id": detect_property_id_column(tgt_headers, kw.get("property_id", ("id",))),
        }
        cols.update({k: v for k, v in given.items() if v})
        return cols


def apply_verification(records: Sequence[MatchRecord], decisions: Mapping[str, bool]) -> List[MatchRecord]:
    """Drop target-only records the reviewer marked ``keep=False``; everything else passes."""
    out: List[MatchRecord] = []
    for r in records:
        if not r.source_address and r.target_address and decisions.get(r.target_address) is False:
            continue
        out.append(r)
    return out


def record_to_dict(r: MatchRecord) -> Dict[str, Any]:
    d = asdict(r)
    d["status"] = r.status
    return d


def _address_key(row: Row, index: int) -> str:
    address = build_address_string(row)
    if address:
        return address
    tenant = row.get("tenant") or ""
    pid = row.get("propertyId") or row.get("property_id") or ""
    label = " ".join(str(x) for x in (tenant, pid) if x)
    if label:
        return f"{label} (Row {index + 1})"
    return f"Row {index + 1}"
