from __future__ import annotations
import logging
from dataclasses import replace
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Set

from .models import MATCH_EXACT, MATCH_FUZZY, MATCH_MISSING, MatchRecord
from .normalize import normalize_address
from .scoring import Scorer

logger = logging.getLogger(__name__)


def match_addresses(
    source: Sequence[str],
    target: Sequence[str],
    scorer: Optional[Scorer] = None,
    normalize: Callable[[str], str] = normalize_address,
) -> List[MatchRecord]:
    """Greedy one-to-one reconciliation of two address lists.

    One record per source address (in source order), then one record per
    target address that nothing consumed (in target order).
    """
    scorer = scorer or Scorer()
    threshold = scorer.fuzzy_threshold

    norm_src = [normalize(a) for a in source]
    norm_tgt = [normalize(a) for a in target]

    consumed: Set[int] = set()
    results: List[MatchRecord] = []

    for i, addr in enumerate(source):
        ns = norm_src[i]

        # exact search looks at every target, consumed or not
        exact_idx = _first_index(norm_tgt, ns)
        if exact_idx >= 0:
            consumed.add(exact_idx)
            results.append(MatchRecord(addr, target[exact_idx], 1.0, MATCH_EXACT))
            continue

        best_idx, best_score = -1, 0.0
        for j, nt in enumerate(norm_tgt):
            if j in consumed:
                continue
            score = scorer.similarity(ns, nt)
            if best_idx < 0 or score > best_score:
                best_idx, best_score = j, score

        if best_idx >= 0 and scorer.classify(best_score) == MATCH_FUZZY:
            consumed.add(best_idx)
            results.append(MatchRecord(addr, target[best_idx], best_score, MATCH_FUZZY))
        else:
            results.append(MatchRecord(addr, "", 0.0, MATCH_MISSING))

    for j, addr in enumerate(target):
        if j not in consumed:
            results.append(MatchRecord("", addr, 0.0, MATCH_MISSING))

    logger.debug("Matched %d source vs %d target addresses (threshold %.2f)", len(source), len(target), threshold)
    return results


def enrich_records(
    records: Sequence[MatchRecord],
    property_ids: Optional[Mapping[str, str]] = None,
    tenants: Optional[Mapping[str, str]] = None,
) -> List[MatchRecord]:
    """Attach property id (by target address) and tenant (by source, then target address)."""
    property_ids = property_ids or {}
    tenants = tenants or {}
    out: List[MatchRecord] = []
    for r in records:
        pid = property_ids.get(r.target_address) if r.target_address else None
        tenant = None
        if r.source_address:
            tenant = tenants.get(r.source_address)
        if tenant is None and r.target_address:
            tenant = tenants.get(r.target_address)
        out.append(replace(r, property_id=pid, tenant=tenant))
    return out


def summarize(records: Sequence[MatchRecord]) -> Dict[str, int]:
    return {
        "n_records": len(records),
        "n_exact": sum(1 for r in records if r.match_type == MATCH_EXACT),
        "n_fuzzy": sum(1 for r in records if r.match_type == MATCH_FUZZY),
        "n_missing_in_target": sum(1 for r in records if r.match_type == MATCH_MISSING and r.source_address),
        "n_extra_in_target": sum(1 for r in records if r.match_type == MATCH_MISSING and not r.source_address),
    }


def _first_index(items: Sequence[str], value: str) -> int:
    for idx, item in enumerate(items):
        if item == value:
            return idx
    return -1
