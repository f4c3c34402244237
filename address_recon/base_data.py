from __future__ import annotations
import json
from pathlib import Path
from typing import Dict, List

# canonical abbreviation -> spellings seen in the wild
STREET_TYPE_ALIASES: Dict[str, List[str]] = {
    "ST": ["STREET", "STR", "ST."],
    "AVE": ["AVENUE", "AV", "AVE.", "AV."],
    "BLVD": ["BOULEVARD", "BLVD.", "BLV", "BL", "BLV."],
    "DR": ["DRIVE", "DR.", "DRV", "DRV."],
    "RD": ["ROAD", "RD.", "R.D."],
    "LN": ["LANE", "LN.", "LA", "LA."],
    "PL": ["PLACE"],
    "CT": ["COURT"],
    "CIR": ["CIRCLE"],
    "HWY": ["HIGHWAY", "HIWAY", "HIGHWY", "HWY.", "HY", "H.W.Y."],
    "PKWY": ["PARKWAY", "PKWY.", "PKY", "PARKWY", "PKWAY", "PKW", "PKW."],
    "EXPY": ["EXPRESSWAY"],
    "FWY": ["FREEWAY"],
    "TPKE": ["TURNPIKE"],
    "STE": ["SUITE"],
    "APT": ["APARTMENT"],
    "BLDG": ["BUILDING"],
    "FL": ["FLOOR"],
    "UNIT": [],
    "RM": ["ROOM"],
}

DIRECTION_ALIASES: Dict[str, List[str]] = {
    "N": ["NORTH"],
    "S": ["SOUTH"],
    "E": ["EAST"],
    "W": ["WEST"],
    "NE": ["NORTHEAST"],
    "NW": ["NORTHWEST"],
    "SE": ["SOUTHEAST"],
    "SW": ["SOUTHWEST"],
}

def load_alias_map(path: str | Path) -> Dict[str, List[str]]:
    p = Path(path)
    return json.loads(p.read_text(encoding="utf-8"))

def merge_alias_maps(base: Dict[str, List[str]], extra: Dict[str, List[str]]) -> Dict[str, List[str]]:
    merged = {canon: list(aliases) for canon, aliases in base.items()}
    for canon, aliases in extra.items():
        bucket = merged.setdefault(_key(canon), [])
        for a in aliases:
            if _key(a) not in bucket:
                bucket.append(_key(a))
    return merged

def build_reverse_alias_map(canonical_to_aliases: Dict[str, List[str]]) -> Dict[str, str]:
    """
    Return: alias -> canonical (all upper-case, no spaces)
    """
    rev: Dict[str, str] = {}
    for canon, aliases in canonical_to_aliases.items():
        canon_key = _key(canon)
        rev[canon_key] = canon_key
        for a in aliases:
            rev[_key(a)] = canon_key
    return rev

def _key(s: str) -> str:
    return "".join((s or "").upper().split())
