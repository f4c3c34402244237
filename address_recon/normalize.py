from __future__ import annotations
import re
from typing import Dict, List, Optional

from .base_data import (
    DIRECTION_ALIASES,
    STREET_TYPE_ALIASES,
    build_reverse_alias_map,
    merge_alias_maps,
)

_US_HWY_RE = re.compile(r"\b(US|U\.S\.|U S|U\.S|US\.)\s*(HWY|HIGHWAY|HWY\.|HIGHWAY\.)\s*(\d+)\b")
_OLD_US_HWY_RE = re.compile(r"\b(OLD)\s*(US|U\.S\.|U S|U\.S|US\.)\s*(HWY|HIGHWAY|HWY\.|HIGHWAY\.)\s*(\d+)\b")
_STATE_HWY_RE = re.compile(r"\b(STATE|ST|ST\.|S\.)\s*(RTE|ROUTE|RT|RD|ROAD|HWY|HIGHWAY)\s*(\d+)\b")

# one or more ZIP / ZIP+4 codes at the very end
_TRAILING_ZIP_RE = re.compile(r"(?:[\s,]*\b\d{5}(?:-\d{4})?\b)+[\s,]*$")

_UNIT_WORDS = r"STE|SUITE|UNIT|APT|APARTMENT|ROOM|RM|BUILDING|BLDG|FLOOR|FL"
_SECONDARY_UNIT_RE = re.compile(
    r"(?:\b(?:" + _UNIT_WORDS + r")(?:\s*#\s*|\s+)|#\s*)[\w-]+,?",
    re.IGNORECASE,
)

_MAX_PASSES = 4


def extract_secondary_unit(address: str) -> Optional[str]:
    """Return the first suite/unit/apt fragment of ``address`` (for display), or None."""
    m = _SECONDARY_UNIT_RE.search(address or "")
    if not m:
        return None
    return m.group(0).rstrip(",").strip()


def remove_secondary_units(address: str) -> str:
    return _SECONDARY_UNIT_RE.sub(" ", address or "").strip()


def process_highways(address: str) -> str:
    """US / state highway idioms; must run before street-type rewriting."""
    out = _US_HWY_RE.sub(r"US HWY \3", address, count=1)
    out = _OLD_US_HWY_RE.sub(r"OLD US HWY \4", out, count=1)
    out = _STATE_HWY_RE.sub(r"STATE HWY \3", out, count=1)
    return out


class AddressNormalizer:
    """Deterministic canonical form for US-style address strings.

    Two addresses are an exact match when their canonical forms are equal.
    ``street_aliases`` extends the built-in street-type table
    (canonical -> list of variants), e.g. from ``load_alias_map``.
    """

    def __init__(self, street_aliases: Optional[Dict[str, List[str]]] = None):
        table = STREET_TYPE_ALIASES
        if street_aliases:
            table = merge_alias_maps(STREET_TYPE_ALIASES, street_aliases)
        self.street_rev = build_reverse_alias_map(table)
        self.direction_rev = build_reverse_alias_map(DIRECTION_ALIASES)

    def normalize(self, raw: Optional[str]) -> str:
        if not raw:
            return ""
        # single pass is not always stable (e.g. "STE. 5" only becomes a removable
        # designator once punctuation is gone), so repeat until it is
        text = self._standardize_once(raw)
        for _ in range(_MAX_PASSES):
            nxt = self._standardize_once(text)
            if nxt == text:
                break
            text = nxt
        return text

    __call__ = normalize

    def normalize_token(self, token: str) -> str:
        core = token.rstrip(",")
        tail = token[len(core):]
        out = self.street_rev.get(core, core)
        out = self.direction_rev.get(out, out)
        return out + tail

    def _standardize_once(self, raw: str) -> str:
        t = raw.upper()
        if t.endswith("."):
            t = t[:-1]

        t = process_highways(t)
        t = _TRAILING_ZIP_RE.sub("", t)

        t = re.sub(r",+$", "", t.strip())
        t = re.sub(r"\s+", " ", t)

        t = remove_secondary_units(t)

        t = " ".join(self.normalize_token(w) for w in t.split(" "))

        t = re.sub(r"[,.#]", " ", t)
        t = re.sub(r"\s+", " ", t).strip()
        return t


_default = AddressNormalizer()


def normalize_address(raw: Optional[str]) -> str:
    """Module-level shortcut using the built-in tables."""
    return _default.normalize(raw)
