from __future__ import annotations
import json
import math
import re
from collections import Counter
from dataclasses import asdict, is_dataclass
from typing import Any, List, Optional, Tuple


def tokens(s: str) -> List[str]:
    return (s or "").split()

def token_overlap_ratio(a: str, b: str) -> float:
    """Share of ``a``'s tokens found anywhere in ``b``, over the longer token count.

    Duplicated tokens in ``a`` each count, so the ratio is not symmetric:
    ("MAIN MAIN ST", "MAIN ST X") -> 1.0 but ("MAIN ST X", "MAIN MAIN ST") -> 2/3.
    """
    ta, tb = tokens(a), tokens(b)
    if not ta or not tb:
        return 0.0
    tb_set = set(tb)
    hits = sum(1 for t in ta if t in tb_set)
    return hits / max(len(ta), len(tb))

def char_bigrams(s: str) -> Counter:
    s = re.sub(r"\s+", "", s or "")
    return Counter(s[i:i+2] for i in range(len(s) - 1))

def bigram_dice(a: str, b: str) -> float:
    """Dice coefficient over character bigrams (whitespace ignored, multiset counts)."""
    a2 = re.sub(r"\s+", "", a or "")
    b2 = re.sub(r"\s+", "", b or "")
    if a2 == b2:
        return 1.0
    if len(a2) < 2 or len(b2) < 2:
        return 0.0
    A, B = char_bigrams(a2), char_bigrams(b2)
    shared = sum((A & B).values())
    return 2.0 * shared / (len(a2) - 1 + len(b2) - 1)

def valid_coordinates(lat: Any, lon: Any) -> Optional[Tuple[float, float]]:
    """Float pair if both values are finite numbers, else None."""
    try:
        lat_f, lon_f = float(lat), float(lon)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat_f) and math.isfinite(lon_f)):
        return None
    return (lat_f, lon_f)

class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, obj: Any) -> Any:
        if is_dataclass(obj):
            return asdict(obj)
        if isinstance(obj, tuple):
            return list(obj)
        if hasattr(obj, "isoformat"):
            return obj.isoformat()
        return super().default(obj)
