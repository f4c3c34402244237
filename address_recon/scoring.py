from __future__ import annotations
from typing import Dict, Optional

from .models import MATCH_EXACT, MATCH_FUZZY, MATCH_MISSING
from .normalize import normalize_address
from .utils import bigram_dice, token_overlap_ratio

DEFAULT_WEIGHTS: Dict[str, float] = {"token": 0.7, "bigram": 0.3}
DEFAULT_THRESHOLDS: Dict[str, float] = {"fuzzy": 0.7}

class Scorer:
    def __init__(self, weights: Optional[Dict[str, float]] = None, thresholds: Optional[Dict[str, float]] = None):
        self.w = dict(weights or DEFAULT_WEIGHTS)
        self.th = dict(thresholds or DEFAULT_THRESHOLDS)

    @property
    def fuzzy_threshold(self) -> float:
        return float(self.th.get("fuzzy", 0.7))

    def feature_scores(self, a: str, b: str) -> Dict[str, float]:
        return {
            "token": token_overlap_ratio(a, b),
            "bigram": bigram_dice(a, b),
        }

    def similarity(self, a: str, b: str) -> float:
        """Weighted blend of token overlap and bigram Dice; inputs already normalized."""
        fs = self.feature_scores(a, b)
        denom = sum(max(0.0, float(v)) for v in self.w.values()) or 1.0
        num = 0.0
        for k, w in self.w.items():
            num += float(w) * float(fs.get(k, 0.0))
        return num / denom

    def classify(self, score: float, exact: bool = False) -> str:
        # threshold is inclusive: exactly 0.7 is still a fuzzy match
        if exact:
            return MATCH_EXACT
        if score >= self.fuzzy_threshold:
            return MATCH_FUZZY
        return MATCH_MISSING

def calculate_address_similarity(address1: str, address2: str, scorer: Optional[Scorer] = None) -> float:
    """Similarity of two raw addresses (normalizes both first)."""
    scorer = scorer or Scorer()
    return scorer.similarity(normalize_address(address1), normalize_address(address2))
