from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

MATCH_EXACT = "exact"
MATCH_FUZZY = "fuzzy"
MATCH_MISSING = "missing"

# (latitude, longitude)
Coordinates = Tuple[float, float]

@dataclass(frozen=True)
class MatchRecord:
    source_address: str
    target_address: str
    score: float
    match_type: str
    property_id: Optional[str] = None
    tenant: Optional[str] = None

    @property
    def status(self) -> str:
        if self.match_type == MATCH_EXACT:
            return "Exact Match"
        if self.match_type == MATCH_FUZZY:
            return "Fuzzy Match"
        if self.source_address and not self.target_address:
            return "Missing in Target"
        return "Extra in Target"

@dataclass
class ProviderState:
    name: str
    request_counter: int = 0
    counter_window_start: Optional[date] = None
    quota_limit: Optional[int] = None
    last_request_timestamp: Optional[float] = None

@dataclass
class GeocodeProgress:
    processed: int
    total: int
    succeeded: int

    @property
    def failed(self) -> int:
        return self.processed - self.succeeded
