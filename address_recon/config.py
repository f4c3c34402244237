from __future__ import annotations
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_PROVIDERS: List[Dict[str, Any]] = [
    {"name": "nominatim", "enabled": True, "quota_limit": None, "window": None, "min_interval": 1.5},
    {"name": "geoapify", "enabled": True, "quota_limit": 2900, "window": "daily", "min_interval": 0.0},
    {"name": "maptiler", "enabled": True, "quota_limit": 1000, "window": "daily", "min_interval": 0.0},
    {"name": "geocodio", "enabled": True, "quota_limit": 2400, "window": "daily", "min_interval": 0.0},
    {"name": "radar", "enabled": True, "quota_limit": 95000, "window": "monthly", "min_interval": 0.0},
]

DEFAULT_COLUMNS: Dict[str, List[str]] = {
    "address": ["address", "location", "street"],
    "tenant": ["tenant", "company", "business", "name", "client"],
    "property_id": ["id", "property", "identifier"],
}


@dataclass
class Config:
    weights: Dict[str, float] = field(default_factory=lambda: {"token": 0.7, "bigram": 0.3})
    thresholds: Dict[str, float] = field(default_factory=lambda: {"fuzzy": 0.7})
    request_timeout: float = 10.0
    progress_every: int = 10
    user_agent: str = "AddressVerificationTool/1.0"
    providers: List[Dict[str, Any]] = field(default_factory=lambda: [dict(p) for p in DEFAULT_PROVIDERS])
    columns: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_COLUMNS.items()})
    alias_path: Optional[str] = None


def load_config(path: str | Path) -> Config:
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    base = Config()

    alias_path = raw.get("alias_path")
    if alias_path and not Path(alias_path).is_absolute():
        # relative to the config file, not the working directory
        alias_path = str(p.parent / alias_path)

    return Config(
        weights=dict(raw.get("weights", base.weights)),
        thresholds=dict(raw.get("thresholds", base.thresholds)),
        request_timeout=float(raw.get("request_timeout", base.request_timeout)),
        progress_every=int(raw.get("progress_every", base.progress_every)),
        user_agent=str(raw.get("user_agent", base.user_agent)),
        providers=[dict(x) for x in raw.get("providers", base.providers)],
        columns={k: list(v) for k, v in raw.get("columns", base.columns).items()},
        alias_path=alias_path,
    )
