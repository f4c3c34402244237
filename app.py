from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional
import dotenv
dotenv.load_dotenv()

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from address_recon.config import load_config
from address_recon.pipeline import ReconciliationPipeline, record_to_dict

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

ROOT = Path(__file__).resolve().parent
DATA_DIR = ROOT / "data"

cfg = load_config(DATA_DIR / "config.default.json")
pipeline = ReconciliationPipeline(cfg)

app = FastAPI(title="Address Reconciliation Service")


class CompareRequest(BaseModel):
    addr1: str
    addr2: str


class MatchRequest(BaseModel):
    source: List[str]
    target: List[str]
    property_ids: Dict[str, str] = {}
    tenants: Dict[str, str] = {}


class GeocodeRequest(BaseModel):
    address: str
    business_name: Optional[str] = None


@app.post("/compare")
def compare_addresses(payload: CompareRequest):
    addr1 = payload.addr1.strip()
    addr2 = payload.addr2.strip()
    if not addr1 or not addr2:
        raise HTTPException(status_code=400, detail="addr1 and addr2 must not be empty")
    return pipeline.compare_addresses(addr1, addr2)


@app.post("/match")
def match_lists(payload: MatchRequest):
    source = [a.strip() for a in payload.source if a and a.strip()]
    target = [a.strip() for a in payload.target if a and a.strip()]
    records = pipeline.match(source, target, property_ids=payload.property_ids, tenants=payload.tenants)
    return {"records": [record_to_dict(r) for r in records]}


@app.post("/geocode")
def geocode(payload: GeocodeRequest):
    address = payload.address.strip()
    if not address:
        raise HTTPException(status_code=400, detail="address must not be empty")
    coords = pipeline.geocoder.enhanced_geocode(address, payload.business_name)
    return {
        "address": address,
        "found": coords is not None,
        "coordinates": list(coords) if coords is not None else None,
    }


@app.get("/providers")
def providers():
    return {"providers": pipeline.provider_status()}


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("APP_HOST", "0.0.0.0")
    port = int(os.getenv("APP_PORT", "8008"))
    uvicorn.run(app, host=host, port=port)
