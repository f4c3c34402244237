from __future__ import annotations
import argparse
import json
import logging
import os
from datetime import date
from pathlib import Path

import dotenv
dotenv.load_dotenv()

from address_recon.config import load_config
from address_recon.pipeline import ReconciliationPipeline
from address_recon.tables import export_results
from address_recon.utils import EnhancedJSONEncoder

def main():
    root = Path(__file__).resolve().parent
    data_dir = root / "data"

    ap = argparse.ArgumentParser(description="Reconcile two address lists (CSV / TSV / Excel).")
    ap.add_argument("source", help="official location list")
    ap.add_argument("target", help="third-party list to compare against")
    ap.add_argument("--out", default=None, help="result file (.csv or .xlsx)")
    ap.add_argument("--config", default=str(data_dir / "config.default.json"))
    ap.add_argument("--geocode", action="store_true", help="geocode addresses present on one side only")
    args = ap.parse_args()

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    cfg = load_config(args.config)

    pipe = ReconciliationPipeline(cfg)
    result = pipe.run(args.source, args.target)
    records = result.pop("records")
    print("Reconciliation finished:", json.dumps(result, cls=EnhancedJSONEncoder, ensure_ascii=False))

    out = Path(args.out or f"address-comparison-{date.today().isoformat()}.csv")
    export_results(records, out)
    print("Results written to:", out)

    if args.geocode:
        coords = pipe.geocode_missing(records)
        unresolved = [a for a, c in coords.items() if c is None]
        print(f"Geocoded {len(coords) - len(unresolved)} of {len(coords)} unmatched addresses")
        for a in unresolved:
            print("  needs manual review:", a)

if __name__ == "__main__":
    main()
