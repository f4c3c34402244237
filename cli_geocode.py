from __future__ import annotations
import argparse
import logging
import os
from pathlib import Path

import dotenv
dotenv.load_dotenv()

import pandas as pd

from address_recon.config import load_config
from address_recon.pipeline import ReconciliationPipeline
from address_recon.tables import detect_coordinate_columns, read_table

def main():
    root = Path(__file__).resolve().parent
    data_dir = root / "data"

    ap = argparse.ArgumentParser(description="Attach coordinates to every row of an address file.")
    ap.add_argument("path", help="CSV / TSV / Excel file")
    ap.add_argument("--out", default="geocoded.csv")
    ap.add_argument("--config", default=str(data_dir / "config.default.json"))
    args = ap.parse_args()

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    cfg = load_config(args.config)
    pipe = ReconciliationPipeline(cfg)

    rows, headers = read_table(args.path)
    lat_col, lng_col = detect_coordinate_columns(headers)
    coords = pipe.extract_coordinates(
        rows, lat_col, lng_col,
        progress=lambda p: print(f"Processed {p.processed} of {p.total} addresses ({p.succeeded} successful)"),
    )

    df = pd.DataFrame(
        [{"address": a, "latitude": c[0], "longitude": c[1]} for a, c in coords.items()],
        columns=["address", "latitude", "longitude"],
    )
    df.to_csv(args.out, index=False, encoding="utf-8")
    print(f"Wrote {len(df)} of {len(rows)} rows with coordinates to: {args.out}")

if __name__ == "__main__":
    main()
