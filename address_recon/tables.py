from __future__ import annotations
import io
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .models import MatchRecord

EXPORT_COLUMNS: List[str] = [
    "Tenant Name", "Source Address", "Target Address", "Property ID", "Match Score", "Status",
]

_LAT_PATTERNS = [
    re.compile(p, re.I) for p in (
        r"^(lat|latitude|y[-_]?coord)",
        r"^(gps[-_]?lat)",
        r"^(y[-_]?coordinate)",
        r"^(geolat)",
        r"^(position[-_]?lat)",
        r"^(loc[-_]?lat)",
        r"^(y)",
    )
]
_LNG_PATTERNS = [
    re.compile(p, re.I) for p in (
        r"^(lon|lng|longitude|long|x[-_]?coord)",
        r"^(gps[-_]?lon|gps[-_]?lng)",
        r"^(x[-_]?coordinate)",
        r"^(geolon|geolng)",
        r"^(position[-_]?lon|position[-_]?lng)",
        r"^(loc[-_]?lon|loc[-_]?lng)",
        r"^(x)",
    )
]

_STREET_RE = re.compile(r"street|address|addr|location", re.I)
_CITY_RE = re.compile(r"city|town|municipality", re.I)
_STATE_RE = re.compile(r"state|province|region", re.I)
_ZIP_RE = re.compile(r"zip|postal|code|postcode", re.I)

Row = Dict[str, Any]

def _clean_value(val: Any) -> Any:
    if val is None:
        return None
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        pass
    return val

def _row_to_dict(row: pd.Series) -> Row:
    return {str(k): _clean_value(v) for k, v in row.to_dict().items()}

def _frame_to_rows(df: pd.DataFrame) -> Tuple[List[Row], List[str]]:
    df = df.dropna(how="all")
    return [_row_to_dict(row) for _, row in df.iterrows()], [str(c) for c in df.columns]

# ---- ingestion ----

def read_table(path: str | Path) -> Tuple[List[Row], List[str]]:
    """Rows (as dicts) and headers of a CSV / TSV / Excel file; first sheet only."""
    p = Path(path)
    ext = p.suffix.lower()
    if ext == ".csv":
        df = pd.read_csv(p, dtype=str, skip_blank_lines=True)
    elif ext in (".tsv", ".txt"):
        df = pd.read_csv(p, sep="\t", dtype=str, skip_blank_lines=True)
    elif ext in (".xlsx", ".xls"):
        df = pd.read_excel(p, sheet_name=0, dtype=str)
    else:
        raise ValueError(f"Unsupported file format: {p.name}. Please use CSV, TSV, or Excel.")
    return _frame_to_rows(df)

def parse_clipboard_text(text: str) -> Tuple[List[Row], List[str]]:
    """Pasted spreadsheet text; tab-separated if the header line has a tab, else comma."""
    body = (text or "").strip()
    if not body:
        return [], []
    first_line = body.split("\n", 1)[0]
    sep = "\t" if "\t" in first_line else ","
    df = pd.read_csv(io.StringIO(body), sep=sep, dtype=str, skip_blank_lines=True)
    return _frame_to_rows(df)

def _find_header(headers: Sequence[str], keywords: Sequence[str]) -> Optional[str]:
    for h in headers:
        low = h.lower()
        if any(k in low for k in keywords):
            return h
    return None

def detect_address_column(headers: Sequence[str], keywords: Sequence[str] = ("address", "location", "street")) -> Optional[str]:
    found = _find_header(headers, keywords)
    if found:
        return found
    return headers[0] if headers else None

def detect_tenant_column(headers: Sequence[str], keywords: Sequence[str] = ("tenant", "company", "business", "name", "client")) -> Optional[str]:
    return _find_header(headers, keywords)

def detect_property_id_column(headers: Sequence[str], keywords: Sequence[str] = ("id", "property", "identifier")) -> Optional[str]:
    return _find_header(headers, keywords)

def detect_coordinate_columns(headers: Sequence[str]) -> Tuple[Optional[str], Optional[str]]:
    lat = next((h for h in headers if any(p.search(h) for p in _LAT_PATTERNS)), None)
    lng = next((h for h in headers if any(p.search(h) for p in _LNG_PATTERNS)), None)
    return lat, lng

def normalize_coordinate(value: Any) -> Optional[float]:
    """Lenient parse of one coordinate cell; None when empty, garbage or outside -180..180."""
    value = _clean_value(value)
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        parsed = float(value)
    else:
        cleaned = re.sub(r"[^\d.-]", "", str(value)).strip()
        try:
            parsed = float(cleaned)
        except ValueError:
            return None
    if parsed != parsed or parsed < -180 or parsed > 180:
        return None
    return parsed

def column_values(rows: Sequence[Row], column: str) -> List[str]:
    """Non-blank cell values of one column, in row order."""
    out: List[str] = []
    for row in rows:
        val = _clean_value(row.get(column))
        if val is None:
            continue
        s = str(val).strip()
        if s:
            out.append(s)
    return out

def side_map(rows: Sequence[Row], key_column: str, value_column: Optional[str]) -> Dict[str, str]:
    """address -> other column (tenant, property id); later rows win."""
    if not value_column:
        return {}
    out: Dict[str, str] = {}
    for row in rows:
        k = _clean_value(row.get(key_column))
        v = _clean_value(row.get(value_column))
        if k is None or v is None:
            continue
        k, v = str(k).strip(), str(v).strip()
        if k and v:
            out[k] = v
    return out

def build_address_string(row: Row) -> str:
    """Join street, city, state and zip cells of a row into one address line."""
    parts: List[str] = []
    for pattern in (_STREET_RE, _CITY_RE, _STATE_RE, _ZIP_RE):
        for key in row:
            if pattern.search(key):
                val = _clean_value(row[key])
                if val is not None and str(val).strip():
                    parts.append(str(val).strip())
                break

    if not parts:
        # no recognisable headers: take anything that looks like part of an address
        for val in row.values():
            if (
                isinstance(val, str)
                and len(val) > 5
                and re.search(r"\d+", val)
                and not re.fullmatch(r"[\d.]+", val)
            ):
                parts.append(val)

    return ", ".join(parts)

# ---- export ----

def records_to_frame(records: Sequence[MatchRecord]) -> pd.DataFrame:
    rows = [
        {
            "Tenant Name": r.tenant or "",
            "Source Address": r.source_address or "",
            "Target Address": r.target_address or "",
            "Property ID": r.property_id or "",
            "Match Score": f"{r.score:.2f}" if r.score > 0 else "",
            "Status": r.status,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)

def export_results(records: Sequence[MatchRecord], path: str | Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    df = records_to_frame(records)
    ext = p.suffix.lower()
    if ext == ".csv":
        df.to_csv(p, index=False, encoding="utf-8")
    elif ext == ".xlsx":
        with pd.ExcelWriter(p, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Results", index=False)
    else:
        raise ValueError(f"Unsupported export format: {p.name}. Use .csv or .xlsx.")
    return p
