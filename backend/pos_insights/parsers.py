"""
Snapshot file parser: dispatches by extension and returns a pandas DataFrame.
Supported formats: CSV/TSV, Excel (.xlsx/.xls), JSON, JSONL.

Used to feed exported sales and products into the engine outside the HTTP
boundary (see scripts/generate_insights.py).
"""
from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from pos_insights.insight_models import ProductRecord, SaleRecord
from pos_insights.records import parse_products, parse_sales

logger = logging.getLogger(__name__)

# Extension → parser mapping
_EXT_MAP = {
    ".csv": "csv",
    ".tsv": "csv",
    ".xlsx": "excel",
    ".xls": "excel",
    ".json": "json",
    ".jsonl": "jsonl",
    ".ndjson": "jsonl",
}

SUPPORTED_EXTENSIONS = set(_EXT_MAP.keys())


def _normalise_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Strip whitespace from headers; field names are case-sensitive aliases."""
    df.columns = [str(col).strip() for col in df.columns]
    return df


def _parse_csv(buf: io.BytesIO, **kwargs) -> pd.DataFrame:
    sep = kwargs.get("sep")
    if sep is None:
        sample = buf.read(4096).decode("utf-8", errors="replace")
        buf.seek(0)
        if "\t" in sample and "," not in sample:
            sep = "\t"
        else:
            sep = ","
    # ids stay text so "007" keeps its zeros
    return pd.read_csv(buf, sep=sep, dtype={"id": str, "productId": str, "product_id": str})


def _parse_excel(buf: io.BytesIO, **kwargs) -> pd.DataFrame:
    sheet = kwargs.get("sheet_name", 0)
    return pd.read_excel(buf, sheet_name=sheet, engine="openpyxl")


def _parse_json(buf: io.BytesIO, **kwargs) -> pd.DataFrame:
    text = buf.read().decode("utf-8")
    obj = json.loads(text)
    if isinstance(obj, dict):
        # Heuristic: find the first key whose value is a list
        for k, v in obj.items():
            if isinstance(v, list):
                return pd.json_normalize(v, max_level=0)
        return pd.json_normalize(obj, max_level=0)
    return pd.json_normalize(obj, max_level=0)


def _parse_jsonl(buf: io.BytesIO, **kwargs) -> pd.DataFrame:
    return pd.read_json(buf, lines=True, dtype=False, convert_dates=False)


_PARSERS = {
    "csv": _parse_csv,
    "excel": _parse_excel,
    "json": _parse_json,
    "jsonl": _parse_jsonl,
}


def parse_file(
    content: bytes,
    filename: str,
    *,
    sheet_name: Optional[str | int] = None,
) -> pd.DataFrame:
    """
    Parse a file into a DataFrame.

    Raises ValueError if the file type is unsupported or parsing fails.
    An empty file yields an empty DataFrame (an empty snapshot is valid).
    """
    ext = Path(filename).suffix.lower()
    fmt = _EXT_MAP.get(ext)
    if not fmt:
        raise ValueError(
            f"Unsupported file type '{ext}'. "
            f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    parser = _PARSERS[fmt]
    kwargs = {}
    if sheet_name is not None and fmt == "excel":
        kwargs["sheet_name"] = sheet_name

    if not content.strip():
        logger.info(f"Parsed {filename}: empty")
        return pd.DataFrame()

    try:
        buf = io.BytesIO(content)
        df = parser(buf, **kwargs)
    except Exception as e:
        raise ValueError(f"Failed to parse {filename}: {e}") from e

    df = _normalise_columns(df)
    logger.info(f"Parsed {filename}: {len(df)} rows × {len(df.columns)} cols")
    return df


def dataframe_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Plain-Python rows; NaN becomes None and datetimes become ISO strings."""
    if df.empty:
        return []
    rows = json.loads(df.to_json(orient="records", date_format="iso"))
    return [{k: v for k, v in row.items() if v is not None} for row in rows]


def load_sales(path: str | Path) -> List[SaleRecord]:
    path = Path(path)
    df = parse_file(path.read_bytes(), path.name)
    return parse_sales(dataframe_to_rows(df))


def load_products(path: str | Path) -> List[ProductRecord]:
    path = Path(path)
    df = parse_file(path.read_bytes(), path.name)
    return parse_products(dataframe_to_rows(df))
