"""
Export of view results
======================

CSV is great for spreadsheets; JSON is great for programs and preserves
field names. Both writers take the rows returned by any report view.
Dates are written as ISO strings; None becomes an empty CSV cell or JSON null.
"""

from __future__ import annotations
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union
import csv
import json
import logging
import os

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def _cell(v: Any) -> Any:
    if isinstance(v, date):
        return v.isoformat()
    return v


def export_csv(rows: Sequence[Row], path: Union[str, Path]) -> str:
    """Write rows to CSV, header taken from the first row's keys."""
    path = str(path)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        if rows:
            w = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            w.writeheader()
            for r in rows:
                w.writerow({k: ("" if v is None else _cell(v)) for k, v in r.items()})
    logger.info("Exported %d rows to %s", len(rows), path)
    return path


def export_json(rows: Sequence[Row], path: Union[str, Path]) -> str:
    """Write rows to a JSON array of objects."""
    path = str(path)
    payload: List[Row] = [{k: _cell(v) for k, v in r.items()} for r in rows]
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    logger.info("Exported %d rows to %s", len(rows), path)
    return path
