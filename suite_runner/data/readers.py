"""File readers for data sources.

Tabular readers return a list of row dicts (one per spreadsheet row,
keyed by the header row).  Structured readers return the parsed
document as-is.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pandas as pd
import yaml

# pandas engines by spreadsheet extension
ENGINE_MAP = {"xlsx": "openpyxl", "xlsm": "openpyxl"}


def _records(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a DataFrame to row dicts with empty cells as None."""
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict(orient="records")


def read_excel(path: Path, sheet: str | int | None = None) -> list[dict[str, Any]]:
    """Read one sheet of a spreadsheet.

    Args:
        path: Spreadsheet file.
        sheet: Sheet name or index; the first sheet when None.

    Raises:
        ValueError: If the sheet does not exist.
    """
    engine = ENGINE_MAP.get(path.suffix.lstrip(".").lower(), "openpyxl")
    frame = pd.read_excel(
        path, sheet_name=0 if sheet is None else sheet, engine=engine
    )
    return _records(frame)


def read_csv(path: Path, sheet: str | int | None = None) -> list[dict[str, Any]]:
    return _records(pd.read_csv(path))


def read_json(path: Path, sheet: str | int | None = None) -> Any:
    """Read a JSON document, optionally selecting one top-level key."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if sheet is not None:
        return data[sheet]
    return data


def read_yaml(path: Path, sheet: str | int | None = None) -> Any:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if sheet is not None:
        return data[sheet]
    return data


READERS: dict[str, Callable[[Path, str | int | None], Any]] = {
    "excel": read_excel,
    "csv": read_csv,
    "json": read_json,
    "yaml": read_yaml,
}
