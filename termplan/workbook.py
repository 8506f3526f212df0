"""
Reading the timetable workbook (.xlsx -> row dicts).

- The first row holds the column headers
- Every following non-empty row becomes one dict {header: value}
- Formula cells give their cached result
- Time columns are turned into 'HH:MM' text, other dates stay date objects

Structuring the rows into courses is done by termplan.catalog.
"""

from __future__ import annotations

import zipfile
from datetime import datetime, time
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from termplan.errors import WorkbookError


def _cell_value(header: str, value: Any) -> Any:
    """
    Convert one cell the way the catalog expects it.
    """
    if isinstance(value, (datetime, time)) and "TIME" in header.upper():
        return f"{value.hour:02d}:{value.minute:02d}"
    if isinstance(value, datetime):
        return value
    # whole numbers come back as floats from some exports (section '1.0')
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _sheet_rows(rows: Any) -> list[dict[str, Any]]:
    headers: list[str] = []
    out: list[dict[str, Any]] = []

    for i, values in enumerate(rows):
        if i == 0:
            headers = ["" if v is None else str(v) for v in values]
            continue

        obj: dict[str, Any] = {}
        for header, value in zip(headers, values):
            if not header or value is None:
                continue
            obj[header] = _cell_value(header, value)

        # skip blank lines at the end of the sheet
        if obj:
            out.append(obj)

    return out


def read_workbook_rows(path: str | Path, sheet_index: int = 0) -> list[dict[str, Any]]:
    """
    Read one sheet of an .xlsx workbook into a list of row dicts.
    Raises WorkbookError when the file or sheet cannot be read.
    """
    wb_path = Path(path)
    if not wb_path.exists():
        raise WorkbookError("Workbook not found", str(wb_path))

    try:
        wb = load_workbook(wb_path, read_only=True, data_only=True)
    except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        raise WorkbookError(f"Cannot open workbook: {exc}", str(wb_path)) from exc

    try:
        sheets = wb.worksheets
        if not 0 <= sheet_index < len(sheets):
            raise WorkbookError(f"Sheet at index {sheet_index} not found", str(wb_path))
        return _sheet_rows(sheets[sheet_index].iter_rows(values_only=True))
    finally:
        wb.close()
