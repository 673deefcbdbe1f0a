from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from io import BytesIO
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd

"""Workbook reader for the enrollment import.

- Only the first sheet is read; its first row is the header.
- Unset cells become "" (never None / NaN). Fully empty rows are dropped.
- Any decoding failure is fatal for the whole import (SpreadsheetParseError),
  raised before anything is written.

Date cells follow the spreadsheet serial convention (serial 0 ~ 1899-12-30).
25569 is the serial of 1970-01-01, so unix_days = serial - 25569.
"""

__all__ = [
    "SpreadsheetParseError",
    "SheetData",
    "read_workbook",
    "excel_serial_to_iso",
    "cell_to_iso",
    "is_missing_cell",
]

EXCEL_UNIX_EPOCH_SERIAL = 25569
SECONDS_PER_DAY = 86400
_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
ISO_FMT = "%Y-%m-%dT%H:%M:%SZ"

WorkbookSource = Path | str | bytes | bytearray | BinaryIO


class SpreadsheetParseError(Exception):
    """Raised when the uploaded file cannot be decoded as a workbook."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]  # RawRow: header -> cell ("" when unset)
    row_numbers: list[int] = field(default_factory=list)  # spreadsheet row of each entry in rows


def read_workbook(source: WorkbookSource) -> SheetData:
    """Read the first sheet of a workbook into raw row mappings.

    Parameters
    ----------
    source: path, raw bytes or a binary file object
    """
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(bytes(source))
    try:
        with pd.ExcelFile(source, engine="openpyxl") as xls:
            if not xls.sheet_names:
                raise SpreadsheetParseError("workbook has no sheets")
            sheet_name = str(xls.sheet_names[0])
            df = xls.parse(xls.sheet_names[0], header=0, dtype=object)
    except SpreadsheetParseError:
        raise
    except Exception as e:
        raise SpreadsheetParseError(f"cannot read workbook: {e}") from e

    columns = [str(c) for c in df.columns]
    rows: list[dict[str, Any]] = []
    row_numbers: list[int] = []
    for idx, raw in df.iterrows():
        if raw.isna().all():
            continue
        row_dict: dict[str, Any] = {}
        for col, val in zip(columns, raw.tolist(), strict=False):
            row_dict[col] = "" if is_missing_cell(val) else val
        rows.append(row_dict)
        # header is spreadsheet row 1, DataFrame index 0 is row 2
        row_numbers.append(int(idx) + 2)
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows, row_numbers=row_numbers)


def is_missing_cell(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def excel_serial_to_iso(serial: Any) -> str:
    """Convert a spreadsheet serial date to an ISO-8601 UTC midnight instant.

    0, "" and None mean "no date" and return "". So does a serial outside the
    years 1-9999 (e.g. 20250115 typed into a date column).

    >>> excel_serial_to_iso(25569)
    '1970-01-01T00:00:00Z'
    """
    if serial is None or isinstance(serial, bool):
        return ""
    try:
        value = float(serial)
    except (TypeError, ValueError):
        return ""
    if not math.isfinite(value) or value == 0:
        return ""
    unix_days = math.floor(value - EXCEL_UNIX_EPOCH_SERIAL)
    try:
        instant = _UNIX_EPOCH + timedelta(seconds=unix_days * SECONDS_PER_DAY)
    except OverflowError:
        return ""
    return instant.strftime(ISO_FMT)


def cell_to_iso(value: Any) -> str:
    """Convert any date-ish cell to an ISO-8601 UTC midnight instant, or "".

    openpyxl hands date-formatted cells over as datetime objects while plain
    numeric cells keep the serial, so both are accepted. Text is parsed
    day-first (dd/mm/yyyy).
    """
    if is_missing_cell(value) or isinstance(value, bool):
        return ""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return f"{value.date().isoformat()}T00:00:00Z"
    if isinstance(value, date):
        return f"{value.isoformat()}T00:00:00Z"
    if isinstance(value, numbers.Real):
        return excel_serial_to_iso(value)
    text = str(value).strip()
    if not text or text == "0":
        return ""
    try:
        return excel_serial_to_iso(float(text)) if _looks_numeric(text) else _parse_text_date(text)
    except (ValueError, OverflowError):
        return ""


def _looks_numeric(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def _parse_text_date(text: str) -> str:
    ts = pd.to_datetime(text, dayfirst=True, errors="coerce")
    if pd.isna(ts):
        return ""
    return cell_to_iso(ts.to_pydatetime())
