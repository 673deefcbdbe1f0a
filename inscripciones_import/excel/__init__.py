from .normalizer import NormalizationOutcome, normalize_rows, normalize_value
from .reader import (
    SheetData,
    SpreadsheetParseError,
    cell_to_iso,
    excel_serial_to_iso,
    read_workbook,
)

__all__ = [
    "NormalizationOutcome",
    "SheetData",
    "SpreadsheetParseError",
    "cell_to_iso",
    "excel_serial_to_iso",
    "normalize_rows",
    "normalize_value",
    "read_workbook",
]
