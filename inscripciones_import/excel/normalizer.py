from __future__ import annotations

import logging
import numbers
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.row_data import NormalizedRow
from . import columns
from .reader import is_missing_cell

"""Row normalization.

Every cell becomes a trimmed string. None, NaN, "", numeric 0 and "0" all
collapse to "" ("value not provided"). Business defaults are NOT applied here;
the grouping stage applies them when it seeds an enrollment group.
"""

__all__ = [
    "NormalizationOutcome",
    "normalize_value",
    "normalize_rows",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizationOutcome:
    rows: list[NormalizedRow]  # rows with a non-empty key
    skipped_row_numbers: list[int] = field(default_factory=list)  # rows dropped for an empty key


def normalize_value(value: Any) -> str:
    if is_missing_cell(value) or isinstance(value, bool):
        return ""
    if isinstance(value, numbers.Real):
        if value == 0:
            return ""
        # 12345678.0 -> "12345678" (RUT / IDs typed as numbers)
        if isinstance(value, numbers.Integral) or float(value).is_integer():
            return str(int(value))
        return str(value)
    text = str(value).strip()
    if text == "0":
        return ""
    return text


def normalize_rows(
    raw_rows: Sequence[dict[str, Any]],
    row_numbers: Sequence[int] | None = None,
    *,
    key_column: str = columns.FICHA,
) -> NormalizationOutcome:
    """Normalize raw rows and drop the ones without a correlation key.

    Parameters
    ----------
    raw_rows: RawRow mappings in file order
    row_numbers: spreadsheet row number of each raw row (default: index + 2)
    key_column: header of the correlation key
    """
    rows: list[NormalizedRow] = []
    skipped: list[int] = []
    for idx, raw in enumerate(raw_rows):
        row_number = row_numbers[idx] if row_numbers is not None else idx + 2
        values = {str(col): normalize_value(val) for col, val in raw.items()}
        if not values.get(key_column, ""):
            logger.warning("row=%d empty %s, row skipped", row_number, key_column)
            skipped.append(row_number)
            continue
        rows.append(NormalizedRow(row_number=row_number, values=values, raw_values=dict(raw)))
    logger.debug("normalized rows=%d skipped=%d", len(rows), len(skipped))
    return NormalizationOutcome(rows=rows, skipped_row_numbers=skipped)
