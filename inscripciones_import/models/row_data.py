from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""NormalizedRow model for the enrollment spreadsheet importer.

A NormalizedRow is one spreadsheet row after sentinel cleanup: every value is a
trimmed string and "" means "value not provided".
"""

__all__ = [
    "NormalizedRow",
]


@dataclass(frozen=True)
class NormalizedRow:
    """Logical representation of a single row after normalization.

    row_number is the spreadsheet row (header = row 1, first data row = 2).
    """
    row_number: int
    values: dict[str, str]  # column header -> trimmed string ("" = not provided)
    raw_values: dict[str, Any] | None = None  # original cells, needed for date serials

    def get(self, column: str) -> str:
        return self.values.get(column, "")

    def raw(self, column: str) -> Any:
        if self.raw_values is None:
            return None
        return self.raw_values.get(column)
