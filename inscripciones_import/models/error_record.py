from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ImportErrorRecord model for per-item import errors.

One record is produced for every non-fatal failure captured during an import
(catalog entry, enrollment or participant creation). Records are kept in the
ImportResult in append order and written to the JSON Lines error log.

Error types (UPPER_SNAKE):
- REFERENCE_CATALOG_ERROR: a catalog list() call failed
- REFERENCE_CREATION_ERROR: one catalog entry could not be created
- ENROLLMENT_CREATION_ERROR: an Inscripcion create failed (group abandoned)
- PARTICIPANT_CREATION_ERROR: one Participante create failed
- EMPTY_FICHA: a row without Ficha was skipped (only when configured)
"""

__all__ = [
    "ImportErrorRecord",
    "REFERENCE_CATALOG_ERROR",
    "REFERENCE_CREATION_ERROR",
    "ENROLLMENT_CREATION_ERROR",
    "PARTICIPANT_CREATION_ERROR",
    "EMPTY_FICHA",
]

REFERENCE_CATALOG_ERROR = "REFERENCE_CATALOG_ERROR"
REFERENCE_CREATION_ERROR = "REFERENCE_CREATION_ERROR"
ENROLLMENT_CREATION_ERROR = "ENROLLMENT_CREATION_ERROR"
PARTICIPANT_CREATION_ERROR = "PARTICIPANT_CREATION_ERROR"
EMPTY_FICHA = "EMPTY_FICHA"


@dataclass(frozen=True)
class ImportErrorRecord:
    """Structured error record for the import result and JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        error_type: Error classification in UPPER_SNAKE_CASE format
        inscripcion_id: Server-assigned enrollment number, None when no
            enrollment exists yet (catalog or enrollment failures)
        ficha: Ficha (correlation key) the error belongs to
        participant_label: Human readable subject, e.g. "Ana Pérez (RUT: 1-9)"
        message: Error message returned by the collaborator
    """
    timestamp: str
    error_type: str
    inscripcion_id: int | None
    ficha: str
    participant_label: str
    message: str

    @staticmethod
    def create(
        error_type: str,
        ficha: str,
        participant_label: str,
        message: str,
        inscripcion_id: int | None = None,
    ) -> ImportErrorRecord:
        """Create a new ImportErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ImportErrorRecord(
            timestamp=ts,
            error_type=error_type,
            inscripcion_id=inscripcion_id,
            ficha=ficha,
            participant_label=participant_label,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to JSON Lines format (exactly the dataclass keys)."""
        return json.dumps(asdict(self), ensure_ascii=False)
