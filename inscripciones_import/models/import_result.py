from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from .error_record import ImportErrorRecord

"""Import result models.

ResultAccumulator is threaded through reconciliation and entity creation and is
the only mutable piece of run state. build() freezes it into the ImportResult
handed back to the caller.
"""

__all__ = [
    "ImportResult",
    "ResultAccumulator",
]


@dataclass(frozen=True)
class ImportResult:
    """Terminal artifact of one import run. Nothing mutates it after build()."""
    empresas_creadas: int
    ejecutivos_creados: int
    modalidades_creadas: int
    inscripciones_creadas: int
    participantes_creados: int
    errors: tuple[ImportErrorRecord, ...]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    total_rows: int = 0  # data rows read from the sheet
    skipped_rows: int = 0  # rows dropped for an empty Ficha
    groups: int = 0  # distinct fichas
    cancelled: bool = False

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class ResultAccumulator:
    """Running counters plus an append-only error list."""

    def __init__(self) -> None:
        self.start_time = datetime.now(UTC)
        self.empresas_creadas = 0
        self.ejecutivos_creados = 0
        self.modalidades_creadas = 0
        self.inscripciones_creadas = 0
        self.participantes_creados = 0
        self.total_rows = 0
        self.skipped_rows = 0
        self.groups = 0
        self.cancelled = False
        self._errors: list[ImportErrorRecord] = []

    @property
    def errors(self) -> tuple[ImportErrorRecord, ...]:
        return tuple(self._errors)

    def add_error(self, record: ImportErrorRecord) -> None:
        self._errors.append(record)

    def increment(self, counter: str, amount: int = 1) -> None:
        """Increment one of the creation counters by name."""
        if counter not in _COUNTERS:
            raise ValueError(f"unknown counter: {counter}")
        setattr(self, counter, getattr(self, counter) + amount)

    def build(self) -> ImportResult:
        end_time = datetime.now(UTC)
        return ImportResult(
            empresas_creadas=self.empresas_creadas,
            ejecutivos_creados=self.ejecutivos_creados,
            modalidades_creadas=self.modalidades_creadas,
            inscripciones_creadas=self.inscripciones_creadas,
            participantes_creados=self.participantes_creados,
            errors=self.errors,
            start_time=self.start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - self.start_time).total_seconds(),
            total_rows=self.total_rows,
            skipped_rows=self.skipped_rows,
            groups=self.groups,
            cancelled=self.cancelled,
        )


_COUNTERS = frozenset({
    "empresas_creadas",
    "ejecutivos_creados",
    "modalidades_creadas",
    "inscripciones_creadas",
    "participantes_creados",
})
