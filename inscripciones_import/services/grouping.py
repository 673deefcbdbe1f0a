from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from ..excel import columns as col
from ..excel.reader import ISO_FMT, cell_to_iso
from ..models.config_models import ImportDefaults
from ..models.enrollment import EnrollmentGroup, ParticipantDraft
from ..models.row_data import NormalizedRow

"""Group normalized rows into enrollment groups keyed by Ficha.

A single linear scan in file order. The first row of a ficha seeds the
group's scalar template (with business defaults); every row, the first one
included, appends one ParticipantDraft. Headcount is len(participants).
"""

__all__ = [
    "group_rows",
    "build_participant",
]

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(UTC).strftime(ISO_FMT)


def _to_float(text: str, column: str, row_number: int) -> float | None:
    if not text:
        return None
    try:
        value = float(text.replace(",", "."))
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        logger.warning("row=%d column=%s not numeric: %r (ignored)", row_number, column, text)
        return None
    return value


def _to_int(text: str) -> int:
    if not text:
        return 0
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return 0


def _date_cell(row: NormalizedRow, column: str) -> str:
    raw = row.raw(column)
    iso = cell_to_iso(raw if raw is not None else row.get(column))
    if not iso and row.get(column):
        logger.warning("row=%d column=%s not a date: %r (ignored)", row.row_number, column, row.get(column))
    return iso


def build_participant(row: NormalizedRow) -> ParticipantDraft:
    franquicia = _to_float(row.get(col.FRANQUICIA), col.FRANQUICIA, row.row_number)
    observacion = row.get(col.OBSERVACIONES)
    return ParticipantDraft(
        nombres=row.get(col.NOMBRES),
        apellidos=row.get(col.APELLIDOS),
        rut=row.get(col.RUT),
        mail=row.get(col.CORREO),
        telefono=row.get(col.TELEFONO),
        valor_cobrado=_to_float(row.get(col.VALOR_COBRADO), col.VALOR_COBRADO, row.row_number),
        # sheet stores a fraction (0.5 -> 50 %)
        franquicia_porcentaje=round(franquicia * 100, 6) if franquicia is not None else None,
        observacion=observacion,
        row_number=row.row_number,
    )


def _seed_group(
    row: NormalizedRow,
    defaults: ImportDefaults,
    now: Callable[[], str],
) -> EnrollmentGroup:
    id_moodle = row.get(col.ID_MOODLE) or "0"
    inicio = _date_cell(row, col.FECHA_INICIO) or now()
    termino = _date_cell(row, col.FECHA_TERMINO) or None
    return EnrollmentGroup(
        ficha=row.get(col.FICHA),
        codigo_curso=id_moodle,
        id_moodle=id_moodle,
        nombre_curso=row.get(col.CURSO),
        empresa=row.get(col.EMPRESA) or defaults.empresa,
        ejecutivo=row.get(col.EJECUTIVO) or defaults.ejecutivo,
        modalidad=row.get(col.MODALIDAD) or defaults.modalidad,
        codigo_sence=row.get(col.CODIGO_SENCE),
        id_sence=row.get(col.ID_SENCE),
        orden_compra=row.get(col.ORDEN_COMPRA),
        correlativo=_to_int(row.get(col.CORRELATIVO)),
        inicio=inicio,
        termino=termino,
        status_alumnos=defaults.status_alumnos,
    )


def group_rows(
    rows: Iterable[NormalizedRow],
    defaults: ImportDefaults | None = None,
    *,
    now: Callable[[], str] = _utc_now_iso,
) -> list[EnrollmentGroup]:
    """Group rows by Ficha, preserving first-seen order.

    Rows without a Ficha are expected to have been dropped by the normalizer;
    any that slip through are ignored here as well.
    """
    defaults = defaults or ImportDefaults()
    groups: dict[str, EnrollmentGroup] = {}
    for row in rows:
        ficha = row.get(col.FICHA)
        if not ficha:
            continue
        group = groups.get(ficha)
        if group is None:
            group = _seed_group(row, defaults, now)
            groups[ficha] = group
        group.add_participant(build_participant(row))
    logger.debug("grouped fichas=%d", len(groups))
    return list(groups.values())
