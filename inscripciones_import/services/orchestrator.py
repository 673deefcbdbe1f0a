from __future__ import annotations

import logging

from ..api.client import CollaboratorStore
from ..excel.normalizer import normalize_rows
from ..excel.reader import WorkbookSource, read_workbook
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImportConfig
from ..models.error_record import EMPTY_FICHA, ImportErrorRecord
from ..models.import_result import ImportResult, ResultAccumulator
from .entity_creator import create_entities
from .grouping import group_rows
from .reconciliation import ModalityClassifier, classify_modality, reconcile_references
from .run_control import CancellationToken, ImportCancelled, check_cancelled, import_lock

"""Import orchestration.

Phases run strictly in sequence, each consuming the complete output of the
previous one:

    P1 read workbook -> P2 normalize -> P3 group by Ficha
    -> P4 reconcile catalogs -> P5 create entities -> P6 build result

Only a workbook that cannot be decoded (P1) raises; it does so before any
write. Every later failure is captured in the ImportResult, which is always
returned. There is no rollback and no retry.
"""

__all__ = [
    "run_import",
]

logger = logging.getLogger(__name__)


def run_import(
    source: WorkbookSource,
    store: CollaboratorStore,
    config: ImportConfig,
    *,
    cancel_token: CancellationToken | None = None,
    error_log: ErrorLogBuffer | None = None,
    modality_classifier: ModalityClassifier = classify_modality,
    use_lock: bool = True,
) -> ImportResult:
    """Import one enrollment spreadsheet.

    Args:
        source: workbook path, bytes or binary file object
        store: collaborator resources (catalogs, enrollments, participants)
        config: import configuration (defaults, lock file, empty-ficha policy)
        cancel_token: checked between phases and before every collaborator call
        error_log: when given, receives every error record and is flushed once
        modality_classifier: derives the facet flags of new modalities
        use_lock: hold config.lock_file for the whole run

    Returns:
        ImportResult with creation counts and per-item error records

    Raises:
        SpreadsheetParseError: the file is not a readable workbook
        ImportInProgressError: another import holds the lock file
    """
    if use_lock:
        with import_lock(config.lock_path):
            result = _run_phases(source, store, config, cancel_token, modality_classifier)
    else:
        result = _run_phases(source, store, config, cancel_token, modality_classifier)

    if error_log is not None and result.errors:
        error_log.extend(result.errors)
        try:
            path = error_log.flush()
            logger.info("error log written: %s (%d records)", path, len(result.errors))
        except OSError as e:
            # the result already carries every record
            logger.warning("could not write error log: %s", e)
    return result


def _run_phases(
    source: WorkbookSource,
    store: CollaboratorStore,
    config: ImportConfig,
    cancel_token: CancellationToken | None,
    modality_classifier: ModalityClassifier,
) -> ImportResult:
    acc = ResultAccumulator()

    sheet = read_workbook(source)
    acc.total_rows = len(sheet.rows)
    logger.info("sheet=%s rows=%d", sheet.sheet_name, len(sheet.rows))

    outcome = normalize_rows(sheet.rows, sheet.row_numbers)
    acc.skipped_rows = len(outcome.skipped_row_numbers)
    if config.report_empty_ficha:
        for row_number in outcome.skipped_row_numbers:
            acc.add_error(ImportErrorRecord.create(
                error_type=EMPTY_FICHA,
                ficha="",
                participant_label=f"Fila {row_number}",
                message="Ficha vacía, fila omitida",
            ))

    groups = group_rows(outcome.rows, config.defaults)
    acc.groups = len(groups)
    logger.info(
        "fichas=%d participantes=%d skipped_rows=%d",
        len(groups),
        sum(g.headcount for g in groups),
        acc.skipped_rows,
    )

    try:
        check_cancelled(cancel_token)
        lookups = reconcile_references(
            groups,
            store,
            acc,
            defaults=config.defaults,
            modality_classifier=modality_classifier,
            cancel_token=cancel_token,
        )
        check_cancelled(cancel_token)
        create_entities(groups, lookups, store, acc, cancel_token)
    except ImportCancelled:
        logger.warning(
            "import cancelled after inscripciones=%d participantes=%d",
            acc.inscripciones_creadas,
            acc.participantes_creados,
        )
        acc.cancelled = True

    return acc.build()
