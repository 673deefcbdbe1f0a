from __future__ import annotations

import logging
from collections.abc import Sequence

from ..api.client import CollaboratorStore
from ..models.enrollment import EnrollmentGroup
from ..models.error_record import (
    ENROLLMENT_CREATION_ERROR,
    PARTICIPANT_CREATION_ERROR,
    ImportErrorRecord,
)
from ..models.import_result import ResultAccumulator
from .progress import ProgressTracker
from .reconciliation import CatalogLookup, ReferenceLookups
from .run_control import CancellationToken, check_cancelled

"""Entity creation: one Inscripcion per group, then its participants.

- Display names are replaced by the resolved codes (as strings). An unresolved
  name is sent as text and only logged as a warning.
- A failed Inscripcion create abandons the group: one error record, no
  participant is attempted.
- Participant creates are isolated from each other.
- Nothing is rolled back: a created Inscripcion stays even if all its
  participants fail.
"""

__all__ = [
    "resolve_reference",
    "create_group",
    "create_entities",
]

logger = logging.getLogger(__name__)


def resolve_reference(name: str, lookup: CatalogLookup, label: str, ficha: str) -> str:
    """Return the catalog code for name as a string, or name itself when unresolved."""
    code = lookup.get(name) if name else None
    if code is not None:
        return str(code)
    logger.warning("ficha=%s %s not resolved: %r (sent as text)", ficha, label, name)
    return name


def create_group(
    group: EnrollmentGroup,
    lookups: ReferenceLookups,
    store: CollaboratorStore,
    acc: ResultAccumulator,
    cancel_token: CancellationToken | None = None,
) -> bool:
    """Create the Inscripcion of one group and its participants.

    Returns True when the Inscripcion was created and carries an enrollment
    number (participants may still have failed individually).
    """
    payload = group.to_payload(
        empresa=resolve_reference(group.empresa, lookups.empresas, "empresa", group.ficha),
        ejecutivo=resolve_reference(group.ejecutivo, lookups.ejecutivos, "ejecutivo", group.ficha),
        modalidad=resolve_reference(group.modalidad, lookups.modalidades, "modalidad", group.ficha),
    )
    skipped_label = f"Inscripción completa ({group.headcount} participantes)"

    check_cancelled(cancel_token)
    try:
        created = store.inscripciones.create(payload)
    except Exception as e:
        logger.error("ficha=%s inscripcion create failed: %s", group.ficha, e)
        acc.add_error(ImportErrorRecord.create(
            error_type=ENROLLMENT_CREATION_ERROR,
            ficha=group.ficha,
            participant_label=skipped_label,
            message=str(e),
        ))
        return False
    acc.increment("inscripciones_creadas")

    numero = created.get("numeroInscripcion")
    if numero is None:
        logger.error("ficha=%s inscripcion created without numeroInscripcion", group.ficha)
        acc.add_error(ImportErrorRecord.create(
            error_type=ENROLLMENT_CREATION_ERROR,
            ficha=group.ficha,
            participant_label=skipped_label,
            message="la respuesta no incluye numeroInscripcion",
        ))
        return False
    logger.debug("ficha=%s numeroInscripcion=%s headcount=%d", group.ficha, numero, group.headcount)

    for draft in group.participants:
        check_cancelled(cancel_token)
        try:
            store.participantes.create(draft.to_payload(numero))
        except Exception as e:
            logger.warning("ficha=%s participante %s failed: %s", group.ficha, draft.label, e)
            acc.add_error(ImportErrorRecord.create(
                error_type=PARTICIPANT_CREATION_ERROR,
                ficha=group.ficha,
                participant_label=draft.label,
                message=str(e),
                inscripcion_id=numero,
            ))
            continue
        acc.increment("participantes_creados")
    return True


def create_entities(
    groups: Sequence[EnrollmentGroup],
    lookups: ReferenceLookups,
    store: CollaboratorStore,
    acc: ResultAccumulator,
    cancel_token: CancellationToken | None = None,
) -> None:
    """Create every group in order, tracking progress on a TTY."""
    with ProgressTracker(len(groups)) as progress:
        for group in groups:
            progress.start_group(group.ficha)
            create_group(group, lookups, store, acc, cancel_token)
            progress.set_postfix(
                inscripciones=acc.inscripciones_creadas,
                participantes=acc.participantes_creados,
                errores=len(acc.errors),
            )
            progress.finish_group()
