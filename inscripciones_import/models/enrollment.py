from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Enrollment group models built from the spreadsheet.

EnrollmentGroup and ParticipantDraft only live for the duration of one import.
They carry display names (company, executive, modality) until the entity
creator swaps them for the codes resolved by the reconciler.
"""

__all__ = [
    "ParticipantDraft",
    "EnrollmentGroup",
]


@dataclass(frozen=True)
class ParticipantDraft:
    """A student row waiting for its parent Inscripcion to be created."""
    nombres: str
    apellidos: str
    rut: str
    mail: str
    telefono: str
    valor_cobrado: float | None
    franquicia_porcentaje: float | None  # sheet fraction * 100
    observacion: str
    row_number: int = -1

    @property
    def full_name(self) -> str:
        return f"{self.nombres} {self.apellidos}"

    @property
    def label(self) -> str:
        return f"{self.full_name} (RUT: {self.rut})"

    def to_payload(self, numero_inscripcion: int) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "numeroInscripcion": numero_inscripcion,
            "nombres": self.nombres,
            "apellidos": self.apellidos,
            "rut": self.rut,
            "mail": self.mail,
            "telefono": self.telefono,
            "costoOtic": None,
            "costoEmpresa": None,
            "estadoInscripcion": self.observacion,
            "observacion": self.observacion,
        }
        if self.valor_cobrado is not None:
            payload["valorCobrado"] = self.valor_cobrado
        if self.franquicia_porcentaje is not None:
            payload["franquiciaPorcentaje"] = self.franquicia_porcentaje
        return payload


@dataclass
class EnrollmentGroup:
    """All rows sharing one Ficha.

    The scalar template comes from the first row seen for the ficha. The
    declared headcount is always len(participants).
    """
    ficha: str
    codigo_curso: str
    id_moodle: str
    nombre_curso: str
    empresa: str
    ejecutivo: str
    modalidad: str
    codigo_sence: str
    id_sence: str
    orden_compra: str
    correlativo: int
    inicio: str  # ISO8601 instant
    termino: str | None
    status_alumnos: str = "Pendiente"
    participants: list[ParticipantDraft] = field(default_factory=list)

    @property
    def headcount(self) -> int:
        return len(self.participants)

    def add_participant(self, draft: ParticipantDraft) -> None:
        self.participants.append(draft)

    def to_payload(self, *, empresa: str, ejecutivo: str, modalidad: str) -> dict[str, Any]:
        """Build the Inscripcion create body with reference values substituted.

        numeroInscripcion is never sent; the server assigns it.
        """
        payload: dict[str, Any] = {
            "ficha": self.ficha,
            "correlativo": self.correlativo,
            "codigoCurso": self.codigo_curso,
            "empresa": empresa,
            "codigoSence": self.codigo_sence,
            "ordenCompra": self.orden_compra,
            "idSence": self.id_sence,
            "idMoodle": self.id_moodle,
            "nombreCurso": self.nombre_curso,
            "modalidad": modalidad,
            "inicio": self.inicio,
            "ejecutivo": ejecutivo,
            "numAlumnosInscritos": self.headcount,
            "statusAlumnos": self.status_alumnos,
        }
        if self.termino:
            payload["termino"] = self.termino
        return payload
