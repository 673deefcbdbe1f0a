from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..api.client import CatalogResource, CollaboratorStore
from ..models.config_models import ImportDefaults
from ..models.enrollment import EnrollmentGroup
from ..models.error_record import (
    REFERENCE_CATALOG_ERROR,
    REFERENCE_CREATION_ERROR,
    ImportErrorRecord,
)
from ..models.import_result import ResultAccumulator
from .run_control import CancellationToken, check_cancelled

"""Reference reconciliation: free-text names -> catalog codes.

One generic resolve-or-create routine serves the three catalogs (companies,
executives, modalities). Per catalog:

1. distinct non-empty names referenced by the groups
2. list() the catalog
3. create() every name not present (case-sensitive exact match); a failed
   create is recorded and skipped, the name stays unresolved
4. list() again after creating; codes come only from this listing, never from
   the create() echo
5. build an immutable name -> code map for this run

Catalogs are processed Company -> Executive -> Modality.
"""

__all__ = [
    "CatalogLookup",
    "CatalogSpec",
    "ModalityFacets",
    "ReferenceLookups",
    "classify_modality",
    "empresa_catalog",
    "ejecutivo_catalog",
    "modalidad_catalog",
    "referenced_names",
    "reconcile_catalog",
    "reconcile_references",
]

logger = logging.getLogger(__name__)

CatalogLookup = Mapping[str, int]

_EMPTY_LOOKUP: CatalogLookup = MappingProxyType({})


@dataclass(frozen=True)
class ModalityFacets:
    sincronico: bool
    asincronico: bool


ModalityClassifier = Callable[[str], ModalityFacets]


def classify_modality(name: str) -> ModalityFacets:
    """Derive the sincronico / asincronico flags from a modality name.

    Inherited substring rule, kept as is:
    - sincronico: "sincrón" (or unaccented "sincr") present and "asincr" absent
    - asincronico: "asincr", "e-learning" or "elearning" present
    """
    lower = name.lower()
    is_async = "asincr" in lower
    # "sincr" also covers "sincrón"
    sincronico = "sincr" in lower and not is_async
    asincronico = is_async or "e-learning" in lower or "elearning" in lower
    return ModalityFacets(sincronico=sincronico, asincronico=asincronico)


@dataclass(frozen=True)
class CatalogSpec:
    """Describes how one catalog is matched by name and how entries are created."""
    label: str  # human label used in error records
    counter: str  # ResultAccumulator counter incremented per created entry
    display_name: Callable[[dict[str, Any]], str]
    build_payload: Callable[[str], dict[str, Any]]


def _nombre(entity: dict[str, Any]) -> str:
    return str(entity.get("nombre") or "")


def _ejecutivo_nombre(entity: dict[str, Any]) -> str:
    return f"{entity.get('nombres') or ''} {entity.get('apellidos') or ''}".strip()


def empresa_catalog(status: str = "Activo") -> CatalogSpec:
    return CatalogSpec(
        label="Empresa",
        counter="empresas_creadas",
        display_name=_nombre,
        build_payload=lambda name: {"nombre": name, "status": status},
    )


def ejecutivo_catalog(status: str = "Activo") -> CatalogSpec:
    def build(name: str) -> dict[str, Any]:
        # first token -> nombres, rest -> apellidos; "nombres apellidos" rebuilds the name
        parts = name.split(" ")
        return {
            "nombres": parts[0] or name,
            "apellidos": " ".join(parts[1:]),
            "status": status,
        }

    return CatalogSpec(
        label="Ejecutivo",
        counter="ejecutivos_creados",
        display_name=_ejecutivo_nombre,
        build_payload=build,
    )


def modalidad_catalog(classifier: ModalityClassifier = classify_modality) -> CatalogSpec:
    def build(name: str) -> dict[str, Any]:
        facets = classifier(name)
        return {
            "nombre": name,
            "sincronico": facets.sincronico,
            "asincronico": facets.asincronico,
        }

    return CatalogSpec(
        label="Modalidad",
        counter="modalidades_creadas",
        display_name=_nombre,
        build_payload=build,
    )


@dataclass(frozen=True)
class ReferenceLookups:
    """Run-local name -> code maps handed to the entity creator."""
    empresas: CatalogLookup = field(default_factory=lambda: _EMPTY_LOOKUP)
    ejecutivos: CatalogLookup = field(default_factory=lambda: _EMPTY_LOOKUP)
    modalidades: CatalogLookup = field(default_factory=lambda: _EMPTY_LOOKUP)


def referenced_names(groups: Iterable[EnrollmentGroup], attribute: str) -> dict[str, list[str]]:
    """Distinct non-empty names (first-seen order) -> fichas referencing them."""
    names: dict[str, list[str]] = {}
    for group in groups:
        name = getattr(group, attribute)
        if not name:
            continue
        names.setdefault(name, []).append(group.ficha)
    return names


def _build_lookup(spec: CatalogSpec, entities: Sequence[dict[str, Any]]) -> CatalogLookup:
    lookup: dict[str, int] = {}
    for entity in entities:
        name = spec.display_name(entity)
        code = entity.get("code")
        if not name or code is None:
            continue
        if name in lookup:
            logger.warning(
                "catalog=%s duplicate entries for %r (codes %s, %s); keeping %s",
                spec.label, name, lookup[name], code, lookup[name],
            )
            continue
        lookup[name] = code
    return MappingProxyType(lookup)


def _catalog_error(acc: ResultAccumulator, spec: CatalogSpec, error: Exception) -> None:
    logger.error("catalog=%s list failed: %s", spec.label, error)
    acc.add_error(ImportErrorRecord.create(
        error_type=REFERENCE_CATALOG_ERROR,
        ficha="N/A",
        participant_label=f"Catálogo {spec.label}",
        message=str(error),
    ))


def reconcile_catalog(
    spec: CatalogSpec,
    referenced: Mapping[str, Sequence[str]],
    resource: CatalogResource,
    acc: ResultAccumulator,
    cancel_token: CancellationToken | None = None,
) -> CatalogLookup:
    """Resolve every referenced name to a code, creating missing entries.

    Parameters
    ----------
    spec: catalog description (matching field and create payload)
    referenced: name -> fichas that reference it
    resource: collaborator resource exposing list() / create()
    acc: result accumulator (creation counter and error records)
    cancel_token: checked before every collaborator call
    """
    if not referenced:
        return _EMPTY_LOOKUP

    check_cancelled(cancel_token)
    try:
        existing = resource.list()
    except Exception as e:
        _catalog_error(acc, spec, e)
        return _EMPTY_LOOKUP

    present = {spec.display_name(entity) for entity in existing}
    attempted = 0
    for name, fichas in referenced.items():
        if name in present:
            continue
        check_cancelled(cancel_token)
        attempted += 1
        try:
            resource.create(spec.build_payload(name))
        except Exception as e:
            logger.warning("catalog=%s could not create %r: %s", spec.label, name, e)
            acc.add_error(ImportErrorRecord.create(
                error_type=REFERENCE_CREATION_ERROR,
                ficha=", ".join(fichas),
                participant_label=f"{spec.label}: {name}",
                message=str(e),
            ))
            continue
        acc.increment(spec.counter)
        logger.info("catalog=%s created %r", spec.label, name)

    if not attempted:
        return _build_lookup(spec, existing)

    check_cancelled(cancel_token)
    try:
        refreshed = resource.list()
    except Exception as e:
        # created entries stay unresolved for this run; known names still resolve
        _catalog_error(acc, spec, e)
        refreshed = existing
    return _build_lookup(spec, refreshed)


def reconcile_references(
    groups: Sequence[EnrollmentGroup],
    store: CollaboratorStore,
    acc: ResultAccumulator,
    *,
    defaults: ImportDefaults | None = None,
    modality_classifier: ModalityClassifier = classify_modality,
    cancel_token: CancellationToken | None = None,
) -> ReferenceLookups:
    """Run the three catalog sub-phases in order Company -> Executive -> Modality."""
    defaults = defaults or ImportDefaults()
    empresas = reconcile_catalog(
        empresa_catalog(defaults.reference_status),
        referenced_names(groups, "empresa"),
        store.empresas,
        acc,
        cancel_token,
    )
    ejecutivos = reconcile_catalog(
        ejecutivo_catalog(defaults.reference_status),
        referenced_names(groups, "ejecutivo"),
        store.ejecutivos,
        acc,
        cancel_token,
    )
    modalidades = reconcile_catalog(
        modalidad_catalog(modality_classifier),
        referenced_names(groups, "modalidad"),
        store.modalidades,
        acc,
        cancel_token,
    )
    return ReferenceLookups(empresas=empresas, ejecutivos=ejecutivos, modalidades=modalidades)
