from __future__ import annotations

import logging

from inscripciones_import.excel import columns as col
from inscripciones_import.excel.normalizer import normalize_rows
from inscripciones_import.models.config_models import ImportDefaults
from inscripciones_import.services.grouping import build_participant, group_rows

from conftest import make_row


def _rows(*raw):
    return normalize_rows(list(raw)).rows


def _fixed_now() -> str:
    return "2030-01-01T00:00:00Z"


def test_every_row_lands_in_exactly_one_group():
    rows = _rows(
        make_row("F-1", **{col.RUT: "1-9"}),
        make_row("F-2", **{col.RUT: "2-7"}),
        make_row("F-1", **{col.RUT: "3-5"}),
    )

    groups = group_rows(rows)

    assert [g.ficha for g in groups] == ["F-1", "F-2"]
    assert [p.rut for p in groups[0].participants] == ["1-9", "3-5"]
    assert [p.rut for p in groups[1].participants] == ["2-7"]
    assert sum(g.headcount for g in groups) == len(rows)


def test_first_row_seeds_the_template():
    rows = _rows(
        make_row("F-1", **{col.EMPRESA: "Acme", col.CURSO: "Excel"}),
        make_row("F-1", **{col.EMPRESA: "Otra", col.CURSO: "Word"}),
    )

    group = group_rows(rows)[0]

    assert group.empresa == "Acme"
    assert group.nombre_curso == "Excel"
    assert group.headcount == 2


def test_template_fields_and_dates():
    group = group_rows(_rows(make_row("F-1")))[0]

    assert group.id_moodle == "321"
    assert group.codigo_curso == "321"
    assert group.correlativo == 7
    assert group.codigo_sence == "1237"
    assert group.orden_compra == "OC-1"
    assert group.inicio == "2025-01-01T00:00:00Z"
    assert group.termino == "2025-01-31T00:00:00Z"
    assert group.status_alumnos == "Pendiente"


def test_defaults_apply_when_reference_names_are_missing():
    rows = _rows(make_row(
        "F-1",
        **{col.EMPRESA: "", col.EJECUTIVO: None, col.MODALIDAD: 0, col.ID_MOODLE: None, col.CORRELATIVO: None},
    ))

    group = group_rows(rows)[0]

    assert group.empresa == "Mutual"
    assert group.ejecutivo == "N/A"
    assert group.modalidad == "e-learning"
    assert group.id_moodle == "0"
    assert group.codigo_curso == "0"
    assert group.correlativo == 0


def test_configured_defaults_are_used():
    defaults = ImportDefaults(empresa="Sin Empresa", ejecutivo="Sin Ejecutivo", modalidad="Presencial")
    rows = _rows(make_row("F-1", **{col.EMPRESA: "", col.EJECUTIVO: "", col.MODALIDAD: ""}))

    group = group_rows(rows, defaults)[0]

    assert (group.empresa, group.ejecutivo, group.modalidad) == ("Sin Empresa", "Sin Ejecutivo", "Presencial")


def test_missing_dates_use_now_for_inicio_and_none_for_termino():
    rows = _rows(make_row("F-1", **{col.FECHA_INICIO: 0, col.FECHA_TERMINO: ""}))

    group = group_rows(rows, now=_fixed_now)[0]

    assert group.inicio == "2030-01-01T00:00:00Z"
    assert group.termino is None


def test_participant_fields():
    row = _rows(make_row("F-1", **{col.VALOR_COBRADO: "150000,5", col.FRANQUICIA: 0.25, col.OBSERVACIONES: "Inscrito"}))[0]

    draft = build_participant(row)

    assert draft.nombres == "Ana"
    assert draft.apellidos == "Pérez"
    assert draft.mail == "ana@example.com"
    assert draft.valor_cobrado == 150000.5
    assert draft.franquicia_porcentaje == 25.0
    assert draft.observacion == "Inscrito"
    assert draft.label == "Ana Pérez (RUT: 11111111-1)"


def test_non_numeric_money_is_ignored():
    row = _rows(make_row("F-1", **{col.VALOR_COBRADO: "gratis", col.FRANQUICIA: ""}))[0]

    draft = build_participant(row)

    assert draft.valor_cobrado is None
    assert draft.franquicia_porcentaje is None


def test_empty_input_gives_no_groups():
    assert group_rows([]) == []


def test_out_of_range_date_falls_back_and_warns(caplog):
    rows = _rows(make_row("F-1", **{col.FECHA_INICIO: 20250115, col.FECHA_TERMINO: 20250131}))

    with caplog.at_level(logging.WARNING):
        group = group_rows(rows, now=_fixed_now)[0]

    assert group.inicio == "2030-01-01T00:00:00Z"
    assert group.termino is None
    assert "row=2 column=F. Inicio not a date: '20250115' (ignored)" in caplog.text
    assert f"row=2 column={col.FECHA_TERMINO} not a date" in caplog.text


def test_overflowing_numbers_are_ignored(caplog):
    rows = _rows(make_row("F-1", **{col.CORRELATIVO: "1e400", col.VALOR_COBRADO: "inf"}))

    with caplog.at_level(logging.WARNING):
        group = group_rows(rows)[0]

    assert group.correlativo == 0
    assert group.participants[0].valor_cobrado is None
    assert f"row=2 column={col.VALOR_COBRADO} not numeric" in caplog.text
