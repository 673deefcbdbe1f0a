from __future__ import annotations

import doctest
from datetime import UTC, datetime

import pytest

from inscripciones_import.models.error_record import ImportErrorRecord
from inscripciones_import.models.import_result import ImportResult
from inscripciones_import.services import summary
from inscripciones_import.services.summary import format_seconds, render_summary_line

T0 = datetime(2025, 1, 1, tzinfo=UTC)


def _result(**overrides) -> ImportResult:
    values = dict(
        empresas_creadas=1,
        ejecutivos_creados=2,
        modalidades_creadas=0,
        inscripciones_creadas=3,
        participantes_creados=9,
        errors=(ImportErrorRecord.create("PARTICIPANT_CREATION_ERROR", "F-1", "x", "y", 1),),
        start_time=T0,
        end_time=T0,
        elapsed_seconds=1.23456,
        total_rows=11,
        skipped_rows=1,
        groups=3,
    )
    values.update(overrides)
    return ImportResult(**values)


def test_summary_line_fields():
    assert render_summary_line(_result()) == (
        "SUMMARY fichas=3 empresas=1 ejecutivos=2 modalidades=0 inscripciones=3 "
        "participantes=9 errors=1 skipped_rows=1 elapsed_sec=1.235"
    )


def test_summary_line_marks_cancelled_runs():
    assert render_summary_line(_result(cancelled=True)).endswith(" cancelled=1")


@pytest.mark.parametrize(
    "value,expected",
    [(0, "0"), (2.0, "2"), (0.0012, "0.0012"), (12.3456, "12.346")],
)
def test_format_seconds(value, expected):
    assert format_seconds(value) == expected


def test_module_doctests():
    failures, _ = doctest.testmod(summary)
    assert failures == 0
