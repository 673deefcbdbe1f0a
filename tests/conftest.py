# Shared pytest fixtures
from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from inscripciones_import.api.client import ApiError, CollaboratorStore
from inscripciones_import.excel import columns as col
from inscripciones_import.logging.init import LOGGER_NAME, reset_logging
from inscripciones_import.models.config_models import ApiConfig, ImportConfig


class FakeResource:
    """In-memory catalog resource: list() / create() with server-assigned codes.

    fail_list / fail_create make individual calls raise ApiError, calls records
    every call in order as (method, payload).
    """

    def __init__(
        self,
        entries: list[dict[str, Any]] | None = None,
        *,
        start_code: int = 1,
        code_field: str = "code",
        fail_list: bool | Callable[[int], bool] = False,
        fail_create: Callable[[dict[str, Any]], bool] | None = None,
    ) -> None:
        self.entries = [dict(e) for e in entries or []]
        self.next_code = max([start_code - 1] + [e.get(code_field, 0) for e in self.entries]) + 1
        self.code_field = code_field
        self.fail_list = fail_list
        self.fail_create = fail_create
        self.calls: list[tuple[str, dict[str, Any] | None]] = []

    @property
    def created(self) -> list[dict[str, Any]]:
        return [p for m, p in self.calls if m == "create" and p is not None]

    def list(self) -> list[dict[str, Any]]:
        self.calls.append(("list", None))
        n_lists = sum(1 for m, _ in self.calls if m == "list")
        failing = self.fail_list(n_lists) if callable(self.fail_list) else self.fail_list
        if failing:
            raise ApiError("catalog unavailable", 503)
        return [dict(e) for e in self.entries]

    def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("create", dict(payload)))
        if self.fail_create is not None and self.fail_create(payload):
            raise ApiError("rejected by server", 400)
        entity = dict(payload)
        entity[self.code_field] = self.next_code
        self.next_code += 1
        self.entries.append(entity)
        return dict(entity)


class FakeStore:
    """Builds a CollaboratorStore over FakeResources and exposes them by name."""

    def __init__(self, **resources: FakeResource) -> None:
        self.empresas = resources.get("empresas") or FakeResource()
        self.ejecutivos = resources.get("ejecutivos") or FakeResource()
        self.modalidades = resources.get("modalidades") or FakeResource()
        self.inscripciones = resources.get("inscripciones") or FakeResource(
            start_code=100, code_field="numeroInscripcion"
        )
        self.participantes = resources.get("participantes") or FakeResource(code_field="id")

    def as_store(self) -> CollaboratorStore:
        return CollaboratorStore(
            empresas=self.empresas,
            ejecutivos=self.ejecutivos,
            modalidades=self.modalidades,
            inscripciones=self.inscripciones,
            participantes=self.participantes,
        )


def make_row(ficha: str, **overrides: Any) -> dict[str, Any]:
    """One spreadsheet row keyed by the literal headers."""
    row: dict[str, Any] = {
        col.FICHA: ficha,
        col.RUT: "11111111-1",
        col.NOMBRES: "Ana",
        col.APELLIDOS: "Pérez",
        col.CORREO: "ana@example.com",
        col.TELEFONO: "56911111111",
        col.VALOR_COBRADO: 100000,
        col.FRANQUICIA: 0.5,
        col.OBSERVACIONES: "",
        col.EMPRESA: "Acme",
        col.CURSO: "Excel Básico",
        col.ID_MOODLE: 321,
        col.CORRELATIVO: 7,
        col.ORDEN_COMPRA: "OC-1",
        col.CODIGO_SENCE: "1237",
        col.ID_SENCE: "S-9",
        col.MODALIDAD: "Sincrónico",
        col.FECHA_INICIO: 45658,
        col.FECHA_TERMINO: 45688,
        col.EJECUTIVO: "Juan Soto",
    }
    row.update(overrides)
    return row


def write_workbook(path: Path, rows: list[dict[str, Any]], *, extra_sheets: dict[str, pd.DataFrame] | None = None) -> Path:
    # headers the importer does not read (e.g. "Num Alumnos") follow the known ones
    extra_headers = [key for key in dict.fromkeys(k for row in rows for k in row) if key not in col.ALL_COLUMNS]
    df = pd.DataFrame(rows, columns=[*col.ALL_COLUMNS, *extra_headers])
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Inscripciones", index=False)
        for name, extra in (extra_sheets or {}).items():
            extra.to_excel(writer, sheet_name=name, index=False)
    return path


@pytest.fixture(autouse=True)
def _clean_app_logger() -> Iterator[None]:
    # setup_logging() binds sys.stdout and stops propagation; undo it so capsys and
    # caplog both see a fresh logger in every test
    def _reset() -> None:
        reset_logging()
        logger = logging.getLogger(LOGGER_NAME)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)

    _reset()
    yield
    _reset()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Iterator[Path]:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  base_url: http://api.test/api
  timeout_seconds: 5
defaults:
  empresa: Mutual
  ejecutivo: N/A
  modalidad: e-learning
report_empty_ficha: false
lock_file: ./logs/import.lock
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def import_config(tmp_path: Path) -> ImportConfig:
    return ImportConfig(
        api=ApiConfig(base_url="http://api.test/api"),
        lock_file=str(tmp_path / "import.lock"),
    )


@pytest.fixture()
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def workbook_path(tmp_path: Path) -> Callable[..., Path]:
    def _build(rows: list[dict[str, Any]], name: str = "inscripciones.xlsx", **kwargs: Any) -> Path:
        return write_workbook(tmp_path / name, rows, **kwargs)

    return _build
