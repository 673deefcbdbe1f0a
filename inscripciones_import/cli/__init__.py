from __future__ import annotations

import argparse
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..api.client import http_store
from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..excel.reader import SpreadsheetParseError, read_workbook
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.import_result import ImportResult
from ..services.orchestrator import run_import
from ..services.run_control import CancellationToken, ImportInProgressError
from ..services.summary import render_summary_line

"""CLI entrypoint.

    python -m inscripciones_import.cli inscripciones.xlsx [--config PATH] [--debug] [--inspect-data]

Flow: load .env -> load config -> read + import the workbook against the REST
API -> print the SUMMARY line. Ctrl+C cancels cooperatively: the current call
finishes, nothing else is sent and the partial result is reported.

Exit codes:
    0  every write succeeded
    2  the import finished with errors or was cancelled
    1  fatal (config, missing file, unreadable workbook, import already running)
"""

__all__ = [
    "main",
    "EXIT_SUCCESS_ALL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_FATAL",
]

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values win over the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Importa inscripciones y participantes desde Excel")
    p.add_argument("file", type=Path, help="Excel (.xlsx) file to import")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print header & first rows then exit")
    return p.parse_args(argv)


@contextmanager
def _cancel_on_sigint(token: CancellationToken) -> Iterator[None]:
    previous = signal.getsignal(signal.SIGINT)

    def _handler(signum: int, frame: Any) -> None:  # pragma: no cover (signal driven)
        token.cancel()

    signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _inspect_data(path: Path) -> int:
    try:
        sheet = read_workbook(path)
    except SpreadsheetParseError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"SHEET: {sheet.sheet_name} rows={len(sheet.rows)} cols={sheet.columns}")
    for row_number, row in zip(sheet.row_numbers, sheet.rows[:INSPECT_SAMPLE_ROWS], strict=False):
        # datetime cells are not JSON friendly -> isoformat
        safe = {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in row.items()}
        print(f"  row {row_number}: {safe}")
    return EXIT_SUCCESS_ALL


def _report(result: ImportResult) -> None:
    logger = setup_logging()
    for record in result.errors:
        logger.warning(
            "%s ficha=%s %s: %s",
            record.error_type,
            record.ficha,
            record.participant_label,
            record.message,
        )
    log_summary(render_summary_line(result)[len("SUMMARY "):])


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None -> read sys.argv; [] stays [] (pytest arguments must not leak in)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        set_debug()
        logger.debug("debug mode enabled")

    path: Path = args.file
    if not path.exists():
        logger.error(f"file not found: {path}")
        return EXIT_FATAL
    if path.suffix.lower() != ".xlsx":
        logger.error(f"not an .xlsx file: {path}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(path)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.info(f"Importing {path.name} -> {cfg.api.base_url}")
    token = CancellationToken()
    error_log = ErrorLogBuffer()
    try:
        with http_store(cfg.api) as store, _cancel_on_sigint(token):
            result = run_import(path, store, cfg, cancel_token=token, error_log=error_log)
    except SpreadsheetParseError as e:
        logger.error(f"workbook: {e}")
        return EXIT_FATAL
    except ImportInProgressError as e:
        logger.error(str(e))
        return EXIT_FATAL

    _report(result)
    if result.has_errors or result.cancelled:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
