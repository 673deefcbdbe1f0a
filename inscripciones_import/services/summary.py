from __future__ import annotations

from ..models.import_result import ImportResult

"""SUMMARY line rendering.

Format:
SUMMARY fichas={groups} empresas={n} ejecutivos={n} modalidades={n}
inscripciones={n} participantes={n} errors={n} skipped_rows={n} elapsed_sec={s}
(one line; " cancelled=1" is appended when the run was cancelled)
"""

__all__ = [
    "render_summary_line",
    "format_seconds",
]


def format_seconds(value: float) -> str:
    """Render seconds without scientific notation and without a trailing .0."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return str(round(value, 3))


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY line for an ImportResult.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2025, 1, 1, tzinfo=timezone.utc)
        >>> result = ImportResult(
        ...     empresas_creadas=1, ejecutivos_creados=0, modalidades_creadas=0,
        ...     inscripciones_creadas=2, participantes_creados=5, errors=(),
        ...     start_time=t, end_time=t, elapsed_seconds=2.0, groups=2,
        ... )
        >>> render_summary_line(result)
        'SUMMARY fichas=2 empresas=1 ejecutivos=0 modalidades=0 inscripciones=2 participantes=5 errors=0 skipped_rows=0 elapsed_sec=2'
    """
    line = (
        f"SUMMARY fichas={result.groups} "
        f"empresas={result.empresas_creadas} "
        f"ejecutivos={result.ejecutivos_creados} "
        f"modalidades={result.modalidades_creadas} "
        f"inscripciones={result.inscripciones_creadas} "
        f"participantes={result.participantes_creados} "
        f"errors={len(result.errors)} "
        f"skipped_rows={result.skipped_rows} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
    if result.cancelled:
        line += " cancelled=1"
    return line
