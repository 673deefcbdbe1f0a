from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

"""Config dataclasses for the enrollment spreadsheet importer.

These are the typed counterparts of config/import.yml. The loader in
inscripciones_import/config/loader.py validates the YAML and builds them.
"""

__all__ = [
    "ApiConfig",
    "ImportDefaults",
    "ImportConfig",
]

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_LOCK_FILE = "./logs/import.lock"


@dataclass(frozen=True)
class ApiConfig:
    """Connection settings for the collaborator REST API.

    API_BASE_URL / API_TIMEOUT_SECONDS environment variables take precedence
    over these values (applied by the loader).
    """
    base_url: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class ImportDefaults:
    """Business defaults applied when an enrollment group is seeded."""
    empresa: str = "Mutual"  # company fallback name
    ejecutivo: str = "N/A"
    modalidad: str = "e-learning"
    reference_status: str = "Activo"  # status for new companies / executives
    status_alumnos: str = "Pendiente"


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for one import run."""
    api: ApiConfig
    defaults: ImportDefaults = field(default_factory=ImportDefaults)
    report_empty_ficha: bool = False  # record rows without Ficha as errors
    lock_file: str = DEFAULT_LOCK_FILE

    @property
    def lock_path(self) -> Path:
        return Path(self.lock_file)
