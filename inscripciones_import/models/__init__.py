"""Domain models for the enrollment spreadsheet importer.

This package contains the dataclasses shared by the import pipeline stages:
configuration, normalized rows, enrollment groups, error records and the
import result.
"""

from .config_models import ApiConfig, ImportConfig, ImportDefaults
from .enrollment import EnrollmentGroup, ParticipantDraft
from .error_record import ImportErrorRecord
from .import_result import ImportResult, ResultAccumulator
from .row_data import NormalizedRow

__all__ = [
    # Configuration models
    "ApiConfig",
    "ImportConfig",
    "ImportDefaults",
    # Processing models
    "NormalizedRow",
    "EnrollmentGroup",
    "ParticipantDraft",
    # Results
    "ImportErrorRecord",
    "ImportResult",
    "ResultAccumulator",
]
