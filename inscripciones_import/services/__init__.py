from .orchestrator import run_import
from .run_control import CancellationToken, ImportInProgressError

__all__ = [
    "CancellationToken",
    "ImportInProgressError",
    "run_import",
]
