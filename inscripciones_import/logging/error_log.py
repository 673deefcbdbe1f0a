from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ImportErrorRecord

"""Per-run error file for the import.

The records an import collects in ImportResult.errors are written here once
the run ends, one JSON object per line. The file is named after the moment the
buffer was created, so a run that starts at 09:15:02 UTC writes
logs/errors-20250115-091502.log even if it flushes minutes later.
"""

__all__ = [
    "ErrorLogBuffer",
    "error_log_name",
]

logger = logging.getLogger(__name__)

DEFAULT_LOGS_DIR = Path("logs")


def error_log_name(started_at: datetime) -> str:
    return f"errors-{started_at.astimezone(UTC):%Y%m%d-%H%M%S}.log"


class ErrorLogBuffer:
    """Collects ImportErrorRecord values until flush().

    Nothing touches the disk while the buffer is empty, so a clean run leaves
    no file and no logs/ directory behind.
    """

    def __init__(self, logs_dir: Path | None = None, *, started_at: datetime | None = None) -> None:
        self.logs_dir = logs_dir if logs_dir is not None else DEFAULT_LOGS_DIR
        self.started_at = started_at or datetime.now(UTC)
        self._pending: list[ImportErrorRecord] = []

    @property
    def file_path(self) -> Path:
        return self.logs_dir / error_log_name(self.started_at)

    def append(self, record: ImportErrorRecord) -> None:
        self._pending.append(record)

    def extend(self, records: Iterable[ImportErrorRecord]) -> None:
        self._pending.extend(records)

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path | None:
        """Append pending records to the run's file and empty the buffer.

        Returns the file written, or None when there was nothing to write.
        """
        if not self._pending:
            return None
        target = self.file_path
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("a", encoding="utf-8") as out:
            out.writelines(f"{record.to_json_line()}\n" for record in self._pending)
        by_type = Counter(record.error_type for record in self._pending)
        logger.debug("wrote %d error records to %s %s", len(self._pending), target, dict(by_type))
        self._pending.clear()
        return target
