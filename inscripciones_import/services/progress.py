from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

"""Progress bar over the enrollment groups being written.

Shown only when stdout is a terminal; under CI or piped output every method is
a no-op so log lines are not interleaved with carriage-return redraws.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]

DEFAULT_DESCRIPTION = "Creando inscripciones"


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """One tick per ficha; the bar title shows the ficha in flight."""

    def __init__(self, total_groups: int, *, description: str = DEFAULT_DESCRIPTION) -> None:
        self.total_groups = total_groups
        self.description = description
        self.current_group = 0
        self.enabled = is_tty_enabled()
        self.pbar: Any = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_groups,
                desc=description,
                unit="ficha",
                leave=True,
                ncols=80,
                ascii=True,
            )

    def start_group(self, ficha: str) -> None:
        self.current_group += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({ficha})")

    def finish_group(self) -> None:
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def set_postfix(self, **stats: Any) -> None:
        """Running counters (inscripciones / participantes / errores) next to the bar."""
        if self.pbar is not None:
            self.pbar.set_postfix(**stats)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
