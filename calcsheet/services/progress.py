from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Run progress with tqdm.

The bar only exists on a TTY; redirected output (CI, log files) gets the
labelled log lines alone. Counters are kept either way so the orchestrator can
ask the tracker for them.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """One tick per take-off file, with failed / unused counters as the postfix."""

    def __init__(self, total_files: int, *, label: str = "Calculating") -> None:
        self.total_files = total_files
        self.label = label
        self.done = 0
        self.failed = 0
        self.unused = 0
        self._bar: TqdmType[Any] | None = None
        if is_tty_enabled():
            self._bar = tqdm(total=total_files, desc=label, unit="file", ncols=80, ascii=True)

    @property
    def active(self) -> bool:
        return self._bar is not None

    def start_file(self, file_path: Path) -> None:
        if self._bar is not None:
            self._bar.set_description(f"{self.label} ({file_path.name})")

    def finish_file(self, *, success: bool, unused_rows: int = 0) -> None:
        self.done += 1
        if success:
            self.unused += unused_rows
        else:
            self.failed += 1
        if self._bar is None:
            return
        self._bar.set_postfix(failed=self.failed, unused=self.unused)
        self._bar.set_description(self.label)
        self._bar.update(1)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
