from __future__ import annotations

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskID, TextColumn

from codemerge.config import PROGRESS_BAR_WIDTH


class ProgressReporter:
    """Fixed-width progress bar redrawn in place while files are merged.

    Purely observational: it never influences what gets written. With
    `enabled=False` the counts are still tracked but nothing is drawn.
    """

    def __init__(self, *, console: Console | None = None, enabled: bool = True) -> None:
        self.console = console or Console()
        self.enabled = enabled
        self.processed = 0
        self.total = 0
        self.finished = False
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def _start(self, total: int) -> None:
        self._progress = Progress(
            TextColumn("Merging"),
            BarColumn(bar_width=PROGRESS_BAR_WIDTH),
            TextColumn("{task.percentage:>3.0f}%"),
            console=self.console,
        )
        self._task = self._progress.add_task("merge", total=total)
        self._progress.start()

    def report(self, processed: int, total: int) -> None:
        """Redraw the bar for `processed` out of `total` files.

        Args:
            processed (int): files handled so far, written or skipped
            total (int): files expected overall; 0 makes this a no-op
        """
        if total == 0:
            return
        self.processed = processed
        self.total = total
        if self.enabled:
            if self._progress is None:
                self._start(total)
            if self._progress is not None and self._task is not None:
                self._progress.update(self._task, completed=processed, total=total)
        if processed >= total:
            self.close()
            self.finished = True

    def close(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task = None
