"""
Progress bar for show-sync using the Rich library.

The sync run processes catalog pages in parallel. The bar advances once
per page and shows entity counters for the whole run.

Usage:
    from show_sync.core.progress import SyncProgressBar

    with SyncProgressBar(total=pages) as progress:
        progress.update(page_result)
"""

import threading
from typing import Optional

from rich import get_console
from rich.progress import BarColumn, Progress, TaskID, TextColumn
from rich.theme import Theme

from show_sync.models import PageResult, SyncAction


PROGRESS_THEME = Theme({
    "bar.back": "grey23",
    "bar.complete": "rgb(165,66,129)",
    "bar.finished": "rgb(114,156,31)",
    "bar.pulse": "rgb(165,66,129)",
    "progress.percentage": "white",
})


class SyncProgressBar:
    """
    Progress bar for the sync run.

    Displays:
        Syncing   + 12  ~ 3  = 230  ✗ 1   ━━━━━━━━━━━━━━  40%

    where + is created, ~ updated, = unchanged and ✗ failed.

    When the page count is unknown (sync until the catalog ends) the bar
    pulses instead of showing a percentage.

    Thread Safety:
        update() may be called from any worker thread.
    """

    def __init__(self, total: int | None, description: str = "Syncing") -> None:
        self.total = total
        self.description = description
        self.completed = 0
        self.created = 0
        self.updated = 0
        self.unchanged = 0
        self.failed = 0

        self._lock = threading.Lock()
        self.console = get_console()
        self.console.push_theme(PROGRESS_THEME)

        self.progress = Progress(
            TextColumn("[white]{task.description}", justify="left"),
            TextColumn("{task.fields[status]}"),
            BarColumn(bar_width=40, finished_style="green"),
            "[progress.percentage]{task.percentage:>3.0f}%",
            console=self.console,
            transient=False,
            refresh_per_second=10,
        )
        self.task_id: Optional[TaskID] = None
        self._started = False

    def __enter__(self) -> "SyncProgressBar":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def start(self) -> None:
        if not self._started:
            self.progress.start()
            self.task_id = self.progress.add_task(
                description=self.description,
                total=self.total,
                status=self._get_status_text(),
            )
            self._started = True

    def stop(self) -> None:
        if self._started:
            self.progress.stop()
            self._started = False

    def _get_status_text(self) -> str:
        parts = [
            f"[green]+ {self.created}[/green]",
            f"[cyan]~ {self.updated}[/cyan]",
            f"[white]= {self.unchanged}[/white]",
            f"[red]✗ {self.failed}[/red]",
        ]
        return "  ".join(parts)

    def update(self, page_result: PageResult) -> None:
        """Advance by one page and add the page's entity outcomes."""
        if page_result.end_of_data:
            return

        with self._lock:
            self.completed += 1
            for result in page_result.results:
                if result.action is SyncAction.CREATED:
                    self.created += 1
                elif result.action is SyncAction.UPDATED:
                    self.updated += 1
                elif result.action is SyncAction.UNCHANGED:
                    self.unchanged += 1
                elif result.action is SyncAction.FAILED:
                    self.failed += 1

            if self.task_id is not None:
                self.progress.update(
                    self.task_id,
                    completed=self.completed,
                    status=self._get_status_text(),
                )
