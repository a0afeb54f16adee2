"""Rich-based observers for validation runs.

Provides Rich console UI components reporting validation runs as they
complete: a progress bar with pass/fail counts and a violation report.

Requires the 'rich' package: pip install rich
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from constraint_validation.events import (
    ValidationEvent,
    ValidationEventType,
    ValidationObserver,
)

if TYPE_CHECKING:
    from rich.console import Console
    from rich.panel import Panel
    from rich.progress import Progress, TaskID
    from rich.table import Table

    from constraint_validation.results import ConstraintViolationSet

__all__ = ["SimpleProgressObserver", "RichViolationReportObserver"]


def _format_path(path: tuple[str, ...]) -> str:
    return ".".join(path) or "<root>"


class SimpleProgressObserver(ValidationObserver):
    """Progress bar with pass/fail counts over many validation runs.

    Must be used within a Rich Progress context.

    Example:
        from rich.progress import Progress

        with Progress() as progress:
            observer = SimpleProgressObserver(progress, total=len(users))
            validate_user.add_observer(observer)

            for user in users:
                validate_user(user)
    """

    def __init__(
        self,
        progress: Progress,
        task_description: str = "Validating",
        total: int | None = None,
    ) -> None:
        """Initialize the progress observer.

        Args:
            progress: A Rich Progress instance (must be started).
            task_description: Description text shown in the progress bar.
            total: Expected number of runs, if known.
        """
        self._progress = progress
        self._task_id: TaskID | None = None
        self._description = task_description
        self._total = total
        self._valid = 0
        self._failed = 0

    def on_event(self, event: ValidationEvent) -> None:
        """Handle validation events to update the progress bar.

        Args:
            event: The validation event to handle.
        """
        if event.event_type != ValidationEventType.VALIDATION_COMPLETED:
            return

        if self._task_id is None:
            self._task_id = self._progress.add_task(self._description, total=self._total)

        if event.data.get("is_valid"):
            self._valid += 1
        else:
            self._failed += 1

        self._progress.update(
            self._task_id,
            advance=1,
            description=(
                f"{self._description} [green]✓{self._valid}[/] [red]✗{self._failed}[/]"
            ),
        )


class RichViolationReportObserver(ValidationObserver):
    """Console report of the violations of each failed run.

    Prints one table per failed run (path and message of each violation)
    and keeps a tally of the most frequent violations across runs, which
    ``summary()`` renders.

    Example:
        observer = RichViolationReportObserver()
        validate_user.add_observer(observer)

        for user in users:
            validate_user(user)

        observer.console.print(observer.summary())
    """

    def __init__(
        self,
        console: Console | None = None,
        top_violations_count: int = 10,
        show_runs: bool = True,
    ) -> None:
        """Initialize the report observer.

        Args:
            console: Rich Console instance. If None, creates a new one.
            top_violations_count: Number of violations listed by summary().
            show_runs: If True, print a table for every failed run.
        """
        from rich.console import Console

        self.console = console or Console()
        self._top_violations_count = top_violations_count
        self._show_runs = show_runs
        self._runs = 0
        self._failed_runs = 0
        self._violation_counts: dict[tuple[str, str], int] = {}

    def on_event(self, event: ValidationEvent) -> None:
        """Handle validation events to update the report.

        Args:
            event: The validation event to handle.
        """
        if event.event_type != ValidationEventType.VALIDATION_COMPLETED:
            return

        self._runs += 1
        if event.data.get("is_valid"):
            return

        self._failed_runs += 1
        violations: ConstraintViolationSet = event.data.get("violations", ())
        for violation in violations:
            key = (_format_path(violation.path), violation.message)
            self._violation_counts[key] = self._violation_counts.get(key, 0) + 1

        if self._show_runs:
            self.console.print(
                self._build_run_table(event.data.get("validator_name", ""), violations)
            )

    def _build_run_table(self, validator_name: str, violations: ConstraintViolationSet) -> Table:
        from rich.table import Table

        table = Table(
            title=f"[bold red]{validator_name}[/]: {len(violations)} violation(s)",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Path", style="cyan")
        table.add_column("Message", style="yellow")
        for violation in violations:
            table.add_row(_format_path(violation.path), violation.message)
        return table

    def summary(self) -> Panel:
        """Build a panel with run counts and the most frequent violations.

        Returns:
            Rich Panel containing the summary table.
        """
        from rich.panel import Panel
        from rich.table import Table

        table = Table(
            title=f"Runs: {self._runs:,}  Failed: {self._failed_runs:,}",
            show_header=True,
            header_style="bold magenta",
            expand=True,
        )
        table.add_column("Path", style="cyan", width=30)
        table.add_column("Violation", style="yellow")
        table.add_column("Count", justify="right", style="red", width=10)

        sorted_violations = sorted(
            self._violation_counts.items(),
            key=lambda x: x[1],
            reverse=True,
        )[: self._top_violations_count]

        for (path, message), count in sorted_violations:
            display_msg = message[:50] + "..." if len(message) > 50 else message
            table.add_row(path, display_msg, f"{count:,}")

        if not sorted_violations:
            table.add_row("-", "No violations", "-")

        return Panel(table, title="[bold]Top Violations[/]", border_style="red")

    @property
    def violation_counts(self) -> dict[tuple[str, str], int]:
        """Get a copy of the (path, message) -> occurrences tally."""
        return self._violation_counts.copy()
