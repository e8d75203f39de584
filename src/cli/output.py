"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich for spinners, colored output and formatted summaries. Supports
verbosity levels and the --no-color flag. Errors go to stderr.
"""

from contextlib import contextmanager
from typing import Iterator, List

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.spinner import Spinner

from src.reconciliation.models import ImportResult, ReconciliationPlan
from src.testrail_client.models import RemoteRun


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console for regular output (stdout)
        err_console: Rich Console for errors (stderr)

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Import completed")
        >>> with handler.spinner("Importing..."):
        ...     pass
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.no_color = no_color
        self.console = Console(no_color=no_color, highlight=False)
        self.err_console = Console(stderr=True, no_color=no_color, highlight=False)

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        """Display error message in red on stderr."""
        self.err_console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message, markup=False)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Display spinner while a blocking operation runs.

        Example:
            >>> with handler.spinner("Closing runs..."):
            ...     manager.close_active_runs(suite_id)
        """
        if self.no_color or not self.console.is_terminal:
            yield
            return
        spinner = Spinner("dots", text=escape(message))
        with Live(spinner, console=self.console, refresh_per_second=10, transient=True):
            yield

    def print_import_summary(self, result: ImportResult) -> None:
        """Display the outcome of an import pass.

        Args:
            result: Result returned by the reconciliation engine
        """
        self.console.print("\n[bold]Import Summary:[/bold]")
        if result.suite_created:
            self.console.print(f"  [green]+[/green] Suite created: {escape(result.suite_id)}")

        self.console.print(f"  [green]+[/green] Created: {len(result.created)} case(s)")
        self.console.print(f"  [blue]↻[/blue] Updated: {len(result.updated)} case(s)")
        self.console.print(f"  [red]✗[/red] Deleted: {len(result.deleted)} case(s)")

        if result.skipped:
            self.console.print(f"  [yellow]⊘[/yellow] Skipped: {len(result.skipped)} case(s)")
            for title in result.skipped:
                self.console.print(f"    • {escape(title)}")

        self.console.print(f"\nSuite: {escape(result.suite_url)}")
        self.console.print("\n[green]Import completed successfully[/green]")

    def print_dryrun_summary(self, plan: ReconciliationPlan) -> None:
        """Display dry run preview of an import.

        Args:
            plan: Diff computed against the mapping
        """
        self.console.print("\n[bold]Dry Run - Changes Preview:[/bold]")

        if plan.suite_id is None:
            self.console.print("\n[green]Would create a new suite and section[/green]")

        to_create = [case.title for case, _ in plan.to_create]
        to_update = [case.title for case, _, _ in plan.to_update]
        to_delete = [f"{link.test_case} ({link.test_case_id})" for link in plan.to_delete]

        self._print_list("green", "Would create", to_create)
        self._print_list("blue", "Would update", to_update)
        self._print_list("red", "Would delete", to_delete)
        self._print_list("yellow", "Would skip", [case.title for case in plan.skipped])

        if not to_create and not to_update and not to_delete:
            self.console.print("\n[yellow]No test cases to import[/yellow]")

    def print_closed_runs(self, runs: List[RemoteRun]) -> None:
        """Display the runs closed by the close-runs tool."""
        self.console.print(f"\n[bold]Closed {len(runs)} run(s):[/bold]")
        for run in runs:
            label = f"{run.id} {run.name}".strip()
            self.console.print(f"  [green]✓[/green] {escape(label)}")

    def _print_list(self, color: str, title: str, items: List[str]) -> None:
        if not items:
            return
        self.console.print(f"\n[{color}]{title} ({len(items)} case(s)):[/{color}]")
        for item in items:
            self.console.print(f"  • {escape(item)}")
