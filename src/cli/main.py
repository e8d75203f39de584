"""Main CLI entry points for the tms-import and tms-close-runs commands.

This module provides the two Typer applications that serve as the entry
points of the tool. Each application has a single command with options; the
commands return exit codes and only this module turns them into a process
exit.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.cli.close_runs_command import CloseRunsCommand
from src.cli.import_command import ImportCommand
from src.cli.output import OutputHandler

__version__ = "0.1.0"

import_app = typer.Typer(
    name="tms-import",
    help="""Import a script or plan into TestRail.

EXAMPLES:
  tms-import -script artifact/script/login.yaml
  tms-import -script artifact/script/login.yaml -scenario "happy path,locked out"
  tms-import -plan artifact/plan/regression.yaml -subplan smoke
  tms-import -script artifact/script/login.yaml --dry-run""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

close_runs_app = typer.Typer(
    name="tms-close-runs",
    help="""Close the active TestRail runs of the suite mapped to a script or plan.

EXAMPLES:
  tms-close-runs -script artifact/script/login.yaml
  tms-close-runs -plan artifact/plan/regression.yaml -subplan smoke""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

# Module logger
logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)
    # Repeated invocations in one process (tests) must not stack handlers
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"tms-sync_{timestamp}.log"

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=date_format
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"testrail-case-sync version {__version__}")
        raise typer.Exit()


@import_app.command()
def import_command(
    script: Optional[str] = typer.Option(
        None,
        "-script",
        "--script",
        help="Script file to import",
        metavar="PATH",
    ),
    plan: Optional[str] = typer.Option(
        None,
        "-plan",
        "--plan",
        help="Plan file to import (requires -subplan)",
        metavar="PATH",
    ),
    subplan: Optional[str] = typer.Option(
        None,
        "-subplan",
        "--subplan",
        help="Subplan of the plan to import",
        metavar="NAME",
    ),
    scenario: Optional[str] = typer.Option(
        None,
        "-scenario",
        "--scenario",
        help="Comma separated scenarios to import (scripts only)",
        metavar="NAMES",
    ),
    mapping: Optional[str] = typer.Option(
        None,
        "--mapping",
        help="Mapping file (default: <project>/.meta/project.tms.json)",
        metavar="PATH",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--dryrun",
        help="Preview changes without calling TestRail",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Import a script or plan into TestRail."""
    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    exit_code = ImportCommand(output_handler=output).run(
        script=script,
        plan=plan,
        subplan=subplan,
        scenario=scenario,
        dry_run=dry_run,
        mapping_path=mapping,
    )
    raise typer.Exit(exit_code)


@close_runs_app.command()
def close_runs_command(
    script: Optional[str] = typer.Option(
        None,
        "-script",
        "--script",
        help="Script whose suite runs are closed",
        metavar="PATH",
    ),
    plan: Optional[str] = typer.Option(
        None,
        "-plan",
        "--plan",
        help="Plan whose suite runs are closed (requires -subplan)",
        metavar="PATH",
    ),
    subplan: Optional[str] = typer.Option(
        None,
        "-subplan",
        "--subplan",
        help="Subplan of the plan",
        metavar="NAME",
    ),
    mapping: Optional[str] = typer.Option(
        None,
        "--mapping",
        help="Mapping file (default: <project>/.meta/project.tms.json)",
        metavar="PATH",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Close the active TestRail runs of a mapped suite."""
    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    exit_code = CloseRunsCommand(output_handler=output).run(
        script=script,
        plan=plan,
        subplan=subplan,
        mapping_path=mapping,
    )
    raise typer.Exit(exit_code)


def import_main() -> None:
    """Console script entry point of tms-import."""
    import_app()


def close_runs_main() -> None:
    """Console script entry point of tms-close-runs."""
    close_runs_app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    import_main()
