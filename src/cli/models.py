"""Data models for CLI operations."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for both command-line tools.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): Unexpected error
    - VALIDATION_ERROR (2): Bad options or an invalid local test file
    - CONFIGURATION_ERROR (3): Missing credentials, URL or mapping file
    - REMOTE_ERROR (4): TestRail call failed or could not be reached
    - RECONCILIATION_ERROR (5): Local cases could not be reconciled, or the
      mapping could not be written
    - NO_ACTIVE_RUNS (6): Close-runs found nothing to close

    Example:
        >>> raise typer.Exit(ExitCode.SUCCESS)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    VALIDATION_ERROR = 2
    CONFIGURATION_ERROR = 3
    REMOTE_ERROR = 4
    RECONCILIATION_ERROR = 5
    NO_ACTIVE_RUNS = 6
