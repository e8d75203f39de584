"""Command-line interface for TestRail test-case synchronization.

This package provides the `tms-import` and `tms-close-runs` tools. They
validate options, wire the mapping file, the local test tree and the TestRail
client together, and translate every error into an exit code.
"""

from .close_runs_command import CloseRunsCommand
from .import_command import ImportCommand
from .models import ExitCode
from .errors import UsageError, exit_code_for

__all__ = [
    'CloseRunsCommand',
    'ImportCommand',
    'ExitCode',
    'UsageError',
    'exit_code_for',
]
