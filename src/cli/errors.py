"""Typed exception hierarchy for CLI-related errors.

This module defines the exceptions raised while validating command-line
input. Errors from the libraries below the CLI propagate unchanged and are
mapped to exit codes by exit_code_for.
"""

from typing import Optional

from src.cli.models import ExitCode
from src.mapping_store.errors import MappingError
from src.reconciliation.errors import NoActiveRunsError, ReconciliationError
from src.test_assets.errors import ValidationError
from src.testrail_client.errors import ConfigurationError, RemoteAPIError


class UsageError(ValidationError):
    """Raised for an invalid combination of command-line options."""

    def __init__(self, message: str, option: Optional[str] = None):
        super().__init__(message)
        self.option = option


def exit_code_for(error: Exception) -> ExitCode:
    """Map an exception raised below the CLI to its process exit code."""
    if isinstance(error, ValidationError):
        return ExitCode.VALIDATION_ERROR
    if isinstance(error, ConfigurationError):
        return ExitCode.CONFIGURATION_ERROR
    if isinstance(error, RemoteAPIError):
        return ExitCode.REMOTE_ERROR
    if isinstance(error, (ReconciliationError, MappingError)):
        return ExitCode.RECONCILIATION_ERROR
    if isinstance(error, NoActiveRunsError):
        return ExitCode.NO_ACTIVE_RUNS
    return ExitCode.GENERAL_ERROR
