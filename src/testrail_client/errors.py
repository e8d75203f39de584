"""Typed exception hierarchy for TestRail-related errors.

This module defines the root of the tool's exception hierarchy along with the
errors raised by the TestRail client library. Every exception carries a
descriptive message with enough context to act on it from the command line.
"""

from typing import List, Optional


class SyncError(Exception):
    """Base exception for all testrail-case-sync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class ConfigurationError(SyncError):
    """Raised when remote credentials, the TestRail URL or project data are missing."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = missing or []


class RemoteAPIError(SyncError):
    """Raised when a TestRail call fails or its response cannot be parsed."""

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        if status_code is not None:
            full_message = f"TestRail {operation} failed (HTTP {status_code}): {message}"
        else:
            full_message = f"TestRail {operation} failed: {message}"
        super().__init__(full_message)
        self.operation = operation
        self.status_code = status_code
        self.original_message = message


class InvalidCredentialsError(RemoteAPIError):
    """Raised when TestRail rejects the configured credentials."""

    def __init__(self, operation: str, user: str, endpoint: str, status_code: int = 401):
        super().__init__(
            operation,
            f"credentials rejected (user: {user}, endpoint: {endpoint})",
            status_code,
        )
        self.user = user
        self.endpoint = endpoint


class APIUnreachableError(RemoteAPIError):
    """Raised when the TestRail API cannot be reached (connection error or timeout)."""

    def __init__(self, operation: str, endpoint: str):
        super().__init__(operation, f"API is not available at {endpoint}")
        self.endpoint = endpoint
