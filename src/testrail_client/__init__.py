"""TestRail client library for test-case synchronization.

This package provides Python abstractions over the TestRail REST API v2:
credential loading, a transport wrapper, the suite/section/case/run
operations used by the reconciliation engine, and the case-body formatter.
"""

from .errors import (
    SyncError,
    ConfigurationError,
    RemoteAPIError,
    InvalidCredentialsError,
    APIUnreachableError,
)

__all__ = [
    "SyncError",
    "ConfigurationError",
    "RemoteAPIError",
    "InvalidCredentialsError",
    "APIUnreachableError",
]
