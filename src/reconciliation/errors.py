"""Exceptions raised by the reconciliation engine and run lifecycle manager."""

from typing import Optional

from src.testrail_client.errors import SyncError


class ReconciliationError(SyncError):
    """Raised when the local tree cannot be reconciled with the mapping.

    Typical causes are a case body with no surviving step or two local cases
    sharing the same composite identity.
    """

    def __init__(self, message: str, scenario: Optional[str] = None):
        if scenario:
            full_message = f"Cannot reconcile scenario '{scenario}': {message}"
        else:
            full_message = message
        super().__init__(full_message)
        self.scenario = scenario
        self.original_message = message


class NoActiveRunsError(SyncError):
    """Raised when a suite has no active run to close."""

    def __init__(self, suite_id: str):
        super().__init__(f"No active test runs found for suite {suite_id}")
        self.suite_id = suite_id
