"""Reconciliation of a local test tree with its TestRail suite.

The engine lives in ``src.reconciliation.engine`` and the run lifecycle
manager in ``src.reconciliation.run_lifecycle``. Only the errors are
re-exported here; the client library imports them as well.
"""

from .errors import NoActiveRunsError, ReconciliationError

__all__ = [
    'NoActiveRunsError',
    'ReconciliationError',
]
