"""Closing of active TestRail runs for a suite."""

import logging
from typing import List

from src.testrail_client.models import RemoteRun
from src.testrail_client.testrail_operations import TestRailOperations

from .errors import NoActiveRunsError

logger = logging.getLogger(__name__)


class RunLifecycleManager:
    """Queries and closes the open runs of a suite.

    Closing is explicit: the reconciliation engine never calls this manager.
    """

    def __init__(self, client: TestRailOperations):
        self.client = client

    def active_runs(self, suite_id: str) -> List[RemoteRun]:
        """Return the runs of a suite that are not completed."""
        runs = self.client.list_runs(suite_id, active_only=True)
        return [run for run in runs if not run.is_completed]

    def close_active_runs(self, suite_id: str) -> List[RemoteRun]:
        """Close every active run of a suite.

        Args:
            suite_id: Suite whose runs are closed

        Returns:
            The closed runs, in the order they were closed

        Raises:
            NoActiveRunsError: If the suite has no active run
            RemoteAPIError: On the first failing close; later runs stay open
        """
        runs = self.active_runs(suite_id)
        if not runs:
            raise NoActiveRunsError(suite_id)

        logger.info(f"Closing {len(runs)} active run(s) of suite {suite_id}")
        closed = []
        for run in runs:
            closed.append(self.client.close_run(run.id))
        return closed
