"""Close-runs command orchestration for CLI.

Closes every active TestRail run of the suite a script or plan is mapped to,
so that cases of the suite can be deleted by the next import.
"""

import logging
from typing import Optional

from src.cli.errors import exit_code_for
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.selection import locate_mapping, resolve_selection
from src.mapping_store.store import MappingStore
from src.reconciliation.errors import NoActiveRunsError
from src.reconciliation.run_lifecycle import RunLifecycleManager
from src.test_assets.errors import ValidationError
from src.testrail_client.api_wrapper import APIWrapper
from src.testrail_client.auth import Authenticator
from src.testrail_client.errors import SyncError
from src.testrail_client.testrail_operations import TestRailOperations

logger = logging.getLogger(__name__)


class CloseRunsCommand:
    """Closes the active runs of the suite mapped to a script or plan.

    Example:
        >>> cmd = CloseRunsCommand(output_handler=OutputHandler())
        >>> exit_code = cmd.run(plan="artifact/plan/regression.yaml", subplan="smoke")
    """

    def __init__(
        self,
        output_handler: Optional[OutputHandler] = None,
        authenticator: Optional[Authenticator] = None,
        api: Optional[APIWrapper] = None,
    ):
        self.output = output_handler or OutputHandler()
        self._authenticator = authenticator
        self._api = api

    def run(
        self,
        script: Optional[str] = None,
        plan: Optional[str] = None,
        subplan: Optional[str] = None,
        mapping_path: Optional[str] = None,
    ) -> ExitCode:
        """Close the active runs.

        Returns:
            ExitCode: SUCCESS, NO_ACTIVE_RUNS when nothing was open, or the code
            matching the error that stopped the command
        """
        try:
            selection = resolve_selection(script, plan, subplan)
            mapping_file = locate_mapping(selection, mapping_path)
            relative_path = mapping_file.relative_path(selection.path)
            mapping = mapping_file.load()

            entry = MappingStore(mapping).get_file(relative_path, selection.subplan)
            if entry is None or not entry.suite_id:
                raise ValidationError("No TestRail suite is mapped to this file; import it first", relative_path)

            api = self._api or APIWrapper(self._authenticator or Authenticator())
            manager = RunLifecycleManager(TestRailOperations(api, mapping.project_id))
            with self.output.spinner(f"Closing active runs of suite {entry.suite_id}..."):
                closed = manager.close_active_runs(entry.suite_id)

            self.output.print_closed_runs(closed)
            return ExitCode.SUCCESS

        except NoActiveRunsError as e:
            logger.warning(str(e))
            self.output.error(str(e))
            return exit_code_for(e)
        except SyncError as e:
            logger.error(f"Closing runs failed: {e}")
            self.output.error(f"Closing runs failed: {e}")
            return exit_code_for(e)
        except Exception as e:
            logger.exception("Unexpected error while closing runs")
            self.output.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR
