"""Import command orchestration for CLI.

This module provides the ImportCommand class that drives one import pass:
validate the options, load the mapping file and the local test tree, run the
reconciliation engine (or its dry-run preview) and report the outcome.
"""

import logging
from typing import List, Optional

from src.cli.errors import exit_code_for
from src.cli.models import ExitCode
from src.cli.output import OutputHandler
from src.cli.selection import TestFileSelection, locate_mapping, resolve_selection
from src.mapping_store.store import MappingStore
from src.reconciliation.engine import ReconciliationEngine
from src.test_assets.loader import TestAssetLoader
from src.test_assets.models import LocalCase
from src.testrail_client.api_wrapper import APIWrapper
from src.testrail_client.auth import Authenticator
from src.testrail_client.errors import SyncError
from src.testrail_client.testrail_operations import TestRailOperations

logger = logging.getLogger(__name__)


class ImportCommand:
    """Orchestrates the import of one script or plan into TestRail.

    The import workflow:
        1. Validate the script/plan/subplan/scenario options
        2. Locate and load the project mapping file
        3. Load the local test cases
        4. Preview (dry run) or run the reconciliation pass
        5. Print a summary and return the exit code

    Every error below this class is translated into an ExitCode; the process
    itself is only terminated by the Typer entry point.

    Example:
        >>> cmd = ImportCommand(output_handler=OutputHandler(verbosity=1))
        >>> exit_code = cmd.run(script="artifact/script/login.yaml")
    """

    def __init__(
        self,
        output_handler: Optional[OutputHandler] = None,
        authenticator: Optional[Authenticator] = None,
        api: Optional[APIWrapper] = None,
    ):
        """Initialize the command.

        Args:
            output_handler: Terminal output (a default handler when None)
            authenticator: Credential loader (created on first remote use when None)
            api: Transport override, mainly for tests
        """
        self.output = output_handler or OutputHandler()
        self._authenticator = authenticator
        self._api = api

    def run(
        self,
        script: Optional[str] = None,
        plan: Optional[str] = None,
        subplan: Optional[str] = None,
        scenario: Optional[str] = None,
        dry_run: bool = False,
        mapping_path: Optional[str] = None,
    ) -> ExitCode:
        """Run the import.

        Args:
            script: Script file to import
            plan: Plan file to import
            subplan: Subplan of the plan to import
            scenario: Comma separated scenario names (scripts only)
            dry_run: Preview the changes without calling TestRail
            mapping_path: Explicit mapping file location

        Returns:
            ExitCode: SUCCESS, or the code matching the error that stopped the import
        """
        try:
            selection = resolve_selection(script, plan, subplan, scenario)
            return self._import(selection, dry_run, mapping_path)
        except SyncError as e:
            exit_code = exit_code_for(e)
            logger.error(f"Import failed: {e}")
            self.output.error(f"Import failed: {e}")
            return exit_code
        except Exception as e:
            logger.exception("Unexpected error during import")
            self.output.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def _import(
        self,
        selection: TestFileSelection,
        dry_run: bool,
        mapping_path: Optional[str],
    ) -> ExitCode:
        mapping_file = locate_mapping(selection, mapping_path)
        relative_path = mapping_file.relative_path(selection.path)
        mapping = mapping_file.load()
        self.output.info(f"Project {mapping.project_id}, mapping {mapping_file.path}")

        cases = self._load_cases(selection, TestAssetLoader(path_resolver=mapping_file.relative_path))
        self.output.info(f"Loaded {len(cases)} test case(s) from {relative_path}")

        store = MappingStore(mapping)
        engine = ReconciliationEngine(self._operations(mapping.project_id), store, mapping_file)
        scenario_filter = selection.scenarios or None

        if dry_run:
            preview = engine.preview(relative_path, cases, selection.subplan, scenario_filter)
            self.output.print_dryrun_summary(preview)
            return ExitCode.SUCCESS

        with self.output.spinner(f"Importing {relative_path}..."):
            result = engine.import_file(
                relative_path,
                cases,
                file_type=selection.file_type,  # type: ignore[arg-type]
                suite_name=selection.suite_name,
                subplan=selection.subplan,
                scenario_filter=scenario_filter,
            )
        self.output.print_import_summary(result)
        return ExitCode.SUCCESS

    @staticmethod
    def _load_cases(selection: TestFileSelection, loader: TestAssetLoader) -> List[LocalCase]:
        if selection.file_type == "plan":
            return loader.load_plan(selection.path, selection.subplan or "")
        # Full scenario list; the engine applies the filter to creates, updates
        # and deletes only.
        cases = loader.load_script(selection.path)
        if selection.scenarios:
            TestAssetLoader.check_scenario_names(cases, selection.scenarios, selection.path)
        return cases

    def _operations(self, project_id: str) -> TestRailOperations:
        api = self._api or APIWrapper(self._authenticator or Authenticator())
        return TestRailOperations(api, project_id)
