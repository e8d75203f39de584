"""Reconciliation engine: brings a TestRail suite in line with a local file.

One import pass walks a fixed sequence of states:

    INIT -> SUITE_RESOLVED -> SECTION_RESOLVED -> CASES_DIFFED
         -> CASES_APPLIED -> ORDER_APPLIED -> PERSISTED

Any failure moves the pass to FAILED and propagates. Remote mutations are
not rolled back and the mapping is written only once, at the very end, so a
failure after a create leaves that case unknown to the mapping; the next pass
creates it again.
"""

import logging
from typing import List, Optional, Sequence

from src.mapping_store.mapping_file import MappingFile
from src.mapping_store.models import FileEntry, FileType, ScenarioLink
from src.mapping_store.store import MappingStore
from src.test_assets.models import LocalCase, ScenarioIdentity
from src.testrail_client.case_formatter import build_case_body
from src.testrail_client.models import RemoteSection
from src.testrail_client.testrail_operations import TestRailOperations

from .errors import ReconciliationError
from .models import ImportResult, ReconciliationPlan, ReconciliationState

logger = logging.getLogger(__name__)


class ReconciliationEngine:
    """Computes and applies the diff between local cases and the mapping.

    The engine never closes runs; deleting cases from a suite with open runs
    fails on the remote side and the operator runs the close-runs tool first.

    Example:
        >>> engine = ReconciliationEngine(operations, store, mapping_file)
        >>> result = engine.import_file("artifact/script/login.yaml", cases,
        ...                             file_type="script", suite_name="login")
        >>> print(result.suite_url)
    """

    def __init__(
        self,
        client: TestRailOperations,
        store: MappingStore,
        mapping_file: Optional[MappingFile] = None,
    ):
        """Initialize the engine with its collaborators.

        Args:
            client: Remote operations for the mapped project
            store: Mapping store, mutated in memory during a pass
            mapping_file: Where the mapping is persisted at the end of a pass
                (None keeps the result in memory only)
        """
        self.client = client
        self.store = store
        self.mapping_file = mapping_file
        self.state = ReconciliationState.INIT

    def import_file(
        self,
        path: str,
        local_cases: List[LocalCase],
        file_type: FileType = "script",
        suite_name: Optional[str] = None,
        subplan: Optional[str] = None,
        scenario_filter: Optional[Sequence[str]] = None,
    ) -> ImportResult:
        """Run one import pass for a file.

        Args:
            path: Project-relative path of the script or plan
            local_cases: Local cases in scenario order
            file_type: "script" or "plan"
            suite_name: Name for a suite created by this pass
            subplan: Subplan name for plans
            scenario_filter: Scenario names the pass is restricted to

        Returns:
            ImportResult describing what was created, updated and deleted

        Raises:
            ReconciliationError: If the local cases share a composite identity
            RemoteAPIError: If a remote call fails
            MappingError: If the mapping cannot be updated or written
        """
        self.state = ReconciliationState.INIT
        try:
            self._validate_identities(local_cases)

            entry, suite_created = self._resolve_suite(path, file_type, suite_name, subplan)
            self._advance(ReconciliationState.SUITE_RESOLVED)

            section = self._resolve_section(entry, suite_created, suite_name or entry.suite_name)
            self._advance(ReconciliationState.SECTION_RESOLVED)

            plan = self._diff(path, local_cases, subplan, scenario_filter)
            plan.suite_id = entry.suite_id
            self._advance(ReconciliationState.CASES_DIFFED)

            result = ImportResult(
                path=path,
                suite_id=entry.suite_id or "",
                suite_url=entry.suite_url or self.client.suite_url(entry.suite_id),
                section_id=section.id,
                suite_created=suite_created,
                skipped=[case.title for case in plan.skipped],
            )
            self._apply(path, subplan, section, plan, result)
            self._advance(ReconciliationState.CASES_APPLIED)

            self._apply_order(path, subplan, entry, section, local_cases, result)
            self._advance(ReconciliationState.ORDER_APPLIED)

            if self.mapping_file is not None:
                self.mapping_file.save(self.store.snapshot())
            self._advance(ReconciliationState.PERSISTED)
        except Exception:
            logger.error(f"Import of {path} failed in state {self.state.value}")
            self.state = ReconciliationState.FAILED
            raise

        logger.info(
            f"Imported {path}: {len(result.created)} created, {len(result.updated)} updated, "
            f"{len(result.deleted)} deleted, {len(result.skipped)} skipped"
        )
        return result

    def preview(
        self,
        path: str,
        local_cases: List[LocalCase],
        subplan: Optional[str] = None,
        scenario_filter: Optional[Sequence[str]] = None,
    ) -> ReconciliationPlan:
        """Compute the diff for a file against the mapping without touching TestRail.

        Raises:
            ReconciliationError: If the local cases share a composite identity
        """
        self._validate_identities(local_cases)
        plan = self._diff(path, local_cases, subplan, scenario_filter)
        entry = self.store.get_file(path, subplan)
        plan.suite_id = entry.suite_id if entry else None
        return plan

    def _advance(self, state: ReconciliationState) -> None:
        logger.debug(f"Reconciliation state: {self.state.value} -> {state.value}")
        self.state = state

    @staticmethod
    def _validate_identities(local_cases: List[LocalCase]) -> None:
        seen = set()
        for case in local_cases:
            if case.identity in seen:
                raise ReconciliationError(
                    f"duplicate scenario identity {tuple(case.identity)}", scenario=case.title
                )
            seen.add(case.identity)

    def _resolve_suite(
        self,
        path: str,
        file_type: FileType,
        suite_name: Optional[str],
        subplan: Optional[str],
    ):
        entry = self.store.get_file(path, subplan)
        if entry is not None and entry.suite_id:
            logger.info(f"Using existing suite {entry.suite_id} for {path}")
            return entry, False

        name = suite_name or path
        suite = self.client.create_suite(name)
        if entry is None:
            entry = FileEntry(path=path, file_type=file_type, subplan=subplan)
        entry.suite_id = suite.id
        entry.suite_name = name
        entry.suite_url = suite.url or self.client.suite_url(suite.id)
        self.store.upsert_file(entry)
        return entry, True

    def _resolve_section(self, entry: FileEntry, suite_created: bool, name: str) -> RemoteSection:
        suite_id = entry.suite_id or ""
        if not suite_created:
            sections = self.client.list_sections(suite_id)
            if sections:
                logger.debug(f"Using section {sections[0].id} of suite {suite_id}")
                return sections[0]
            logger.warning(f"Suite {suite_id} has no section; creating one")
        return self.client.create_section(suite_id, name)

    def _diff(
        self,
        path: str,
        local_cases: List[LocalCase],
        subplan: Optional[str],
        scenario_filter: Optional[Sequence[str]],
    ) -> ReconciliationPlan:
        wanted = set(scenario_filter) if scenario_filter else None
        plan = ReconciliationPlan()

        for case in local_cases:
            if wanted is not None and case.scenario_name not in wanted:
                continue
            try:
                body = build_case_body(case)
            except ReconciliationError as e:
                logger.warning(f"Skipping '{case.title}': {e.original_message}")
                plan.skipped.append(case)
                continue
            link = self.store.find_link(path, case.identity, subplan)
            if link is None:
                plan.to_create.append((case, body))
            else:
                plan.to_update.append((case, link, body))

        local_identities = {case.identity for case in local_cases}
        for link in self.store.links_for(path, subplan):
            if link.identity in local_identities:
                continue
            if wanted is not None and link.scenario_name not in wanted:
                continue
            plan.to_delete.append(link)

        logger.debug(
            f"Diff for {path}: {len(plan.to_create)} to create, {len(plan.to_update)} to update, "
            f"{len(plan.to_delete)} to delete"
        )
        return plan

    def _apply(
        self,
        path: str,
        subplan: Optional[str],
        section: RemoteSection,
        plan: ReconciliationPlan,
        result: ImportResult,
    ) -> None:
        for case, body in plan.to_create:
            remote = self.client.create_case(section.id, body)
            link = ScenarioLink(
                file_path=case.script_path,
                scenario_name=case.scenario_name,
                test_case_id=remote.id,
                row=case.row,
            )
            result.created.append(self.store.upsert_link(path, link, subplan))

        for case, link, body in plan.to_update:
            self.client.update_case(link.test_case_id, body)
            result.updated.append(link)

        if plan.to_delete:
            self.client.delete_cases([link.test_case_id for link in plan.to_delete])
            for link in plan.to_delete:
                self.store.remove_link(path, link.identity, subplan)
                result.deleted.append(link)

    def _apply_order(
        self,
        path: str,
        subplan: Optional[str],
        entry: FileEntry,
        section: RemoteSection,
        local_cases: List[LocalCase],
        result: ImportResult,
    ) -> None:
        identities: List[ScenarioIdentity] = []
        ordered_ids: List[str] = []
        for case in local_cases:
            link = self.store.find_link(path, case.identity, subplan)
            if link is None:
                continue
            identities.append(case.identity)
            ordered_ids.append(link.test_case_id)

        if not ordered_ids:
            logger.debug(f"No linked cases to order for {path}")
            return

        self.client.reorder_cases(section.id, ordered_ids, entry.suite_id or "")
        self.store.reorder_links(path, identities, subplan)
        result.ordered_case_ids = ordered_ids
