"""Remote operations against a TestRail project.

TestRailOperations translates the typed requests of the reconciliation engine
into TestRail API v2 calls made through the APIWrapper transport, and parses
the responses into typed results. One instance is bound to one project.
"""

import logging
from typing import Any, Dict, List, Optional

from .api_wrapper import API_PATH, APIWrapper
from .errors import RemoteAPIError
from .models import (
    CaseBody,
    ReorderRequest,
    RemoteCase,
    RemoteRun,
    RemoteSection,
    RemoteSuite,
    SectionRequest,
    SuiteRequest,
)

logger = logging.getLogger(__name__)


class TestRailOperations:
    """Suite, section, case and run operations for a single TestRail project.

    Example:
        >>> ops = TestRailOperations(APIWrapper(Authenticator()), project_id="7")
        >>> suite = ops.create_suite("login")
        >>> section = ops.create_section(suite.id, "login")
    """

    # Not a test class, despite the name
    __test__ = False

    def __init__(self, api: APIWrapper, project_id: str):
        """Initialize operations for a project.

        Args:
            api: Transport exposing send_get / send_post
            project_id: TestRail project id all suites belong to
        """
        self.api = api
        self.project_id = str(project_id)

    def create_suite(self, name: str) -> RemoteSuite:
        """Create a suite in the project.

        Args:
            name: Suite name (script name, or plan/subplan)

        Returns:
            RemoteSuite: The created suite

        Raises:
            RemoteAPIError: If the call fails or returns no id
        """
        response = self.api.send_post(f"add_suite/{self.project_id}", SuiteRequest(name).to_payload())
        suite = RemoteSuite.from_response(self._require_id(response, "add_suite"))
        logger.info(f"Created suite '{name}' with id {suite.id}")
        return suite

    def create_section(self, suite_id: str, name: str) -> RemoteSection:
        """Create a section inside a suite."""
        request = SectionRequest(name=name, suite_id=suite_id)
        response = self.api.send_post(f"add_section/{self.project_id}", request.to_payload())
        section = RemoteSection.from_response(self._require_id(response, "add_section"))
        logger.info(f"Created section '{name}' with id {section.id} in suite {suite_id}")
        return section

    def create_case(self, section_id: str, body: CaseBody) -> RemoteCase:
        """Create a test case in a section.

        Args:
            section_id: Section the case is added to
            body: Case body built by case_formatter

        Returns:
            RemoteCase: The created case
        """
        response = self.api.send_post(f"add_case/{section_id}", body.to_payload())
        case = RemoteCase.from_response(self._require_id(response, "add_case"))
        logger.info(f"Added test case '{body.title}' with id {case.id}")
        return case

    def update_case(self, case_id: str, body: CaseBody) -> RemoteCase:
        """Overwrite an existing test case with a full case body."""
        response = self.api.send_post(f"update_case/{case_id}", body.to_payload())
        case = RemoteCase.from_response(self._require_id(response, "update_case"))
        logger.info(f"Updated test case '{body.title}' with id {case.id}")
        return case

    def delete_cases(self, case_ids: List[str]) -> None:
        """Delete test cases one by one.

        The first failing id aborts the call; cases deleted before it stay
        deleted.
        """
        for case_id in case_ids:
            self.api.send_post(f"delete_case/{case_id}")
            logger.info(f"Deleted test case {case_id}")

    def list_cases_for_suite(self, suite_id: str) -> List[RemoteCase]:
        """List every case of a suite."""
        items = self._get_list(f"get_cases/{self.project_id}&suite_id={suite_id}", 'cases')
        return [RemoteCase.from_response(item) for item in items]

    def list_sections(self, suite_id: str) -> List[RemoteSection]:
        """List every section of a suite."""
        items = self._get_list(f"get_sections/{self.project_id}&suite_id={suite_id}", 'sections')
        return [RemoteSection.from_response(item) for item in items]

    def reorder_cases(self, section_id: str, ordered_case_ids: List[str], suite_id: str) -> None:
        """Move the given cases into a section in the given order.

        Args:
            section_id: Target section
            ordered_case_ids: Case ids in the order they should appear
            suite_id: Suite owning the section
        """
        request = ReorderRequest(suite_id=suite_id, case_ids=list(ordered_case_ids))
        self.api.send_post(f"move_cases_to_section/{section_id}", request.to_payload())
        logger.info(f"Reordered {len(ordered_case_ids)} case(s) in section {section_id}")

    def list_runs(self, suite_id: str, active_only: bool = True) -> List[RemoteRun]:
        """List the runs of a suite.

        Args:
            suite_id: Suite whose runs are listed
            active_only: Only return runs that are not completed
        """
        path = f"get_runs/{self.project_id}&suite_id={suite_id}"
        if active_only:
            path += "&is_completed=0"
        return [RemoteRun.from_response(item) for item in self._get_list(path, 'runs')]

    def close_run(self, run_id: str) -> RemoteRun:
        """Close a run, archiving its results."""
        response = self.api.send_post(f"close_run/{run_id}", {'run': run_id})
        run = RemoteRun.from_response(self._require_id(response, "close_run"))
        logger.info(f"Closed run {run.id}")
        return run

    def suite_url(self, suite_id: str) -> str:
        """Return the browser URL of a suite."""
        return f"{self.api.instance_url}/index.php?/suites/view/{suite_id}"

    def _get_list(self, path: str, key: str) -> List[Dict[str, Any]]:
        """GET a list endpoint, accepting bare arrays and paginated envelopes.

        Paginated envelopes are followed through their ``_links.next`` path
        until exhausted.
        """
        items: List[Dict[str, Any]] = []
        next_path: Optional[str] = path
        while next_path:
            response = self.api.send_get(next_path)
            if isinstance(response, list):
                items.extend(response)
                break
            if not isinstance(response, dict) or not isinstance(response.get(key), list):
                raise RemoteAPIError(f"GET {next_path}", f"unexpected response shape, expected '{key}'")
            items.extend(response[key])
            next_path = self._next_page(response)
        return items

    @staticmethod
    def _next_page(response: Dict[str, Any]) -> Optional[str]:
        links = response.get('_links') or {}
        next_link = links.get('next')
        if not next_link:
            return None
        # Links look like "/api/v2/get_cases/1&suite_id=2&offset=250"
        marker = "/api/v2/"
        index = next_link.find(marker)
        if index >= 0:
            return next_link[index + len(marker):]
        if next_link.startswith(API_PATH):
            return next_link[len(API_PATH):]
        return next_link.lstrip('/')

    @staticmethod
    def _require_id(response: Any, operation: str) -> Dict[str, Any]:
        if not isinstance(response, dict) or response.get('id') in (None, ""):
            raise RemoteAPIError(operation, "response does not carry an id")
        return response
