"""Data models for the mapping between local test files and TestRail.

This module defines the in-memory shape of the mapping file: one Mapping per
project, one FileEntry per imported script (or plan/subplan), and one
ScenarioLink per scenario that has a remote test case.
All models use dataclasses, following the patterns of the other packages.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple

from src.test_assets.models import ScenarioIdentity, script_name_for

FileType = Literal["script", "plan"]

# (path, subplan); subplan is None for scripts
FileKey = Tuple[str, Optional[str]]


@dataclass
class ScenarioLink:
    """Link between a local scenario and its remote test case.

    Attributes:
        file_path: Project-relative path of the script owning the scenario
        scenario_name: Scenario name
        test_case_id: TestRail case id
        row: Plan row for scripts embedded in a plan, None otherwise
    """
    file_path: str
    scenario_name: str
    test_case_id: str
    row: Optional[int] = None

    @property
    def identity(self) -> ScenarioIdentity:
        return ScenarioIdentity(self.file_path, self.scenario_name, self.row)

    @property
    def test_case(self) -> str:
        """Title of the remote case as stored in the mapping file."""
        if self.row is None:
            return self.scenario_name
        return f"{script_name_for(self.file_path)}/{self.scenario_name}/{self.row}"


@dataclass
class FileEntry:
    """Mapping record of one imported file.

    Script entries hold their links in ``scenarios``. Plan entries hold one
    nested entry per (script, plan row) in ``plan_steps``; the nested entries
    carry the plan row in ``step_id`` and the links of that plan step.

    Attributes:
        path: Project-relative path of the file
        file_type: "script" or "plan"
        suite_id: TestRail suite id, assigned once
        suite_url: Browser URL of the suite
        suite_name: Name the suite was created with
        step_id: Plan row of a nested plan-step entry
        subplan: Subplan name for plan entries
        plan_steps: Nested plan-step entries (plans only)
        scenarios: Ordered scenario links
    """
    path: str
    file_type: FileType = "script"
    suite_id: Optional[str] = None
    suite_url: str = ""
    suite_name: str = ""
    step_id: Optional[str] = None
    subplan: Optional[str] = None
    plan_steps: List['FileEntry'] = field(default_factory=list)
    scenarios: List[ScenarioLink] = field(default_factory=list)

    @property
    def key(self) -> FileKey:
        return (self.path, self.subplan)

    @property
    def is_plan(self) -> bool:
        return self.file_type == "plan"

    def all_links(self) -> List[ScenarioLink]:
        """Every link of the entry in stored order (plan steps flattened)."""
        if self.is_plan:
            return [link for step in self.plan_steps for link in step.scenarios]
        return list(self.scenarios)


@dataclass
class Mapping:
    """Root of the mapping file, one per project.

    Attributes:
        project_id: TestRail project id
        files: Ordered file entries
    """
    project_id: str
    files: List[FileEntry] = field(default_factory=list)
