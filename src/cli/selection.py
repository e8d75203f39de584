"""Validation of the script/plan/subplan/scenario options shared by both tools."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from src.mapping_store.mapping_file import MappingFile
from src.test_assets.errors import ValidationError
from src.test_assets.models import script_name_for

from .errors import UsageError


@dataclass
class TestFileSelection:
    """The test file a command operates on.

    Attributes:
        path: Script or plan path as given on the command line
        file_type: "script" or "plan"
        subplan: Subplan name (plans only)
        scenarios: Scenario names to restrict the import to (scripts only)
    """
    __test__ = False

    path: str
    file_type: str
    subplan: Optional[str] = None
    scenarios: List[str] = field(default_factory=list)

    @property
    def suite_name(self) -> str:
        """Suite name: script name, or ``<plan name>/<subplan>`` for plans."""
        name = script_name_for(self.path)
        if self.file_type == "plan":
            return f"{name}/{self.subplan}"
        return name


def parse_scenarios(value: Optional[str]) -> List[str]:
    """Split a comma separated scenario list, dropping blank names."""
    if not value:
        return []
    return [name.strip() for name in value.split(',') if name.strip()]


def resolve_selection(
    script: Optional[str],
    plan: Optional[str],
    subplan: Optional[str],
    scenario: Optional[str] = None,
) -> TestFileSelection:
    """Validate the option combination and return the selected test file.

    Raises:
        UsageError: If not exactly one of script/plan is given, -subplan is
            missing for a plan, or -scenario is combined with a plan
        ValidationError: If the test file does not exist
    """
    if bool(script) == bool(plan):
        raise UsageError("Exactly one of -script or -plan must be provided", option="-script/-plan")

    if plan:
        if not subplan or not subplan.strip():
            raise UsageError("-subplan is required with -plan", option="-subplan")
        if scenario:
            raise UsageError("-scenario can only be used with -script", option="-scenario")
        selection = TestFileSelection(path=plan, file_type="plan", subplan=subplan.strip())
    else:
        if subplan:
            raise UsageError("-subplan can only be used with -plan", option="-subplan")
        selection = TestFileSelection(path=script, file_type="script", scenarios=parse_scenarios(scenario))  # type: ignore[arg-type]

    if not os.path.isfile(selection.path):
        raise ValidationError("Test file not found", selection.path)
    return selection


def locate_mapping(selection: TestFileSelection, mapping_path: Optional[str] = None) -> MappingFile:
    """Return the mapping file for a selection (``--mapping`` wins over the derived location)."""
    if mapping_path:
        return MappingFile(mapping_path)
    return MappingFile.for_test_file(selection.path)
