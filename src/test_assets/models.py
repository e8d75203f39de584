"""Data models for the local test tree.

A LocalCase corresponds to one scenario of a script (or one scenario of a
script embedded in a plan step). It holds the ordered activities of the
scenario as LocalStep records, each with its ordered row-level sub-steps.
"""

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import List, NamedTuple, Optional


class ScenarioIdentity(NamedTuple):
    """Composite identity joining a local scenario to its remote test case.

    Equality is exact on all three fields; the remote case title never takes
    part in matching.
    """
    file_path: str
    scenario_name: str
    row: Optional[int] = None


@dataclass
class LocalCustomStep:
    """A single row-level sub-step of an activity.

    Attributes:
        row_index: Position of the row within the activity (0-based)
        script_row_index: Row number in the original script
        description: Free-text description of the row
    """
    row_index: int
    script_row_index: int
    description: str = ""


@dataclass
class LocalStep:
    """An activity of a scenario with its row-level sub-steps.

    Attributes:
        activity: Activity name (becomes the step content)
        custom_steps: Sub-steps in original row order
        message_id: Identifier rendered as the trailing line of the step
    """
    activity: str
    custom_steps: List[LocalCustomStep] = field(default_factory=list)
    message_id: str = ""


@dataclass
class LocalCase:
    """One scenario of a local script, the unit mapped to a remote test case.

    Attributes:
        scenario_name: Scenario name
        script_name: Script name without extension
        script_path: Project-relative path of the owning script
        row: Plan row for scripts embedded in a plan, None for plain scripts
        steps: Ordered activities
    """
    scenario_name: str
    script_name: str
    script_path: str
    row: Optional[int] = None
    steps: List[LocalStep] = field(default_factory=list)

    @property
    def identity(self) -> ScenarioIdentity:
        return ScenarioIdentity(self.script_path, self.scenario_name, self.row)

    @property
    def title(self) -> str:
        if self.row is None:
            return self.scenario_name
        return f"{self.script_name}/{self.scenario_name}/{self.row}"


def script_name_for(path: str) -> str:
    """Return the script name (file name without extension) for a path."""
    return PurePosixPath(path.replace('\\', '/')).stem
