"""Typed request and response structures for TestRail operations.

Each remote operation sends one of the request dataclasses below (serialized
with ``to_payload()``) and parses its result into one of the response
dataclasses (built with ``from_response()``). Remote ids are always strings,
regardless of how TestRail encodes them on the wire.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Fixed template for cases with separated steps ("Test Case (Steps)")
CASE_TEMPLATE_ID = 2
CASE_PRECONDITIONS = "See the Steps section for details"


def _id(value: Any) -> str:
    if value is None or value == "":
        return ""
    return str(value)


@dataclass
class CustomStep:
    """One entry of a case's ``custom_steps_separated`` field.

    Attributes:
        content: The activity name
        expected: Rendered row table for the activity (see case_formatter)
    """
    content: str
    expected: str

    def to_payload(self) -> Dict[str, str]:
        return {'content': self.content, 'expected': self.expected}


@dataclass
class CaseBody:
    """Request body for add_case / update_case.

    Attributes:
        title: Case title (scenario name, or script/scenario/row for plans)
        custom_steps: Ordered separated steps, one per surviving local step
        template_id: TestRail template identifier (always the steps template)
        preconditions: Fixed preconditions text
    """
    title: str
    custom_steps: List[CustomStep] = field(default_factory=list)
    template_id: int = CASE_TEMPLATE_ID
    preconditions: str = CASE_PRECONDITIONS

    def to_payload(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'template_id': self.template_id,
            'custom_preconds': self.preconditions,
            'custom_steps_separated': [step.to_payload() for step in self.custom_steps],
        }


@dataclass
class SuiteRequest:
    """Request body for add_suite."""
    name: str

    def to_payload(self) -> Dict[str, str]:
        return {
            'name': self.name,
            'description': f"Test suite corresponding to script {self.name}",
        }


@dataclass
class SectionRequest:
    """Request body for add_section."""
    name: str
    suite_id: str

    def to_payload(self) -> Dict[str, str]:
        return {
            'name': self.name,
            'suite_id': self.suite_id,
            'description': f"Section corresponding to script: {self.name}",
        }


@dataclass
class ReorderRequest:
    """Request body for move_cases_to_section.

    TestRail expects the ids as a single comma separated string; the order of
    that string is the order the cases end up in.
    """
    suite_id: str
    case_ids: List[str]

    def to_payload(self) -> Dict[str, str]:
        return {
            'suite_id': self.suite_id,
            'case_ids': ", ".join(self.case_ids),
        }


@dataclass
class RemoteSuite:
    """A suite as returned by TestRail."""
    id: str
    name: str = ""
    url: str = ""

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> 'RemoteSuite':
        return cls(id=_id(data.get('id')), name=data.get('name') or "", url=data.get('url') or "")


@dataclass
class RemoteSection:
    """A section as returned by TestRail."""
    id: str
    name: str = ""
    suite_id: str = ""

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> 'RemoteSection':
        return cls(
            id=_id(data.get('id')),
            name=data.get('name') or "",
            suite_id=_id(data.get('suite_id')),
        )


@dataclass
class RemoteCase:
    """A test case as returned by TestRail."""
    id: str
    title: str = ""
    section_id: str = ""
    suite_id: str = ""

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> 'RemoteCase':
        return cls(
            id=_id(data.get('id')),
            title=data.get('title') or "",
            section_id=_id(data.get('section_id')),
            suite_id=_id(data.get('suite_id')),
        )


@dataclass
class RemoteRun:
    """A test run as returned by TestRail.

    Attributes:
        id: Run id
        name: Run name
        is_completed: True once the run has been closed
        suite_id: Suite the run executes
        url: Link to the run in the TestRail UI (if returned)
    """
    id: str
    name: str = ""
    is_completed: bool = False
    suite_id: Optional[str] = None
    url: str = ""

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> 'RemoteRun':
        suite_id = data.get('suite_id')
        return cls(
            id=_id(data.get('id')),
            name=data.get('name') or "",
            is_completed=bool(data.get('is_completed')),
            suite_id=_id(suite_id) if suite_id is not None else None,
            url=data.get('url') or "",
        )
