"""Data models for reconciliation passes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from src.mapping_store.models import ScenarioLink
from src.test_assets.models import LocalCase
from src.testrail_client.models import CaseBody


class ReconciliationState(Enum):
    """States of one import pass.

    The pass moves forward through the states in declaration order and ends
    in PERSISTED, or in FAILED from any earlier state.
    """
    INIT = "init"
    SUITE_RESOLVED = "suite_resolved"
    SECTION_RESOLVED = "section_resolved"
    CASES_DIFFED = "cases_diffed"
    CASES_APPLIED = "cases_applied"
    ORDER_APPLIED = "order_applied"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass
class ReconciliationPlan:
    """Diff between the local cases of a file and its recorded links.

    Attributes:
        to_create: Local cases without a link, with their case bodies
        to_update: Local cases with a link, with their case bodies
        to_delete: Links without a matching local case
        skipped: Local cases whose body has no surviving step
        suite_id: Recorded suite id (None if the suite would be created)
    """
    to_create: List[Tuple[LocalCase, CaseBody]] = field(default_factory=list)
    to_update: List[Tuple[LocalCase, ScenarioLink, CaseBody]] = field(default_factory=list)
    to_delete: List[ScenarioLink] = field(default_factory=list)
    skipped: List[LocalCase] = field(default_factory=list)
    suite_id: Optional[str] = None


@dataclass
class ImportResult:
    """Outcome of a successful import pass.

    Attributes:
        path: Project-relative path of the imported file
        suite_id: Suite the file is mapped to
        suite_url: Browser URL of the suite
        section_id: Section holding the cases
        suite_created: True if the suite was created by this pass
        created: Links created by this pass
        updated: Links whose cases were overwritten
        deleted: Links removed together with their remote cases
        skipped: Titles of cases not sent because no step survived
        ordered_case_ids: Case ids sent to the reorder call
    """
    path: str
    suite_id: str
    suite_url: str
    section_id: str
    suite_created: bool = False
    created: List[ScenarioLink] = field(default_factory=list)
    updated: List[ScenarioLink] = field(default_factory=list)
    deleted: List[ScenarioLink] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    ordered_case_ids: List[str] = field(default_factory=list)
