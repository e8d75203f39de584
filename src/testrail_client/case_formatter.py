"""Pure construction of TestRail case bodies from local cases.

This module turns a LocalCase into the CaseBody sent to add_case/update_case.
Each activity of the scenario becomes one separated step whose ``expected``
field is a small table rendered in TestRail markup:

    ||| Row | Test Step
    || 1 | GIVEN a running service
    || 2 |  deploy service
    [login.yaml][happy path][deploy]

No I/O happens here.
"""

import logging
from typing import List

from src.reconciliation.errors import ReconciliationError
from src.test_assets.models import LocalCase, LocalStep

from .models import CaseBody, CustomStep

logger = logging.getLogger(__name__)

NBSP = "\u00a0"

BDD_KEYWORDS = frozenset({
    "FEATURE",
    "RULE",
    "GIVEN",
    "SCENARIO",
    "EXAMPLE",
    "WHEN",
    "THEN",
    "AND",
    "BUT",
    "BACKGROUND",
    "SCENARIO OUTLINE",
})

EXPECTED_HEADER = "||| Row | Test Step\n"
STEP_SUFFIX_MARKER = "[STEP"


def format_step_description(text: str) -> str:
    """Prefix a description with a non-breaking space unless it opens with a BDD keyword.

    "AND" is the exception: it is a keyword but still gets the prefix, so that
    continuation lines render indented under the preceding GIVEN/WHEN/THEN.

    Args:
        text: Raw description of a custom step

    Returns:
        The description, possibly prefixed with NBSP
    """
    # Only a literal space ends the first token, so tab-led text is always prefixed.
    parts = text.split(" ")
    first_token = parts[0]
    if first_token == "AND" or first_token not in BDD_KEYWORDS:
        return NBSP + text
    return text


def _message_line(message_id: str) -> str:
    index = message_id.find(STEP_SUFFIX_MARKER)
    return message_id if index < 0 else message_id[:index]


def is_blank_step(step: LocalStep) -> bool:
    """True when every custom step of the activity has a blank description."""
    return all(not custom.description.strip() for custom in step.custom_steps)


def render_expected_block(step: LocalStep) -> str:
    """Render the ``expected`` text of one separated step.

    Blank descriptions produce no data line; the row number of every other
    line is the custom step's row index plus one.
    """
    lines = [EXPECTED_HEADER]
    for custom in step.custom_steps:
        if not custom.description.strip():
            continue
        lines.append(f"|| {custom.row_index + 1} | {format_step_description(custom.description)}\n")
    lines.append(_message_line(step.message_id))
    return "".join(lines)


def build_custom_steps(case: LocalCase) -> List[CustomStep]:
    """Build the separated steps of a case, skipping activities with only blank rows.

    TODO: confirm with test authors whether activities without any description
    should still appear as an empty step instead of being dropped.
    """
    custom_steps = []
    for step in case.steps:
        if is_blank_step(step):
            logger.debug(f"Omitting activity '{step.activity}' of '{case.scenario_name}': no descriptions")
            continue
        custom_steps.append(CustomStep(content=step.activity, expected=render_expected_block(step)))
    return custom_steps


def build_case_body(case: LocalCase) -> CaseBody:
    """Build the full case body for a local case.

    Raises:
        ReconciliationError: If no activity of the case survives
    """
    custom_steps = build_custom_steps(case)
    if not custom_steps:
        raise ReconciliationError("no step with a description to send", scenario=case.title)
    return CaseBody(title=case.title, custom_steps=custom_steps)
