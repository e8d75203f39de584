"""Test fixtures for test-case synchronization tests.

This module provides:
- Builders for local test trees (LocalCase / LocalStep)
- On-disk projects with YAML scripts, plans and mapping files
- Mapping snapshots for scripts and plans
"""

from .local_cases import SCRIPT_PATH, make_case, make_cases, make_step
from .projects import (
    plan_mapping_snapshot,
    read_mapping,
    script_mapping_snapshot,
    write_project,
)

__all__ = [
    "SCRIPT_PATH",
    "make_case",
    "make_cases",
    "make_step",
    "plan_mapping_snapshot",
    "read_mapping",
    "script_mapping_snapshot",
    "write_project",
]
