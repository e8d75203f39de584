"""Pytest configuration and fixtures for integration tests.

Integration tests drive the import and close-runs commands end to end on an
on-disk project (YAML assets plus mapping file) against an in-memory TestRail.
"""

from pathlib import Path

import pytest

from src.cli.close_runs_command import CloseRunsCommand
from src.cli.import_command import ImportCommand
from src.cli.output import OutputHandler
from tests.fixtures.projects import write_project
from tests.helpers.fake_testrail import FakeTestRail


@pytest.fixture
def project(tmp_path) -> Path:
    """Project root with login/checkout scripts, a regression plan and an empty mapping."""
    return write_project(tmp_path / "project")


@pytest.fixture
def testrail() -> FakeTestRail:
    return FakeTestRail()


@pytest.fixture
def import_command(testrail) -> ImportCommand:
    return ImportCommand(output_handler=OutputHandler(no_color=True), api=testrail)


@pytest.fixture
def close_runs_command(testrail) -> CloseRunsCommand:
    return CloseRunsCommand(output_handler=OutputHandler(no_color=True), api=testrail)
