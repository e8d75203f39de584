"""Mapping file loading and saving.

This module handles locating, loading and saving the project mapping file
(``<project>/.meta/project.tms.json``). The project root is the directory
holding the ``artifact`` folder the test files live in; every path stored in
the mapping is relative to it and uses forward slashes.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.testrail_client.errors import ConfigurationError

from .errors import MappingError
from .models import FileEntry, Mapping, ScenarioLink

logger = logging.getLogger(__name__)


class MappingFile:
    """Handles mapping file location, loading, validation, and saving.

    Mapping file structure:
        {
          "projectId": "7",
          "files": [
            {"path": "artifact/script/login.yaml", "fileType": "script",
             "suiteId": "12", "suiteUrl": "...", "suiteName": "login",
             "scenarios": [{"testCase": "happy path", "scenarioName": "happy path",
                            "testCaseId": "1001"}]}
          ]
        }

    A missing mapping file is a configuration problem: the file is created by
    the project owner and must carry the TestRail project id.
    """

    META_DIR = '.meta'
    FILE_NAME = 'project.tms.json'
    ARTIFACT_DIR = 'artifact'

    def __init__(self, path: str):
        self.path = str(path)

    @property
    def project_root(self) -> Path:
        return Path(self.path).resolve().parent.parent

    @classmethod
    def for_test_file(cls, test_file: str) -> 'MappingFile':
        """Locate the mapping file of the project a test file belongs to.

        Raises:
            ConfigurationError: If the test file is not inside an artifact directory
        """
        parts = Path(test_file).resolve().parts
        if cls.ARTIFACT_DIR not in parts:
            raise ConfigurationError(
                f"Cannot locate project root for {test_file}: "
                f"file is not inside an '{cls.ARTIFACT_DIR}' directory (use --mapping)"
            )
        index = len(parts) - 1 - parts[::-1].index(cls.ARTIFACT_DIR)
        root = Path(*parts[:index])
        return cls(str(root / cls.META_DIR / cls.FILE_NAME))

    def relative_path(self, test_file: str) -> str:
        """Return the project-relative path of a test file (e.g. ``artifact/script/a.yaml``).

        Raises:
            ConfigurationError: If the test file lies outside the project root
        """
        resolved = Path(test_file).resolve()
        try:
            return resolved.relative_to(self.project_root).as_posix()
        except ValueError:
            raise ConfigurationError(
                f"Test file {test_file} is outside the project root {self.project_root}"
            )

    def load(self) -> Mapping:
        """Load and parse the mapping file.

        Returns:
            Mapping parsed from the file

        Raises:
            ConfigurationError: If the file is missing or has no project id
            MappingError: If the file cannot be read or is malformed
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigurationError(f"Mapping file not found at {self.path}")
        except OSError as e:
            raise MappingError(str(e), self.path, 'read')

        try:
            data = json.loads(content) if content.strip() else {}
        except json.JSONDecodeError as e:
            raise MappingError(f"Invalid JSON syntax: {e}", self.path)

        if not isinstance(data, dict):
            raise MappingError(
                f"Mapping must be a JSON object, got {type(data).__name__}", self.path
            )

        project_id = data.get('projectId')
        if project_id is None or not str(project_id).strip():
            raise ConfigurationError(f"Mapping file {self.path} does not define projectId")

        files = data.get('files') or []
        if not isinstance(files, list):
            raise MappingError("Field 'files' must be a list", self.path)

        mapping = Mapping(
            project_id=str(project_id).strip(),
            files=[self._parse_entry(item) for item in files],
        )
        logger.debug(f"Loaded mapping with {len(mapping.files)} file(s) from {self.path}")
        return mapping

    def save(self, mapping: Mapping) -> None:
        """Save the mapping atomically.

        The snapshot is written to a temporary file in the same directory and
        then moved over the mapping file.

        Raises:
            MappingError: If the file cannot be written
        """
        content = json.dumps(self.to_dict(mapping), indent=2, ensure_ascii=False)
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise MappingError(str(e), directory, 'create_directory')

        tmp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=directory, prefix='.project.tms.', suffix='.tmp', delete=False
            ) as f:
                tmp_path = f.name
                f.write(content)
                f.write('\n')
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise MappingError(str(e), self.path, 'write')
        logger.info(f"Saved mapping to {self.path}")

    @classmethod
    def to_dict(cls, mapping: Mapping) -> Dict[str, Any]:
        return {
            'projectId': mapping.project_id,
            'files': [cls._entry_to_dict(entry) for entry in mapping.files],
        }

    @classmethod
    def _entry_to_dict(cls, entry: FileEntry) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'path': entry.path,
            'fileType': entry.file_type,
            'suiteId': entry.suite_id,
            'suiteName': entry.suite_name,
            'suiteUrl': entry.suite_url,
        }
        if entry.step_id is not None:
            data['stepId'] = entry.step_id
        if entry.subplan is not None:
            data['subplan'] = entry.subplan
        if entry.is_plan:
            data['planSteps'] = [cls._entry_to_dict(step) for step in entry.plan_steps]
        data['scenarios'] = [
            {
                'testCase': link.test_case,
                'scenarioName': link.scenario_name,
                'testCaseId': link.test_case_id,
            }
            for link in entry.scenarios
        ]
        return data

    def _parse_entry(self, data: Any, parent: Optional[FileEntry] = None) -> FileEntry:
        if not isinstance(data, dict):
            raise MappingError(f"File entry must be an object, got {type(data).__name__}", self.path)

        path = data.get('path')
        if not isinstance(path, str) or not path.strip():
            raise MappingError("File entry without 'path'", self.path)

        file_type = data.get('fileType') or 'script'
        if file_type not in ('script', 'plan'):
            raise MappingError(f"Unknown fileType '{file_type}' for {path}", self.path)

        suite_id = data.get('suiteId')
        step_id = data.get('stepId')
        entry = FileEntry(
            path=path,
            file_type=file_type,
            suite_id=str(suite_id) if suite_id not in (None, "") else None,
            suite_url=data.get('suiteUrl') or "",
            suite_name=data.get('suiteName') or "",
            step_id=str(step_id) if step_id not in (None, "") else None,
            subplan=data.get('subplan'),
        )

        if entry.is_plan:
            entry.plan_steps = [self._parse_entry(step, entry) for step in data.get('planSteps') or []]

        row = self._row_of(entry) if parent is not None else None
        entry.scenarios = self._parse_links(data.get('scenarios') or [], entry.path, row)
        return entry

    def _row_of(self, entry: FileEntry) -> int:
        try:
            return int(entry.step_id)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise MappingError(f"Plan step {entry.path} has invalid stepId '{entry.step_id}'", self.path)

    def _parse_links(self, items: List[Any], file_path: str, row: Optional[int]) -> List[ScenarioLink]:
        links = []
        for item in items:
            if not isinstance(item, dict):
                raise MappingError(f"Scenario entry must be an object in {file_path}", self.path)
            scenario_name = item.get('scenarioName')
            test_case_id = item.get('testCaseId')
            if not scenario_name or test_case_id in (None, ""):
                raise MappingError(
                    f"Scenario entry in {file_path} needs 'scenarioName' and 'testCaseId'", self.path
                )
            links.append(ScenarioLink(
                file_path=file_path,
                scenario_name=scenario_name,
                test_case_id=str(test_case_id),
                row=row,
            ))
        return links
