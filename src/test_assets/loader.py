"""YAML reader for local scripts and plans.

A script file lists scenarios, each with ordered activities, each with
row-level steps:

    scenarios:
      - name: happy path
        activities:
          - name: open login page
            steps:
              - row: 4
                description: GIVEN the login page is open
              - row: 5
                description: enter credentials

A plan file lists subplans, each with ordered steps referencing scripts
relative to the plan file:

    subplans:
      - name: smoke
        steps:
          - script: ../script/login.yaml
            scenarios: [happy path]
            row: 3
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import yaml

from .errors import ValidationError
from .models import LocalCase, LocalCustomStep, LocalStep, script_name_for

logger = logging.getLogger(__name__)


class TestAssetLoader:
    """Loads LocalCase trees from script and plan files.

    Args:
        path_resolver: Maps a file path to the path recorded as the owning
            file of each case (the project-relative path). Defaults to the
            path as given, with forward slashes.
    """

    # Not a test class, despite the name
    __test__ = False

    def __init__(self, path_resolver: Optional[Callable[[str], str]] = None):
        self._resolve = path_resolver or (lambda path: Path(path).as_posix())

    def load_script(self, path: str, scenarios: Optional[Sequence[str]] = None) -> List[LocalCase]:
        """Load the scenarios of a script in file order.

        Args:
            path: Script file path
            scenarios: Optional scenario names to keep

        Returns:
            List of LocalCase, one per (selected) scenario

        Raises:
            ValidationError: If the file is invalid or a named scenario does not exist
        """
        return self._load_script(path, scenarios, row=None)

    def load_plan(self, path: str, subplan: str) -> List[LocalCase]:
        """Load every case referenced by the enabled steps of a subplan.

        Raises:
            ValidationError: If the plan or a referenced script is invalid, or the
                subplan does not exist
        """
        data = self._read_yaml(path)
        subplans = data.get('subplans')
        if not isinstance(subplans, list):
            raise ValidationError("Plan must define a 'subplans' list", path)

        selected = None
        for item in subplans:
            if isinstance(item, dict) and item.get('name') == subplan:
                selected = item
                break
        if selected is None:
            raise ValidationError(f"Subplan '{subplan}' not found", path)

        plan_dir = Path(path).parent
        cases: List[LocalCase] = []
        for index, step in enumerate(selected.get('steps') or [], start=1):
            if not isinstance(step, dict):
                raise ValidationError(f"Plan step {index} of '{subplan}' must be a mapping", path)
            if step.get('disabled'):
                logger.debug(f"Skipping disabled plan step {index} of '{subplan}'")
                continue
            script = step.get('script')
            if not script:
                raise ValidationError(f"Plan step {index} of '{subplan}' does not name a script", path)
            row = step.get('row', index)
            if not isinstance(row, int):
                raise ValidationError(f"Plan step {index} of '{subplan}' has a non-numeric row", path)
            names = self._plan_step_scenarios(step.get('scenarios'), index, subplan, path)
            cases.extend(self._load_script(str(plan_dir / script), names, row=row))

        logger.info(f"Loaded {len(cases)} case(s) from subplan '{subplan}' of {path}")
        return cases

    def _load_script(
        self,
        path: str,
        names: Optional[Sequence[str]],
        row: Optional[int],
    ) -> List[LocalCase]:
        data = self._read_yaml(path)
        items = data.get('scenarios')
        if not isinstance(items, list):
            raise ValidationError("Script must define a 'scenarios' list", path)

        script_path = self._resolve(path)
        script_name = script_name_for(path)
        file_name = Path(path).name

        cases = []
        for item in items:
            if not isinstance(item, dict) or not str(item.get('name') or '').strip():
                raise ValidationError("Every scenario needs a name", path)
            name = str(item['name']).strip()
            cases.append(LocalCase(
                scenario_name=name,
                script_name=script_name,
                script_path=script_path,
                row=row,
                steps=self._parse_activities(item, file_name, path),
            ))

        if names:
            cases = self.select_scenarios(cases, names, path)

        logger.debug(f"Loaded {len(cases)} scenario(s) from {path}")
        return cases

    @staticmethod
    def select_scenarios(cases: List[LocalCase], names: Sequence[str], path: str) -> List[LocalCase]:
        """Keep the cases whose scenario is named in ``names``.

        Raises:
            ValidationError: If a name matches no scenario
        """
        TestAssetLoader.check_scenario_names(cases, names, path)
        wanted = set(names)
        return [case for case in cases if case.scenario_name in wanted]

    @staticmethod
    def check_scenario_names(cases: List[LocalCase], names: Sequence[str], path: str) -> None:
        """Raise ValidationError if any of ``names`` matches no scenario in ``cases``."""
        known = {case.scenario_name for case in cases}
        unknown = [name for name in names if name not in known]
        if unknown:
            raise ValidationError(f"Unknown scenario(s): {', '.join(unknown)}", path)

    @staticmethod
    def _plan_step_scenarios(value: Any, index: int, subplan: str, path: str) -> Optional[List[str]]:
        # A plain string is a comma separated list of names.
        if value is None:
            return None
        if isinstance(value, str):
            return [name.strip() for name in value.split(',') if name.strip()]
        if isinstance(value, list):
            return [str(name).strip() for name in value]
        raise ValidationError(
            f"Plan step {index} of '{subplan}' has scenarios that are neither a list nor a string", path
        )

    def _parse_activities(self, scenario: Dict[str, Any], file_name: str, path: str) -> List[LocalStep]:
        scenario_name = str(scenario['name']).strip()
        steps = []
        seen = set()
        for activity in scenario.get('activities') or []:
            name = str((activity or {}).get('name') or '').strip() if isinstance(activity, dict) else ''
            if not name:
                raise ValidationError(f"Scenario '{scenario_name}' has an activity without a name", path)
            if name in seen:
                raise ValidationError(f"Scenario '{scenario_name}' repeats activity '{name}'", path)
            seen.add(name)

            rows = []
            for position, raw in enumerate(activity.get('steps') or []):
                if not isinstance(raw, dict):
                    raise ValidationError(f"Steps of activity '{name}' must be mappings", path)
                if raw.get('disabled'):
                    continue
                script_row = raw.get('row', position)
                if not isinstance(script_row, int):
                    raise ValidationError(f"Activity '{name}' has a step with a non-numeric row", path)
                rows.append((script_row, str(raw.get('description') or '')))
            rows.sort(key=lambda item: item[0])

            steps.append(LocalStep(
                activity=name,
                custom_steps=[
                    LocalCustomStep(row_index=index, script_row_index=script_row, description=text)
                    for index, (script_row, text) in enumerate(rows)
                ],
                message_id=f"[{file_name}][{scenario_name}][{name}]",
            ))
        return steps

    @staticmethod
    def _read_yaml(path: str) -> Dict[str, Any]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            raise ValidationError("Test file not found", path)
        except OSError as e:
            raise ValidationError(f"Cannot read test file: {e}", path)

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValidationError(f"Invalid YAML syntax: {e}", path)

        if not isinstance(data, dict):
            raise ValidationError("Test file must be a YAML mapping", path)
        return data
