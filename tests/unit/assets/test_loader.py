"""Unit tests for TestAssetLoader."""

import pytest

from src.mapping_store.mapping_file import MappingFile
from src.test_assets.errors import ValidationError
from src.test_assets.loader import TestAssetLoader
from tests.fixtures.projects import write_project


@pytest.fixture
def project(tmp_path):
    return write_project(tmp_path)


@pytest.fixture
def loader(project):
    mapping_file = MappingFile(str(project / ".meta" / "project.tms.json"))
    return TestAssetLoader(path_resolver=mapping_file.relative_path)


def write_script(project, name, content):
    path = project / "artifact" / "script" / name
    path.write_text(content, encoding="utf-8")
    return str(path)


class TestLoadScript:
    """Test cases for TestAssetLoader.load_script."""

    def test_scenarios_in_file_order(self, project, loader):
        cases = loader.load_script(str(project / "artifact" / "script" / "login.yaml"))

        assert [case.scenario_name for case in cases] == ["happy path", "locked out", "no descriptions"]
        assert all(case.row is None for case in cases)
        assert cases[0].script_path == "artifact/script/login.yaml"
        assert cases[0].script_name == "login"
        assert cases[0].title == "happy path"

    def test_steps_sorted_by_row(self, project, loader):
        case = loader.load_script(str(project / "artifact" / "script" / "login.yaml"))[0]

        first = case.steps[0]
        assert first.activity == "open login page"
        assert [(s.row_index, s.script_row_index, s.description) for s in first.custom_steps] == [
            (0, 4, "WHEN the user waits"),
            (1, 5, "GIVEN the login page is open"),
        ]
        assert first.message_id == "[login.yaml][happy path][open login page]"

    def test_blank_descriptions_are_kept_as_rows(self, project, loader):
        case = loader.load_script(str(project / "artifact" / "script" / "login.yaml"))[0]

        assert [s.description for s in case.steps[1].custom_steps] == [
            "enter valid credentials", "", "THEN the dashboard is shown",
        ]

    def test_disabled_steps_are_skipped(self, project, loader):
        case = loader.load_script(str(project / "artifact" / "script" / "login.yaml"))[1]

        assert [s.script_row_index for s in case.steps[0].custom_steps] == [12, 13]

    def test_row_defaults_to_position(self, project, loader):
        case = loader.load_script(str(project / "artifact" / "script" / "checkout.yaml"))[0]

        assert case.steps[0].custom_steps[0].script_row_index == 0

    def test_scenario_filter(self, project, loader):
        cases = loader.load_script(str(project / "artifact" / "script" / "login.yaml"), ["locked out"])

        assert [case.scenario_name for case in cases] == ["locked out"]

    def test_unknown_scenario_raises(self, project, loader):
        with pytest.raises(ValidationError) as exc_info:
            loader.load_script(str(project / "artifact" / "script" / "login.yaml"), ["happy path", "missing"])

        assert "missing" in str(exc_info.value)

    def test_missing_file_raises(self, project, loader):
        with pytest.raises(ValidationError) as exc_info:
            loader.load_script(str(project / "artifact" / "script" / "nope.yaml"))

        assert exc_info.value.original_message == "Test file not found"

    def test_invalid_yaml_raises(self, project, loader):
        path = write_script(project, "broken.yaml", "scenarios: [unclosed\n")

        with pytest.raises(ValidationError) as exc_info:
            loader.load_script(path)

        assert "Invalid YAML" in str(exc_info.value)

    @pytest.mark.parametrize("content", ["- just a list\n", "name: x\n", ""])
    def test_non_script_document_raises(self, project, loader, content):
        path = write_script(project, "odd.yaml", content)

        with pytest.raises(ValidationError):
            loader.load_script(path)

    def test_duplicate_activity_raises(self, project, loader):
        path = write_script(project, "dup.yaml", (
            "scenarios:\n"
            "  - name: s\n"
            "    activities:\n"
            "      - name: a\n"
            "      - name: a\n"
        ))

        with pytest.raises(ValidationError) as exc_info:
            loader.load_script(path)

        assert "repeats activity 'a'" in str(exc_info.value)

    def test_blank_activity_name_raises(self, project, loader):
        path = write_script(project, "blank.yaml", (
            "scenarios:\n"
            "  - name: s\n"
            "    activities:\n"
            "      - name: '  '\n"
        ))

        with pytest.raises(ValidationError):
            loader.load_script(path)

    def test_default_resolver_keeps_given_path(self, project):
        cases = TestAssetLoader().load_script(str(project / "artifact" / "script" / "checkout.yaml"))

        assert cases[0].script_path.endswith("artifact/script/checkout.yaml")


class TestLoadPlan:
    """Test cases for TestAssetLoader.load_plan."""

    def test_subplan_cases(self, project, loader):
        cases = loader.load_plan(str(project / "artifact" / "plan" / "regression.yaml"), "smoke")

        assert [case.title for case in cases] == [
            "login/happy path/1",
            "checkout/pay by card/7",
            "checkout/pay by voucher/7",
        ]
        assert cases[0].script_path == "artifact/script/login.yaml"
        assert cases[1].identity == ("artifact/script/checkout.yaml", "pay by card", 7)

    def test_other_subplan(self, project, loader):
        cases = loader.load_plan(str(project / "artifact" / "plan" / "regression.yaml"), "nightly")

        assert [case.title for case in cases] == ["checkout/pay by card/1", "checkout/pay by voucher/1"]

    def test_unknown_subplan_raises(self, project, loader):
        with pytest.raises(ValidationError) as exc_info:
            loader.load_plan(str(project / "artifact" / "plan" / "regression.yaml"), "weekly")

        assert "weekly" in str(exc_info.value)

    def test_plan_without_subplans_raises(self, project, loader):
        path = project / "artifact" / "plan" / "empty.yaml"
        path.write_text("name: empty\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            loader.load_plan(str(path), "smoke")

    def test_missing_referenced_script_raises(self, project, loader):
        path = project / "artifact" / "plan" / "stale.yaml"
        path.write_text(
            "subplans:\n  - name: smoke\n    steps:\n      - script: ../script/gone.yaml\n",
            encoding="utf-8",
        )

        with pytest.raises(ValidationError) as exc_info:
            loader.load_plan(str(path), "smoke")

        assert "gone.yaml" in str(exc_info.value)

    def test_scenarios_given_as_comma_separated_string(self, project, loader):
        path = project / "artifact" / "plan" / "inline.yaml"
        path.write_text(
            "subplans:\n  - name: smoke\n    steps:\n"
            "      - script: ../script/login.yaml\n        scenarios: happy path, locked out\n",
            encoding="utf-8",
        )

        cases = loader.load_plan(str(path), "smoke")

        assert [case.scenario_name for case in cases] == ["happy path", "locked out"]

    def test_scenarios_of_another_type_raise(self, project, loader):
        path = project / "artifact" / "plan" / "broken.yaml"
        path.write_text(
            "subplans:\n  - name: smoke\n    steps:\n"
            "      - script: ../script/login.yaml\n        scenarios: {happy path: true}\n",
            encoding="utf-8",
        )

        with pytest.raises(ValidationError) as exc_info:
            loader.load_plan(str(path), "smoke")

        assert "neither a list nor a string" in str(exc_info.value)


class TestSelectScenarios:
    """Test cases for TestAssetLoader.select_scenarios."""

    def test_keeps_file_order(self, project, loader):
        cases = loader.load_script(str(project / "artifact" / "script" / "login.yaml"))

        selected = TestAssetLoader.select_scenarios(cases, ["no descriptions", "happy path"], "login.yaml")

        assert [case.scenario_name for case in selected] == ["happy path", "no descriptions"]


class TestCheckScenarioNames:
    """Test cases for TestAssetLoader.check_scenario_names."""

    def test_known_names_pass(self, project, loader):
        cases = loader.load_script(str(project / "artifact" / "script" / "login.yaml"))

        TestAssetLoader.check_scenario_names(cases, ["locked out"], "login.yaml")

    def test_unknown_names_are_listed(self, project, loader):
        cases = loader.load_script(str(project / "artifact" / "script" / "login.yaml"))

        with pytest.raises(ValidationError) as exc_info:
            TestAssetLoader.check_scenario_names(cases, ["happy path", "admin", "guest"], "login.yaml")

        assert "Unknown scenario(s): admin, guest" in str(exc_info.value)
