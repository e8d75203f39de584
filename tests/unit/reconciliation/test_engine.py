"""Unit tests for ReconciliationEngine against an in-memory TestRail."""

import json
from unittest.mock import Mock

import pytest

from src.mapping_store.mapping_file import MappingFile
from src.mapping_store.models import FileEntry, Mapping
from src.mapping_store.store import MappingStore
from src.reconciliation.engine import ReconciliationEngine
from src.reconciliation.errors import ReconciliationError
from src.reconciliation.models import ReconciliationState
from src.test_assets.models import ScenarioIdentity
from src.testrail_client.errors import RemoteAPIError
from src.testrail_client.testrail_operations import TestRailOperations
from tests.fixtures.local_cases import SCRIPT_PATH, make_case, make_cases, make_step
from tests.helpers.fake_testrail import FakeTestRail, operations_in_order

PLAN_PATH = "artifact/plan/regression.yaml"
CHECKOUT_PATH = "artifact/script/checkout.yaml"


@pytest.fixture
def fake():
    return FakeTestRail()


@pytest.fixture
def client(fake):
    return TestRailOperations(fake, project_id="7")


@pytest.fixture
def store():
    return MappingStore(Mapping(project_id="7"))


def import_script(client, store, cases, mapping_file=None, **kwargs):
    engine = ReconciliationEngine(client, store, mapping_file)
    result = engine.import_file(SCRIPT_PATH, cases, file_type="script", suite_name="login", **kwargs)
    return engine, result


def linked_ids(store, path=SCRIPT_PATH, subplan=None):
    return {link.scenario_name: link.test_case_id for link in store.links_for(path, subplan)}


class TestFirstImport:
    """A file without a mapping entry gets a suite, a section and one case per scenario."""

    def test_creates_suite_section_and_cases(self, fake, client, store):
        engine, result = import_script(client, store, make_cases("A", "B"))

        assert operations_in_order(fake) == [
            ('POST', 'add_suite'),
            ('POST', 'add_section'),
            ('POST', 'add_case'),
            ('POST', 'add_case'),
            ('POST', 'move_cases_to_section'),
        ]
        assert result.suite_created
        assert result.suite_id == "1"
        assert result.suite_url == "https://testrail.example.com/index.php?/suites/view/1"
        assert result.section_id == "2"
        assert [link.scenario_name for link in result.created] == ["A", "B"]
        assert engine.state == ReconciliationState.PERSISTED

    def test_records_links_and_suite(self, client, store):
        import_script(client, store, make_cases("A", "B"))

        entry = store.get_file(SCRIPT_PATH)
        assert entry.suite_id == "1"
        assert entry.suite_name == "login"
        assert linked_ids(store) == {"A": "3", "B": "4"}

    def test_case_bodies_follow_case_format(self, fake, client, store):
        import_script(client, store, make_cases("A"))

        body = fake.calls_to('add_case')[0].body
        assert body['title'] == "A"
        assert body['template_id'] == 2
        assert body['custom_steps_separated'][0]['content'] == "open page"

    def test_suite_named_after_path_when_no_name_given(self, fake, client, store):
        ReconciliationEngine(client, store).import_file(SCRIPT_PATH, make_cases("A"))

        assert fake.calls_to('add_suite')[0].body['name'] == SCRIPT_PATH

    def test_mapping_saved_once_at_the_end(self, client, store, tmp_path):
        mapping_file = MappingFile(str(tmp_path / ".meta" / "project.tms.json"))

        import_script(client, store, make_cases("A", "B"), mapping_file=mapping_file)

        data = json.loads((tmp_path / ".meta" / "project.tms.json").read_text(encoding="utf-8"))
        assert [s["testCaseId"] for s in data["files"][0]["scenarios"]] == ["3", "4"]


class TestIdempotence:
    """A second pass over an unchanged file only updates and reorders."""

    def test_second_pass_creates_and_deletes_nothing(self, fake, client, store):
        import_script(client, store, make_cases("A", "B"))
        fake.calls.clear()

        _, result = import_script(client, store, make_cases("A", "B"))

        assert operations_in_order(fake) == [
            ('GET', 'get_sections'),
            ('POST', 'update_case'),
            ('POST', 'update_case'),
            ('POST', 'move_cases_to_section'),
        ]
        assert not result.suite_created
        assert result.created == [] and result.deleted == []
        assert [link.test_case_id for link in result.updated] == ["3", "4"]
        assert len(fake.cases) == 2

    def test_mapping_unchanged_by_second_pass(self, client, store):
        import_script(client, store, make_cases("A", "B"))
        before = store.snapshot()

        import_script(client, store, make_cases("A", "B"))

        assert store.snapshot() == before

    def test_missing_section_is_recreated(self, fake, client, store):
        suite = client.create_suite("login")
        store.upsert_file(FileEntry(path=SCRIPT_PATH, suite_id=suite.id, suite_name="login"))

        _, result = import_script(client, store, make_cases("A"))

        assert len(fake.calls_to('add_section')) == 1
        assert result.section_id in fake.sections
        assert len(fake.calls_to('add_suite')) == 1

    def test_suite_url_derived_when_entry_has_none(self, client, store):
        suite = client.create_suite("login")
        store.upsert_file(FileEntry(path=SCRIPT_PATH, suite_id=suite.id, suite_name="login"))

        _, result = import_script(client, store, make_cases("A"))

        assert store.get_file(SCRIPT_PATH).suite_url == ""
        assert result.suite_url == f"https://testrail.example.com/index.php?/suites/view/{suite.id}"


class TestIdentity:
    """Matching is on (file path, scenario name, plan row)."""

    def test_duplicate_local_identities_rejected_before_any_call(self, fake, client, store):
        engine = ReconciliationEngine(client, store)

        with pytest.raises(ReconciliationError):
            engine.import_file(SCRIPT_PATH, make_cases("A", "A"))

        assert fake.calls == []
        assert engine.state == ReconciliationState.FAILED

    def test_renamed_scenario_is_delete_plus_create(self, fake, client, store):
        import_script(client, store, make_cases("A", "B"))

        _, result = import_script(client, store, make_cases("A", "B renamed"))

        assert [link.scenario_name for link in result.deleted] == ["B"]
        assert [link.scenario_name for link in result.created] == ["B renamed"]
        assert "4" not in fake.cases

    def test_title_change_alone_keeps_the_case(self, fake, client, store):
        import_script(client, store, make_cases("A"))
        fake.cases["3"]["title"] = "edited in TestRail"

        _, result = import_script(client, store, make_cases("A"))

        assert [link.test_case_id for link in result.updated] == ["3"]
        assert fake.cases["3"]["title"] == "A"


class TestOrdering:
    """Remote order and mapping order follow local scenario order."""

    def test_reorder_follows_local_order(self, fake, client, store):
        import_script(client, store, make_cases("A", "B", "C"))

        _, result = import_script(client, store, make_cases("C", "A", "B"))

        assert result.ordered_case_ids == ["5", "3", "4"]
        assert fake.calls_to('move_cases_to_section')[-1].body == {'suite_id': '1', 'case_ids': '5, 3, 4'}
        assert fake.section_order(result.section_id) == ["5", "3", "4"]
        assert [link.scenario_name for link in store.links_for(SCRIPT_PATH)] == ["C", "A", "B"]

    def test_new_case_is_placed_in_local_position(self, fake, client, store):
        import_script(client, store, make_cases("A", "C"))

        _, result = import_script(client, store, make_cases("A", "B", "C"))

        assert fake.section_order(result.section_id) == ["3", "5", "4"]

    def test_no_reorder_when_nothing_is_linked(self, fake, client, store):
        empty = make_case("E", steps=[make_step("cleanup", [""])])

        import_script(client, store, [empty])

        assert fake.calls_to('move_cases_to_section') == []


class TestDeletion:
    """Links without a local scenario are deleted remotely and from the mapping."""

    def test_removed_scenario_is_deleted(self, fake, client, store):
        import_script(client, store, make_cases("A", "B"))

        _, result = import_script(client, store, make_cases("A"))

        assert [call.target for call in fake.calls_to('delete_case')] == ["4"]
        assert [link.test_case_id for link in result.deleted] == ["4"]
        assert linked_ids(store) == {"A": "3"}
        assert fake.section_order(result.section_id) == ["3"]

    def test_delete_blocked_by_active_run(self, fake, client, store):
        import_script(client, store, make_cases("A", "B"))
        fake.add_run("1", name="nightly")
        mapping_file = Mock()

        with pytest.raises(RemoteAPIError) as exc_info:
            import_script(client, store, make_cases("A"), mapping_file=mapping_file)

        assert "active test run" in str(exc_info.value)
        assert fake.calls_to('close_run') == []
        assert fake.calls_to('get_runs') == []
        mapping_file.save.assert_not_called()
        assert "4" in fake.cases

    def test_first_delete_failure_stops_remaining_deletes(self, fake, client, store):
        import_script(client, store, make_cases("A", "B", "C"))
        fake.fail_on('delete_case', nth=1)

        with pytest.raises(RemoteAPIError):
            import_script(client, store, make_cases("A"))

        assert len(fake.calls_to('delete_case')) == 1
        assert set(fake.cases) == {"3", "4", "5"}


class TestSkippedCases:
    """A case with no step carrying a description is not sent."""

    def test_new_empty_case_is_skipped(self, fake, client, store):
        empty = make_case("E", steps=[make_step("cleanup", ["", "  "])])

        _, result = import_script(client, store, [make_case("A"), empty])

        assert result.skipped == ["E"]
        assert len(fake.calls_to('add_case')) == 1
        assert linked_ids(store) == {"A": "3"}

    def test_linked_case_that_became_empty_keeps_its_link(self, fake, client, store):
        import_script(client, store, make_cases("A", "E"))
        fake.calls.clear()
        empty = make_case("E", steps=[make_step("cleanup", [""])])

        _, result = import_script(client, store, [make_case("A"), empty])

        assert result.skipped == ["E"]
        assert [call.target for call in fake.calls_to('update_case')] == ["3"]
        assert fake.calls_to('delete_case') == []
        assert linked_ids(store) == {"A": "3", "E": "4"}
        assert result.ordered_case_ids == ["3", "4"]


class TestScenarioFilter:
    """A filtered pass only touches the named scenarios."""

    def test_only_named_scenarios_are_sent(self, fake, client, store):
        import_script(client, store, make_cases("A", "B"))
        fake.calls.clear()

        _, result = import_script(client, store, make_cases("A", "B", "C"), scenario_filter=["C"])

        assert [link.scenario_name for link in result.created] == ["C"]
        assert fake.calls_to('update_case') == []
        assert result.ordered_case_ids == ["3", "4", "5"]

    def test_unfiltered_stale_link_survives(self, fake, client, store):
        import_script(client, store, make_cases("A", "B", "D"))

        _, result = import_script(client, store, make_cases("A", "B"), scenario_filter=["A"])

        assert result.deleted == []
        assert "D" in linked_ids(store)

    def test_filtered_stale_link_is_deleted(self, fake, client, store):
        import_script(client, store, make_cases("A", "D"))

        _, result = import_script(client, store, make_cases("A"), scenario_filter=["D"])

        assert [link.scenario_name for link in result.deleted] == ["D"]


class TestFailures:
    """Failures stop the pass, leave remote changes in place and skip persistence."""

    def test_failure_moves_to_failed_state(self, fake, client, store):
        fake.fail_on('add_section')
        engine = ReconciliationEngine(client, store)

        with pytest.raises(RemoteAPIError):
            engine.import_file(SCRIPT_PATH, make_cases("A"))

        assert engine.state == ReconciliationState.FAILED
        assert fake.calls_to('add_case') == []

    def test_fault_after_create_leaves_duplicate_risk(self, fake, client, tmp_path):
        mapping_path = tmp_path / ".meta" / "project.tms.json"
        mapping_file = MappingFile(str(mapping_path))
        mapping_file.save(Mapping(project_id="7"))
        fake.fail_on('add_case', nth=2)

        with pytest.raises(RemoteAPIError):
            import_script(client, MappingStore(mapping_file.load()), make_cases("A", "B"), mapping_file)

        assert mapping_file.load().files == []
        assert [case['title'] for case in fake.cases.values()] == ["A"]

        import_script(client, MappingStore(mapping_file.load()), make_cases("A", "B"), mapping_file)

        titles = [case['title'] for case in fake.cases.values()]
        assert titles.count("A") == 2
        assert len(fake.suites) == 2


class TestPlans:
    """Plan imports key links by (script, scenario, row) under the subplan entry."""

    def plan_cases(self):
        return [
            make_case("happy path", script_path=SCRIPT_PATH, row=1),
            make_case("pay by card", script_path=CHECKOUT_PATH, row=7),
            make_case("happy path", script_path=SCRIPT_PATH, row=9),
        ]

    def import_plan(self, client, store, cases):
        engine = ReconciliationEngine(client, store)
        return engine.import_file(
            PLAN_PATH, cases, file_type="plan", suite_name="regression/smoke", subplan="smoke",
        )

    def test_plan_import_titles_and_links(self, fake, client, store):
        self.import_plan(client, store, self.plan_cases())

        assert [call.body['title'] for call in fake.calls_to('add_case')] == [
            "login/happy path/1", "checkout/pay by card/7", "login/happy path/9",
        ]
        entry = store.get_file(PLAN_PATH, "smoke")
        assert entry.file_type == "plan"
        assert [(step.path, step.step_id) for step in entry.plan_steps] == [
            (SCRIPT_PATH, "1"), (CHECKOUT_PATH, "7"), (SCRIPT_PATH, "9"),
        ]

    def test_plan_second_pass_is_idempotent(self, fake, client, store):
        self.import_plan(client, store, self.plan_cases())
        fake.calls.clear()

        result = self.import_plan(client, store, self.plan_cases())

        assert fake.calls_to('add_case') == [] and fake.calls_to('delete_case') == []
        assert len(result.updated) == 3

    def test_removed_plan_row_deletes_only_that_row(self, fake, client, store):
        self.import_plan(client, store, self.plan_cases())

        result = self.import_plan(client, store, self.plan_cases()[:2])

        assert [link.identity for link in result.deleted] == [ScenarioIdentity(SCRIPT_PATH, "happy path", 9)]
        assert len(store.get_file(PLAN_PATH, "smoke").plan_steps) == 2


class TestPreview:
    """Dry-run diffs make no remote call."""

    def test_preview_of_new_file(self, fake, client, store):
        plan = ReconciliationEngine(client, store).preview(SCRIPT_PATH, make_cases("A", "B"))

        assert [case.scenario_name for case, _ in plan.to_create] == ["A", "B"]
        assert plan.suite_id is None
        assert fake.calls == []

    def test_preview_of_mapped_file(self, fake, client, store):
        import_script(client, store, make_cases("A", "B"))
        fake.calls.clear()

        plan = ReconciliationEngine(client, store).preview(SCRIPT_PATH, make_cases("B", "C"))

        assert [case.scenario_name for case, _ in plan.to_create] == ["C"]
        assert [link.scenario_name for _, link, _ in plan.to_update] == ["B"]
        assert [link.scenario_name for link in plan.to_delete] == ["A"]
        assert plan.suite_id == "1"
        assert fake.calls == []
