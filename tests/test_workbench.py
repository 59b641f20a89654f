"""End-to-end tests for the workbench facade."""

import pytest
from lab_results.errors import CollectedTestError, NoActiveTestError, ReportStoreError
from lab_results.pipeline.compile import CompileRejected, RejectionReason
from lab_results.pipeline.workbench import LabWorkbench
from lab_results.schemas import Classification, LabReport


def test_cbc_compile_before_collection_is_rejected(workbench):
    """Adding cbc and compiling straight away is refused."""
    workbench.add_test("cbc")
    assert len(workbench.roster.tests) == 1
    assert workbench.roster.tests[0].status.collected is False
    workbench.set_value("hb", "13.1")
    result = workbench.compile()
    assert isinstance(result, CompileRejected)
    assert result.reason is RejectionReason.NOT_COLLECTED


def test_full_entry_to_report(workbench, clock, draft_store, report_store):
    """Add, enter, collect, compile: the report reflects the working set."""
    workbench.add_test("lft")
    workbench.set_value("sgot_ast", "55")
    workbench.set_value("sgpt_alt", "20")
    clock.advance(1.0)
    workbench.toggle_collected()
    report = workbench.compile()
    assert isinstance(report, LabReport)
    assert [p.field_id for p in report.parameters] == ["sgpt_alt", "sgot_ast"]
    assert report.collected_by == "tech-01"
    assert workbench.reports == [report]
    assert report_store.list_for_patient("P0001") == [report]
    assert draft_store.get("P0001", "lft").status.collected is True


def test_toggle_shows_on_roster(workbench):
    """Collection toggles update the shared roster entry."""
    workbench.add_test("cbc")
    workbench.toggle_collected("tech-09")
    assert workbench.roster.get("cbc").status.collected_by == "tech-09"
    assert workbench.roster.collected_count() == 1


def test_adding_test_selects_it_and_flushes_previous(workbench, draft_store):
    """Adding a test switches selection after flushing the previous one."""
    workbench.add_test("cbc")
    workbench.set_value("hb", "12")
    workbench.add_test("esr")
    assert workbench.current_test.test_id == "esr"
    assert draft_store.get("P0001", "cbc").parameters["hb"].value == "12"


def test_select_round_trip(workbench):
    """Values survive switching away and back."""
    workbench.add_test("cbc")
    workbench.set_value("hb", "12")
    workbench.add_test("lft")
    values = workbench.select("cbc")
    assert values["hb"].value == "12"


def test_remove_selected_test_moves_selection(workbench, draft_store):
    """Removing the active test flushes it and selects the next one."""
    workbench.open(["cbc", "lft", "kft"])
    workbench.select("lft")
    workbench.set_value("sgot_ast", "33")
    assert workbench.remove_test("lft") == "kft"
    assert workbench.current_test.test_id == "kft"
    assert draft_store.get("P0001", "lft") is not None


def test_remove_last_test_clears_selection(workbench):
    workbench.add_test("cbc")
    assert workbench.remove_test("cbc") is None
    assert workbench.current_test is None
    with pytest.raises(NoActiveTestError):
        workbench.set_value("hb", "1")


def test_remove_collected_test_refused(workbench):
    workbench.add_test("cbc")
    workbench.toggle_collected()
    with pytest.raises(CollectedTestError):
        workbench.remove_test("cbc")
    assert workbench.current_test.test_id == "cbc"


def test_compile_without_selection_raises(workbench):
    with pytest.raises(NoActiveTestError):
        workbench.compile()


def test_compile_after_uncollect_is_rejected(workbench):
    """Toggling back to pending after a compile blocks the next compile."""
    workbench.add_test("cbc")
    workbench.set_value("hb", "12")
    workbench.toggle_collected()
    assert isinstance(workbench.compile(), LabReport)
    workbench.toggle_collected()
    result = workbench.compile()
    assert result.reason is RejectionReason.NOT_COLLECTED


def test_report_store_failure_keeps_working_set(workbench, report_store):
    """A failed compile leaves the working set intact for a retry."""
    workbench.add_test("cbc")
    workbench.set_value("hb", "12")
    workbench.toggle_collected()
    report_store.fail_saves = 1
    with pytest.raises(ReportStoreError):
        workbench.compile()
    assert workbench.reports == []
    assert isinstance(workbench.compile(), LabReport)


def test_classifications_for_highlighting(workbench):
    workbench.add_test("cbc")
    workbench.set_value("hb", "9.1")
    assert workbench.classifications() == {"hb": Classification.ABNORMAL_LOW}


def test_open_loads_roster_from_store(workbench, roster_store):
    """open() without test ids hydrates from the roster store."""
    roster_store.add_test("P0001", "esr")
    workbench.open()
    assert workbench.current_test.test_id == "esr"


def test_notifications_drain(workbench, roster_store):
    roster_store.fail_adds = 1
    workbench.add_test("cbc")
    assert [n.code for n in workbench.drain_notifications()] == ["ROSTER_ADD_FAILED"]
    assert workbench.drain_notifications() == []


def test_close_flushes(workbench, draft_store):
    workbench.add_test("cbc")
    workbench.set_value("hb", "12")
    workbench.close()
    assert draft_store.get("P0001", "cbc") is not None
    assert workbench.current_test is None


def test_reopen_restores_collection_status(
    patient, draft_store, roster_store, report_store, clock, registry, config, notifier
):
    """A reopened workbench still refuses to remove an already collected test."""

    def bench(technician):
        return LabWorkbench(
            patient,
            technician,
            draft_store,
            roster_store,
            report_store,
            scheduler=clock,
            registry=registry,
            config=config,
            notifier=notifier,
        )

    first = bench("tech-01")
    first.open([])
    first.add_test("lft")
    first.add_test("cbc")
    first.toggle_collected()
    first.close()

    second = bench("tech-02")
    second.open()
    assert [(t.test_id, t.status.collected) for t in second.roster.tests] == [
        ("lft", False),
        ("cbc", True),
    ]
    assert second.roster.collected_count() == 1
    assert second.roster.get("cbc").status.collected_by == "tech-01"
    with pytest.raises(CollectedTestError):
        second.remove_test("cbc")
    assert roster_store.get_tests("P0001") == ["lft", "cbc"]


def test_reopen_tolerates_unreadable_draft(workbench, draft_store, roster_store):
    """A failed status read leaves the entry pending and still opens."""
    roster_store.add_test("P0001", "esr")
    roster_store.add_test("P0001", "cbc")
    draft_store.fail_gets = 1
    workbench.open()
    assert [t.test_id for t in workbench.roster.tests] == ["esr", "cbc"]
    assert workbench.roster.collected_count() == 0
    assert workbench.current_test.test_id == "esr"
