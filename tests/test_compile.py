"""Tests for the report compiler."""

import pytest
from datetime import datetime, timezone
from pydantic import ValidationError
from lab_results.errors import ReportStoreError
from lab_results.pipeline.collection import CollectionStateMachine
from lab_results.pipeline.compile import CompileRejected, RejectionReason, ReportCompiler
from lab_results.schemas import Classification, LabReport, ParameterValue

AT = datetime(2024, 2, 2, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def compiler(report_store, registry, clock, notifier) -> ReportCompiler:
    return ReportCompiler(report_store, registry, clock, notifier)


def values(**entries):
    return {k: ParameterValue(field_id=k, value=v) for k, v in entries.items()}


def collected(registry, test_id, collector="tech-07"):
    test = registry.ordered_test(test_id)
    CollectionStateMachine().toggle_test(test, collector, AT)
    return test


def test_compile_pending_test_is_rejected(compiler, registry, patient, report_store):
    """Compiling before collection is refused with not_collected."""
    result = compiler.compile(patient, registry.ordered_test("cbc"), values(hb="12"), "tech-01")
    assert isinstance(result, CompileRejected)
    assert result.reason is RejectionReason.NOT_COLLECTED
    assert "collected" in result.message
    assert report_store.list_for_patient("P0001") == []


def test_compile_without_values_is_rejected(compiler, registry, patient):
    """A working set of blanks is refused with no_data."""
    test = collected(registry, "lft")
    result = compiler.compile(patient, test, values(sgot_ast="  ", sgpt_alt=""), "tech-01")
    assert isinstance(result, CompileRejected)
    assert result.reason is RejectionReason.NO_DATA


def test_sparse_compile_keeps_schema_order(compiler, registry, patient):
    """Only non-empty values are reported, in schema order."""
    test = collected(registry, "thyroid")
    working_set = values(free_t4="2.1", tsh="", free_t3="3.0", sample_time=" ")
    report = compiler.compile(patient, test, working_set, "tech-01")
    assert isinstance(report, LabReport)
    assert [p.field_id for p in report.parameters] == ["free_t3", "free_t4"]
    assert report.parameters[1].classification is Classification.ABNORMAL_HIGH
    assert report.parameters[1].unit == "ng/dL"


def test_compile_stamps_attribution(compiler, registry, patient, clock):
    """Reports carry collection attribution and the compile time."""
    clock.advance(300)
    test = collected(registry, "lft", collector="tech-07")
    report = compiler.compile(patient, test, values(sgot_ast="55"), "tech-01")
    assert report.collected_by == "tech-07"
    assert report.collected_at == AT
    assert report.compiled_at == clock.now()
    assert report.status == "completed"
    assert report.test_name == "Liver Function Test (LFT)"
    assert report.patient.name == "Jane Smith"
    assert report.report_id
    assert report.token


def test_compile_scenario_lft(compiler, registry, patient):
    """sgot_ast 55 is abnormal-high, 20 normal, blank omitted."""
    test = collected(registry, "lft")
    high = compiler.compile(patient, test, values(sgot_ast="55", sgpt_alt="20"), "t")
    assert [p.classification for p in high.parameters] == [
        Classification.NORMAL,
        Classification.ABNORMAL_HIGH,
    ]
    assert [p.field_id for p in high.abnormal_parameters] == ["sgot_ast"]

    normal = compiler.compile(patient, test, values(sgot_ast="20"), "t")
    assert normal.parameters[0].classification is Classification.NORMAL

    blank = compiler.compile(patient, test, values(sgot_ast="", sgpt_alt="30"), "t")
    assert [p.field_id for p in blank.parameters] == ["sgpt_alt"]


def test_recompile_yields_independent_reports(compiler, registry, patient, clock, report_store):
    """Identical inputs compile to equal parameters but distinct reports."""
    test = collected(registry, "cbc")
    working_set = values(hb="9.1", tlc="7.0")
    first = compiler.compile(patient, test, working_set, "tech-01")
    clock.advance(10)
    second = compiler.compile(patient, test, working_set, "tech-01")
    assert first.parameters == second.parameters
    assert first.report_id != second.report_id
    assert second.compiled_at > first.compiled_at
    assert [r.report_id for r in report_store.list_for_patient("P0001")] == [
        second.report_id,
        first.report_id,
    ]


def test_report_is_immutable(compiler, registry, patient):
    """Compiled reports cannot be edited."""
    report = compiler.compile(patient, collected(registry, "cbc"), values(hb="12"), "t")
    with pytest.raises(ValidationError):
        report.test_name = "edited"


def test_report_store_failure_propagates(compiler, registry, patient, report_store):
    """A store failure aborts the compile without fabricating a report."""
    report_store.fail_saves = 1
    with pytest.raises(ReportStoreError):
        compiler.compile(patient, collected(registry, "cbc"), values(hb="12"), "t")
    assert report_store.list_for_patient("P0001") == []


def test_unknown_test_compiles_against_generic_schema(compiler, registry, patient):
    """Tests without a schema report their generic fields."""
    test = collected(registry, "vitamin_d")
    report = compiler.compile(patient, test, values(result="Sufficient", value="32"), "t")
    assert [p.field_id for p in report.parameters] == ["result", "value"]
    assert all(p.classification is Classification.INDETERMINATE for p in report.parameters)


def test_mark_printed_failure_is_advisory(compiler, report_store, notifier):
    """A failed print mark only notifies."""
    report_store.fail_prints = 1
    assert compiler.mark_printed("P0001") is False
    assert notifier.codes() == ["PRINT_MARK_FAILED"]
    assert compiler.mark_printed("P0001") is True
    assert "P0001" in report_store.printed
