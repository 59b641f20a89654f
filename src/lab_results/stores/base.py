"""Persistence boundaries consumed by the core.

Implementations signal failure by raising `StoreError`. Writes are full
snapshot replacements, so retrying one is always safe.
"""

from typing import Protocol, runtime_checkable

from lab_results.schemas.records import LabReport, LabReportInput, TestDraft


@runtime_checkable
class DraftStore(Protocol):
    def get(self, patient_id: str, test_id: str) -> TestDraft | None: ...

    def put(self, draft: TestDraft) -> None: ...

    def list_for_patient(self, patient_id: str) -> list[TestDraft]: ...


@runtime_checkable
class RosterStore(Protocol):
    def add_test(self, patient_id: str, test_id: str) -> None: ...

    def remove_test(self, patient_id: str, test_id: str) -> None: ...

    def get_tests(self, patient_id: str) -> list[str]: ...


@runtime_checkable
class ReportStore(Protocol):
    def save(self, report: LabReportInput) -> LabReport:
        """Persist a compiled report and return it with its assigned id and token."""
        ...

    def list_for_patient(self, patient_id: str) -> list[LabReport]: ...

    def mark_printed(self, patient_id: str) -> None: ...
