from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timezone

from lab_results.schemas.records import LabReport, LabReportInput, TestDraft, draft_key


class InMemoryDraftStore:
    def __init__(self) -> None:
        self._drafts: dict[str, TestDraft] = {}

    def get(self, patient_id: str, test_id: str) -> TestDraft | None:
        draft = self._drafts.get(draft_key(patient_id, test_id))
        return draft.model_copy(deep=True) if draft else None

    def put(self, draft: TestDraft) -> None:
        existing = self._drafts.get(draft.draft_id)
        stored = draft.model_copy(deep=True)
        if existing is not None:
            stored.created_at = existing.created_at
        self._drafts[draft.draft_id] = stored

    def list_for_patient(self, patient_id: str) -> list[TestDraft]:
        return [
            d.model_copy(deep=True)
            for d in self._drafts.values()
            if d.patient_id == patient_id
        ]


class InMemoryRosterStore:
    def __init__(self) -> None:
        self._tests: dict[str, list[str]] = {}

    def add_test(self, patient_id: str, test_id: str) -> None:
        tests = self._tests.setdefault(patient_id, [])
        if test_id not in tests:
            tests.append(test_id)

    def remove_test(self, patient_id: str, test_id: str) -> None:
        tests = self._tests.get(patient_id, [])
        if test_id in tests:
            tests.remove(test_id)

    def get_tests(self, patient_id: str) -> list[str]:
        return list(self._tests.get(patient_id, []))


class InMemoryReportStore:
    def __init__(self) -> None:
        self._reports: dict[str, LabReport] = {}
        self.printed: dict[str, datetime] = {}

    def save(self, report: LabReportInput) -> LabReport:
        stored = LabReport(
            **report.model_dump(),
            report_id=uuid.uuid4().hex,
            token=secrets.token_hex(4),
        )
        self._reports[stored.report_id] = stored
        return stored

    def get(self, report_id: str) -> LabReport | None:
        return self._reports.get(report_id)

    def list_for_patient(self, patient_id: str) -> list[LabReport]:
        reports = [r for r in self._reports.values() if r.patient_id == patient_id]
        return sorted(reports, key=lambda r: r.compiled_at, reverse=True)

    def mark_printed(self, patient_id: str) -> None:
        self.printed[patient_id] = datetime.now(timezone.utc)
