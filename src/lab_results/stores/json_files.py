"""JSON-file store adapters.

Layout under the store root:
    drafts/<patientId>-<testId>.json
    rosters/<patientId>.json
    reports/<patientId>/<reportId>.json
"""

from __future__ import annotations

import json
import logging
import secrets
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from lab_results.errors import ReportStoreError, StoreError
from lab_results.schemas.records import LabReport, LabReportInput, TestDraft, draft_key

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(text, encoding="utf-8")
    tmp.replace(path)


def _read_model(model: type[ModelT], path: Path, error: type[StoreError]) -> ModelT:
    try:
        return model.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as exc:
        raise error(f"Failed to read {path.parent.name}/{path.name}: {exc}") from exc


class JsonDraftStore:
    def __init__(self, root: Path | str) -> None:
        self.root = Path(root) / "drafts"

    def _path(self, patient_id: str, test_id: str) -> Path:
        return self.root / f"{draft_key(patient_id, test_id)}.json"

    def get(self, patient_id: str, test_id: str) -> TestDraft | None:
        path = self._path(patient_id, test_id)
        if not path.exists():
            return None
        return _read_model(TestDraft, path, StoreError)

    def put(self, draft: TestDraft) -> None:
        path = self._path(draft.patient_id, draft.test_id)
        try:
            existing = self.get(draft.patient_id, draft.test_id)
        except StoreError as exc:
            logger.warning("drafts: overwriting unreadable %s: %s", path.name, exc)
            existing = None
        if existing is not None:
            draft = draft.model_copy(update={"created_at": existing.created_at})
        try:
            _write(path, draft.model_dump_json(indent=2))
        except OSError as exc:
            raise StoreError(f"Failed to save draft {path.name}: {exc}") from exc
        logger.debug("drafts: wrote %s", path)

    def list_for_patient(self, patient_id: str) -> list[TestDraft]:
        if not self.root.exists():
            return []
        drafts = []
        for path in sorted(self.root.glob("*.json")):
            draft = _read_model(TestDraft, path, StoreError)
            if draft.patient_id == patient_id:
                drafts.append(draft)
        return drafts


class JsonRosterStore:
    def __init__(self, root: Path | str) -> None:
        self.root = Path(root) / "rosters"

    def _path(self, patient_id: str) -> Path:
        return self.root / f"{patient_id}.json"

    def _load(self, patient_id: str) -> dict:
        path = self._path(patient_id)
        if not path.exists():
            return {"patient_id": patient_id, "tests": []}
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Failed to read roster for {patient_id}: {exc}") from exc

    def _save(self, patient_id: str, data: dict) -> None:
        data["last_visit"] = datetime.now(timezone.utc).isoformat()
        try:
            _write(self._path(patient_id), json.dumps(data, indent=2))
        except OSError as exc:
            raise StoreError(f"Failed to save roster for {patient_id}: {exc}") from exc

    def add_test(self, patient_id: str, test_id: str) -> None:
        data = self._load(patient_id)
        if test_id not in data["tests"]:
            data["tests"].append(test_id)
        self._save(patient_id, data)

    def remove_test(self, patient_id: str, test_id: str) -> None:
        data = self._load(patient_id)
        data["tests"] = [t for t in data["tests"] if t != test_id]
        self._save(patient_id, data)

    def get_tests(self, patient_id: str) -> list[str]:
        return list(self._load(patient_id)["tests"])

    def mark_printed(self, patient_id: str) -> None:
        data = self._load(patient_id)
        data["report_printed_at"] = datetime.now(timezone.utc).isoformat()
        self._save(patient_id, data)


class JsonReportStore:
    def __init__(self, root: Path | str, rosters: JsonRosterStore | None = None) -> None:
        self.root = Path(root) / "reports"
        self.rosters = rosters or JsonRosterStore(root)

    def save(self, report: LabReportInput) -> LabReport:
        stored = LabReport(
            **report.model_dump(),
            report_id=uuid.uuid4().hex,
            token=secrets.token_hex(4),
        )
        path = self.root / report.patient_id / f"{stored.report_id}.json"
        try:
            _write(path, stored.model_dump_json(indent=2))
        except OSError as exc:
            raise ReportStoreError(f"Failed to save lab report: {exc}") from exc
        logger.info("reports: saved %s for patient %s", stored.report_id, report.patient_id)
        return stored

    def get(self, patient_id: str, report_id: str) -> LabReport | None:
        path = self.root / patient_id / f"{report_id}.json"
        if not path.exists():
            return None
        return _read_model(LabReport, path, ReportStoreError)

    def list_for_patient(self, patient_id: str) -> list[LabReport]:
        folder = self.root / patient_id
        if not folder.exists():
            return []
        reports = [
            _read_model(LabReport, p, ReportStoreError)
            for p in folder.glob("*.json")
        ]
        return sorted(reports, key=lambda r: r.compiled_at, reverse=True)

    def mark_printed(self, patient_id: str) -> None:
        self.rosters.mark_printed(patient_id)
