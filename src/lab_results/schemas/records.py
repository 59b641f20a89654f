from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Classification(str, Enum):
    """Verdict for one value against its reference range."""

    NORMAL = "normal"
    ABNORMAL_HIGH = "abnormal-high"
    ABNORMAL_LOW = "abnormal-low"
    INDETERMINATE = "indeterminate"  # No parsable range or non-numeric value

    @property
    def is_abnormal(self) -> bool:
        return self in (Classification.ABNORMAL_HIGH, Classification.ABNORMAL_LOW)


class CollectionStatus(BaseModel):
    """Specimen collection state of one ordered test.

    collected=True implies collected_at and collected_by are set;
    collected=False implies both are cleared.
    """

    model_config = ConfigDict(frozen=True)

    collected: bool = False
    collected_at: datetime | None = None
    collected_by: str | None = None
    notes: str = ""

    @model_validator(mode="after")
    def _attribution_matches_state(self) -> CollectionStatus:
        if self.collected and (self.collected_at is None or not self.collected_by):
            raise ValueError("collected status requires collected_at and collected_by")
        if not self.collected and (
            self.collected_at is not None or self.collected_by is not None
        ):
            raise ValueError("pending status must not carry collection attribution")
        return self


class TestInfo(BaseModel):
    """Catalog metadata for an orderable test."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    test_id: str
    name: str
    category: str = "General"
    specimen_type: str
    container: str
    instructions: str = ""


class OrderedTest(BaseModel):
    """One entry in a patient's roster.

    Only `status` and `synced` change after creation; `status` is replaced
    wholesale by the collection state machine.
    """

    model_config = ConfigDict(validate_assignment=True)

    test_id: str
    name: str
    specimen_type: str
    container: str
    instructions: str = ""
    status: CollectionStatus = Field(default_factory=CollectionStatus)
    synced: bool = True  # False after a failed remote add


class ParameterValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    field_id: str
    value: str = ""  # Raw text, never coerced
    notes: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.value.strip()


class TestDraft(BaseModel):
    """Persisted working-set snapshot for one (patient, test) pair."""

    __test__ = False

    patient_id: str
    test_id: str
    parameters: dict[str, ParameterValue]
    status: CollectionStatus = Field(default_factory=CollectionStatus)
    created_at: datetime
    updated_at: datetime

    @property
    def draft_id(self) -> str:
        return draft_key(self.patient_id, self.test_id)


def draft_key(patient_id: str, test_id: str) -> str:
    return f"{patient_id}-{test_id}"


class PatientSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    patient_id: str
    name: str = ""
    age: str = ""
    gender: str = ""
    referred_by: str | None = None


class LabReportParameter(BaseModel):
    model_config = ConfigDict(frozen=True)

    field_id: str
    label: str
    value: str
    unit: str = ""
    ref_range: str = ""
    classification: Classification
    notes: str = ""


class LabReportInput(BaseModel):
    """Report content handed to the report store, before an id exists."""

    model_config = ConfigDict(frozen=True)

    patient_id: str
    patient: PatientSnapshot
    test_id: str
    test_name: str
    parameters: tuple[LabReportParameter, ...]
    collected_at: datetime | None
    collected_by: str
    compiled_at: datetime
    status: Literal["completed"] = "completed"


class LabReport(LabReportInput):
    """Immutable compiled report. A recompile yields a new report."""

    report_id: str
    token: str | None = None  # Short access token assigned by the store

    @property
    def abnormal_parameters(self) -> list[LabReportParameter]:
        return [p for p in self.parameters if p.classification.is_abnormal]
