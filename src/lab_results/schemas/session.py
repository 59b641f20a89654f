from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from lab_results.engine.notify import Notification
from lab_results.schemas.records import LabReport, OrderedTest, PatientSnapshot


class SessionAction(BaseModel):
    action: Literal[
        "add", "remove", "select", "set", "notes", "toggle", "advance", "compile", "print"
    ]
    test: str | None = None  # add / remove / select
    field: str | None = None  # set / notes; omitted on notes for collection notes
    value: str = ""
    notes: str = ""
    seconds: float = 0.0  # advance
    collector: str | None = None  # toggle; defaults to the session technician

    @model_validator(mode="after")
    def _has_target(self) -> SessionAction:
        if self.action in ("add", "remove", "select") and not self.test:
            raise ValueError(f"'{self.action}' needs a test")
        if self.action == "set" and not self.field:
            raise ValueError("'set' needs a field")
        return self


class Session(BaseModel):
    """A recorded result-entry session, replayed by the CLI."""

    patient: PatientSnapshot
    technician: str
    tests: list[str] | None = None  # Initial roster; None loads it from the roster store
    actions: list[SessionAction] = Field(default_factory=list)


class CompileFailure(BaseModel):
    test_id: str
    reason: str
    message: str


class SessionResult(BaseModel):
    session_path: str
    patient_id: str | None = None
    reports: list[LabReport] = Field(default_factory=list)
    rejections: list[CompileFailure] = Field(default_factory=list)
    roster: list[OrderedTest] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)
    actions_applied: int = 0
    success: bool
    error: str | None = None
