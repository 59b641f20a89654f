from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from lab_results.engine.scheduler import VirtualClock
from lab_results.errors import LabResultsError
from lab_results.pipeline.compile import CompileRejected
from lab_results.pipeline.workbench import LabWorkbench
from lab_results.schemas.config import WorkbenchConfig
from lab_results.schemas.session import (
    CompileFailure,
    Session,
    SessionAction,
    SessionResult,
)
from lab_results.stores.base import DraftStore, ReportStore, RosterStore
from lab_results.stores.json_files import JsonDraftStore, JsonReportStore, JsonRosterStore
from lab_results.stores.memory import (
    InMemoryDraftStore,
    InMemoryReportStore,
    InMemoryRosterStore,
)

logger = logging.getLogger(__name__)


@dataclass
class StoreSet:
    drafts: DraftStore
    rosters: RosterStore
    reports: ReportStore


def build_stores(store_dir: str | None) -> StoreSet:
    """JSON-file stores under `store_dir`, or in-memory stores when it is None."""
    if store_dir is None:
        return StoreSet(InMemoryDraftStore(), InMemoryRosterStore(), InMemoryReportStore())
    rosters = JsonRosterStore(store_dir)
    return StoreSet(JsonDraftStore(store_dir), rosters, JsonReportStore(store_dir, rosters))


def apply_action(
    workbench: LabWorkbench, clock: VirtualClock, action: SessionAction
) -> object:
    if action.action == "add":
        return workbench.add_test(action.test)
    if action.action == "remove":
        return workbench.remove_test(action.test)
    if action.action == "select":
        return workbench.select(action.test)
    if action.action == "set":
        return workbench.set_value(action.field, action.value)
    if action.action == "notes":
        if action.field:
            return workbench.set_notes(action.field, action.notes)
        return workbench.set_collection_notes(action.notes)
    if action.action == "toggle":
        return workbench.toggle_collected(action.collector)
    if action.action == "advance":
        return clock.advance(action.seconds)
    if action.action == "compile":
        return workbench.compile()
    return workbench.mark_printed()


def run_session(
    session_path: str, stores: StoreSet, config: WorkbenchConfig
) -> SessionResult:
    """Replay one recorded session against `stores`.

    Compile rejections are collected and the replay continues; any other
    LabResultsError stops the replay and marks the result failed. Pending
    drafts are flushed either way.
    """
    start = time.time()
    try:
        session = Session.model_validate_json(
            Path(session_path).read_text(encoding="utf-8")
        )
    except (OSError, ValidationError) as exc:
        logger.error("session: could not read %s - %s", session_path, exc)
        return SessionResult(session_path=str(session_path), success=False, error=str(exc))

    clock = VirtualClock()
    workbench = LabWorkbench(
        session.patient,
        session.technician,
        stores.drafts,
        stores.rosters,
        stores.reports,
        scheduler=clock,
        config=config,
    )
    rejections: list[CompileFailure] = []
    applied = 0
    error = None
    total = len(session.actions)

    try:
        workbench.open(session.tests)
        for step, action in enumerate(session.actions, start=1):
            logger.info("session: [%d/%d] %s", step, total, action.action)
            outcome = apply_action(workbench, clock, action)
            if isinstance(outcome, CompileRejected):
                rejections.append(
                    CompileFailure(
                        test_id=outcome.test_id,
                        reason=outcome.reason.value,
                        message=outcome.message,
                    )
                )
            applied += 1
    except LabResultsError as exc:
        logger.error("session: failed at action %d - %s", applied + 1, exc)
        error = str(exc)
    finally:
        workbench.close()

    logger.info(
        "session: %s replayed in %.2fs - %d reports, %d rejected",
        session.patient.patient_id,
        time.time() - start,
        len(workbench.reports),
        len(rejections),
    )
    return SessionResult(
        session_path=str(session_path),
        patient_id=session.patient.patient_id,
        reports=list(workbench.reports),
        rejections=rejections,
        roster=workbench.roster.tests,
        notifications=workbench.drain_notifications(),
        actions_applied=applied,
        success=error is None and not rejections,
        error=error,
    )
