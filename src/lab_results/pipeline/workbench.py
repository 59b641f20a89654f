from __future__ import annotations

import logging
from collections.abc import Iterable

from lab_results.engine.notify import Notification, Notifier
from lab_results.engine.scheduler import Scheduler, VirtualClock
from lab_results.errors import NoActiveTestError, StoreError
from lab_results.pipeline.collection import CollectionStateMachine
from lab_results.pipeline.compile import CompileRejected, ReportCompiler
from lab_results.pipeline.drafts import DraftController
from lab_results.pipeline.roster import RosterSynchronizer
from lab_results.schemas.config import WorkbenchConfig
from lab_results.schemas.records import (
    Classification,
    LabReport,
    OrderedTest,
    ParameterValue,
    PatientSnapshot,
)
from lab_results.schemas.registry import SchemaRegistry
from lab_results.stores.base import DraftStore, ReportStore, RosterStore

logger = logging.getLogger(__name__)


class LabWorkbench:
    """One technician's result-entry session for one patient.

    Wires the roster, draft controller, collection state machine and report
    compiler together. The roster's OrderedTest objects are shared with the
    draft controller, so collection toggles show up on the roster directly.
    """

    def __init__(
        self,
        patient: PatientSnapshot,
        technician_id: str,
        draft_store: DraftStore,
        roster_store: RosterStore,
        report_store: ReportStore,
        scheduler: Scheduler | None = None,
        registry: SchemaRegistry | None = None,
        config: WorkbenchConfig | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.patient = patient
        self.technician_id = technician_id
        self.config = config or WorkbenchConfig()
        self.scheduler = scheduler or VirtualClock()
        self.registry = registry or SchemaRegistry()
        self.notifier = notifier or Notifier()
        self.state_machine = CollectionStateMachine(self.config.collected_note)

        self.roster = RosterSynchronizer(
            patient.patient_id, self.registry, roster_store, self.notifier, self.config
        )
        self.drafts = DraftController(
            self.registry,
            draft_store,
            self.scheduler,
            self.notifier,
            self.config,
            self.state_machine,
        )
        self.compiler = ReportCompiler(
            report_store, self.registry, self.scheduler, self.notifier
        )
        self.reports: list[LabReport] = []

    @property
    def patient_id(self) -> str:
        return self.patient.patient_id

    @property
    def current_test(self) -> OrderedTest | None:
        active = self.drafts.active
        return active.ordered_test if active else None

    def _sync_selection(self) -> None:
        test_id = self.roster.current_test_id
        if test_id is None:
            self.drafts.deselect()
            return
        self.drafts.select(self.patient_id, test_id, self.roster.get(test_id))

    def _restore_collection(self, tests: list[OrderedTest]) -> None:
        """Copy each test's saved collection status onto its roster entry."""
        for test in tests:
            try:
                draft = self.drafts.latest_draft(self.patient_id, test.test_id)
            except StoreError as exc:
                logger.warning(
                    "workbench: could not restore collection status of %s: %s",
                    test.test_id,
                    exc,
                )
                continue
            if draft is not None:
                test.status = draft.status

    # -- roster --------------------------------------------------------

    def open(self, test_ids: Iterable[str] | None = None) -> list[OrderedTest]:
        """Load the roster (from `test_ids`, else the roster store) and select the first test."""
        self.drafts.deselect()
        if test_ids is None:
            tests = self.roster.load()
        else:
            tests = self.roster.hydrate(test_ids)
        self._restore_collection(tests)
        self._sync_selection()
        logger.info("workbench: opened %s with %d tests", self.patient_id, len(tests))
        return tests

    def add_test(self, test_id: str) -> OrderedTest:
        entry = self.roster.add_test(test_id)
        self._sync_selection()
        return entry

    def remove_test(self, test_id: str) -> str | None:
        # Selecting the replacement flushes the removed test's pending draft
        current = self.roster.remove_test(test_id)
        self._sync_selection()
        return current

    def select(self, test_id: str) -> dict[str, ParameterValue]:
        self.roster.select(test_id)
        self._sync_selection()
        return self.drafts.working_set

    # -- entry ---------------------------------------------------------

    def set_value(self, field_id: str, value: str) -> ParameterValue:
        return self.drafts.set_value(field_id, value)

    def set_notes(self, field_id: str, notes: str) -> ParameterValue:
        return self.drafts.set_notes(field_id, notes)

    def set_collection_notes(self, notes: str) -> None:
        self.drafts.set_collection_notes(notes)

    def toggle_collected(self, collector_id: str | None = None) -> OrderedTest:
        return self.drafts.toggle_collected(collector_id or self.technician_id)

    def classifications(self) -> dict[str, Classification]:
        return self.drafts.classifications()

    # -- reporting -----------------------------------------------------

    def compile(self) -> LabReport | CompileRejected:
        """Compile the selected test. StoreError from the report store propagates."""
        active = self.drafts.active
        if active is None:
            raise NoActiveTestError("No test is selected")
        self.drafts.flush_now()
        result = self.compiler.compile(
            self.patient,
            active.ordered_test,
            self.drafts.working_set,
            self.technician_id,
        )
        if isinstance(result, LabReport):
            self.reports.append(result)
        return result

    def mark_printed(self) -> bool:
        return self.compiler.mark_printed(self.patient_id)

    def drain_notifications(self) -> list[Notification]:
        return self.notifier.drain()

    def close(self) -> None:
        """Flush the selected test's pending draft and release the selection."""
        self.drafts.deselect()
