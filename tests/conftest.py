"""Shared pytest fixtures for lab_results tests."""

import pytest
from lab_results.engine.notify import Notifier
from lab_results.engine.scheduler import VirtualClock
from lab_results.errors import ReportStoreError, StoreError
from lab_results.pipeline.drafts import DraftController
from lab_results.pipeline.roster import RosterSynchronizer
from lab_results.pipeline.workbench import LabWorkbench
from lab_results.schemas.config import WorkbenchConfig
from lab_results.schemas.records import PatientSnapshot
from lab_results.schemas.registry import SchemaRegistry
from lab_results.stores.memory import (
    InMemoryDraftStore,
    InMemoryReportStore,
    InMemoryRosterStore,
)


class FlakyDraftStore(InMemoryDraftStore):
    """InMemoryDraftStore whose next `fail_puts` puts (and `fail_gets` gets) raise."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_puts = 0
        self.fail_gets = 0
        self.puts = []

    def get(self, patient_id, test_id):
        if self.fail_gets:
            self.fail_gets -= 1
            raise StoreError("draft read timed out")
        return super().get(patient_id, test_id)

    def put(self, draft):
        self.puts.append(draft)
        if self.fail_puts:
            self.fail_puts -= 1
            raise StoreError("draft write timed out")
        super().put(draft)


class FlakyRosterStore(InMemoryRosterStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail_adds = 0
        self.fail_removes = 0

    def add_test(self, patient_id, test_id):
        if self.fail_adds:
            self.fail_adds -= 1
            raise StoreError("roster add rejected")
        super().add_test(patient_id, test_id)

    def remove_test(self, patient_id, test_id):
        if self.fail_removes:
            self.fail_removes -= 1
            raise StoreError("roster remove rejected")
        super().remove_test(patient_id, test_id)


class FlakyReportStore(InMemoryReportStore):
    def __init__(self) -> None:
        super().__init__()
        self.fail_saves = 0
        self.fail_prints = 0

    def save(self, report):
        if self.fail_saves:
            self.fail_saves -= 1
            raise ReportStoreError("report store unavailable")
        return super().save(report)

    def mark_printed(self, patient_id):
        if self.fail_prints:
            self.fail_prints -= 1
            raise StoreError("print bookkeeping failed")
        super().mark_printed(patient_id)


@pytest.fixture
def clock() -> VirtualClock:
    """Virtual clock starting at 2024-01-01T00:00Z."""
    return VirtualClock()


@pytest.fixture
def config() -> WorkbenchConfig:
    """Default WorkbenchConfig (1s debounce, 0.25s retry backoff)."""
    return WorkbenchConfig()


@pytest.fixture
def registry() -> SchemaRegistry:
    """Registry holding the built-in schemas and catalog."""
    return SchemaRegistry()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def draft_store() -> FlakyDraftStore:
    return FlakyDraftStore()


@pytest.fixture
def roster_store() -> FlakyRosterStore:
    return FlakyRosterStore()


@pytest.fixture
def report_store() -> FlakyReportStore:
    return FlakyReportStore()


@pytest.fixture
def patient() -> PatientSnapshot:
    return PatientSnapshot(patient_id="P0001", name="Jane Smith", age="38", gender="F")


@pytest.fixture
def controller(registry, draft_store, clock, notifier, config) -> DraftController:
    """DraftController over a flaky in-memory draft store and the virtual clock."""
    return DraftController(registry, draft_store, clock, notifier, config)


@pytest.fixture
def roster(registry, roster_store, notifier, config) -> RosterSynchronizer:
    """Empty roster for patient P0001."""
    return RosterSynchronizer("P0001", registry, roster_store, notifier, config)


@pytest.fixture
def workbench(
    patient, draft_store, roster_store, report_store, clock, registry, config, notifier
) -> LabWorkbench:
    """Workbench for P0001 with technician tech-01 and an empty roster."""
    bench = LabWorkbench(
        patient,
        "tech-01",
        draft_store,
        roster_store,
        report_store,
        scheduler=clock,
        registry=registry,
        config=config,
        notifier=notifier,
    )
    bench.open([])
    return bench
