"""Working-set ownership and debounced draft persistence.

The controller holds the field values of the currently selected test. Every
edit lands in memory immediately and (re)starts one debounce timer for that
(patient, test) pair; when the timer fires the full working set is written
to the draft store as a snapshot. Local state is always what the user sees:
a failed write never rolls it back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from lab_results.engine.notify import Notifier
from lab_results.engine.scheduler import Scheduler, TimerHandle
from lab_results.errors import NoActiveTestError, StoreError, UnknownFieldError
from lab_results.pipeline.collection import CollectionStateMachine
from lab_results.pipeline.flag import classify_working_set
from lab_results.schemas.config import WorkbenchConfig
from lab_results.schemas.fields import TestSchema, default_value
from lab_results.schemas.records import (
    Classification,
    OrderedTest,
    ParameterValue,
    TestDraft,
)
from lab_results.schemas.registry import SchemaRegistry
from lab_results.stores.base import DraftStore

logger = logging.getLogger(__name__)

DraftKey = tuple[str, str]


@dataclass
class ActiveTest:
    patient_id: str
    schema: TestSchema
    ordered_test: OrderedTest
    values: dict[str, ParameterValue]
    created_at: datetime | None = None  # Set once the first snapshot is written

    @property
    def test_id(self) -> str:
        return self.ordered_test.test_id

    @property
    def key(self) -> DraftKey:
        return (self.patient_id, self.ordered_test.test_id)


@dataclass
class _WriteSlot:
    timer: TimerHandle | None = None
    failures: int = 0
    unflushed: TestDraft | None = None  # Last snapshot that failed to write


class DraftController:
    def __init__(
        self,
        registry: SchemaRegistry,
        store: DraftStore,
        scheduler: Scheduler,
        notifier: Notifier | None = None,
        config: WorkbenchConfig | None = None,
        state_machine: CollectionStateMachine | None = None,
    ) -> None:
        self.registry = registry
        self.store = store
        self.scheduler = scheduler
        self.notifier = notifier or Notifier()
        self.config = config or WorkbenchConfig()
        self.state_machine = state_machine or CollectionStateMachine(
            self.config.collected_note
        )
        self._active: ActiveTest | None = None
        self._slots: dict[DraftKey, _WriteSlot] = {}

    # -- selection -----------------------------------------------------

    @property
    def active(self) -> ActiveTest | None:
        return self._active

    def select(
        self,
        patient_id: str,
        test_id: str,
        ordered_test: OrderedTest | None = None,
    ) -> dict[str, ParameterValue]:
        """Make (patient_id, test_id) the active test and load its working set.

        Any pending write for the previously active test is flushed before
        the new test's draft is read. Re-selecting the active test is a no-op.
        """
        if self._active is not None:
            if self._active.key == (patient_id, test_id):
                return self.working_set
            self.flush_now()

        schema = self.registry.resolve(test_id)
        if not self.registry.has_schema(test_id):
            self.notifier.notify(
                "SCHEMA_FALLBACK",
                f"No result schema for '{test_id}', using generic fields",
                level="info",
                patient_id=patient_id,
                test_id=test_id,
            )
        if ordered_test is None:
            ordered_test = self.registry.ordered_test(
                test_id, self.config.fallback_specimen, self.config.fallback_container
            )

        draft = self._load_draft(patient_id, test_id)
        if draft is None:
            values = {
                f.id: ParameterValue(
                    field_id=f.id, value=default_value(f, self.config.negative_sentinels)
                )
                for f in schema.fields
            }
            created_at = None
        else:
            values = {
                f.id: draft.parameters.get(f.id)
                or ParameterValue(
                    field_id=f.id, value=default_value(f, self.config.negative_sentinels)
                )
                for f in schema.fields
            }
            ordered_test.status = draft.status
            created_at = draft.created_at

        self._active = ActiveTest(
            patient_id=patient_id,
            schema=schema,
            ordered_test=ordered_test,
            values=values,
            created_at=created_at,
        )
        logger.info(
            "drafts: selected %s/%s (%s)",
            patient_id,
            test_id,
            "restored" if draft is not None else "new",
        )
        return self.working_set

    def deselect(self) -> None:
        """Flush and drop the active test."""
        if self._active is None:
            return
        self.flush_now()
        self._active = None

    def latest_draft(self, patient_id: str, test_id: str) -> TestDraft | None:
        """Newest known snapshot for a test, unflushed or stored.

        Raises:
            StoreError: If the store read fails.
        """
        slot = self._slots.get((patient_id, test_id))
        if slot is not None and slot.unflushed is not None:
            # A write for this test is still outstanding; it is newer than the store.
            return slot.unflushed
        return self.store.get(patient_id, test_id)

    def _load_draft(self, patient_id: str, test_id: str) -> TestDraft | None:
        try:
            return self.latest_draft(patient_id, test_id)
        except StoreError as exc:
            self.notifier.notify(
                "DRAFT_READ_FAILED",
                f"Could not load saved results: {exc}",
                patient_id=patient_id,
                test_id=test_id,
            )
            return None

    # -- edits ---------------------------------------------------------

    def _require_active(self) -> ActiveTest:
        if self._active is None:
            raise NoActiveTestError("No test is selected")
        return self._active

    def _require_field(self, active: ActiveTest, field_id: str) -> ParameterValue:
        if active.schema.get_field(field_id) is None:
            raise UnknownFieldError(active.test_id, field_id)
        return active.values.get(field_id) or ParameterValue(field_id=field_id)

    def set_value(self, field_id: str, value: str) -> ParameterValue:
        active = self._require_active()
        current = self._require_field(active, field_id)
        updated = current.model_copy(update={"value": value})
        active.values[field_id] = updated
        logger.debug("drafts: %s.%s = %r", active.test_id, field_id, value)
        self.schedule_flush()
        return updated

    def set_notes(self, field_id: str, notes: str) -> ParameterValue:
        active = self._require_active()
        current = self._require_field(active, field_id)
        updated = current.model_copy(update={"notes": notes})
        active.values[field_id] = updated
        self.schedule_flush()
        return updated

    def set_collection_notes(self, notes: str) -> None:
        active = self._require_active()
        active.ordered_test.status = self.state_machine.with_notes(
            active.ordered_test.status, notes
        )
        self.schedule_flush()

    def toggle_collected(self, collector_id: str) -> OrderedTest:
        """Flip the active test's collection state and persist immediately."""
        active = self._require_active()
        self.state_machine.toggle_test(
            active.ordered_test, collector_id, self.scheduler.now()
        )
        self.schedule_flush()
        self.flush_now()
        return active.ordered_test

    @property
    def working_set(self) -> dict[str, ParameterValue]:
        if self._active is None:
            return {}
        return dict(self._active.values)

    def classifications(self) -> dict[str, Classification]:
        if self._active is None:
            return {}
        return classify_working_set(self._active.schema, self._active.values)

    # -- flushing ------------------------------------------------------

    def has_pending(self, key: DraftKey | None = None) -> bool:
        key = key or (self._active.key if self._active else None)
        return key is not None and key in self._slots

    def schedule_flush(self) -> None:
        """(Re)start the debounce timer for the active test."""
        active = self._require_active()
        slot = self._slots.setdefault(active.key, _WriteSlot())
        if slot.timer is not None:
            slot.timer.cancel()
        key = active.key
        slot.timer = self.scheduler.call_later(
            self.config.debounce_delay, lambda: self._on_timer(key)
        )

    def cancel_pending(self, key: DraftKey | None = None) -> None:
        """Drop the scheduled write without writing."""
        key = key or self._require_active().key
        slot = self._slots.pop(key, None)
        if slot is not None and slot.timer is not None:
            slot.timer.cancel()

    def flush_now(self, key: DraftKey | None = None) -> bool:
        """Write any pending snapshot for `key` (default: active test) right away.

        Returns:
            True if nothing was pending or the write succeeded.
        """
        if key is None:
            if self._active is None:
                return True
            key = self._active.key
        slot = self._slots.get(key)
        if slot is None:
            return True
        if slot.timer is not None:
            slot.timer.cancel()
            slot.timer = None
        return self._write(key, slot)

    def _on_timer(self, key: DraftKey) -> None:
        slot = self._slots.get(key)
        if slot is None:
            return
        slot.timer = None
        self._write(key, slot)

    def _snapshot(self, key: DraftKey, slot: _WriteSlot) -> TestDraft | None:
        active = self._active
        if active is None or active.key != key:
            return slot.unflushed
        now = self.scheduler.now()
        return TestDraft(
            patient_id=active.patient_id,
            test_id=active.test_id,
            parameters=dict(active.values),
            status=active.ordered_test.status,
            created_at=active.created_at or now,
            updated_at=now,
        )

    def _write(self, key: DraftKey, slot: _WriteSlot) -> bool:
        snapshot = self._snapshot(key, slot)
        if snapshot is None:
            self._slots.pop(key, None)
            return True

        try:
            self.store.put(snapshot)
        except StoreError as exc:
            slot.failures += 1
            slot.unflushed = snapshot
            if slot.failures <= self.config.max_write_retries:
                logger.warning(
                    "drafts: write failed for %s/%s, retrying in %.2fs: %s",
                    key[0],
                    key[1],
                    self.config.retry_backoff,
                    exc,
                )
                slot.timer = self.scheduler.call_later(
                    self.config.retry_backoff, lambda: self._on_timer(key)
                )
            else:
                slot.failures = 0
                self.notifier.notify(
                    "DRAFT_WRITE_FAILED",
                    f"Results could not be saved; they are kept on screen ({exc})",
                    patient_id=key[0],
                    test_id=key[1],
                )
            return False

        self._slots.pop(key, None)
        if self._active is not None and self._active.key == key:
            self._active.created_at = snapshot.created_at
        logger.info("drafts: saved %s", snapshot.draft_id)
        return True
