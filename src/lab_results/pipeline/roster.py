"""Patient test roster with optimistic remote synchronisation.

Local membership changes happen first and are never rolled back: a failed
remote add leaves the test visible but flagged unsynced, and a failed remote
remove leaves the test removed. Both raise an advisory notification.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from lab_results.engine.notify import Notifier
from lab_results.errors import (
    CollectedTestError,
    DuplicateTestError,
    StoreError,
    UnknownTestError,
)
from lab_results.schemas.config import WorkbenchConfig
from lab_results.schemas.records import OrderedTest
from lab_results.schemas.registry import SchemaRegistry
from lab_results.stores.base import RosterStore

logger = logging.getLogger(__name__)


class RosterSynchronizer:
    def __init__(
        self,
        patient_id: str,
        registry: SchemaRegistry,
        store: RosterStore,
        notifier: Notifier | None = None,
        config: WorkbenchConfig | None = None,
    ) -> None:
        self.patient_id = patient_id
        self.registry = registry
        self.store = store
        self.notifier = notifier or Notifier()
        self.config = config or WorkbenchConfig()
        self._tests: list[OrderedTest] = []
        self.current_test_id: str | None = None

    @property
    def tests(self) -> list[OrderedTest]:
        return list(self._tests)

    def get(self, test_id: str) -> OrderedTest | None:
        for test in self._tests:
            if test.test_id == test_id:
                return test
        return None

    def _new_entry(self, test_id: str) -> OrderedTest:
        return self.registry.ordered_test(
            test_id, self.config.fallback_specimen, self.config.fallback_container
        )

    def hydrate(self, test_ids: Iterable[str]) -> list[OrderedTest]:
        """Replace the local roster with pending entries for `test_ids`.

        Duplicates are dropped; the first test becomes the current selection.
        No remote call is made.
        """
        self._tests = []
        for test_id in test_ids:
            if self.get(test_id) is None:
                self._tests.append(self._new_entry(test_id))
        self.current_test_id = self._tests[0].test_id if self._tests else None
        logger.info("roster: loaded %d tests for %s", len(self._tests), self.patient_id)
        return self.tests

    def load(self) -> list[OrderedTest]:
        """Hydrate from the remote roster store."""
        return self.hydrate(self.store.get_tests(self.patient_id))

    def select(self, test_id: str | None) -> None:
        if test_id is not None and self.get(test_id) is None:
            raise UnknownTestError(test_id)
        self.current_test_id = test_id

    def add_test(self, test_id: str) -> OrderedTest:
        """Append a pending test, select it, then persist the addition remotely.

        Raises:
            DuplicateTestError: If the test is already on the roster.
        """
        if self.get(test_id) is not None:
            raise DuplicateTestError(test_id)

        entry = self._new_entry(test_id)
        self._tests.append(entry)
        self.current_test_id = test_id
        logger.info("roster: added %s for %s", test_id, self.patient_id)

        self._push_add(entry)
        return entry

    def _push_add(self, entry: OrderedTest) -> bool:
        try:
            self.store.add_test(self.patient_id, entry.test_id)
        except StoreError as exc:
            entry.synced = False
            self.notifier.notify(
                "ROSTER_ADD_FAILED",
                f"'{entry.name}' was added here but not saved to the patient record: {exc}",
                patient_id=self.patient_id,
                test_id=entry.test_id,
            )
            return False
        entry.synced = True
        return True

    def remove_test(self, test_id: str) -> str | None:
        """Remove an uncollected test and persist the removal remotely.

        Returns:
            The current selection after removal.

        Raises:
            UnknownTestError: If the test is not on the roster.
            CollectedTestError: If the test's sample has been collected.
        """
        entry = self.get(test_id)
        if entry is None:
            raise UnknownTestError(test_id)
        if entry.status.collected:
            raise CollectedTestError(test_id)

        index = self._tests.index(entry)
        self._tests.pop(index)
        if self.current_test_id == test_id:
            if index < len(self._tests):
                self.current_test_id = self._tests[index].test_id
            elif self._tests:
                self.current_test_id = self._tests[-1].test_id
            else:
                self.current_test_id = None
        logger.info("roster: removed %s for %s", test_id, self.patient_id)

        try:
            self.store.remove_test(self.patient_id, test_id)
        except StoreError as exc:
            logger.warning("roster: remote removal of %s failed: %s", test_id, exc)
            self.notifier.notify(
                "ROSTER_REMOVE_FAILED",
                f"'{entry.name}' was removed here but the patient record was not updated: {exc}",
                patient_id=self.patient_id,
                test_id=test_id,
            )
        return self.current_test_id

    def retry_unsynced(self) -> list[str]:
        """Re-issue remote adds for tests flagged unsynced.

        Returns:
            IDs of tests that are now synced.
        """
        synced = []
        for entry in self._tests:
            if not entry.synced and self._push_add(entry):
                synced.append(entry.test_id)
        return synced

    def unsynced(self) -> list[OrderedTest]:
        return [t for t in self._tests if not t.synced]

    def pending(self) -> list[OrderedTest]:
        return [t for t in self._tests if not t.status.collected]

    def collected_count(self) -> int:
        return sum(1 for t in self._tests if t.status.collected)
