from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum

from lab_results.errors import MissingCollectorError
from lab_results.schemas.records import CollectionStatus, OrderedTest

logger = logging.getLogger(__name__)


class CollectionState(str, Enum):
    PENDING = "pending"
    COLLECTED = "collected"


def state_of(status: CollectionStatus) -> CollectionState:
    return CollectionState.COLLECTED if status.collected else CollectionState.PENDING


class CollectionStateMachine:
    """Pending <-> Collected transitions for an ordered test's sample.

    Every transition is an explicit user action. The ordered test's status
    is replaced with a new CollectionStatus; the roster shape is untouched.
    """

    def __init__(self, collected_note: str = "Sample collected") -> None:
        self.collected_note = collected_note

    def mark_collected(
        self, status: CollectionStatus, collector_id: str, at: datetime
    ) -> CollectionStatus:
        if not collector_id or not collector_id.strip():
            raise MissingCollectorError("A collector id is required to mark a sample collected")
        return CollectionStatus(
            collected=True,
            collected_at=at,
            collected_by=collector_id.strip(),
            notes=status.notes or self.collected_note,
        )

    def mark_pending(self, status: CollectionStatus) -> CollectionStatus:
        return CollectionStatus(collected=False, notes=status.notes)

    def toggle(
        self, status: CollectionStatus, collector_id: str, at: datetime
    ) -> CollectionStatus:
        if status.collected:
            return self.mark_pending(status)
        return self.mark_collected(status, collector_id, at)

    def toggle_test(self, test: OrderedTest, collector_id: str, at: datetime) -> OrderedTest:
        test.status = self.toggle(test.status, collector_id, at)
        logger.info(
            "collection: %s -> %s (by %s)",
            test.test_id,
            state_of(test.status).value,
            test.status.collected_by or "-",
        )
        return test

    @staticmethod
    def with_notes(status: CollectionStatus, notes: str) -> CollectionStatus:
        return status.model_copy(update={"notes": notes})

    @staticmethod
    def is_compilable(status: CollectionStatus) -> bool:
        return state_of(status) is CollectionState.COLLECTED
