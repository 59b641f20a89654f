"""Advisory notifications raised by background failures.

Adapter failures never interrupt editing; they are logged and queued here
for the presentation layer to show and drain.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

NotificationCode = Literal[
    "DRAFT_WRITE_FAILED",
    "DRAFT_READ_FAILED",
    "ROSTER_ADD_FAILED",
    "ROSTER_REMOVE_FAILED",
    "SCHEMA_FALLBACK",
    "PRINT_MARK_FAILED",
]


class Notification(BaseModel):
    code: NotificationCode
    message: str
    level: Literal["info", "warning", "error"] = "warning"
    patient_id: str | None = None
    test_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Notifier:
    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def notify(
        self,
        code: NotificationCode,
        message: str,
        level: Literal["info", "warning", "error"] = "warning",
        patient_id: str | None = None,
        test_id: str | None = None,
    ) -> Notification:
        notification = Notification(
            code=code,
            message=message,
            level=level,
            patient_id=patient_id,
            test_id=test_id,
        )
        log = logger.info if level == "info" else logger.warning
        log("notify: [%s] %s", code, message)
        self._pending.append(notification)
        return notification

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Return and clear all queued notifications."""
        drained, self._pending = self._pending, []
        return drained

    def codes(self) -> list[str]:
        return [n.code for n in self._pending]
