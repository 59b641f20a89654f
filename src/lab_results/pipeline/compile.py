"""Turn a collected test's working set into an immutable, stored LabReport."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict

from lab_results.engine.notify import Notifier
from lab_results.engine.scheduler import Scheduler
from lab_results.errors import StoreError
from lab_results.pipeline.classify import classify
from lab_results.schemas.records import (
    LabReport,
    LabReportInput,
    LabReportParameter,
    OrderedTest,
    ParameterValue,
    PatientSnapshot,
)
from lab_results.schemas.registry import SchemaRegistry
from lab_results.stores.base import ReportStore

logger = logging.getLogger(__name__)


class RejectionReason(str, Enum):
    NOT_COLLECTED = "not_collected"
    NO_DATA = "no_data"


class CompileRejected(BaseModel):
    """A compile refused because a precondition was not met."""

    model_config = ConfigDict(frozen=True)

    test_id: str
    reason: RejectionReason
    message: str


class ReportCompiler:
    def __init__(
        self,
        report_store: ReportStore,
        registry: SchemaRegistry,
        clock: Scheduler,
        notifier: Notifier | None = None,
    ) -> None:
        self.report_store = report_store
        self.registry = registry
        self.clock = clock
        self.notifier = notifier or Notifier()

    def build_parameters(
        self, test_id: str, working_set: Mapping[str, ParameterValue]
    ) -> list[LabReportParameter]:
        """Classified report rows for every non-empty value, in schema order."""
        schema = self.registry.resolve(test_id)
        params = []
        for field_def in schema.fields:
            entry = working_set.get(field_def.id)
            if entry is None or entry.is_empty:
                continue
            value = entry.value.strip()
            params.append(
                LabReportParameter(
                    field_id=field_def.id,
                    label=field_def.label,
                    value=value,
                    unit=field_def.unit or "",
                    ref_range=field_def.ref_range or "",
                    classification=classify(value, field_def.ref_range),
                    notes=entry.notes,
                )
            )
        return params

    def compile(
        self,
        patient: PatientSnapshot,
        ordered_test: OrderedTest,
        working_set: Mapping[str, ParameterValue],
        collector_id: str,
    ) -> LabReport | CompileRejected:
        """Validate, classify and persist a report for one ordered test.

        Returns:
            The stored LabReport, or CompileRejected naming the unmet
            precondition.

        Raises:
            StoreError: If the report store fails. Nothing is fabricated.
        """
        status = ordered_test.status
        if not status.collected:
            logger.info("compile: %s rejected, sample not collected", ordered_test.test_id)
            return CompileRejected(
                test_id=ordered_test.test_id,
                reason=RejectionReason.NOT_COLLECTED,
                message=f"Mark the sample for '{ordered_test.name}' as collected before compiling",
            )

        params = self.build_parameters(ordered_test.test_id, working_set)
        if not params:
            logger.info("compile: %s rejected, no values entered", ordered_test.test_id)
            return CompileRejected(
                test_id=ordered_test.test_id,
                reason=RejectionReason.NO_DATA,
                message=f"Enter at least one result for '{ordered_test.name}' before compiling",
            )

        report_input = LabReportInput(
            patient_id=patient.patient_id,
            patient=patient,
            test_id=ordered_test.test_id,
            test_name=ordered_test.name,
            parameters=tuple(params),
            collected_at=status.collected_at,
            collected_by=status.collected_by or collector_id,
            compiled_at=self.clock.now(),
        )
        try:
            report = self.report_store.save(report_input)
        except StoreError as exc:
            logger.error("compile: %s could not be stored - %s", ordered_test.test_id, exc)
            raise

        abnormal = len(report.abnormal_parameters)
        logger.info(
            "compile: %s -> report %s (%d parameters, %d abnormal)",
            ordered_test.test_id,
            report.report_id,
            len(report.parameters),
            abnormal,
        )
        return report

    def mark_printed(self, patient_id: str) -> bool:
        """Record that a patient's reports were printed. Failures are advisory."""
        try:
            self.report_store.mark_printed(patient_id)
        except StoreError as exc:
            self.notifier.notify(
                "PRINT_MARK_FAILED",
                f"Could not record the print for patient {patient_id}: {exc}",
                patient_id=patient_id,
            )
            return False
        logger.info("compile: marked reports printed for %s", patient_id)
        return True
