"""Exceptions raised by the lab results core."""


class LabResultsError(Exception):
    """Base class for lab results errors."""


class StoreError(LabResultsError):
    """Raised by a store adapter when a read or write fails."""


class ReportStoreError(StoreError):
    """Raised when a compiled report could not be persisted."""


class SchemaRegistrationError(LabResultsError):
    """Raised when a schema is registered twice or is malformed."""


class NoActiveTestError(LabResultsError):
    """Raised when an edit arrives while no test is selected."""


class UnknownFieldError(LabResultsError):
    """Raised when an edit targets a field the active schema does not define."""

    def __init__(self, test_id: str, field_id: str) -> None:
        self.test_id = test_id
        self.field_id = field_id
        super().__init__(f"Test '{test_id}' has no field '{field_id}'")


class MissingCollectorError(LabResultsError):
    """Raised when a sample is marked collected without a collector id."""


class RosterValidationError(LabResultsError):
    """Raised when a roster change violates a membership rule."""

    def __init__(self, test_id: str, message: str) -> None:
        self.test_id = test_id
        super().__init__(message)


class DuplicateTestError(RosterValidationError):
    def __init__(self, test_id: str) -> None:
        super().__init__(test_id, f"Test '{test_id}' is already on the roster")


class CollectedTestError(RosterValidationError):
    def __init__(self, test_id: str) -> None:
        super().__init__(
            test_id, f"Test '{test_id}' has a collected sample and cannot be removed"
        )


class UnknownTestError(RosterValidationError):
    def __init__(self, test_id: str) -> None:
        super().__init__(test_id, f"Test '{test_id}' is not on the roster")
