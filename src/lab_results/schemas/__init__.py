"""Schema definitions for lab result entry and reporting."""
from lab_results.schemas.fields import (
    FieldDefinition, NumericField, SelectField, TimestampField, TextField, TestSchema,
)
from lab_results.schemas.records import (
    Classification, CollectionStatus, TestInfo, OrderedTest, ParameterValue,
    TestDraft, PatientSnapshot, LabReportParameter, LabReportInput, LabReport,
)
from lab_results.schemas.config import WorkbenchConfig
from lab_results.schemas.registry import SchemaRegistry

__all__ = [
    "FieldDefinition", "NumericField", "SelectField", "TimestampField", "TextField",
    "TestSchema", "Classification", "CollectionStatus", "TestInfo", "OrderedTest",
    "ParameterValue", "TestDraft", "PatientSnapshot", "LabReportParameter",
    "LabReportInput", "LabReport", "WorkbenchConfig", "SchemaRegistry",
]
