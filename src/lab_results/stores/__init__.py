"""Store adapters for drafts, rosters and compiled reports."""
from lab_results.stores.base import DraftStore, ReportStore, RosterStore
from lab_results.stores.json_files import JsonDraftStore, JsonReportStore, JsonRosterStore
from lab_results.stores.memory import InMemoryDraftStore, InMemoryReportStore, InMemoryRosterStore

__all__ = [
    "DraftStore", "RosterStore", "ReportStore",
    "InMemoryDraftStore", "InMemoryRosterStore", "InMemoryReportStore",
    "JsonDraftStore", "JsonRosterStore", "JsonReportStore",
]
