"""Lab test result entry, draft persistence and report compilation."""

__version__ = "0.1.0"
