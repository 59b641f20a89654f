from dataclasses import dataclass


@dataclass
class WorkbenchConfig:
    debounce_delay: float = 1.0  # Draft autosave window, in scheduler time units
    retry_backoff: float = 0.25
    max_write_retries: int = 1
    collected_note: str = "Sample collected"
    fallback_specimen: str = "Blood"
    fallback_container: str = "Standard"
    store_dir: str = "data"
    negative_sentinels: tuple[str, ...] = (
        "Negative",
        "Non-Reactive",
        "NR",
        "Nil",
        "Absent",
        "None",
        "Not Found",
    )
