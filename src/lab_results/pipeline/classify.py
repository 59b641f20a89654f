from __future__ import annotations

import math
import re

from lab_results.schemas.records import Classification

# "<low> - <high>", decimal bounds, anything around it ignored
_INTERVAL = re.compile(r"(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)")


def parse_interval(ref_range: str | None) -> tuple[float, float] | None:
    """Extract the first dash-separated numeric interval from a reference range.

    Only the first match is used, so "M: 0-15, F: 0-20" yields (0, 15).
    Returns None when the text holds no such interval (e.g. "< 200",
    "Negative").
    """
    if not ref_range:
        return None
    match = _INTERVAL.search(ref_range)
    if match is None:
        return None
    return float(match.group(1)), float(match.group(2))


def parse_value(raw_value: str | None) -> float | None:
    if raw_value is None:
        return None
    try:
        value = float(raw_value.strip())
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def classify(raw_value: str | None, ref_range: str | None) -> Classification:
    """Classify a raw entry against a free-text reference range.

    Anything that cannot be compared numerically is INDETERMINATE, never
    abnormal.
    """
    interval = parse_interval(ref_range)
    value = parse_value(raw_value)
    if interval is None or value is None:
        return Classification.INDETERMINATE

    low, high = interval
    if value < low:
        return Classification.ABNORMAL_LOW
    if value > high:
        return Classification.ABNORMAL_HIGH
    return Classification.NORMAL
