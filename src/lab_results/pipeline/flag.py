from __future__ import annotations

import logging
from collections.abc import Mapping

from lab_results.pipeline.classify import classify
from lab_results.schemas.fields import TestSchema
from lab_results.schemas.records import Classification, ParameterValue

logger = logging.getLogger(__name__)


def classify_working_set(
    schema: TestSchema,
    values: Mapping[str, ParameterValue],
) -> dict[str, Classification]:
    """Classification per field, for every field holding a non-empty value.

    Used for live highlighting of abnormal rows while entering results.
    """
    flags: dict[str, Classification] = {}
    for field_def in schema.fields:
        param = values.get(field_def.id)
        if param is None or param.is_empty:
            continue
        flags[field_def.id] = classify(param.value, field_def.ref_range)

    abnormal = sum(1 for flag in flags.values() if flag.is_abnormal)
    logger.debug(
        "flag: %s %d/%d values abnormal", schema.test_id, abnormal, len(flags)
    )
    return flags


def abnormal_fields(flags: Mapping[str, Classification]) -> list[str]:
    return [field_id for field_id, flag in flags.items() if flag.is_abnormal]
