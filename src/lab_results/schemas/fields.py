from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _BaseField(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    unit: str | None = None
    ref_range: str | None = None  # Free text, e.g. "0 - 40" or "M: 0-15, F: 0-20"
    required: bool = False


class NumericField(_BaseField):
    kind: Literal["numeric"] = "numeric"
    min: float | None = None
    max: float | None = None
    step: float | None = None


class SelectField(_BaseField):
    kind: Literal["select"] = "select"
    options: tuple[str, ...]


class TimestampField(_BaseField):
    kind: Literal["timestamp"] = "timestamp"


class TextField(_BaseField):
    kind: Literal["text"] = "text"
    default_value: str = ""  # Interpretive comment pre-filled on a fresh working set


FieldDefinition = Annotated[
    Union[NumericField, SelectField, TimestampField, TextField],
    Field(discriminator="kind"),
]


class TestSchema(BaseModel):
    """Ordered field definitions for one test.

    Order is display order and serialization order. Field ids are unique.
    """

    __test__ = False  # not a pytest class

    model_config = ConfigDict(frozen=True)

    test_id: str
    fields: tuple[FieldDefinition, ...]

    @model_validator(mode="after")
    def _unique_field_ids(self) -> TestSchema:
        seen: set[str] = set()
        for field_def in self.fields:
            if field_def.id in seen:
                raise ValueError(
                    f"Duplicate field id '{field_def.id}' in schema '{self.test_id}'"
                )
            seen.add(field_def.id)
        return self

    def get_field(self, field_id: str) -> FieldDefinition | None:
        """Get a field definition by its ID."""
        for field_def in self.fields:
            if field_def.id == field_id:
                return field_def
        return None

    @property
    def field_ids(self) -> list[str]:
        return [field_def.id for field_def in self.fields]


def default_value(
    field_def: FieldDefinition, negative_sentinels: tuple[str, ...]
) -> str:
    """Initial raw value for a field on a fresh working set."""
    if isinstance(field_def, SelectField):
        sentinels = {s.lower() for s in negative_sentinels}
        for option in field_def.options:
            if option.strip().lower() in sentinels:
                return option
        return ""
    if isinstance(field_def, TextField):
        return field_def.default_value
    return ""
