from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from pydantic import ValidationError

from lab_results.errors import SchemaRegistrationError
from lab_results.schemas.catalog import BUILTIN_SCHEMAS, GENERIC_FIELDS, TEST_CATALOG
from lab_results.schemas.fields import FieldDefinition, TestSchema
from lab_results.schemas.records import OrderedTest, TestInfo

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Registry mapping test identifiers to their field schemas.

    Schemas are immutable once registered. Lookups for unknown tests return
    None from `schema_for`; callers that need something to render use
    `resolve`, which falls back to a generic three-field schema.
    """

    def __init__(
        self,
        schemas: Mapping[str, TestSchema] | None = None,
        catalog: Mapping[str, TestInfo] | None = None,
    ) -> None:
        self._schemas: dict[str, TestSchema] = dict(
            BUILTIN_SCHEMAS if schemas is None else schemas
        )
        self._catalog: dict[str, TestInfo] = dict(
            TEST_CATALOG if catalog is None else catalog
        )

    def schema_for(self, test_id: str) -> TestSchema | None:
        return self._schemas.get(test_id)

    def resolve(self, test_id: str) -> TestSchema:
        """Get the schema for a test, or the generic schema if none is registered."""
        schema = self._schemas.get(test_id)
        if schema is not None:
            return schema
        logger.info("registry: no schema for '%s', using generic fields", test_id)
        return generic_schema(test_id)

    def has_schema(self, test_id: str) -> bool:
        return test_id in self._schemas

    def register(
        self,
        test_id: str,
        fields: Iterable[FieldDefinition],
        info: TestInfo | None = None,
    ) -> TestSchema:
        """Register a schema (and optionally catalog metadata) for a new test.

        Raises:
            SchemaRegistrationError: If the test already has a schema or the
                field list is invalid (e.g. duplicate field ids).
        """
        if test_id in self._schemas:
            raise SchemaRegistrationError(f"Schema already registered for '{test_id}'")
        try:
            schema = TestSchema(test_id=test_id, fields=tuple(fields))
        except ValidationError as exc:
            raise SchemaRegistrationError(
                f"Invalid schema for '{test_id}': {exc}"
            ) from exc

        self._schemas[test_id] = schema
        if info is not None:
            self._catalog[test_id] = info
        logger.info("registry: registered '%s' (%d fields)", test_id, len(schema.fields))
        return schema

    def info_for(self, test_id: str) -> TestInfo | None:
        return self._catalog.get(test_id)

    def known_tests(self) -> list[str]:
        return sorted(self._schemas)

    def ordered_test(
        self,
        test_id: str,
        fallback_specimen: str = "Blood",
        fallback_container: str = "Standard",
    ) -> OrderedTest:
        """Build a fresh (pending) roster entry from catalog metadata."""
        info = self._catalog.get(test_id)
        if info is None:
            return OrderedTest(
                test_id=test_id,
                name=f"Test {test_id}",
                specimen_type=fallback_specimen,
                container=fallback_container,
            )
        return OrderedTest(
            test_id=test_id,
            name=info.name,
            specimen_type=info.specimen_type,
            container=info.container,
            instructions=info.instructions,
        )


def generic_schema(test_id: str) -> TestSchema:
    return TestSchema(test_id=test_id, fields=GENERIC_FIELDS)
