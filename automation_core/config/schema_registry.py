"""
Schema Registry Module.

Holds the JSON schemas used to validate configuration files. Schemas are
read lazily from a directory (on disk or inside the installed package) and
validated with jsonschema's Draft 7 validator.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

import jsonschema
from loguru import logger

from automation_core.exceptions import AutomationException

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable


class SchemaValidationError(AutomationException):
    """Raised when configuration data does not match its schema."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def bundled_schema_dir() -> Traversable:
    """Return the schema directory shipped inside the package."""
    return resources.files("automation_core") / "resources" / "schemas"


class SchemaRegistry:
    """
    Registry of JSON schemas for configuration validation.

    Attributes:
        schema_dir: Directory containing ``<name>.json`` schema files.
    """

    def __init__(self, schema_dir: str | Path | Traversable | None = None) -> None:
        """
        Initialize the schema registry.

        Args:
            schema_dir: Directory holding the schema files. Defaults to the
                        schemas bundled with the package.
        """
        if schema_dir is None:
            self.schema_dir = bundled_schema_dir()
        elif isinstance(schema_dir, str):
            self.schema_dir = Path(schema_dir)
        else:
            self.schema_dir = schema_dir
        self._schemas: Dict[str, Dict[str, Any]] = {}
        logger.debug(f"SchemaRegistry initialized: schema_dir={self.schema_dir}")

    def get_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Retrieve a schema by name, reading it on first use.

        Raises:
            SchemaValidationError: If the schema is missing or is not valid JSON.
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_file = self.schema_dir / f"{schema_name}.json"
        try:
            schema = json.loads(schema_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SchemaValidationError(
                f"Failed to load schema '{schema_name}' from {self.schema_dir}: {e}"
            ) from e

        self._schemas[schema_name] = schema
        logger.debug(f"Schema loaded: {schema_name}")
        return schema

    def validate(self, data: Dict[str, Any], schema_name: str) -> None:
        """
        Validate a mapping against a named schema.

        Raises:
            SchemaValidationError: With one entry per violation.
        """
        schema = self.get_schema(schema_name)
        validator = jsonschema.Draft7Validator(schema)
        errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))

        if errors:
            error_messages = []
            for error in errors:
                path = " -> ".join(str(p) for p in error.absolute_path) or "(root)"
                error_messages.append(f"  [{path}] {error.message}")

            raise SchemaValidationError(
                f"Schema validation failed for '{schema_name}' "
                f"({len(errors)} error(s)):\n" + "\n".join(error_messages),
                errors=error_messages,
            )

        logger.debug(f"Validation passed: {schema_name}")
