"""
Configuration Module.

Two-tier configuration for the automation framework:
- Framework defaults bundled with the package.
- Project overrides read from ``config/configuration.yaml``.
- Schema validation of both layers.
"""

from automation_core.config.loader import ConfigResolver, ConfigurationError, PropertiesFile
from automation_core.config.schema_registry import SchemaRegistry, SchemaValidationError

__all__ = [
    "ConfigResolver",
    "ConfigurationError",
    "PropertiesFile",
    "SchemaRegistry",
    "SchemaValidationError",
]
