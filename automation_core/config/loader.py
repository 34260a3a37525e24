"""
Configuration Loader Module.

Two-tier key/value configuration for the automation framework:
- A framework-default file bundled with the package (always present).
- An optional project file on disk that overrides the defaults key by key.

Files are YAML or JSON. Nested mappings are flattened into dotted keys, so
both of these define ``jira.connector.isActive``::

    jira.connector.isActive: true

    jira:
      connector:
        isActive: true
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

import yaml
from loguru import logger

from automation_core.config.schema_registry import SchemaRegistry
from automation_core.exceptions import AutomationException

if TYPE_CHECKING:
    from importlib.resources.abc import Traversable

DEFAULT_FILE_NAME = "configuration_core.yaml"
PROJECT_FILE = Path("config") / "configuration.yaml"
SCHEMA_NAME = "configuration_schema"
SUPPORTED_EXTENSIONS = {".yaml", ".yml", ".json"}

_MISSING = object()


class ConfigurationError(AutomationException):
    """Raised when a configuration file or key cannot be loaded."""

    pass


def read_mapping(source: Path | Traversable) -> Dict[str, Optional[str]]:
    """
    Read a YAML/JSON file into a flat ``{dotted.key: str | None}`` mapping.

    Raises:
        ConfigurationError: If the file is missing, unreadable, malformed or
                            does not hold a mapping.
    """
    suffix = Path(source.name).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported file format '{suffix}' for {source}. "
            f"Supported: {sorted(SUPPORTED_EXTENSIONS)}"
        )

    try:
        content = source.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to read file {source}: {e}") from e

    try:
        if suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to parse {source}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping (dict), "
            f"got {type(data).__name__}: {source}"
        )

    return _flatten(data)


def _flatten(data: Dict[Any, Any], prefix: str = "") -> Dict[str, Optional[str]]:
    flat: Dict[str, Optional[str]] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{full_key}."))
        else:
            flat[full_key] = _to_text(value)
    return flat


def _to_text(value: Any) -> Optional[str]:
    """Normalize a scalar to the string form a properties file would hold."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


class PropertiesFile:
    """
    A single configuration file held in memory.

    Attributes:
        path: Location the values were read from.
    """

    def __init__(self, path: str | Path | Traversable) -> None:
        self.path = Path(path) if isinstance(path, str) else path
        self._values = read_mapping(self.path)
        logger.debug(f"Properties loaded: {self.path} ({len(self._values)} keys)")

    @classmethod
    def empty(cls, label: str = "<runtime>") -> "PropertiesFile":
        """Create an in-memory layer with no backing file."""
        instance = cls.__new__(cls)
        instance.path = Path(label)
        instance._values = {}
        return instance

    def get_value(self, key: str) -> Optional[str]:
        """Return the value for ``key``, or None if it is not defined."""
        return self._values.get(key)

    def set_value(self, key: str, value: Any) -> None:
        """Set ``key`` in memory. The file on disk is not rewritten."""
        self._values[key] = _to_text(value)

    def __contains__(self, key: str) -> bool:
        return key in self._values

    @property
    def properties(self) -> Dict[str, Optional[str]]:
        """Copy of all loaded key/value pairs."""
        return dict(self._values)


class ConfigResolver:
    """
    Resolves configuration keys across the project and framework layers.

    The project file, when present, wins for every key it defines with a
    non-null value; everything else falls back to the framework default.

    Usage::

        resolver = ConfigResolver()
        if resolver.resolve("jira.connector.isActive") == "true":
            ...
    """

    def __init__(
        self,
        file_name: str = DEFAULT_FILE_NAME,
        project_file: str | Path | None = None,
        resource_dir: str | Path | Traversable | None = None,
        *,
        validate: bool = True,
        schema_registry: Optional[SchemaRegistry] = None,
    ) -> None:
        """
        Load the framework defaults and, if it exists, the project file.

        Args:
            file_name: Name of the framework-default file.
            project_file: Project override file; it must exist when given.
                          Defaults to ``<cwd>/config/configuration.yaml``,
                          which is optional.
            resource_dir: Directory holding ``file_name``. Defaults to the
                          resources bundled with the package.
            validate: Validate both layers against the configuration schema.
            schema_registry: Registry to validate with (bundled schemas by default).

        Raises:
            ConfigurationError: If a file cannot be read or fails validation.
        """
        self.file_name = file_name.lstrip("/\\")

        if resource_dir is None:
            base = resources.files("automation_core") / "resources"
        elif isinstance(resource_dir, str):
            base = Path(resource_dir)
        else:
            base = resource_dir

        try:
            self._framework = PropertiesFile(base / self.file_name)
        except ConfigurationError as e:
            raise ConfigurationError(
                "Failed to load framework properties '%s': %s",
                self.file_name,
                e.message,
                log=False,
            ) from e

        if project_file:
            project_path = Path(project_file)
            if not project_path.is_file():
                raise ConfigurationError(
                    "Project configuration file not found: %s", project_path
                )
        else:
            project_path = Path.cwd() / PROJECT_FILE

        self._project: Optional[PropertiesFile] = None
        if project_path.is_file():
            self._project = PropertiesFile(project_path)
            logger.info(f"Project configuration loaded: {project_path}")

        if validate:
            registry = schema_registry or SchemaRegistry()
            self._validate(registry, self._framework)
            if self._project is not None:
                self._validate(registry, self._project)

        logger.info(
            f"ConfigResolver initialized: defaults={self.file_name}, "
            f"project_overrides={self.has_project_overrides}"
        )

    @property
    def has_project_overrides(self) -> bool:
        """Whether a project override layer is loaded."""
        return self._project is not None

    def resolve(self, key: str) -> str:
        """
        Resolve a key, project layer first.

        Raises:
            ConfigurationError: If neither layer defines the key.
        """
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise ConfigurationError(
                "Key '%s' was not found in the framework properties file '%s'",
                key,
                self.file_name,
            )
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Resolve a key, returning ``default`` when neither layer defines it."""
        if self._project is not None:
            value = self._project.get_value(key)
            if value is not None:
                return value

        if key in self._framework:
            value = self._framework.get_value(key)
            return value if value is not None else ""

        return default

    def set_value(self, key: str, value: Any) -> None:
        """Override ``key`` for the rest of the process (project layer only)."""
        if self._project is None:
            logger.debug("No project configuration loaded, creating a runtime layer")
            self._project = PropertiesFile.empty()
        self._project.set_value(key, value)

    @staticmethod
    def _validate(registry: SchemaRegistry, layer: PropertiesFile) -> None:
        try:
            registry.validate(layer.properties, SCHEMA_NAME)
        except AutomationException as e:
            raise ConfigurationError(
                f"Configuration validation failed for {layer.path}: {e.message}",
                log=False,
            ) from e
