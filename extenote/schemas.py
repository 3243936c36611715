"""Schema registry - loads object type definitions from YAML files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import ValidationError

from .config import YAML_SUFFIXES
from .errors import ConfigError
from .models import IssueStage, Schema, Severity, VaultConfig, VaultIssue

logger = logging.getLogger(__name__)


@dataclass
class SchemaRegistry:
    """Schemas keyed by object type, plus problems found while loading."""

    schemas: dict[str, Schema] = field(default_factory=dict)
    issues: list[VaultIssue] = field(default_factory=list)

    def get(self, type_name: str) -> Schema | None:
        return self.schemas.get(type_name)

    def __contains__(self, type_name: str) -> bool:
        return type_name in self.schemas

    def __len__(self) -> int:
        return len(self.schemas)


def _issue(severity: Severity, file_path: Path, message: str) -> VaultIssue:
    return VaultIssue(
        severity=severity,
        message=message,
        stage=IssueStage.SCHEMA,
        file_path=str(file_path),
    )


def load_schemas(config: VaultConfig, cwd: Path) -> SchemaRegistry:
    """Load every schema file under the configured schema directory.

    Broken files and entries are recorded as issues so that the rest of
    the registry stays usable.

    Raises:
        ConfigError: if the schema path exists but is not a directory.
    """
    registry = SchemaRegistry()
    schema_dir = (cwd / config.schema_dir).resolve()

    if not schema_dir.exists():
        logger.warning(f"Schema directory not found: {schema_dir}")
        registry.issues.append(
            _issue(Severity.WARN, schema_dir, f"Schema directory not found: {schema_dir}")
        )
        return registry
    if not schema_dir.is_dir():
        raise ConfigError(f"Schema path is not a directory: {schema_dir}")

    files = sorted(
        p for p in schema_dir.rglob("*") if p.is_file() and p.suffix in YAML_SUFFIXES
    )
    for file_path in files:
        _load_schema_file(file_path, registry)

    logger.info(f"Loaded {len(registry)} schemas from {schema_dir}")
    return registry


def _load_schema_file(file_path: Path, registry: SchemaRegistry) -> None:
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError, ValueError) as e:
        logger.warning(f"Failed to read schema file {file_path}: {e}")
        registry.issues.append(
            _issue(Severity.ERROR, file_path, f"Failed to read schema file: {e}")
        )
        return

    if data is None:
        return
    if not isinstance(data, dict):
        registry.issues.append(
            _issue(Severity.ERROR, file_path, "Schema file must contain a mapping")
        )
        return

    entries = data.get("schemas") or []
    if not isinstance(entries, list):
        registry.issues.append(
            _issue(Severity.ERROR, file_path, "'schemas' must be a list")
        )
        return

    for position, entry in enumerate(entries):
        if not isinstance(entry, dict):
            registry.issues.append(
                _issue(Severity.ERROR, file_path, f"Schema entry {position} must be a mapping")
            )
            continue

        label = entry.get("name") or f"#{position}"
        try:
            schema = Schema.model_validate({**entry, "filePath": str(file_path)})
        except ValidationError as e:
            registry.issues.append(
                _issue(Severity.ERROR, file_path, f"Invalid schema {label}: {e}")
            )
            continue

        existing = registry.schemas.get(schema.name)
        if existing is not None:
            registry.issues.append(
                _issue(
                    Severity.ERROR,
                    file_path,
                    f'Duplicate schema name "{schema.name}" '
                    f"(already defined in {existing.file_path})",
                )
            )
            continue

        registry.schemas[schema.name] = schema
        logger.debug(f"Registered schema '{schema.name}' from {file_path}")
