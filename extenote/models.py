"""Data model for configuration, schemas and vault records."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Visibility = Literal["public", "private", "unlisted"]
VISIBILITIES: tuple[str, ...] = ("public", "private", "unlisted")

RuleSetting = Literal["off", "warn", "error"]

DEFAULT_LINT_RULES: dict[str, RuleSetting] = {"required-visibility": "warn"}


class Severity(str, Enum):
    ERROR = "error"
    WARN = "warn"
    INFO = "info"


class IssueStage(str, Enum):
    """Pipeline stage that raised an issue."""

    SCHEMA = "schema"
    LOAD = "load"
    VALIDATION = "validation"
    LINT = "lint"


class FieldKind(Enum):
    """Tag for the runtime shape of a frontmatter value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    NULL = "null"
    OTHER = "other"


def classify_value(value: Any) -> FieldKind:
    """Tag a YAML-decoded frontmatter value with its kind."""
    if value is None:
        return FieldKind.NULL
    # bool is a subclass of int, check it first
    if isinstance(value, bool):
        return FieldKind.BOOLEAN
    if isinstance(value, (int, float)):
        return FieldKind.NUMBER
    if isinstance(value, str):
        return FieldKind.STRING
    if isinstance(value, date):
        return FieldKind.DATE
    if isinstance(value, (list, tuple)):
        return FieldKind.SEQUENCE
    if isinstance(value, dict):
        return FieldKind.MAPPING
    return FieldKind.OTHER


def has_value(value: Any) -> bool:
    """Check if a value is present (not None, blank string or empty list)."""
    kind = classify_value(value)
    if kind is FieldKind.NULL:
        return False
    if kind is FieldKind.STRING:
        return bool(value.strip())
    if kind is FieldKind.SEQUENCE:
        return len(value) > 0
    return True


# ─── Configuration ──────────────────────────────────────────────────────────


class _ConfigModel(BaseModel):
    """Immutable model read from camelCase YAML keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class SourceConfig(_ConfigModel):
    """A physical location holding content files."""

    id: str = Field(min_length=1)
    type: Literal["local"] = "local"
    root: str
    include: tuple[str, ...] | None = None
    exclude: tuple[str, ...] = ()
    visibility: Visibility | None = None
    disabled: bool = False
    required: bool = False


class LintConfig(_ConfigModel):
    rules: dict[str, RuleSetting] = Field(default_factory=lambda: dict(DEFAULT_LINT_RULES))
    autofix: bool = False

    def setting(self, rule: str) -> RuleSetting:
        return self.rules.get(rule, "off")


class CompatibilityDefinition(_ConfigModel):
    """Fields a build target needs on every object of a project."""

    required_fields: tuple[str, ...] = ()
    require_public_visibility: bool = False


class ProjectProfile(_ConfigModel):
    """A logical project: its sources, included projects and overrides."""

    name: str = Field(min_length=1)
    source_ids: tuple[str, ...] = ()
    includes: tuple[str, ...] = ()
    default_visibility: Visibility | None = None
    visibility_field: str | None = None
    lint: LintConfig | None = None
    compatibility: dict[str, CompatibilityDefinition] = Field(default_factory=dict)


class VaultConfig(_ConfigModel):
    """Resolved configuration for one run."""

    sources: tuple[SourceConfig, ...] = ()
    project_profiles: tuple[ProjectProfile, ...] = ()
    default_visibility: Visibility = "private"
    visibility_field: str = "visibility"
    lint: LintConfig = Field(default_factory=LintConfig)
    schema_dir: str = "schemas"

    def get_profile(self, name: str) -> ProjectProfile | None:
        for profile in self.project_profiles:
            if profile.name == name:
                return profile
        return None

    def get_source(self, source_id: str) -> SourceConfig | None:
        for source in self.sources:
            if source.id == source_id:
                return source
        return None


# ─── Schemas ────────────────────────────────────────────────────────────────

FieldType = Literal["string", "number", "boolean", "date", "array", "object"]


class SchemaField(_ConfigModel):
    type: FieldType
    items: Literal["string", "number", "boolean", "date"] | None = None
    description: str | None = None
    required: bool = False


class Schema(_ConfigModel):
    """Definition of one object type."""

    name: str = Field(min_length=1)
    description: str | None = None
    identity_field: str = "slug"
    subdirectory: str | None = None
    required: tuple[str, ...] = ()
    fields: dict[str, SchemaField] = Field(default_factory=dict)
    source_ids: tuple[str, ...] = ()
    projects: tuple[str, ...] = ()
    file_path: str = ""

    def required_fields(self) -> list[str]:
        """Top-level required list plus fields flagged required, in order."""
        names = list(self.required)
        for name, definition in self.fields.items():
            if definition.required and name not in names:
                names.append(name)
        return names


# ─── Vault records ──────────────────────────────────────────────────────────


@dataclass
class VaultObject:
    """A single content file loaded from a source."""

    id: str
    type: str
    title: str
    source_id: str
    file_path: str
    relative_path: str
    frontmatter: dict[str, Any]
    body: str
    mtime: float
    visibility: Visibility
    project: str = ""
    schema: Schema | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "source_id": self.source_id,
            "file_path": self.file_path,
            "relative_path": self.relative_path,
            "frontmatter": self.frontmatter,
            "body": self.body,
            "mtime": self.mtime,
            "visibility": self.visibility,
            "project": self.project,
        }


@dataclass
class VaultIssue:
    """A non-fatal diagnostic raised while assembling the vault."""

    severity: Severity
    message: str
    stage: IssueStage
    source_id: str = ""
    file_path: str = ""
    object_id: str | None = None
    field: str | None = None
    rule: str | None = None

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "stage": self.stage.value,
            "source_id": self.source_id,
            "file_path": self.file_path,
            "object_id": self.object_id,
            "field": self.field,
            "rule": self.rule,
        }


@dataclass
class SourceSummary:
    source: SourceConfig
    object_count: int
    issues: list[VaultIssue] = field(default_factory=list)
    last_synced: float | None = None

    def to_dict(self) -> dict:
        return {
            "source_id": self.source.id,
            "root": self.source.root,
            "object_count": self.object_count,
            "issues": [i.to_dict() for i in self.issues],
            "last_synced": self.last_synced,
        }


@dataclass
class VaultState:
    """Read-only snapshot produced by one vault load."""

    config: VaultConfig
    schemas: dict[str, Schema]
    objects: list[VaultObject] = field(default_factory=list)
    issues: list[VaultIssue] = field(default_factory=list)
    summaries: list[SourceSummary] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity is Severity.ERROR for issue in self.issues)

    def filter_objects(
        self,
        project: str | None = None,
        type: str | None = None,
        visibility: str | None = None,
    ) -> list[VaultObject]:
        """Objects matching every given criterion."""
        return [
            obj
            for obj in self.objects
            if (project is None or obj.project == project)
            and (type is None or obj.type == type)
            and (visibility is None or obj.visibility == visibility)
        ]

    def issues_for(self, obj: VaultObject) -> list[VaultIssue]:
        """Issues raised against a given object.

        Object ids are only unique per source, so issues are matched on
        source id and file path as well.
        """
        return [
            issue
            for issue in self.issues
            if issue.source_id == obj.source_id and issue.file_path == obj.file_path
        ]

    def to_dict(self) -> dict:
        return {
            "config": self.config.model_dump(mode="json", by_alias=True),
            "schemas": sorted(self.schemas),
            "objects": [o.to_dict() for o in self.objects],
            "issues": [i.to_dict() for i in self.issues],
            "summaries": [s.to_dict() for s in self.summaries],
        }
