"""Schema validation of vault objects."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .models import (
    VISIBILITIES,
    FieldKind,
    IssueStage,
    Schema,
    Severity,
    VaultConfig,
    VaultIssue,
    VaultObject,
    Visibility,
    classify_value,
    has_value,
)

logger = logging.getLogger(__name__)

_YEAR_RE = re.compile(r"\b(19|20)\d{2}\b")
_DATE_FORMATS = (
    "%Y",
    "%Y-%m",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %Y",
    "%b %Y",
)

_SCALAR_KINDS = {
    "string": FieldKind.STRING,
    "number": FieldKind.NUMBER,
    "boolean": FieldKind.BOOLEAN,
    "object": FieldKind.MAPPING,
}


@dataclass
class ValidationResult:
    object: VaultObject
    issues: list[VaultIssue] = field(default_factory=list)


def is_valid_date_string(value: str) -> bool:
    """Accept strings that carry a 4-digit year and parse as a date."""
    value = value.strip()
    if not _YEAR_RE.search(value):
        return False
    try:
        datetime.fromisoformat(value)
        return True
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            datetime.strptime(value, fmt)
            return True
        except ValueError:
            continue
    return False


def matches_type(value: Any, type_name: str, items: str | None = None) -> bool:
    """Check a frontmatter value against a declared schema type."""
    kind = classify_value(value)

    if type_name == "date":
        return kind is FieldKind.DATE or (
            kind is FieldKind.STRING and is_valid_date_string(value)
        )
    if type_name == "array":
        if kind is not FieldKind.SEQUENCE:
            return False
        return items is None or all(matches_type(entry, items) for entry in value)

    expected = _SCALAR_KINDS.get(type_name)
    return expected is None or kind is expected


def resolve_visibility(obj: VaultObject, config: VaultConfig) -> Visibility:
    """Visibility for an object.

    Order: frontmatter value, project default, source default, global default.
    """
    profile = config.get_profile(obj.project)
    visibility_field = (profile and profile.visibility_field) or config.visibility_field

    value = obj.frontmatter.get(visibility_field)
    if value in VISIBILITIES:
        return value
    if profile and profile.default_visibility:
        return profile.default_visibility

    source = config.get_source(obj.source_id)
    if source and source.visibility:
        return source.visibility
    return config.default_visibility


def validate_object(
    obj: VaultObject, config: VaultConfig, schemas: Mapping[str, Schema]
) -> ValidationResult:
    """Validate one object; the object is always kept."""
    issues: list[VaultIssue] = []

    def issue(severity: Severity, message: str, field_name: str | None = None) -> None:
        issues.append(
            VaultIssue(
                severity=severity,
                message=message,
                stage=IssueStage.VALIDATION,
                source_id=obj.source_id,
                file_path=obj.file_path,
                object_id=obj.id,
                field=field_name,
            )
        )

    obj.visibility = resolve_visibility(obj, config)

    schema = schemas.get(obj.type)
    if schema is None:
        issue(Severity.WARN, f"Unknown schema {obj.type}")
        return ValidationResult(object=obj, issues=issues)

    obj.schema = schema

    for name in schema.required_fields():
        if not has_value(obj.frontmatter.get(name)):
            issue(Severity.ERROR, f"Missing required field {name}", name)

    for name, definition in schema.fields.items():
        value = obj.frontmatter.get(name)
        if value is None:
            continue
        if not matches_type(value, definition.type, definition.items):
            expected = definition.type
            if definition.items:
                expected = f"{expected} of {definition.items}"
            issue(Severity.ERROR, f"Field {name} should be {expected}", name)

    return ValidationResult(object=obj, issues=issues)


def validate_objects(
    objects: list[VaultObject], config: VaultConfig, schemas: Mapping[str, Schema]
) -> list[ValidationResult]:
    """Validate every object, one result per object in input order."""
    results = [validate_object(obj, config, schemas) for obj in objects]
    issue_count = sum(len(r.issues) for r in results)
    logger.info(f"Validated {len(results)} objects ({issue_count} issues)")
    return results
