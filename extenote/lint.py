"""Content lint rules evaluated over validated objects."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .citations import BIBTEX_TYPE, bibliography_keys, detect_cited_references
from .markdown import serialize_markdown
from .models import (
    VISIBILITIES,
    CompatibilityDefinition,
    IssueStage,
    LintConfig,
    RuleSetting,
    Severity,
    VaultConfig,
    VaultIssue,
    VaultObject,
    has_value,
)

logger = logging.getLogger(__name__)

REQUIRED_VISIBILITY = "required-visibility"
MISSING_CITATION = "missing-citation"


@dataclass
class LintResult:
    issues: list[VaultIssue] = field(default_factory=list)
    updated_files: list[str] = field(default_factory=list)


def _severity(setting: RuleSetting) -> Severity:
    return Severity.ERROR if setting == "error" else Severity.WARN


def _issue(
    obj: VaultObject,
    setting: RuleSetting,
    rule: str,
    message: str,
    field_name: str | None = None,
) -> VaultIssue:
    return VaultIssue(
        severity=_severity(setting),
        message=message,
        stage=IssueStage.LINT,
        source_id=obj.source_id,
        file_path=obj.file_path,
        object_id=obj.id,
        field=field_name,
        rule=rule,
    )


def lint_objects(
    objects: list[VaultObject], config: VaultConfig, fix: bool = False
) -> LintResult:
    """Run the configured lint rules over every object.

    Objects are only modified when fix is set, in which case fixable
    problems are also written back to the files.
    """
    result = LintResult()
    known_keys: set[str] | None = None

    for obj in objects:
        profile = config.get_profile(obj.project)
        lint_config: LintConfig = (profile and profile.lint) or config.lint
        visibility_field = (profile and profile.visibility_field) or config.visibility_field

        setting = lint_config.setting(REQUIRED_VISIBILITY)
        if setting != "off":
            _check_visibility(obj, config, visibility_field, setting, fix, result)

        if profile:
            for target, definition in profile.compatibility.items():
                rule = f"compatibility:{target}"
                setting = lint_config.setting(rule)
                if setting != "off":
                    result.issues.extend(
                        _check_compatibility(obj, definition, visibility_field, target, setting)
                    )

        setting = lint_config.setting(MISSING_CITATION)
        if setting != "off" and obj.type != BIBTEX_TYPE:
            if known_keys is None:
                known_keys = bibliography_keys(objects)
            for key in sorted(detect_cited_references([obj]) - known_keys):
                result.issues.append(
                    _issue(obj, setting, MISSING_CITATION, f"Citation key @{key} not found in bibliography")
                )

    logger.info(f"Linted {len(objects)} objects ({len(result.issues)} issues)")
    return result


def _check_visibility(
    obj: VaultObject,
    config: VaultConfig,
    visibility_field: str,
    setting: RuleSetting,
    fix: bool,
    result: LintResult,
) -> None:
    if obj.frontmatter.get(visibility_field) in VISIBILITIES:
        return

    profile = config.get_profile(obj.project)
    default = (profile and profile.default_visibility) or config.default_visibility
    result.issues.append(
        _issue(
            obj,
            setting,
            REQUIRED_VISIBILITY,
            f"Missing {visibility_field}; defaulting to {default}",
            visibility_field,
        )
    )

    if not fix:
        return

    frontmatter = {**obj.frontmatter, visibility_field: default}
    try:
        Path(obj.file_path).write_text(serialize_markdown(frontmatter, obj.body), encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to fix {obj.file_path}: {e}")
        result.issues.append(
            VaultIssue(
                severity=Severity.ERROR,
                message=f"Failed to write fix: {e}",
                stage=IssueStage.LINT,
                source_id=obj.source_id,
                file_path=obj.file_path,
                object_id=obj.id,
                rule=REQUIRED_VISIBILITY,
            )
        )
        return

    obj.frontmatter = frontmatter
    obj.visibility = default
    result.updated_files.append(obj.file_path)
    logger.info(f"Set {visibility_field}: {default} in {obj.file_path}")


def _check_compatibility(
    obj: VaultObject,
    definition: CompatibilityDefinition,
    visibility_field: str,
    target: str,
    setting: RuleSetting,
) -> list[VaultIssue]:
    rule = f"compatibility:{target}"
    issues = [
        _issue(obj, setting, rule, f"{name} is required for {target} compatibility", name)
        for name in definition.required_fields
        if not has_value(obj.frontmatter.get(name))
    ]

    if definition.require_public_visibility and obj.visibility != "public":
        issues.append(
            _issue(
                obj,
                setting,
                rule,
                f"Visibility must be public for {target} compatibility",
                visibility_field,
            )
        )

    return issues
