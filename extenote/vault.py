"""Vault assembly - runs the full load pipeline and aggregates issues."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from .config import (
    DEFAULT_CONFIG_PATH,
    build_source_id_to_project,
    known_projects,
    load_config,
)
from .lint import lint_objects
from .models import SourceSummary, VaultIssue, VaultObject, VaultState
from .projects import attribute_projects
from .schemas import load_schemas
from .sources import SourceLoadContext, load_source
from .validation import validate_objects

logger = logging.getLogger(__name__)


def load_vault(
    cwd: Path | None = None,
    *,
    config_path: str = DEFAULT_CONFIG_PATH,
    max_workers: int = 4,
) -> VaultState:
    """Load, attribute, validate and lint every configured source.

    Sources are read concurrently; their results are merged in configured
    order so the object and issue sequences are deterministic.

    Raises:
        ConfigError: if the configuration cannot be loaded.
        SourceAccessError: if a required source's root is unusable.
    """
    cwd = (cwd or Path.cwd()).resolve()
    config = load_config(cwd, config_path)
    registry = load_schemas(config, cwd)

    projects = known_projects(config)
    source_projects = MappingProxyType(build_source_id_to_project(config))
    context = SourceLoadContext(
        cwd=cwd,
        schemas=MappingProxyType(dict(registry.schemas)),
        visibility_field=config.visibility_field,
        default_visibility=config.default_visibility,
    )

    objects: list[VaultObject] = []
    issues: list[VaultIssue] = list(registry.issues)
    summaries: list[SourceSummary] = []

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        results = list(executor.map(lambda s: load_source(s, context), config.sources))

    for source, result in zip(config.sources, results):
        attribute_projects(result.objects, projects, source_projects)
        summaries.append(
            SourceSummary(
                source=source,
                object_count=len(result.objects),
                issues=result.issues,
                last_synced=result.last_synced,
            )
        )
        objects.extend(result.objects)
        issues.extend(result.issues)

    validation_results = validate_objects(objects, config, registry.schemas)
    validated = [r.object for r in validation_results]
    for r in validation_results:
        issues.extend(r.issues)

    lint_result = lint_objects(validated, config, fix=False)
    issues.extend(lint_result.issues)

    logger.info(f"Vault loaded: {len(validated)} objects, {len(issues)} issues")
    return VaultState(
        config=config,
        schemas=registry.schemas,
        objects=validated,
        issues=issues,
        summaries=summaries,
    )


@dataclass
class VaultSummary:
    """Counts over a loaded vault."""

    total_objects: int = 0
    total_issues: int = 0
    type_counts: dict[str, int] = field(default_factory=dict)
    visibility_counts: dict[str, int] = field(default_factory=dict)
    project_counts: dict[str, int] = field(default_factory=dict)
    issue_counts: dict[str, int] = field(
        default_factory=lambda: {"info": 0, "warn": 0, "error": 0}
    )

    def to_dict(self) -> dict:
        return {
            "total_objects": self.total_objects,
            "total_issues": self.total_issues,
            "type_counts": self.type_counts,
            "visibility_counts": self.visibility_counts,
            "project_counts": self.project_counts,
            "issue_counts": self.issue_counts,
        }


def summarize_vault(objects: list[VaultObject], issues: list[VaultIssue]) -> VaultSummary:
    summary = VaultSummary(total_objects=len(objects), total_issues=len(issues))

    for obj in objects:
        summary.type_counts[obj.type] = summary.type_counts.get(obj.type, 0) + 1
        summary.visibility_counts[obj.visibility] = summary.visibility_counts.get(obj.visibility, 0) + 1
        summary.project_counts[obj.project] = summary.project_counts.get(obj.project, 0) + 1

    for issue in issues:
        key = issue.severity.value
        summary.issue_counts[key] = summary.issue_counts.get(key, 0) + 1

    return summary
