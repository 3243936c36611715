"""Citation detection across vault objects."""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from .models import VaultConfig, VaultObject
from .projects import object_belongs_to_project

BIBTEX_TYPE = "bibtex_entry"
REFERENCE_FIELDS = ("references", "citations", "bibliography_keys", "cites")

# [see @smith2020, p. 3] and [@a; @b]
_BRACKET_RE = re.compile(r"\[([^\]]*@[^\]]+)\]")
_KEY_RE = re.compile(r"@([\w][\w:._-]*)", re.ASCII)


class CitationSource(Protocol):
    body: str
    frontmatter: dict[str, Any]


def detect_cited_references(objects: Iterable[CitationSource]) -> set[str]:
    """Collect citation keys from bodies and reference frontmatter fields.

    Bodies are scanned for Pandoc-style bracket citations; bracket groups
    containing "mailto:" are skipped.
    """
    cited: set[str] = set()

    for obj in objects:
        if obj.body:
            for bracket in _BRACKET_RE.finditer(obj.body):
                content = bracket.group(1)
                if "mailto:" in content.lower():
                    continue
                cited.update(_KEY_RE.findall(content))

        for name in REFERENCE_FIELDS:
            value = obj.frontmatter.get(name)
            if isinstance(value, str):
                cited.add(value)
            elif isinstance(value, list):
                cited.update(key for key in value if isinstance(key, str))

    return cited


def citation_key(entry: VaultObject) -> str:
    key = entry.frontmatter.get("citation_key")
    return key if isinstance(key, str) and key else entry.id


def bibliography_keys(objects: Iterable[VaultObject]) -> set[str]:
    """Citation keys of every bibtex entry among the objects."""
    return {citation_key(obj) for obj in objects if obj.type == BIBTEX_TYPE}


@dataclass
class CitedInMap:
    """Reverse index from citation key to the projects citing it."""

    cited_in: dict[str, list[str]] = field(default_factory=dict)
    total_citations: int = 0
    scanned_projects: list[str] = field(default_factory=list)


def compute_cited_in(
    objects: list[VaultObject],
    config: VaultConfig,
    reference_project: str = "shared-references",
) -> CitedInMap:
    """Build the cited-in index for projects using a reference project."""
    cited_in: dict[str, set[str]] = {}
    result = CitedInMap()

    for profile in config.project_profiles:
        if profile.name != reference_project and reference_project not in profile.includes:
            continue

        project_objects = [
            obj
            for obj in objects
            if obj.type != BIBTEX_TYPE and object_belongs_to_project(obj, profile.name, config)
        ]
        citations = detect_cited_references(project_objects)
        if not citations:
            continue

        result.scanned_projects.append(profile.name)
        result.total_citations += len(citations)
        for key in citations:
            cited_in.setdefault(key, set()).add(profile.name)

    result.cited_in = {key: sorted(projects) for key, projects in cited_in.items()}
    return result


def get_cited_in(entry: VaultObject, cited_in_map: CitedInMap | None = None) -> list[str]:
    """Projects citing a bibtex entry, preferring a persisted cited_in field."""
    persisted = entry.frontmatter.get("cited_in")
    if isinstance(persisted, list) and persisted:
        return persisted

    if cited_in_map is not None:
        return cited_in_map.cited_in.get(citation_key(entry), [])
    return []
