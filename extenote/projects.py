"""Project attribution - assigns every object to exactly one project."""

from collections.abc import Iterable, Mapping, Set

from .models import VaultConfig, VaultObject

UNKNOWN_PROJECT = "unknown"


def first_path_segment(relative_path: str) -> str:
    """First component of a relative path ("a/b/c.md" -> "a")."""
    return relative_path.replace("\\", "/").split("/")[0]


def resolve_project(
    relative_path: str,
    source_id: str,
    known_projects: Set[str],
    source_projects: Mapping[str, str],
) -> str:
    """Pick the project for a file.

    A first directory named after a known project wins; otherwise the
    source's project is used, and "unknown" when the source has none.
    """
    segment = first_path_segment(relative_path)
    if segment in known_projects:
        return segment
    return source_projects.get(source_id) or UNKNOWN_PROJECT


def attribute_projects(
    objects: Iterable[VaultObject],
    known_projects: Set[str],
    source_projects: Mapping[str, str],
) -> None:
    """Set `project` on each object in place."""
    for obj in objects:
        obj.project = resolve_project(
            obj.relative_path, obj.source_id, known_projects, source_projects
        )


def object_belongs_to_project(obj: VaultObject, project: str, config: VaultConfig) -> bool:
    """Check if an object belongs to a project directly or via its includes."""
    if obj.project == project:
        return True
    profile = config.get_profile(project)
    return profile is not None and obj.project in profile.includes
