"""Base source loader class."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from extenote.models import (
    IssueStage,
    Schema,
    Severity,
    SourceConfig,
    VaultIssue,
    VaultObject,
    Visibility,
)


@dataclass(frozen=True)
class SourceLoadContext:
    """Read-only inputs shared by every source load in a run."""

    cwd: Path
    schemas: MappingProxyType[str, Schema]
    visibility_field: str = "visibility"
    default_visibility: Visibility = "private"


@dataclass
class SourceLoadResult:
    """Objects and issues produced by loading one source."""

    source_id: str
    objects: list[VaultObject] = field(default_factory=list)
    issues: list[VaultIssue] = field(default_factory=list)
    last_synced: float | None = None


class SourceLoader(ABC):
    """Base class for source loaders."""

    source_type: str = "unknown"

    @abstractmethod
    def load(self, source: SourceConfig, context: SourceLoadContext) -> SourceLoadResult:
        """Load every eligible file of a source.

        File-level failures are returned as issues, never raised.

        Raises:
            SourceAccessError: if a required source's root is unusable.
        """
        pass

    def _issue(
        self,
        source: SourceConfig,
        file_path: Path | str,
        message: str,
        field: str | None = None,
    ) -> VaultIssue:
        """Create an error issue for a file of this source."""
        return VaultIssue(
            severity=Severity.ERROR,
            message=message,
            stage=IssueStage.LOAD,
            source_id=source.id,
            file_path=str(file_path),
            field=field,
        )
