"""Exception types for vault loading."""

from pathlib import Path


class ExtenoteError(Exception):
    """Base class for all extenote errors."""


class ConfigError(ExtenoteError):
    """Project configuration is missing or malformed."""


class SourceAccessError(ExtenoteError):
    """The root directory of a required source cannot be used."""

    def __init__(self, source_id: str, path: Path, reason: str) -> None:
        self.source_id = source_id
        self.path = path
        self.reason = reason
        super().__init__(f"Source '{source_id}' root {reason}: {path}")


class FrontmatterError(ExtenoteError):
    """A file's frontmatter block could not be parsed."""
