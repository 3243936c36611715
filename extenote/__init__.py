"""Extenote - assembles content sources into a validated vault."""

from .errors import ConfigError, ExtenoteError, FrontmatterError, SourceAccessError
from .models import VaultIssue, VaultObject, VaultState
from .vault import load_vault, summarize_vault

__all__ = [
    "ConfigError",
    "ExtenoteError",
    "FrontmatterError",
    "SourceAccessError",
    "VaultIssue",
    "VaultObject",
    "VaultState",
    "load_vault",
    "summarize_vault",
]
