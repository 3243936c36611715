"""Configuration: runtime settings and project configuration loading."""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError
from .models import LintConfig, ProjectProfile, SourceConfig, VaultConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "projects"
DEFAULT_SCHEMA_DIR = "schemas"
YAML_SUFFIXES = (".yml", ".yaml")

_PLACEHOLDER_RE = re.compile(r"\$\{([^}:]+)(?::-(.+?))?\}")


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EXTENOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_root: Path = Path(".")
    config_path: str = DEFAULT_CONFIG_PATH
    max_workers: int = Field(default=4, ge=1)
    log_level: str = "INFO"

    @field_validator("project_root")
    @classmethod
    def validate_project_root(cls, v: Path) -> Path:
        """Ensure project root exists and is a directory."""
        if not v.exists():
            raise ValueError(f"Project root does not exist: {v}")
        if not v.is_dir():
            raise ValueError(f"Project root is not a directory: {v}")
        return v.resolve()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level


def get_settings() -> Settings:
    """Load settings from environment."""
    return Settings()


# ─── Environment placeholders ───────────────────────────────────────────────


def load_environment(cwd: Path) -> dict[str, str]:
    """Environment used for ${VAR} placeholders.

    `.env` never overrides the process environment, `.env.local` does.
    The process environment itself is left untouched.
    """
    env: dict[str, str] = {}
    for key, value in dotenv_values(cwd / ".env").items():
        if value is not None:
            env[key] = value
    env.update(os.environ)
    for key, value in dotenv_values(cwd / ".env.local").items():
        if value is not None:
            env[key] = value
    return env


def resolve_placeholders(value: str, env: dict[str, str]) -> str:
    """Replace ${VAR} and ${VAR:-default} in a string."""

    def replace(match: re.Match) -> str:
        resolved = env.get(match.group(1))
        if resolved:
            return resolved
        return match.group(2) or ""

    return _PLACEHOLDER_RE.sub(replace, value)


def resolve_env_vars(value: Any, env: dict[str, str]) -> Any:
    """Recursively resolve placeholders in strings, lists and mappings."""
    if isinstance(value, str):
        return resolve_placeholders(value, env)
    if isinstance(value, list):
        return [resolve_env_vars(v, env) for v in value]
    if isinstance(value, dict):
        return {k: resolve_env_vars(v, env) for k, v in value.items()}
    return value


# ─── Project configuration ──────────────────────────────────────────────────


def load_config(cwd: Path, config_path: str = DEFAULT_CONFIG_PATH) -> VaultConfig:
    """Load the project configuration rooted at cwd.

    config_path is either a directory of per-project YAML documents or a
    single YAML file holding the whole configuration.

    Raises:
        ConfigError: if the configuration is missing or malformed.
    """
    path = (cwd / config_path).resolve()
    if not path.exists():
        raise ConfigError(f"Could not find config at {path}")

    env = load_environment(cwd)

    if path.is_dir():
        config = _load_config_directory(path, env)
    else:
        config = _load_config_file(path, env)

    logger.info(
        f"Loaded config: {len(config.sources)} sources, "
        f"{len(config.project_profiles)} projects"
    )
    return config


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _validate(model: type, data: Any, path: Path, what: str):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid {what} in {path}: {e}") from e


def _load_config_file(path: Path, env: dict[str, str]) -> VaultConfig:
    data = _read_yaml(path)
    sources = data.get("sources") or []
    if not isinstance(sources, list):
        raise ConfigError(f"'sources' must be a list in {path}")
    data["sources"] = [resolve_env_vars(s, env) for s in sources]

    config = _validate(VaultConfig, data, path, "config")
    _assert_unique_sources(config.sources)
    return config


def _load_config_directory(directory: Path, env: dict[str, str]) -> VaultConfig:
    files = sorted(
        p for p in directory.rglob("*") if p.is_file() and p.suffix in YAML_SUFFIXES
    )
    if not files:
        raise ConfigError(f"No project config files found in {directory}")

    sources: dict[str, SourceConfig] = {}
    profiles: list[ProjectProfile] = []
    default_visibility = None
    visibility_field = None
    lint = None
    schema_dir = None

    for file_path in files:
        doc = _read_yaml(file_path)
        project_name = doc.get("project") or file_path.stem

        raw_sources = doc.get("sources") or []
        if not isinstance(raw_sources, list):
            raise ConfigError(f"'sources' must be a list in {file_path}")

        source_ids: list[str] = []
        for raw in raw_sources:
            source = _validate(SourceConfig, resolve_env_vars(raw, env), file_path, "source")
            existing = sources.get(source.id)
            if existing is None:
                sources[source.id] = source
            elif existing != source:
                raise ConfigError(f"Conflicting source definitions for id {source.id}")
            source_ids.append(source.id)

        # First document that sets a global value wins
        default_visibility = default_visibility or doc.get("defaultVisibility")
        visibility_field = visibility_field or doc.get("visibilityField")
        lint = lint or doc.get("lint")
        schema_dir = schema_dir or doc.get("schemaDir")

        inline = {}
        for entry in doc.get("projectProfiles") or []:
            if isinstance(entry, dict) and entry.get("name") == project_name:
                inline = entry
                break

        profile_data = {
            "name": project_name,
            "sourceIds": inline.get("sourceIds", source_ids),
            "includes": doc.get("includes") or (),
            "defaultVisibility": doc.get("defaultVisibility"),
            "visibilityField": doc.get("visibilityField"),
            "lint": doc.get("lint"),
            "compatibility": doc.get("compatibility") or {},
        }
        profiles.append(_validate(ProjectProfile, profile_data, file_path, "project"))
        logger.debug(f"Loaded project '{project_name}' from {file_path}")

    config_data: dict[str, Any] = {
        "sources": list(sources.values()),
        "projectProfiles": profiles,
        "schemaDir": schema_dir or DEFAULT_SCHEMA_DIR,
    }
    if default_visibility:
        config_data["defaultVisibility"] = default_visibility
    if visibility_field:
        config_data["visibilityField"] = visibility_field
    if lint:
        config_data["lint"] = _validate(LintConfig, lint, directory, "lint config")

    return _validate(VaultConfig, config_data, directory, "config")


def _assert_unique_sources(sources: tuple[SourceConfig, ...]) -> None:
    seen: set[str] = set()
    for source in sources:
        if source.id in seen:
            raise ConfigError(f"Duplicate source id detected: {source.id}")
        seen.add(source.id)


def build_source_id_to_project(config: VaultConfig) -> dict[str, str]:
    """Map each source id to the first project that declares it."""
    mapping: dict[str, str] = {}
    for profile in config.project_profiles:
        for source_id in profile.source_ids:
            mapping.setdefault(source_id, profile.name)
    return mapping


def known_projects(config: VaultConfig) -> frozenset[str]:
    return frozenset(profile.name for profile in config.project_profiles)
