"""Tests for the schema registry."""

from pathlib import Path

import pytest

from extenote.config import load_config
from extenote.errors import ConfigError
from extenote.models import IssueStage, Schema, SchemaField, Severity, VaultConfig
from extenote.schemas import load_schemas


class TestLoadSchemas:
    """Tests for load_schemas."""

    def test_loads_schemas(self, tmp_project: Path):
        registry = load_schemas(load_config(tmp_project), tmp_project)

        assert set(registry.schemas) == {"post", "note", "bibtex_entry"}
        assert registry.issues == []
        post = registry.get("post")
        assert post.required == ("title",)
        assert post.fields["tags"].items == "string"
        assert post.file_path.endswith("core.yml")
        assert registry.get("bibtex_entry").identity_field == "citation_key"

    def test_identity_field_default(self, tmp_project: Path):
        registry = load_schemas(load_config(tmp_project), tmp_project)
        assert registry.get("note").identity_field == "slug"

    def test_missing_directory_is_warning(self, tmp_path: Path):
        registry = load_schemas(VaultConfig(), tmp_path)

        assert len(registry) == 0
        assert len(registry.issues) == 1
        assert registry.issues[0].severity is Severity.WARN
        assert registry.issues[0].stage is IssueStage.SCHEMA

    def test_schema_path_is_file(self, tmp_path: Path):
        (tmp_path / "schemas").write_text("not a directory")

        with pytest.raises(ConfigError, match="not a directory"):
            load_schemas(VaultConfig(), tmp_path)

    def test_custom_schema_dir(self, tmp_path: Path, write_file):
        write_file(tmp_path / "defs" / "a.yaml", "schemas:\n  - name: page\n")

        registry = load_schemas(VaultConfig(schema_dir="defs"), tmp_path)
        assert "page" in registry

    def test_invalid_yaml_file_does_not_block_others(self, tmp_path: Path, write_file):
        write_file(tmp_path / "schemas" / "a.yml", "schemas: [\n")
        write_file(tmp_path / "schemas" / "b.yml", "schemas:\n  - name: note\n")

        registry = load_schemas(VaultConfig(), tmp_path)

        assert "note" in registry
        assert len(registry.issues) == 1
        assert registry.issues[0].severity is Severity.ERROR
        assert registry.issues[0].file_path.endswith("a.yml")

    def test_invalid_date_value_does_not_block_others(self, tmp_path: Path, write_file):
        write_file(tmp_path / "schemas" / "a.yml", "created: 2024-02-30\nschemas:\n  - name: post\n")
        write_file(tmp_path / "schemas" / "b.yml", "schemas:\n  - name: note\n")

        registry = load_schemas(VaultConfig(), tmp_path)

        assert "note" in registry
        assert "post" not in registry
        assert len(registry.issues) == 1
        assert registry.issues[0].stage is IssueStage.SCHEMA
        assert registry.issues[0].message.startswith("Failed to read schema file")

    def test_invalid_entry_does_not_block_siblings(self, tmp_path: Path, write_file):
        write_file(
            tmp_path / "schemas" / "core.yml",
            "schemas:\n"
            "  - description: no name\n"
            "  - name: odd\n"
            "    fields:\n"
            "      size: {type: huge}\n"
            "  - name: note\n",
        )

        registry = load_schemas(VaultConfig(), tmp_path)

        assert set(registry.schemas) == {"note"}
        assert len(registry.issues) == 2
        assert "Invalid schema #0" in registry.issues[0].message
        assert "Invalid schema odd" in registry.issues[1].message

    def test_schemas_not_a_list(self, tmp_path: Path, write_file):
        write_file(tmp_path / "schemas" / "core.yml", "schemas:\n  name: note\n")

        registry = load_schemas(VaultConfig(), tmp_path)
        assert len(registry) == 0
        assert "must be a list" in registry.issues[0].message

    def test_duplicate_name_keeps_first(self, tmp_path: Path, write_file):
        write_file(tmp_path / "schemas" / "a.yml", "schemas:\n  - name: note\n    description: first\n")
        write_file(tmp_path / "schemas" / "b.yml", "schemas:\n  - name: note\n    description: second\n")

        registry = load_schemas(VaultConfig(), tmp_path)

        assert registry.get("note").description == "first"
        assert len(registry.issues) == 1
        assert "Duplicate schema name" in registry.issues[0].message


class TestSchema:
    """Tests for the Schema model."""

    def test_required_fields_union(self):
        schema = Schema(
            name="post",
            required=("title",),
            fields={
                "title": SchemaField(type="string", required=True),
                "date": SchemaField(type="date", required=True),
                "tags": SchemaField(type="array"),
            },
        )

        assert schema.required_fields() == ["title", "date"]
