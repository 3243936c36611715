"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest

from extenote.models import VaultObject


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    """Write a file, creating parent directories."""
    return _write


@pytest.fixture
def tmp_project(tmp_path: Path) -> Path:
    """Create a project root with two sources, project configs and schemas."""
    root = tmp_path / "project"
    root.mkdir()

    _write(
        root / "projects" / "blog.yml",
        "project: blog\n"
        "sources:\n"
        "  - id: blog\n"
        "    type: local\n"
        "    root: content/blog\n",
    )
    _write(
        root / "projects" / "notes.yml",
        "project: notes\n"
        "sources:\n"
        "  - id: notes\n"
        "    type: local\n"
        "    root: content/notes\n",
    )

    _write(
        root / "schemas" / "core.yml",
        "schemas:\n"
        "  - name: post\n"
        "    required: [title]\n"
        "    fields:\n"
        "      title: {type: string}\n"
        "      date: {type: date}\n"
        "      tags: {type: array, items: string}\n"
        "  - name: note\n"
        "    fields:\n"
        "      title: {type: string}\n"
        "  - name: bibtex_entry\n"
        "    identityField: citation_key\n"
        "    fields:\n"
        "      citation_key: {type: string}\n",
    )

    _write(
        root / "content" / "blog" / "hello.md",
        "---\n"
        "type: post\n"
        "title: Hello\n"
        "visibility: public\n"
        "date: 2024-01-15\n"
        "tags: [intro]\n"
        "---\n"
        "\n"
        "See [@smith2020] for background.\n",
    )
    _write(
        root / "content" / "blog" / "notes" / "post.md",
        "---\ntype: note\ntitle: Cross-posted\nvisibility: public\n---\nFiled under notes.\n",
    )
    _write(
        root / "content" / "notes" / "idea.md",
        "---\ntype: note\nvisibility: private\n---\n# An Idea\n\nWrite it down.\n",
    )

    return root


@pytest.fixture
def sample_note_content() -> str:
    """Sample note content for testing."""
    return """---
type: note
title: Test Note
date: 2024-03-01
tags: [test, sample]
---

# Test Note

This is a test note with some content.
"""


def make_object(**overrides) -> VaultObject:
    """Build a vault object with sensible defaults."""
    data = {
        "id": "test",
        "type": "note",
        "title": "Test",
        "source_id": "local",
        "file_path": "/vault/test.md",
        "relative_path": "test.md",
        "frontmatter": {"type": "note"},
        "body": "",
        "mtime": 1700000000.0,
        "visibility": "private",
        "project": "default",
    }
    data.update(overrides)
    return VaultObject(**data)


@pytest.fixture
def object_factory() -> Callable[..., VaultObject]:
    return make_object
