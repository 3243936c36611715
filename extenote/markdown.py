"""Frontmatter parsing and serialization for markdown files."""

import re
from dataclasses import dataclass, field
from typing import Any

import yaml

from .errors import FrontmatterError

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)(.*)\Z",
    re.DOTALL | re.MULTILINE,
)
_OPENING_RE = re.compile(r"\A---[ \t]*\r?\n")
_H1_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)


@dataclass
class ParsedMarkdown:
    frontmatter: dict[str, Any] = field(default_factory=dict)
    body: str = ""


def parse_markdown(content: str) -> ParsedMarkdown:
    """Split file content into frontmatter and body.

    Content without a leading `---` line has no frontmatter.

    Raises:
        FrontmatterError: if the block is unclosed, is not valid YAML,
            or does not hold a mapping.
    """
    content = content.lstrip("\ufeff")
    if not _OPENING_RE.match(content):
        return ParsedMarkdown(frontmatter={}, body=content.strip())

    match = _FRONTMATTER_RE.match(content)
    if not match:
        raise FrontmatterError("Unclosed frontmatter block")

    try:
        data = yaml.safe_load(match.group(1))
    except (yaml.YAMLError, ValueError) as e:
        # ValueError: well-formed scalars pyyaml cannot construct, e.g. 2024-13-45
        raise FrontmatterError(f"Invalid YAML frontmatter: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Frontmatter must be a mapping, got {type(data).__name__}"
        )

    return ParsedMarkdown(frontmatter=data, body=match.group(2).strip())


def serialize_markdown(frontmatter: dict[str, Any], body: str) -> str:
    """Combine frontmatter and body into file content."""
    body = body.strip() + "\n"
    if not frontmatter:
        return body

    fm_str = yaml.safe_dump(
        frontmatter, default_flow_style=False, allow_unicode=True, sort_keys=False
    )
    return f"---\n{fm_str}---\n{body}"


def extract_title(frontmatter: dict[str, Any], body: str, fallback: str) -> str:
    """Title from frontmatter, else the first H1 heading, else fallback."""
    title = frontmatter.get("title")
    if isinstance(title, str) and title.strip():
        return title.strip()

    h1_match = _H1_RE.search(body)
    if h1_match:
        return h1_match.group(1).strip()

    return fallback
