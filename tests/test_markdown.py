"""Tests for markdown frontmatter parsing."""

from datetime import date

import pytest

from extenote.errors import FrontmatterError
from extenote.markdown import extract_title, parse_markdown, serialize_markdown


class TestParseMarkdown:
    """Tests for parse_markdown."""

    def test_parses_frontmatter_and_body(self, sample_note_content: str):
        parsed = parse_markdown(sample_note_content)

        assert parsed.frontmatter["title"] == "Test Note"
        assert parsed.frontmatter["tags"] == ["test", "sample"]
        assert parsed.frontmatter["date"] == date(2024, 3, 1)
        assert parsed.body.startswith("# Test Note")

    def test_no_frontmatter(self):
        parsed = parse_markdown("# Just a heading\n\nText.\n")

        assert parsed.frontmatter == {}
        assert parsed.body == "# Just a heading\n\nText."

    def test_empty_frontmatter(self):
        parsed = parse_markdown("---\n---\nBody\n")

        assert parsed.frontmatter == {}
        assert parsed.body == "Body"

    def test_frontmatter_without_body(self):
        parsed = parse_markdown("---\ntype: note\n---")

        assert parsed.frontmatter == {"type": "note"}
        assert parsed.body == ""

    def test_crlf_line_endings(self):
        parsed = parse_markdown("---\r\ntype: note\r\n---\r\nBody\r\n")

        assert parsed.frontmatter == {"type": "note"}
        assert parsed.body == "Body"

    def test_invalid_yaml(self):
        with pytest.raises(FrontmatterError, match="Invalid YAML"):
            parse_markdown("---\ntype: note\ntitle: [\n---\nBody\n")

    @pytest.mark.parametrize("value", ["2024-13-45", "2024-02-30"])
    def test_unconstructible_date(self, value):
        with pytest.raises(FrontmatterError, match="Invalid YAML"):
            parse_markdown(f"---\ntype: note\ndate: {value}\n---\nBody\n")

    def test_non_mapping_frontmatter(self):
        with pytest.raises(FrontmatterError, match="must be a mapping"):
            parse_markdown("---\n- a\n- b\n---\nBody\n")

    def test_unclosed_frontmatter(self):
        with pytest.raises(FrontmatterError, match="Unclosed"):
            parse_markdown("---\ntype: note\nBody without a closing line\n")

    def test_dashes_later_in_file_are_body(self):
        parsed = parse_markdown("Intro\n\n---\n\nMore")

        assert parsed.frontmatter == {}
        assert "---" in parsed.body


class TestSerializeMarkdown:
    """Tests for serialize_markdown."""

    def test_round_trip(self):
        content = serialize_markdown({"type": "note", "visibility": "public"}, "Body text")

        assert content.startswith("---\ntype: note\nvisibility: public\n---\n")
        parsed = parse_markdown(content)
        assert parsed.frontmatter == {"type": "note", "visibility": "public"}
        assert parsed.body == "Body text"

    def test_without_frontmatter(self):
        assert serialize_markdown({}, "Body\n\n") == "Body\n"


class TestExtractTitle:
    """Tests for extract_title."""

    def test_frontmatter_title(self):
        assert extract_title({"title": " Custom "}, "# Heading", "stem") == "Custom"

    def test_heading_fallback(self):
        assert extract_title({}, "Intro\n\n# Heading\n", "stem") == "Heading"

    def test_stem_fallback(self):
        assert extract_title({"title": 42}, "No heading here", "stem") == "stem"
