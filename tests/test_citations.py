"""Tests for citation detection."""

from extenote.citations import (
    bibliography_keys,
    compute_cited_in,
    detect_cited_references,
    get_cited_in,
)
from extenote.models import ProjectProfile, VaultConfig


class TestDetectCitedReferences:
    """Tests for detect_cited_references."""

    def test_bracket_citations(self, object_factory):
        obj = object_factory(body="See [@smith2020] and [@jones2019; @lee2021]")

        assert detect_cited_references([obj]) == {"smith2020", "jones2019", "lee2021"}

    def test_citation_with_locator(self, object_factory):
        obj = object_factory(body="As argued [see @doe_2018:intro, p. 4].")

        assert detect_cited_references([obj]) == {"doe_2018:intro"}

    def test_mailto_links_ignored(self, object_factory):
        obj = object_factory(body="Email [me](mailto:x@example.com)")

        assert detect_cited_references([obj]) == set()

    def test_mailto_inside_brackets_ignored(self, object_factory):
        obj = object_factory(body="Write to [MAILTO:x@example.com] or cite [@real]")

        assert detect_cited_references([obj]) == {"real"}

    def test_keys_stop_at_non_ascii(self, object_factory):
        obj = object_factory(body="[@müller2020] and [@smith2020]")

        assert detect_cited_references([obj]) == {"m", "smith2020"}

    def test_bare_mentions_ignored(self, object_factory):
        obj = object_factory(body="Ping @someone on chat")

        assert detect_cited_references([obj]) == set()

    def test_frontmatter_references(self, object_factory):
        obj = object_factory(frontmatter={"references": ["a", "b"]}, body="")

        assert detect_cited_references([obj]) == {"a", "b"}

    def test_all_reference_fields(self, object_factory):
        obj = object_factory(
            frontmatter={
                "citations": "c",
                "bibliography_keys": ["d", 5],
                "cites": ["e"],
            },
            body="Also [@f].",
        )

        assert detect_cited_references([obj]) == {"c", "d", "e", "f"}

    def test_union_across_objects(self, object_factory):
        objects = [object_factory(body="[@a]"), object_factory(body="[@b]")]

        assert detect_cited_references(objects) == {"a", "b"}


class TestBibliography:
    """Tests for bibliography helpers."""

    def test_bibliography_keys(self, object_factory):
        objects = [
            object_factory(type="bibtex_entry", id="file-stem", frontmatter={"citation_key": "smith2020"}),
            object_factory(type="bibtex_entry", id="jones2019", frontmatter={}),
            object_factory(type="note", id="not-a-ref"),
        ]

        assert bibliography_keys(objects) == {"smith2020", "jones2019"}

    def test_compute_cited_in(self, object_factory):
        config = VaultConfig(
            project_profiles=(
                ProjectProfile(name="shared-references"),
                ProjectProfile(name="paper", includes=("shared-references",)),
                ProjectProfile(name="blog", includes=("shared-references",)),
                ProjectProfile(name="private"),
            )
        )
        objects = [
            object_factory(project="paper", body="[@smith2020; @lee2021]"),
            object_factory(project="blog", body="[@smith2020]"),
            object_factory(project="private", body="[@secret]"),
            object_factory(project="shared-references", type="bibtex_entry", body="[@ignored]"),
        ]

        cited = compute_cited_in(objects, config)

        assert cited.cited_in == {"smith2020": ["blog", "paper"], "lee2021": ["paper"]}
        assert cited.scanned_projects == ["paper", "blog"]
        assert cited.total_citations == 3

    def test_get_cited_in(self, object_factory):
        persisted = object_factory(type="bibtex_entry", frontmatter={"cited_in": ["paper"]})
        computed = object_factory(type="bibtex_entry", id="lee2021", frontmatter={})
        config = VaultConfig(project_profiles=(ProjectProfile(name="paper", includes=("shared-references",)),))
        cited = compute_cited_in([object_factory(project="paper", body="[@lee2021]")], config)

        assert get_cited_in(persisted) == ["paper"]
        assert get_cited_in(computed, cited) == ["paper"]
        assert get_cited_in(computed) == []
