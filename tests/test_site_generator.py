"""
Tests for the static HTML site generator.
"""

import pytest

from aetheria_lore.generators import StaticSiteGenerator
from aetheria_lore.generators.site import format_property


@pytest.fixture
def site(storage, renderer, tmp_path):
    """Generate the site once and return (output directory, report)."""
    output = tmp_path / "site"
    generator = StaticSiteGenerator(storage, output, renderer=renderer, site_url="https://aetheria.example/")
    return output, generator.generate()


class TestSiteLayout:
    """Test which files are written."""

    def test_top_level_pages(self, site):
        output, report = site
        for page in ("index.html", "docs/index.html", "data/index.html", "sitemap.xml"):
            assert (output / page).is_file(), page
        assert report.page_count == len(report.pages)

    def test_doc_pages(self, site):
        output, _ = site
        page = (output / "docs" / "magic.html").read_text()
        assert "<title>Magic of Aetheria - Aetheria World</title>" in page
        assert "<table>" in page

    def test_entity_pages_per_type(self, site):
        """Test one page per entity, named by slug."""
        output, _ = site
        regions = sorted(p.name for p in (output / "data" / "regions").iterdir())
        assert regions == ["free-cities.html", "index.html", "kingdoms.html", "north-reach.html", "port-town.html"]

    def test_clean_removes_stale_files(self, storage, renderer, tmp_path):
        output = tmp_path / "site"
        output.mkdir()
        (output / "stale.html").write_text("old")
        StaticSiteGenerator(storage, output, renderer=renderer).generate()
        assert not (output / "stale.html").exists()


class TestEntityPages:
    """Test entity page content."""

    def test_breadcrumb_follows_ancestors(self, site):
        """Test that nested entities link each ancestor page."""
        output, _ = site
        page = (output / "data" / "regions" / "port-town.html").read_text()
        assert '<a href="kingdoms.html">Kingdoms</a>' in page
        assert '<a href="north-reach.html">North Reach</a>' in page
        assert page.index("kingdoms.html") < page.index("north-reach.html")

    def test_property_table_without_template(self, site):
        """Test the fallback rendering for types without a template."""
        output, _ = site
        page = (output / "data" / "regions" / "north-reach.html").read_text()
        assert "<td><strong>Leader</strong></td><td>Jarl Valora</td>" in page
        assert "Elf: 10, Human: 60, Dwarf: 30" in page

    def test_alignment_property(self, site):
        output, _ = site
        page = (output / "data" / "characters" / "valora-iceclaw.html").read_text()
        assert "Ideology: Order (Stewardship), Temperament: Aether" in page

    def test_list_alignment_renders_unknown(self, storage, renderer, lore_dir, tmp_path):
        """Test that an alignment given as a list does not stop the build."""
        (lore_dir / "data" / "characters.yaml").write_text(
            "characters:\n  oddity:\n    name: Oddity\n    alignment: [Order, Chaos]\n"
        )
        output = tmp_path / "site"
        StaticSiteGenerator(storage, output, renderer=renderer).generate()
        page = (output / "data" / "characters" / "oddity.html").read_text()
        assert "<td><strong>Alignment</strong></td><td>Unknown</td>" in page

    def test_template_body(self, site):
        """Test that the project's creatures template renders the body."""
        output, _ = site
        page = (output / "data" / "creatures" / "dragons.html").read_text()
        assert "<em>Beast, Elemental</em>" in page
        assert '<a href="fire-drake.html">Fire Drake</a>' in page

    def test_related_lists_deeper_descendants(self, site):
        """Test that Related appears only when there are grandchildren."""
        output, _ = site
        kingdoms = (output / "data" / "regions" / "kingdoms.html").read_text()
        assert "<h3>Related</h3>" in kingdoms
        assert "<li>Port Town</li>" in kingdoms
        north = (output / "data" / "regions" / "north-reach.html").read_text()
        assert "<h3>Related</h3>" not in north

    def test_type_index_hierarchy(self, site):
        output, _ = site
        page = (output / "data" / "regions" / "index.html").read_text()
        assert "Kingdoms\n  North Reach\n    Port Town\nFree Cities" in page


class TestSiteReport:
    """Test warnings and collisions."""

    def test_duplicate_slug_renamed(self, site):
        """Test that the second "Fire" creature gets a numbered file."""
        output, report = site
        assert (output / "data" / "creatures" / "fire.html").is_file()
        assert (output / "data" / "creatures" / "fire-2.html").is_file()
        assert any("fire-2.html" in warning for warning in report.warnings)

    def test_doc_named_index_keeps_its_page(self, storage, renderer, lore_dir, tmp_path):
        """Test that docs/index.md does not overwrite the documentation listing."""
        (lore_dir / "docs" / "index.md").write_text("# Index\n\nWelcome text.\n")
        output = tmp_path / "site"
        report = StaticSiteGenerator(storage, output, renderer=renderer).generate()

        assert "Welcome text." in (output / "docs" / "index-2.html").read_text()
        listing = (output / "docs" / "index.html").read_text()
        assert "index-2.html" in listing
        assert "magic.html" in listing
        assert report.pages.count("docs/index.html") == 1
        assert len(report.pages) == len(set(report.pages))
        assert "docs: 'index.md' written as index-2.html" in report.warnings

    def test_collisions_reported(self, site):
        _, report = site
        assert list(report.collisions) == ["creatures"]
        collision = report.collisions["creatures"][0]
        assert collision.name == "fire"
        assert collision.paths == [("elementals", "fire"), ("spirits", "fire_spirit")]

    def test_malformed_type_skipped(self, storage, renderer, lore_dir, tmp_path):
        """Test that a broken data file is skipped with a warning."""
        (lore_dir / "data" / "broken.yaml").write_text("alpha: 3\n")
        report = StaticSiteGenerator(storage, tmp_path / "site", renderer=renderer).generate()
        assert any(warning.startswith("Skipped data type 'broken'") for warning in report.warnings)
        assert not (tmp_path / "site" / "data" / "broken").exists()

    def test_sitemap(self, site):
        output, _ = site
        sitemap = (output / "sitemap.xml").read_text()
        assert "<loc>https://aetheria.example/</loc>" in sitemap
        assert "<loc>https://aetheria.example/data/regions/port-town.html</loc>" in sitemap
        assert "sitemap.xml</loc>" not in sitemap


class TestFormatProperty:
    """Test table cell formatting."""

    def test_values(self):
        assert format_property("abilities", ["Fire Breath", "Flight"]) == "Fire Breath, Flight"
        assert format_property("challenge_rating", 15) == "15"
        assert format_property("notes", None) is None
        assert format_property("alignment", {"morality": {"value": "Kind"}}) == "Morality: Kind"
