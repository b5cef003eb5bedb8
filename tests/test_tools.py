"""
Tests for the lore tool functions served over MCP.
"""

import json

import pytest
import yaml

from aetheria_lore.tools import (
    extract_data,
    generate_content,
    get_aetheria_page,
    get_hierarchy,
    lookup_entity,
    search_lore,
)


def _payload(text: str):
    """Parse the JSON that follows a tool's header line."""
    return json.loads(text.split("\n\n", 1)[1])


# ============================================================================
# Hierarchy Tests
# ============================================================================


class TestLookupEntity:
    """Test entity lookup with hierarchy context."""

    def test_nested_entity(self, storage):
        """Test path, parents and descendants of a nested region."""
        found = lookup_entity(storage, "regions", "North Reach")
        assert found["path"] == ["kingdoms", "north_reach"]
        assert found["parentPath"] == ["kingdoms"]
        assert found["data"]["allChildren"] == ["Port Town"]
        assert found["data"]["leader"] == "Jarl Valora"

    def test_root_entity_has_no_parent_path(self, storage):
        found = lookup_entity(storage, "regions", "kingdoms")
        assert "parentPath" not in found
        assert found["data"]["allChildren"] == ["North Reach", "Port Town"]

    def test_without_children(self, storage):
        """Test that the children container is dropped on request."""
        found = lookup_entity(storage, "creatures", "dragons", include_children=False)
        assert "subtypes" not in found["data"]
        assert "allChildren" not in found["data"]

    def test_slug_lookup(self, storage):
        """Test lookups by URL slug."""
        assert lookup_entity(storage, "creatures", "fire-drake")["path"] == ["dragons", "fire_drake"]

    def test_first_match_wins(self, storage):
        """Test that the first "Fire" in traversal order is returned."""
        assert lookup_entity(storage, "creatures", "Fire")["path"] == ["elementals", "fire"]

    def test_missing(self, storage):
        assert lookup_entity(storage, "regions", "Atlantis") is None
        assert lookup_entity(storage, "planets", "Mars") is None


class TestGetHierarchy:
    """Test the get_hierarchy tool."""

    def test_whole_tree(self, storage):
        text = get_hierarchy(storage, "magic_schools")
        assert text.startswith("magic_schools hierarchy:")
        assert list(_payload(text)) == ["pyromancy"]

    def test_entity(self, storage):
        text = get_hierarchy(storage, "regions", "port_town")
        assert text.startswith("Hierarchy for port_town:")
        payload = _payload(text)
        assert payload["parentPath"] == ["kingdoms", "north_reach"]
        assert payload["data"]["name"] == "Port Town"

    def test_without_parents(self, storage):
        payload = _payload(get_hierarchy(storage, "regions", "port_town", include_parents=False))
        assert "parentPath" not in payload

    def test_unknown_entity(self, storage):
        assert get_hierarchy(storage, "regions", "Atlantis") == 'No entity named "Atlantis" in regions.'

    def test_unknown_type_lists_available(self, storage):
        text = get_hierarchy(storage, "planets")
        assert text.startswith("No hierarchy data found for planets.")
        assert "characters, creatures, magic_schools, regions" in text

    def test_markdown_tables_fallback(self, storage):
        """Test that a document's tables stand in for a missing data file."""
        text = get_hierarchy(storage, "magic")
        assert text.startswith("magic hierarchy:")
        assert _payload(text)["Schools"][0] == {"School": "Pyromancy", "Element": "Fire"}

        text = get_hierarchy(storage, "magic", "schools")
        assert _payload(text)["path"] == ["Schools"]

    def test_malformed_data_reported(self, storage, lore_dir):
        """Test that malformed trees are reported as text."""
        (lore_dir / "data" / "broken.yaml").write_text("alpha: just a string\n")
        text = get_hierarchy(storage, "broken", "beta")
        assert text.startswith("No hierarchy data found for broken. Error:")


# ============================================================================
# Search Tests
# ============================================================================


class TestSearchLore:
    """Test the search_lore tool."""

    def test_results(self, storage):
        text = search_lore(storage, "jarls")
        assert text.startswith('Found 1 matches for "jarls" (total: 1):')
        result = _payload(text)[0]
        assert result["file"] == "politics"
        assert result["title"] == "Politics"
        assert "url" not in result

    def test_empty_query(self, storage):
        assert search_lore(storage, "   ") == "Please provide a search query."

    def test_max_results(self, storage):
        text = search_lore(storage, "a", max_results=1)
        assert text.startswith('Found 1 matches for "a" (total: 2):')

    def test_without_context(self, storage):
        result = _payload(search_lore(storage, "jarls", include_context=False))[0]
        assert "context" not in result


# ============================================================================
# Content Generation Tests
# ============================================================================


class TestGenerateContent:
    """Test the generate_content tool."""

    def test_project_template_with_dataset_entity(self, storage, renderer):
        """Test that entity data fills the project's stat block template."""
        text = generate_content(storage, renderer, "creature_stat_block", "Dragons")
        assert text.startswith("# Dragons Stat Block")
        assert "Ancient winged beasts." in text
        assert "Challenge: 15" in text

    def test_builtin_template(self, storage, renderer):
        """Test a content type with no project template."""
        text = generate_content(storage, renderer, "magic_school_description", "Pyromancy")
        assert text.startswith("# Pyromancy\n\nThe art of fire.")
        assert "- Flame" in text

    def test_table_row_fallback(self, storage, renderer):
        """Test that a table row is used when no dataset holds the entity."""
        text = generate_content(storage, renderer, "magic_school_description", "Hydromancy")
        assert text.startswith("# Hydromancy")

    def test_parameters_override(self, storage, renderer):
        text = generate_content(
            storage, renderer, "character_profile", "Valora Iceclaw", {"location": "Port Town"}
        )
        assert "- **Location:** Port Town" in text
        assert "- **Alignment:** Ideology: Order (Stewardship), Temperament: Aether" in text

    def test_alignment_axis_without_value(self, storage, renderer, lore_dir):
        """Test that a value-less alignment axis renders as Unknown."""
        (lore_dir / "data" / "characters.yaml").write_text(
            "characters:\n"
            "  halfway:\n"
            "    name: Halfway\n"
            "    alignment:\n"
            "      ideology:\n"
            "        modifier: Stewardship\n"
        )
        text = generate_content(storage, renderer, "character_profile", "halfway")
        assert text.startswith("# Halfway")
        assert "- **Alignment:** Unknown" in text

    def test_unknown_entity_renders_name(self, storage, renderer):
        text = generate_content(storage, renderer, "political_overview", "The Iron Pact")
        assert text.startswith("# The Iron Pact")

    def test_template_error_reported(self, storage, renderer, lore_dir):
        """Test that a broken template is reported as text."""
        (lore_dir / "templates" / "equipment_catalog.md").write_text("{% if %}")
        text = generate_content(storage, renderer, "equipment_catalog", "Sword")
        assert text.startswith("Error generating equipment_catalog for Sword:")


# ============================================================================
# Extraction and Page Tests
# ============================================================================


class TestExtractData:
    """Test the extract_data tool."""

    def test_json(self, storage):
        text = extract_data(storage, "magic")
        assert text.startswith("Extracted data from magic:")
        assert _payload(text) == {
            "Schools": [
                {"School": "Pyromancy", "Element": "Fire"},
                {"School": "Hydromancy", "Element": "Water"},
            ]
        }

    def test_yaml(self, storage):
        text = extract_data(storage, "magic", output_format="yaml")
        assert yaml.safe_load(text.split("\n\n", 1)[1])["Schools"][1]["Element"] == "Water"

    def test_markdown(self, storage):
        text = extract_data(storage, "magic", output_format="markdown")
        assert "## Schools" in text
        assert "|Pyromancy|Fire|" in text

    def test_data_type_filter(self, storage):
        assert _payload(extract_data(storage, "magic", data_type="creatures")) == {}
        assert "Schools" in _payload(extract_data(storage, "magic", data_type="school"))

    def test_missing_source(self, storage):
        assert extract_data(storage, "bestiary") == (
            "Error extracting data from bestiary: No markdown file found for bestiary"
        )

    def test_unsupported_format(self, storage):
        assert extract_data(storage, "magic", output_format="xml").startswith("Unsupported format 'xml'")


class TestGetAetheriaPage:
    """Test the get_aetheria_page tool."""

    @pytest.fixture
    def pages(self, lore_config):
        pages = lore_config.resolved_pages_dir
        pages.mkdir(parents=True)
        (pages / "index.md").write_text("# Index\n")
        (pages / "creatures").mkdir()
        (pages / "creatures" / "dragons.md").write_text("# Dragons\n")
        return pages

    def test_page(self, storage, pages):
        assert get_aetheria_page(storage, "creatures/dragons") == "# Dragons\n"

    def test_fallback(self, storage, pages):
        text = get_aetheria_page(storage, "creatures/unicorns")
        assert 'The requested page "creatures/unicorns" was not found' in text
        assert text.endswith("# Index\n")

    def test_no_pages(self, storage):
        assert get_aetheria_page(storage).startswith("Error: Page not found")
