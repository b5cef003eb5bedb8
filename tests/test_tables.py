"""
Tests for Markdown table extraction.
"""

from aetheria_lore.tables import parse_markdown_tables, tables_to_markdown

DOC = """\
# Bestiary

Intro text.

## Dragons

| Name | CR |
|------|---:|
| Red Dragon | 17 |
| Fire Drake | 7 |

Some prose.

## Sprites

| Name | Home | Notes |
|---|---|---|
| Pixie | Glade |
"""


class TestParseMarkdownTables:
    """Test table parsing."""

    def test_tables_keyed_by_heading(self):
        """Test that each table is named after the heading above it."""
        tables = parse_markdown_tables(DOC)
        assert list(tables) == ["Dragons", "Sprites"]
        assert tables["Dragons"] == [
            {"Name": "Red Dragon", "CR": "17"},
            {"Name": "Fire Drake", "CR": "7"},
        ]

    def test_short_rows_padded(self):
        """Test that missing cells become empty strings."""
        tables = parse_markdown_tables(DOC)
        assert tables["Sprites"] == [{"Name": "Pixie", "Home": "Glade", "Notes": ""}]

    def test_no_tables(self):
        assert parse_markdown_tables("# Title\n\nJust text.\n") == {}

    def test_table_without_rows_is_dropped(self):
        """Test that a header-only table produces nothing."""
        assert parse_markdown_tables("## Empty\n\n| A | B |\n|---|---|\n") == {}


class TestTablesToMarkdown:
    """Test rendering tables back to Markdown."""

    def test_render(self):
        tables = {"Schools": [{"School": "Pyromancy", "Element": "Fire"}]}
        assert tables_to_markdown(tables) == (
            "## Schools\n\n|School|Element|\n|---|---|\n|Pyromancy|Fire|\n\n"
        )

    def test_render_parses_back(self):
        """Test that rendered tables are parsed to the same rows."""
        tables = parse_markdown_tables(DOC)
        assert parse_markdown_tables(tables_to_markdown(tables)) == tables
