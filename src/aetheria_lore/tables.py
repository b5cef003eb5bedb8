"""
Extraction of pipe tables from Markdown documents.

Tables are keyed by the nearest heading above them; each row becomes a
mapping of column header -> cell text.
"""

import re

_HEADING = re.compile(r"^#+\s*")
_SEPARATOR = re.compile(r"^\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)*\|?$")


def _cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.strip().strip("|").split("|")]


def parse_markdown_tables(markdown: str) -> dict[str, list[dict[str, str]]]:
    """Parse every pipe table in a Markdown document.

    A table needs a preceding heading to be kept; its name is the heading
    text. When two tables share a heading the later one wins.

    Args:
        markdown: Markdown source

    Returns:
        Mapping of table name -> list of row dicts

    Example:
        >>> parse_markdown_tables("## Schools\\n\\n| School | Element |\\n|---|---|\\n| Pyromancy | Fire |\\n")
        {'Schools': [{'School': 'Pyromancy', 'Element': 'Fire'}]}
    """
    tables: dict[str, list[dict[str, str]]] = {}
    current_heading = ""
    table_name = ""
    headers: list[str] = []
    rows: list[dict[str, str]] = []

    def flush() -> None:
        if table_name and rows:
            tables[table_name] = list(rows)

    for raw in markdown.splitlines():
        line = raw.strip()
        is_row = line.startswith("|") and line.endswith("|") and len(line) > 1

        if is_row:
            if _SEPARATOR.match(line):
                continue
            if not headers:
                headers = _cells(line)
                table_name = current_heading
                rows = []
            else:
                values = _cells(line)
                rows.append({
                    header: values[i] if i < len(values) else ""
                    for i, header in enumerate(headers)
                })
            continue

        if headers:
            flush()
            headers, rows, table_name = [], [], ""

        if line.startswith("#"):
            current_heading = _HEADING.sub("", line).strip()

    if headers:
        flush()

    return tables


def tables_to_markdown(tables: dict[str, list[dict[str, str]]]) -> str:
    """Render parsed tables back to Markdown, one ``##`` section per table."""
    parts = []
    for name, rows in tables.items():
        section = f"## {name}\n\n"
        if rows:
            headers = list(rows[0].keys())
            section += f"|{'|'.join(headers)}|\n"
            section += f"|{'|'.join('---' for _ in headers)}|\n"
            for row in rows:
                section += f"|{'|'.join(str(row.get(h, '')) for h in headers)}|\n"
            section += "\n"
        parts.append(section)
    return "".join(parts)


__all__ = ["parse_markdown_tables", "tables_to_markdown"]
