"""
Case-insensitive substring search across lore documents and data files.
"""

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field

from .storage import LoreStorage, LoreStorageError

logger = logging.getLogger("aetheria-lore")


class DocSearchResult(BaseModel):
    """A Markdown document containing the query.

    Attributes:
        file: Document name without suffix, lower-cased
        filename: Document file name as stored, with suffix
        category: Document category (same as file)
        title: Frontmatter title or file stem
        matches: First matching lines (at most 5)
        frontmatter: Document frontmatter
        context: Matching lines with two lines either side, blocks separated by ``---``
    """
    type: Literal["document"] = "document"
    file: str
    filename: str
    category: str
    title: str
    matches: list[str] = Field(default_factory=list)
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    context: str | None = None
    url: str


class DataSearchResult(BaseModel):
    """A string value inside a data file containing the query.

    Attributes:
        data_type: Data file name
        entity: Dotted path of the matching value
        match: The matching value
        url: API route for the data type's hierarchy
    """
    type: Literal["data"] = "data"
    data_type: str
    entity: str
    match: str
    url: str


def extract_match(content: str, query: str) -> str:
    """Return the first line containing the query, stripped, or ""."""
    needle = query.lower()
    for line in content.split("\n"):
        if needle in line.lower():
            return line.strip()
    return ""


def search_docs(
    storage: LoreStorage,
    query: str,
    category: str = "all",
    include_context: bool = True,
    max_lines: int = 5,
) -> list[DocSearchResult]:
    """Search Markdown documents for a query.

    Args:
        storage: Lore storage
        query: Text to look for (case-insensitive)
        category: "all", or a substring that the document name must contain
        include_context: Attach two lines of context around each match
        max_lines: Maximum matching lines reported per document

    Returns:
        One result per matching document, in document name order
    """
    needle = query.lower()
    results: list[DocSearchResult] = []

    for filename in storage.list_docs():
        stem = filename.removesuffix(".md").lower()
        if category and category != "all" and category.lower() not in stem:
            continue

        try:
            doc = storage.load_doc(filename)
        except LoreStorageError as e:
            logger.warning(f"Skipping unreadable document {filename}: {e}")
            continue
        if doc is None or needle not in doc.content.lower():
            continue

        lines = doc.content.split("\n")
        matching: list[str] = []
        contexts: list[str] = []
        for i, line in enumerate(lines):
            if needle in line.lower():
                matching.append(line)
                if include_context:
                    contexts.append("\n".join(lines[max(0, i - 2):i + 3]))

        results.append(DocSearchResult(
            file=stem,
            filename=filename,
            category=doc.category,
            title=doc.title,
            matches=matching[:max_lines],
            frontmatter=doc.frontmatter,
            context="\n---\n".join(contexts) if include_context else None,
            url=f"/docs/{filename}",
        ))

    return results


def _search_object(obj: Any, needle: str, path: str, results: list[tuple[str, str]]) -> None:
    if isinstance(obj, str):
        if needle in obj.lower():
            results.append((path, obj))
    elif isinstance(obj, dict):
        for key, value in obj.items():
            _search_object(value, needle, f"{path}.{key}" if path else str(key), results)
    elif isinstance(obj, list):
        for index, value in enumerate(obj):
            _search_object(value, needle, f"{path}.{index}" if path else str(index), results)


def search_data(storage: LoreStorage, query: str) -> list[DataSearchResult]:
    """Search every string value of every data file for a query.

    Returns:
        One result per matching value, with its dotted path
    """
    needle = query.lower()
    results: list[DataSearchResult] = []

    for data_type in storage.list_data_types():
        try:
            data = storage.load_data(data_type)
        except LoreStorageError as e:
            logger.warning(f"Skipping unreadable data file {data_type}: {e}")
            continue
        if data is None:
            continue

        matches: list[tuple[str, str]] = []
        _search_object(data, needle, "", matches)
        for path, value in matches:
            results.append(DataSearchResult(
                data_type=data_type,
                entity=path,
                match=value,
                url=f"/api/hierarchy/{data_type}/{path}",
            ))

    return results


__all__ = [
    "DocSearchResult",
    "DataSearchResult",
    "extract_match",
    "search_docs",
    "search_data",
]
