"""
Lore tools for MCP integration.

Each tool is a plain function over a LoreStorage that returns the text sent
back to the client. Lookup failures are reported as text rather than raised,
so an assistant can read the explanation and retry with another query.
"""

import json
import logging
from typing import Any

import yaml
from jinja2 import TemplateError

from .hierarchy import HierarchyError
from .search import search_docs
from .storage import LoreStorage, LoreStorageError, PageNotFoundError
from .tables import parse_markdown_tables, tables_to_markdown
from .templates import ContentRenderer

logger = logging.getLogger("aetheria-lore")

# Content type -> dataset holding the entities it describes
GENERATION_TYPE_MAP: dict[str, str] = {
    "creature_stat_block": "creatures",
    "magic_school_description": "magic_schools",
    "character_class_guide": "classes",
    "equipment_catalog": "equipment",
    "political_overview": "organizations",
    "location_description": "regions",
    "character_profile": "characters",
}

EXTRACT_FORMATS = ("json", "yaml", "markdown")


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def _tables_for(storage: LoreStorage, source: str) -> dict[str, list[dict[str, str]]] | None:
    """Parse the tables of the document whose name matches ``source``."""
    wanted = source.lower().removesuffix(".md")
    for filename in storage.list_docs():
        if filename.removesuffix(".md").lower() == wanted:
            doc = storage.load_doc(filename)
            if doc is not None:
                return parse_markdown_tables(doc.content)
    return None


def lookup_entity(
    storage: LoreStorage,
    data_type: str,
    entity: str,
    include_children: bool = True,
    include_parents: bool = True,
) -> dict[str, Any] | None:
    """Find an entity in a dataset and shape it for display.

    Args:
        storage: Lore storage
        data_type: Dataset name
        entity: Key or display name to look for
        include_children: Keep the children container and list all descendants
        include_parents: Add the ancestor keys as ``parentPath``

    Returns:
        ``{"path", "data", "parentPath"?}``, or None if the dataset or entity
        does not exist

    Raises:
        LoreStorageError: If the data file cannot be parsed
        MalformedDataError: If the tree is not well formed
    """
    tree = storage.load_tree(data_type)
    if tree is None:
        return None

    resolver = storage.resolver_for(data_type)
    match = resolver.find(tree, entity) or resolver.find(tree, entity, by_slug=True)
    if match is None:
        return None

    data = dict(match.data)
    if include_children:
        data["allChildren"] = list(resolver.descendants(match))
    else:
        data.pop(resolver.children_key, None)

    result: dict[str, Any] = {"path": list(match.full_path), "data": data}
    if include_parents and match.path:
        result["parentPath"] = list(match.path)
    return result


def get_hierarchy(
    storage: LoreStorage,
    data_type: str,
    entity: str | None = None,
    include_children: bool = True,
    include_parents: bool = True,
) -> str:
    """Return a dataset's tree, or one entity with its position in it.

    When no data file exists for ``data_type``, the tables of the Markdown
    document of the same name are used as a flat hierarchy.
    """
    try:
        tree = storage.load_tree(data_type)
        if tree is None:
            tree = _tables_for(storage, data_type)
            if tree is None:
                return f"No hierarchy data found for {data_type}. Available types: {', '.join(storage.list_data_types()) or 'none'}"
            logger.debug(f"Using Markdown tables as hierarchy for {data_type}")
            if entity:
                # Table rows carry no nesting; match on table names only
                for table_name, rows in tree.items():
                    if table_name.lower() == entity.lower():
                        return f"Hierarchy for {entity}:\n\n{_dump({'path': [table_name], 'data': rows})}"
                return f'No entity named "{entity}" in {data_type}.'
            return f"{data_type} hierarchy:\n\n{_dump(tree)}"

        if not entity:
            return f"{data_type} hierarchy:\n\n{_dump(tree)}"

        found = lookup_entity(storage, data_type, entity, include_children, include_parents)
        if found is None:
            return f'No entity named "{entity}" in {data_type}.'
        return f"Hierarchy for {entity}:\n\n{_dump(found)}"

    except (LoreStorageError, HierarchyError) as e:
        logger.error(f"❌ Failed to read hierarchy for {data_type}: {e}")
        return f"No hierarchy data found for {data_type}. Error: {e}"


def search_lore(
    storage: LoreStorage,
    query: str,
    category: str = "all",
    include_context: bool = True,
    max_results: int = 10,
) -> str:
    """Search the lore documents and report the matches as JSON text."""
    if not query.strip():
        return "Please provide a search query."

    results = search_docs(storage, query, category=category, include_context=include_context)
    limited = results[:max(0, max_results)]
    payload = [r.model_dump(exclude={"type", "url", "filename"}, exclude_none=True) for r in limited]
    return f'Found {len(limited)} matches for "{query}" (total: {len(results)}):\n\n{_dump(payload)}'


def _entity_data(storage: LoreStorage, content_type: str, name: str) -> dict[str, Any]:
    """Collect the data used to render generated content.

    Tries the dataset mapped to the content type, then any Markdown table row
    mentioning the name, then falls back to just the name and type.
    """
    data_type = GENERATION_TYPE_MAP.get(content_type)
    if data_type:
        try:
            found = lookup_entity(storage, data_type, name, include_children=False)
        except (LoreStorageError, HierarchyError) as e:
            logger.warning(f"Could not read {data_type} for {name}: {e}")
            found = None
        if found is not None:
            data = found["data"]
            data.setdefault("name", found["path"][-1])
            return data

    needle = name.lower()
    for doc in storage.iter_docs():
        for table_name, rows in parse_markdown_tables(doc.content).items():
            for row in rows:
                if any(needle in value.lower() for value in row.values()):
                    return {**row, "name": name, "type": content_type, "source": table_name}

    return {"name": name, "type": content_type}


def generate_content(
    storage: LoreStorage,
    renderer: ContentRenderer,
    content_type: str,
    name: str,
    parameters: dict[str, Any] | None = None,
) -> str:
    """Render a content template for a named entity.

    Args:
        storage: Lore storage
        renderer: Template renderer
        content_type: Generation type such as "creature_stat_block"
        name: Entity to describe
        parameters: Extra values merged over the entity data

    Returns:
        Rendered Markdown, or an error message
    """
    try:
        data = _entity_data(storage, content_type, name)
        data.update(parameters or {})
        return renderer.render_generation(content_type, data)
    except (LoreStorageError, HierarchyError, TemplateError) as e:
        logger.error(f"❌ Error generating {content_type} for {name}: {e}")
        return f"Error generating {content_type} for {name}: {e}"


def extract_data(
    storage: LoreStorage,
    source: str,
    data_type: str = "all",
    output_format: str = "json",
) -> str:
    """Extract the tables of a Markdown document.

    Args:
        storage: Lore storage
        source: Document name without ``.md``
        data_type: "all", or a substring the table name must contain
        output_format: "json", "yaml" or "markdown"
    """
    if output_format not in EXTRACT_FORMATS:
        return f"Unsupported format '{output_format}'. Use one of: {', '.join(EXTRACT_FORMATS)}"

    try:
        tables = _tables_for(storage, source)
    except LoreStorageError as e:
        return f"Error extracting data from {source}: {e}"
    if tables is None:
        return f"Error extracting data from {source}: No markdown file found for {source}"

    if data_type and data_type != "all":
        tables = {name: rows for name, rows in tables.items() if data_type.lower() in name.lower()}

    if output_format == "yaml":
        result = yaml.safe_dump(tables, sort_keys=False, allow_unicode=True)
    elif output_format == "markdown":
        result = tables_to_markdown(tables)
    else:
        result = _dump(tables)

    return f"Extracted data from {source}:\n\n{result}"


def get_aetheria_page(storage: LoreStorage, path: str | None = "index") -> str:
    """Return a pre-generated reference page, falling back to the index."""
    try:
        return storage.get_page(path)
    except PageNotFoundError as e:
        return f"Error: {e}"
    except OSError as e:
        logger.error(f"❌ Failed to read page {path}: {e}")
        return f"Error reading page {path}: {e}"


__all__ = [
    "GENERATION_TYPE_MAP",
    "lookup_entity",
    "get_hierarchy",
    "search_lore",
    "generate_content",
    "extract_data",
    "get_aetheria_page",
]
