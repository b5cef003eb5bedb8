"""
Aetheria Lore MCP Server
Exposes the Aetheria world documentation and data to AI assistants over MCP.
"""

import logging
from typing import Annotated, Any, Literal

from fastmcp import FastMCP
from pydantic import Field

from . import tools
from .cache import DocumentCache
from .config import configure_logging, load_config
from .storage import LoreStorage
from .templates import ContentRenderer

logger = logging.getLogger("aetheria-lore")

config = load_config()
configure_logging(config.log_level)

cache = DocumentCache(default_ttl=config.cache_ttl)
storage = LoreStorage(config, cache=cache)
renderer = ContentRenderer(config.templates_dir)
logger.debug(f"✅ Storage layer initialized (cache ttl {config.cache_ttl}s)")

mcp = FastMCP(
    name="aetheria-lore"
)

logger.debug("✅ Server initialized, registering tools")


# ----------------------------------------------------------------------
# Tools
# ----------------------------------------------------------------------

@mcp.tool
def search_lore(
    query: Annotated[str, Field(description="Search query (case-insensitive)")],
    category: Annotated[str, Field(description="Document category to restrict the search to, or 'all'")] = "all",
    includeContext: Annotated[bool, Field(description="Include two lines of context around each match")] = True,
    maxResults: Annotated[int, Field(description="Maximum number of documents to return", ge=1)] = 10,
) -> str:
    """Search the Aetheria lore documents for a term."""
    return tools.search_lore(storage, query, category, includeContext, maxResults)


@mcp.tool
def get_hierarchy(
    type: Annotated[str, Field(description="Data type, e.g. 'regions', 'creatures', 'magic_schools'")],
    entity: Annotated[str | None, Field(description="Entity key or name to locate in the hierarchy")] = None,
    includeChildren: Annotated[bool, Field(description="Include the entity's children and all descendant names")] = True,
    includeParents: Annotated[bool, Field(description="Include the path of ancestor keys")] = True,
) -> str:
    """Get a hierarchical dataset, or one entity with its parents and children."""
    return tools.get_hierarchy(storage, type, entity, includeChildren, includeParents)


@mcp.tool
def generate_content(
    type: Annotated[Literal[
        "creature_stat_block",
        "magic_school_description",
        "character_class_guide",
        "equipment_catalog",
        "political_overview",
        "location_description",
        "character_profile",
    ], Field(description="Kind of content to generate")],
    name: Annotated[str, Field(description="Name of the entity to describe")],
    parameters: Annotated[dict[str, Any] | None, Field(description="Extra template values that override the entity data")] = None,
) -> str:
    """Generate Markdown content for an entity from a template."""
    return tools.generate_content(storage, renderer, type, name, parameters)


@mcp.tool
def extract_data(
    source: Annotated[str, Field(description="Document name without .md, e.g. 'magic'")],
    dataType: Annotated[str, Field(description="Only tables whose heading contains this text, or 'all'")] = "all",
    format: Annotated[Literal["json", "yaml", "markdown"], Field(description="Output format")] = "json",
) -> str:
    """Extract the tables of a lore document as structured data."""
    return tools.extract_data(storage, source, dataType, format)


@mcp.tool
def get_aetheria_page(
    path: Annotated[str, Field(description="Page path such as 'index', 'magic' or 'creatures/dragons'")] = "index",
) -> str:
    """Get a pre-generated Aetheria reference page. Unknown pages fall back to the index."""
    return tools.get_aetheria_page(storage, path)


# ----------------------------------------------------------------------
# Resources
# ----------------------------------------------------------------------

@mcp.resource("aetheria://page", mime_type="text/markdown")
def index_page() -> str:
    """The Aetheria reference index page."""
    return tools.get_aetheria_page(storage, "index")


@mcp.resource("aetheria://docs/{name}", mime_type="text/markdown")
def doc_resource(name: str) -> str:
    """A lore document, including its frontmatter."""
    doc = storage.load_doc(name)
    if doc is None:
        raise ValueError(f"Unknown document: {name}")
    return (storage.docs_dir / doc.filename).read_text(encoding="utf-8")


@mcp.resource("aetheria://data/{data_type}", mime_type="application/json")
def data_resource(data_type: str) -> dict:
    """A parsed lore data file."""
    data = storage.load_data(data_type)
    if data is None:
        raise ValueError(f"Unknown data type: {data_type}")
    return data


def main() -> None:
    """Main entry point for the Aetheria Lore MCP Server."""
    if config.mcp_transport == "stdio":
        mcp.run()
    else:
        logger.info(f"🌐 Serving MCP over {config.mcp_transport} on {config.mcp_host}:{config.mcp_port}")
        mcp.run(transport=config.mcp_transport, host=config.mcp_host, port=config.mcp_port)


if __name__ == "__main__":
    main()
