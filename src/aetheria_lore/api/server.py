"""
HTTP API for the Aetheria world data.

Serves the lore documents, data files and content templates over a
Starlette app run by Uvicorn.

Routes:
- GET / - HTML index of documents, data types and templates
- GET /api/docs - List documentation files
- GET /api/docs/{filename} - Document frontmatter, Markdown and HTML
- GET /api/data - List data types
- GET /api/data/{type} - Parsed data file
- GET /api/hierarchy/{type} - Root keys of a data type
- GET /api/hierarchy/{type}/{entity} - One entity with parents/children
- GET /api/search?q=...&category=docs|data - Search documents and data
- GET /generate/{type} and /generate/{type}/{name} - Render a template
- GET /docs/{filename} - Document rendered as an HTML page
"""

import html
import json
import logging
from typing import Any

import uvicorn
from jinja2 import TemplateNotFound
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import (
    HTMLResponse,
    JSONResponse,
    PlainTextResponse,
    Response,
)
from starlette.routing import Route

from ..config import LoreConfig, configure_logging, load_config
from ..hierarchy import MalformedDataError
from ..search import search_data, search_docs
from ..storage import LoreStorage, LoreStorageError
from ..templates import ContentRenderer, render_markdown

logger = logging.getLogger("aetheria-lore.api")

# Data types searched, in order, when /generate is given an entity name
GENERATE_LOOKUP_TYPES = ("creatures", "magic_schools", "organizations", "classes", "equipment")

PAGE_STYLE = """body{font-family:-apple-system,BlinkMacSystemFont,sans-serif;max-width:800px;margin:0 auto;padding:20px;line-height:1.6}
table{border-collapse:collapse;width:100%}th,td{border:1px solid #ddd;padding:8px;text-align:left}th{background-color:#f2f2f2}
code{background-color:#f4f4f4;padding:2px 4px;border-radius:3px}pre{background-color:#f4f4f4;padding:10px;border-radius:5px;overflow-x:auto}
.grid{display:grid;grid-template-columns:repeat(auto-fit,minmax(200px,1fr));gap:20px}.card{border:1px solid #ddd;padding:15px;border-radius:5px}
ul{list-style:none;padding:0}a{color:#0066cc;text-decoration:none}"""


class LoreJSONResponse(JSONResponse):
    """JSON response that serializes YAML dates and other scalars as strings."""

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, default=str).encode("utf-8")


class LoreHTTPServer:
    """
    HTTP server for browsing and querying the lore.

    Attributes:
        storage: Lore storage
        renderer: Template renderer for /generate
        host: Server bind address
        port: Server port
        app: The Starlette application
    """

    def __init__(
        self,
        storage: LoreStorage,
        renderer: ContentRenderer | None = None,
        host: str = "127.0.0.1",
        port: int = 3000,
    ) -> None:
        self.storage = storage
        self.renderer = renderer or ContentRenderer(storage.templates_dir)
        self.host = host
        self.port = port
        self.app = self._build_app()

        logger.info(f"LoreHTTPServer initialized on {host}:{port}")

    def _build_app(self) -> Starlette:
        """
        Build the Starlette application with routes.

        Returns:
            Configured Starlette app
        """
        routes = [
            Route("/", self.get_index, methods=["GET"]),
            Route("/api/docs", self.list_docs, methods=["GET"]),
            Route("/api/docs/{filename}", self.get_doc, methods=["GET"]),
            Route("/api/data", self.list_data, methods=["GET"]),
            Route("/api/data/{type}", self.get_data, methods=["GET"]),
            Route("/api/hierarchy/{type}", self.get_hierarchy, methods=["GET"]),
            Route("/api/hierarchy/{type}/{entity}", self.get_hierarchy_entity, methods=["GET"]),
            Route("/api/search", self.search, methods=["GET"]),
            Route("/generate/{type}", self.generate_content, methods=["GET"]),
            Route("/generate/{type}/{name}", self.generate_content, methods=["GET"]),
            Route("/docs/{filename}", self.get_doc_html, methods=["GET"]),
        ]

        return Starlette(
            debug=False,
            routes=routes,
            exception_handlers={
                MalformedDataError: self._handle_data_error,
                LoreStorageError: self._handle_data_error,
            },
        )

    async def _handle_data_error(self, request: Request, exc: Exception) -> Response:
        data_type = request.path_params.get("type")
        logger.error(f"❌ Bad data for {data_type or request.url.path}: {exc}")
        return LoreJSONResponse(
            {"error": f"Malformed data in '{data_type}': {exc}" if data_type else f"Malformed data: {exc}"},
            status_code=500,
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def list_docs(self, request: Request) -> Response:
        return LoreJSONResponse(self.storage.list_docs())

    async def get_doc(self, request: Request) -> Response:
        """Return a document's frontmatter, Markdown body and rendered HTML."""
        filename = request.path_params["filename"]
        if not filename.endswith(".md"):
            return LoreJSONResponse({"error": "Only markdown files are supported"}, status_code=400)

        doc = self.storage.load_doc(filename)
        if doc is None:
            return LoreJSONResponse({"error": "Document not found"}, status_code=404)

        return LoreJSONResponse({
            "frontmatter": doc.frontmatter,
            "content": doc.content,
            "html": render_markdown(doc.content),
            "filename": doc.filename,
        })

    async def get_doc_html(self, request: Request) -> Response:
        """Serve a document as a standalone HTML page."""
        filename = request.path_params["filename"]
        if not filename.endswith(".md"):
            return LoreJSONResponse({"error": "Only markdown files are supported"}, status_code=400)

        doc = self.storage.load_doc(filename)
        if doc is None:
            return HTMLResponse("<h1>Document not found</h1>", status_code=404)

        page = f"""<!DOCTYPE html>
<html lang="en"><head><meta charset="UTF-8"><meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{html.escape(doc.title)}</title><style>{PAGE_STYLE}</style></head>
<body><nav><a href="/">&larr; Back to Index</a></nav>
{render_markdown(doc.content)}
</body></html>"""
        return HTMLResponse(page)

    # ------------------------------------------------------------------
    # Data and hierarchy
    # ------------------------------------------------------------------

    async def list_data(self, request: Request) -> Response:
        return LoreJSONResponse(self.storage.list_data_types())

    async def get_data(self, request: Request) -> Response:
        data = self.storage.load_data(request.path_params["type"])
        if data is None:
            return LoreJSONResponse({"error": "Data file not found"}, status_code=404)
        return LoreJSONResponse(data)

    async def get_hierarchy(self, request: Request) -> Response:
        """Return the root keys of a data type's tree."""
        data_type = request.path_params["type"]
        tree = self.storage.load_tree(data_type)
        if tree is None:
            return LoreJSONResponse({"error": "Hierarchy type not found"}, status_code=404)
        return LoreJSONResponse(self.storage.resolver_for(data_type).root_keys(tree))

    async def get_hierarchy_entity(self, request: Request) -> Response:
        """
        Return one entity's data.

        Query parameters ``includeParents=true`` and ``includeChildren=true``
        add the ancestor keys (``parents``) and every descendant name
        (``allChildren``). The entity segment matches a key or name, or their
        slug form.

        Returns:
            JSON entity, or 404 if the type or entity does not exist
        """
        data_type = request.path_params["type"]
        entity = request.path_params["entity"]
        include_children = request.query_params.get("includeChildren") == "true"
        include_parents = request.query_params.get("includeParents") == "true"

        tree = self.storage.load_tree(data_type)
        if tree is None:
            return LoreJSONResponse({"error": "Hierarchy type not found"}, status_code=404)

        resolver = self.storage.resolver_for(data_type)
        by_slug = False
        match = resolver.find(tree, entity)
        if match is None:
            by_slug = True
            match = resolver.find(tree, entity, by_slug=True)
        if match is None:
            return LoreJSONResponse({"error": "Entity not found in hierarchy"}, status_code=404)

        result = dict(match.data)
        if include_parents:
            result["parents"] = list(resolver.ancestor_path(tree, entity, by_slug=by_slug))
        if include_children:
            result["allChildren"] = list(resolver.descendants(match))
        return LoreJSONResponse(result)

    # ------------------------------------------------------------------
    # Search and generation
    # ------------------------------------------------------------------

    async def search(self, request: Request) -> Response:
        """Search documents (category=docs), data (category=data) or both."""
        query = request.query_params.get("q")
        category = request.query_params.get("category")
        if not query:
            return LoreJSONResponse({"error": 'Query parameter "q" is required'}, status_code=400)

        results: list[dict] = []
        if not category or category == "docs":
            for doc in search_docs(self.storage, query, include_context=False):
                results.append({
                    "type": doc.type,
                    "file": doc.filename,
                    "title": doc.title,
                    "match": doc.matches[0].strip() if doc.matches else "",
                    "url": doc.url,
                })
        if not category or category == "data":
            results.extend(r.model_dump() for r in search_data(self.storage, query))

        return LoreJSONResponse({
            "query": query,
            "category": category or "all",
            "count": len(results),
            "results": results,
        })

    async def generate_content(self, request: Request) -> Response:
        """Render ``<type>.md`` from the templates directory as Markdown."""
        template_type = request.path_params["type"]
        name = request.path_params.get("name") or request.query_params.get("name")

        if self.storage.load_template(template_type) is None:
            return LoreJSONResponse({"error": "Template not found"}, status_code=404)

        data: dict[str, Any] = {}
        if name:
            for data_type in GENERATE_LOOKUP_TYPES:
                tree = self.storage.load_tree(data_type)
                if tree is None:
                    continue
                match = self.storage.resolver_for(data_type).find(tree, name)
                if match is not None:
                    data = {**match.data, "type": data_type}
                    data.setdefault("name", match.name)
                    break

        try:
            content = self.renderer.render([f"{template_type}.md"], data)
        except TemplateNotFound:
            return LoreJSONResponse({"error": "Template not found"}, status_code=404)
        return PlainTextResponse(content, media_type="text/markdown")

    # ------------------------------------------------------------------
    # Index page
    # ------------------------------------------------------------------

    async def get_index(self, request: Request) -> Response:
        """Landing page linking every document, data type and template."""
        docs = "".join(
            f'<li><a href="/docs/{html.escape(f)}">{html.escape(f)}</a></li>' for f in self.storage.list_docs()
        )
        data = "".join(
            f'<li><a href="/api/data/{html.escape(t)}">{html.escape(t)}</a></li>' for t in self.storage.list_data_types()
        )
        templates = "".join(
            f'<li><a href="/generate/{html.escape(t)}">{html.escape(t)}</a></li>' for t in self.storage.list_templates()
        )
        endpoints = "".join(f"<li><code>{line}</code></li>" for line in (
            "GET /api/docs",
            "GET /api/docs/{filename}",
            "GET /api/data",
            "GET /api/data/{type}",
            "GET /api/hierarchy/{type}",
            "GET /api/hierarchy/{type}/{entity}",
            "GET /api/search?q=query&amp;category=docs|data",
            "GET /generate/{type}",
            "GET /generate/{type}/{name}",
        ))
        page = f"""<!DOCTYPE html>
<html lang="en"><head><meta charset="UTF-8"><meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Aetheria World Data</title><style>{PAGE_STYLE}</style></head>
<body><h1>Aetheria World Data Server</h1>
<div class="grid">
<div class="card"><h3>📚 Documentation</h3><ul>{docs}</ul></div>
<div class="card"><h3>📊 Data Files</h3><ul>{data}</ul></div>
<div class="card"><h3>🔧 Generate Content</h3><ul>{templates}</ul></div>
</div>
<h2>API Endpoints</h2><ul>{endpoints}</ul>
</body></html>"""
        return HTMLResponse(page)

    def run(self) -> None:
        """Serve the app with Uvicorn until interrupted."""
        logger.info(f"🌐 Aetheria HTTP server running on http://{self.host}:{self.port}")
        uvicorn.run(self.app, host=self.host, port=self.port, log_level="info")


def create_server(config: LoreConfig | None = None) -> LoreHTTPServer:
    """Build a server from configuration (the environment by default)."""
    config = config or load_config()
    storage = LoreStorage(config)
    return LoreHTTPServer(
        storage,
        ContentRenderer(config.templates_dir),
        host=config.http_host,
        port=config.http_port,
    )


def main() -> None:
    """Entry point for the Aetheria HTTP server."""
    config = load_config()
    configure_logging(config.log_level)
    create_server(config).run()


if __name__ == "__main__":
    main()
