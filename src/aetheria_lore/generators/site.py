"""
Static HTML site generator.

Builds a browsable site from the lore content:

    <output>/index.html
    <output>/docs/index.html, <output>/docs/<doc>.html
    <output>/data/index.html
    <output>/data/<type>/index.html
    <output>/data/<type>/<entity-slug>.html
    <output>/sitemap.xml

Entity pages are rendered through the project's content templates when one
applies, otherwise as a property table.
"""

import logging
import shutil
from datetime import datetime, timezone
from html import escape
from pathlib import Path
from typing import Any, Mapping

from jinja2 import DictLoader, Environment, TemplateNotFound

from ..alignment import format_alignment
from ..hierarchy import EntityMatch, HierarchyError, HierarchyResolver
from ..storage import LoreStorage, LoreStorageError
from ..templates import ContentRenderer, render_markdown
from ..text import capitalize, display_name, truncate
from .report import GenerationReport, assign_filenames, unique_name

logger = logging.getLogger("aetheria-lore.generators")

LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }} - Aetheria World</title>
    <meta name="description" content="Explore the world of Aetheria - {{ title }}">
</head>
<body>
    <header><h1>🌍 Aetheria</h1><p>A Rich Fantasy World</p></header>
    <nav>
        <ul>
            <li><a href="{{ root }}index.html">🏠 Home</a></li>
            <li><a href="{{ root }}docs/index.html">📚 Documentation</a></li>
            <li><a href="{{ root }}data/index.html">📊 Data</a></li>
        </ul>
    </nav>
    <main>
        {% if breadcrumb %}<div class="breadcrumb">
        {%- for label, href in breadcrumb -%}
            {% if not loop.first %} &gt; {% endif %}{% if href %}<a href="{{ href }}">{{ label }}</a>{% else %}{{ label }}{% endif %}
        {%- endfor -%}
        </div>{% endif %}
        {{ content | safe }}
    </main>
    <footer><p>Generated on {{ generated_on }}</p></footer>
</body>
</html>
"""

ENTITY_BODY = """<div class="card">
{% if body %}{{ body | safe }}{% else %}<h2>{{ name }}</h2>
{% if description %}<p>{{ description }}</p>{% endif %}
{% if properties %}<h3>Properties</h3>
<table>
{% for label, value in properties %}<tr><td><strong>{{ label }}</strong></td><td>{{ value }}</td></tr>
{% endfor %}</table>{% endif %}{% endif %}
{% if children %}<h3>Subtypes</h3>
<ul class="entity-list">
{% for child in children %}<li><a href="{{ child.href }}">{{ child.name }}</a></li>
{% endfor %}</ul>{% endif %}
{% if related %}<h3>Related</h3>
<ul>
{% for name in related %}<li>{{ name }}</li>
{% endfor %}</ul>{% endif %}
</div>
"""

TYPE_INDEX = """<div class="card">
<h2>{{ title }}</h2>
<p>All {{ data_type }} in the Aetheria world ({{ entities | length }} entries).</p>
<div class="entity-list">
{% for entity in entities %}<div class="entity-card"><a href="{{ entity.href }}"><h4>{{ entity.name }}</h4></a>{% if entity.summary %}<p>{{ entity.summary }}</p>{% endif %}</div>
{% endfor %}</div>
<h3>Hierarchy</h3>
<pre class="hierarchy">{{ hierarchy }}</pre>
</div>
"""

LINK_LIST = """<div class="card">
<h2>{{ heading }}</h2>
{% if intro %}<p>{{ intro }}</p>{% endif %}
<ul class="entity-list">
{% for label, href, note in links %}<li><a href="{{ href }}">{{ label }}</a>{% if note %} - {{ note }}{% endif %}</li>
{% endfor %}</ul>
</div>
"""


def format_property(key: str, value: Any) -> str | None:
    """Render an attribute value as table cell text, or None to skip it."""
    if value is None:
        return None
    if key == "alignment":
        return format_alignment(value)
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    if isinstance(value, Mapping):
        return ", ".join(f"{k}: {v}" for k, v in value.items())
    return str(value)


class StaticSiteGenerator:
    """
    Writes the lore as a static HTML site.

    Attributes:
        storage: Lore storage
        renderer: Content template renderer used for entity pages
        output_dir: Site root
        site_url: Public base URL written to sitemap.xml
    """

    def __init__(
        self,
        storage: LoreStorage,
        output_dir: Path,
        renderer: ContentRenderer | None = None,
        site_url: str = "http://localhost:3000",
    ) -> None:
        self.storage = storage
        self.output_dir = output_dir
        self.renderer = renderer or ContentRenderer(storage.templates_dir)
        self.site_url = site_url.rstrip("/")
        self.env = Environment(
            loader=DictLoader({
                "layout.html": LAYOUT,
                "entity.html": ENTITY_BODY,
                "type_index.html": TYPE_INDEX,
                "links.html": LINK_LIST,
            }),
            autoescape=True,
        )
        self._generated_on = datetime.now(timezone.utc).date().isoformat()

    def generate(self, clean: bool = True) -> GenerationReport:
        """
        Build the whole site.

        Args:
            clean: Remove the output directory first

        Returns:
            GenerationReport listing the written pages
        """
        logger.info(f"🚀 Generating Aetheria static site in {self.output_dir}")
        if clean and self.output_dir.exists():
            shutil.rmtree(self.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        report = GenerationReport(output_dir=self.output_dir)

        logger.info("📚 Processing documentation...")
        docs = self._write_docs(report)

        logger.info("📊 Processing data hierarchies...")
        data_types = self._write_data(report)

        self._write_index(report, docs, data_types)
        self._write_sitemap(report)

        logger.info(f"✅ Site generation complete! {report.page_count} files written to {self.output_dir}")
        return report

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _page(
        self,
        title: str,
        content: str,
        depth: int,
        breadcrumb: list[tuple[str, str | None]] | None = None,
    ) -> str:
        return self.env.get_template("layout.html").render(
            title=title,
            content=content,
            root="../" * depth,
            breadcrumb=breadcrumb or [],
            generated_on=self._generated_on,
        )

    def _links(self, heading: str, links: list[tuple[str, str, str]], intro: str = "") -> str:
        return self.env.get_template("links.html").render(heading=heading, links=links, intro=intro)

    # ------------------------------------------------------------------
    # Documentation
    # ------------------------------------------------------------------

    def _write_docs(self, report: GenerationReport) -> list[tuple[str, str]]:
        written: list[tuple[str, str]] = []
        used: set[str] = {"index"}
        for doc in self.storage.iter_docs():
            filename = unique_name(report, used, doc.stem, f"docs: '{doc.filename}'", ".html")
            page = self._page(
                doc.title,
                render_markdown(doc.content),
                depth=1,
                breadcrumb=[("Home", "../index.html"), ("Documentation", "index.html"), (doc.title, None)],
            )
            report.write(f"docs/{filename}", page)
            written.append((doc.title, filename))

        content = self._links(
            "📚 Documentation",
            [(title, href, "") for title, href in written],
            intro="Core documentation for the Aetheria world.",
        )
        report.write("docs/index.html", self._page(
            "Documentation", content, depth=1,
            breadcrumb=[("Home", "../index.html"), ("Documentation", None)],
        ))
        return written

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def _write_data(self, report: GenerationReport) -> list[tuple[str, int]]:
        written: list[tuple[str, int]] = []
        for data_type in self.storage.list_data_types():
            try:
                tree = self.storage.load_tree(data_type)
                if tree is None:
                    continue
                resolver = self.storage.resolver_for(data_type)
                count = self._write_data_type(report, data_type, tree, resolver)
            except (LoreStorageError, HierarchyError) as e:
                message = f"Skipped data type '{data_type}': {e}"
                logger.warning(f"⚠️ {message}")
                report.warnings.append(message)
                continue
            written.append((data_type, count))

        content = self._links(
            "📊 World Data",
            [(display_name(t), f"{t}/index.html", f"{n} entries") for t, n in written],
            intro="Structured hierarchical data about the Aetheria world.",
        )
        report.write("data/index.html", self._page(
            "World Data", content, depth=1,
            breadcrumb=[("Home", "../index.html"), ("Data", None)],
        ))
        return written

    def _write_data_type(
        self,
        report: GenerationReport,
        data_type: str,
        tree: Mapping[str, Any],
        resolver: HierarchyResolver,
    ) -> int:
        entities = list(resolver.iter_entities(tree))

        collisions = resolver.find_collisions(tree)
        if collisions:
            report.collisions[data_type] = collisions
            logger.warning(f"⚠️ {data_type}: {len(collisions)} names are shared by several entities")

        filenames = assign_filenames(report, data_type, entities, ".html")
        names = {match.full_path: match.name for match in entities}
        title = display_name(data_type)

        for match in entities:
            self._write_entity(report, data_type, title, match, resolver, filenames, names)

        hierarchy = "\n".join(f"{'  ' * match.depth}{match.name}" for match in entities)
        content = self.env.get_template("type_index.html").render(
            title=title,
            data_type=data_type.replace("_", " "),
            entities=[
                {
                    "name": match.name,
                    "href": filenames[match.full_path],
                    "summary": truncate(match.description, 100),
                }
                for match in entities
            ],
            hierarchy=hierarchy,
        )
        report.write(f"data/{data_type}/index.html", self._page(
            title, content, depth=2,
            breadcrumb=[("Home", "../../index.html"), ("Data", "../index.html"), (title, None)],
        ))
        logger.debug(f"  📊 {data_type}: {len(entities)} entities")
        return len(entities)

    def _write_entity(
        self,
        report: GenerationReport,
        data_type: str,
        type_title: str,
        match: EntityMatch,
        resolver: HierarchyResolver,
        filenames: dict[tuple[str, ...], str],
        names: dict[tuple[str, ...], str],
    ) -> None:
        template_data = {k: v for k, v in match.data.items() if k != resolver.children_key}
        try:
            body = render_markdown(self.renderer.render_entity(data_type, template_data))
        except TemplateNotFound:
            body = ""

        properties = []
        for key, value in template_data.items():
            if key in ("name", "description"):
                continue
            text = format_property(key, value)
            if text is not None:
                properties.append((capitalize(key), text))

        direct = resolver.children(match)
        related = list(resolver.descendants(match))
        content = self.env.get_template("entity.html").render(
            body=body,
            name=match.name,
            description=match.description,
            properties=properties,
            children=[
                {"name": child.name, "href": filenames[child.full_path]}
                for child in direct
            ],
            related=related if len(related) > len(direct) else [],
        )

        breadcrumb: list[tuple[str, str | None]] = [
            ("Home", "../../index.html"),
            ("Data", "../index.html"),
            (type_title, "index.html"),
        ]
        for i in range(1, len(match.path) + 1):
            ancestor = match.path[:i]
            breadcrumb.append((names[ancestor], filenames[ancestor]))
        breadcrumb.append((match.name, None))

        report.write(
            f"data/{data_type}/{filenames[match.full_path]}",
            self._page(match.name, content, depth=2, breadcrumb=breadcrumb),
        )

    # ------------------------------------------------------------------
    # Index and sitemap
    # ------------------------------------------------------------------

    def _write_index(
        self,
        report: GenerationReport,
        docs: list[tuple[str, str]],
        data_types: list[tuple[str, int]],
    ) -> None:
        content = (
            "<h2>Welcome to Aetheria</h2>\n"
            + self._links("📚 Documentation", [(title, f"docs/{href}", "") for title, href in docs])
            + self._links(
                "📊 World Data",
                [(display_name(t), f"data/{t}/index.html", f"{n} entries") for t, n in data_types],
            )
        )
        report.write("index.html", self._page("Home", content, depth=0))

    def _write_sitemap(self, report: GenerationReport) -> None:
        urls = [f"{self.site_url}/"] + [
            f"{self.site_url}/{page}" for page in report.pages if page != "index.html"
        ]
        entries = "".join(
            f"  <url>\n    <loc>{escape(url)}</loc>\n    <lastmod>{self._generated_on}</lastmod>\n"
            f"    <priority>{'1.0' if i == 0 else '0.8'}</priority>\n  </url>\n"
            for i, url in enumerate(urls)
        )
        sitemap = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
            f"{entries}</urlset>\n"
        )
        report.write("sitemap.xml", sitemap)


__all__ = ["StaticSiteGenerator", "format_property"]
