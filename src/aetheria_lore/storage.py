"""
File-system storage for Aetheria lore content.

Reads three kinds of content:
- structured data files (``data/*.yaml``, ``*.yml``, ``*.json``)
- Markdown documentation with YAML frontmatter (``docs/*.md``)
- content templates (``templates/*.md``)
plus the pre-generated Markdown pages served to MCP clients.

Parsed files are kept in a DocumentCache passed in by the caller.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import frontmatter
import yaml
from pydantic import BaseModel, Field

from .cache import DocumentCache
from .config import LoreConfig
from .hierarchy import HierarchyResolver

logger = logging.getLogger("aetheria-lore")

DATA_SUFFIXES = (".yaml", ".yml", ".json")


class LoreStorageError(Exception):
    """A content file exists but could not be read or parsed."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.path = path


class PageNotFoundError(LoreStorageError):
    """Neither the requested page nor the index fallback exists."""
    pass


class LoreDocument(BaseModel):
    """A Markdown document split into frontmatter and body.

    Attributes:
        filename: File name including the ``.md`` suffix
        frontmatter: Parsed YAML frontmatter
        content: Markdown body without frontmatter
        last_modified: File modification time
    """
    filename: str
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    content: str = ""
    last_modified: datetime | None = None

    @property
    def stem(self) -> str:
        return Path(self.filename).stem

    @property
    def title(self) -> str:
        title = self.frontmatter.get("title")
        return str(title) if title else self.stem

    @property
    def category(self) -> str:
        return self.stem.lower()


def _safe_relative(name: str) -> str:
    """Strip parent references and leading slashes from a user-supplied path."""
    return name.replace("..", "").lstrip("/").strip()


class LoreStorage:
    """Read-only access to the lore content directories.

    Attributes:
        config: Active configuration
        cache: Cache holding parsed data files and documents
    """

    def __init__(self, config: LoreConfig, cache: DocumentCache | None = None) -> None:
        self.config = config
        self.cache = cache if cache is not None else DocumentCache(default_ttl=config.cache_ttl)
        self._resolvers: dict[str, HierarchyResolver] = {}

    @property
    def data_dir(self) -> Path:
        return self.config.data_dir

    @property
    def docs_dir(self) -> Path:
        return self.config.docs_dir

    @property
    def templates_dir(self) -> Path:
        return self.config.templates_dir

    @property
    def pages_dir(self) -> Path:
        return self.config.resolved_pages_dir

    # ------------------------------------------------------------------
    # Structured data
    # ------------------------------------------------------------------

    def list_data_types(self) -> list[str]:
        """Return the names of all data files (without suffix), sorted."""
        if not self.data_dir.is_dir():
            logger.warning(f"Data directory not found: {self.data_dir}")
            return []
        types = {
            path.stem
            for path in self.data_dir.iterdir()
            if path.is_file() and path.suffix in DATA_SUFFIXES
        }
        return sorted(types)

    def data_file(self, data_type: str) -> Path | None:
        """Locate the file backing a data type, trying each supported suffix."""
        name = _safe_relative(data_type)
        if not name or "/" in name:
            return None
        for suffix in DATA_SUFFIXES:
            path = self.data_dir / f"{name}{suffix}"
            if path.is_file():
                return path
        return None

    def load_data(self, data_type: str) -> dict[str, Any] | None:
        """Load and parse a data file.

        Args:
            data_type: File name without suffix (e.g. "creatures")

        Returns:
            Parsed mapping, or None if no such file exists

        Raises:
            LoreStorageError: If the file cannot be parsed or is not a mapping
        """
        path = self.data_file(data_type)
        if path is None:
            return None
        return self.cache.get_or_load(path, self._parse_data_file)

    def load_tree(self, data_type: str) -> dict[str, Any] | None:
        """Load a data file and unwrap its configured root key.

        Returns:
            The entity tree, or None if the data type does not exist
        """
        data = self.load_data(data_type)
        if data is None:
            return None
        root_key = self.config.shape_for(data_type).root_key
        if root_key and isinstance(data.get(root_key), dict):
            return data[root_key]
        return data

    def resolver_for(self, data_type: str) -> HierarchyResolver:
        """Return a resolver configured with the data type's children key."""
        if data_type not in self._resolvers:
            shape = self.config.shape_for(data_type)
            self._resolvers[data_type] = shape.resolver(max_depth=self.config.max_depth)
        return self._resolvers[data_type]

    @staticmethod
    def _parse_data_file(path: Path) -> dict[str, Any]:
        try:
            text = path.read_text(encoding="utf-8")
            if path.suffix == ".json":
                data = json.loads(text) if text.strip() else {}
            else:
                data = yaml.safe_load(text) or {}
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise LoreStorageError(f"Failed to parse {path.name}: {e}", path=path) from e

        if not isinstance(data, dict):
            raise LoreStorageError(
                f"{path.name} must contain a mapping at the top level, got {type(data).__name__}",
                path=path,
            )
        logger.debug(f"📊 Parsed data file {path.name}")
        return data

    # ------------------------------------------------------------------
    # Markdown documentation
    # ------------------------------------------------------------------

    def list_docs(self) -> list[str]:
        """Return the Markdown file names in the docs directory, sorted."""
        if not self.docs_dir.is_dir():
            logger.warning(f"Docs directory not found: {self.docs_dir}")
            return []
        return sorted(
            path.name for path in self.docs_dir.iterdir()
            if path.is_file() and path.suffix == ".md"
        )

    def load_doc(self, filename: str) -> LoreDocument | None:
        """Load a Markdown document with its frontmatter.

        Args:
            filename: Document name; ``.md`` is appended when missing

        Returns:
            LoreDocument, or None if the document does not exist
        """
        name = _safe_relative(filename)
        if not name:
            return None
        if not name.endswith(".md"):
            name = f"{name}.md"
        path = self.docs_dir / name
        if not path.is_file():
            return None
        return self.cache.get_or_load(path, self._parse_doc)

    def iter_docs(self):
        """Yield every document in the docs directory."""
        for filename in self.list_docs():
            doc = self.load_doc(filename)
            if doc is not None:
                yield doc

    @staticmethod
    def _parse_doc(path: Path) -> LoreDocument:
        try:
            post = frontmatter.loads(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise LoreStorageError(f"Failed to read {path.name}: {e}", path=path) from e
        return LoreDocument(
            filename=path.name,
            frontmatter=dict(post.metadata),
            content=post.content,
            last_modified=datetime.fromtimestamp(path.stat().st_mtime),
        )

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def list_templates(self) -> list[str]:
        """Return template names (without ``.md``), sorted."""
        if not self.templates_dir.is_dir():
            return []
        return sorted(
            path.stem for path in self.templates_dir.iterdir()
            if path.is_file() and path.suffix == ".md"
        )

    def load_template(self, name: str) -> str | None:
        """Return a template's source, or None if it does not exist."""
        safe = _safe_relative(name)
        if not safe:
            return None
        path = self.templates_dir / f"{safe.removesuffix('.md')}.md"
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    # ------------------------------------------------------------------
    # Pre-generated pages
    # ------------------------------------------------------------------

    def get_page(self, page_path: str | None = "index") -> str:
        """Read a pre-generated page, falling back to the index page.

        Args:
            page_path: Page path such as "magic/fire"; empty means "index"

        Returns:
            Page Markdown. A fallback to the index is prefixed with a note
            naming the page that was requested.

        Raises:
            PageNotFoundError: If neither the page nor the index exists
        """
        requested = page_path or ""
        safe = _safe_relative(requested) or "index"
        filename = safe if safe.endswith(".md") else f"{safe}.md"
        path = self.pages_dir / filename

        if path.is_file():
            return path.read_text(encoding="utf-8")

        if safe in ("index", "index.md"):
            raise PageNotFoundError(
                f'Page not found: "{requested or "index"}". '
                "Available pages can be found in the index.",
                path=path,
            )

        logger.warning(f'Page not found: "{requested}", falling back to index')
        index_path = self.pages_dir / "index.md"
        if not index_path.is_file():
            raise PageNotFoundError(
                f'Page not found: "{requested}" and fallback to index failed.',
                path=path,
            )
        note = (
            "# Aetheria World Reference\n\n"
            f'> **Note**: The requested page "{requested}" was not found. '
            "Showing the main index page instead.\n\n---\n\n"
        )
        return note + index_path.read_text(encoding="utf-8")


__all__ = [
    "LoreStorage",
    "LoreDocument",
    "LoreStorageError",
    "PageNotFoundError",
    "DATA_SUFFIXES",
]
