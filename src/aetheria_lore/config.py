"""
Configuration for the Aetheria lore toolkit.

Values come from the environment (optionally a ``.env`` file) and are
validated into a ``LoreConfig`` model shared by the MCP server, the HTTP
API and the generators.
"""

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .hierarchy import HierarchyResolver, TreeShape

logger = logging.getLogger("aetheria-lore")


class DatasetShape(BaseModel):
    """How a data file's tree is laid out.

    Attributes:
        children_key: Field holding nested entities of the same shape
        root_key: Optional wrapper key to unwrap before traversal
            (e.g. ``regions.json`` is ``{"regions": {...}}``)
    """
    children_key: str = Field(default=TreeShape.CHILDREN.value, min_length=1)
    root_key: str | None = Field(default=None)

    def resolver(self, max_depth: int = 64) -> HierarchyResolver:
        return HierarchyResolver(children_key=self.children_key, max_depth=max_depth)


def _default_datasets() -> dict[str, DatasetShape]:
    return {
        "regions": DatasetShape(children_key=TreeShape.REGIONS.value, root_key="regions"),
        "creatures": DatasetShape(children_key=TreeShape.SUBTYPES.value, root_key="creatures"),
        "characters": DatasetShape(root_key="characters"),
    }


class LoreConfig(BaseModel):
    """Runtime settings for servers and generators."""

    # Content locations
    data_dir: Path = Field(default=Path("data"), description="Structured lore data (YAML/JSON)")
    docs_dir: Path = Field(default=Path("docs"), description="Markdown documentation")
    templates_dir: Path = Field(default=Path("templates"), description="Entity content templates")
    output_dir: Path = Field(default=Path("dist"), description="Generator output root")
    pages_dir: Path | None = Field(
        default=None,
        description="Pre-generated Markdown pages served by get_aetheria_page (default: <output_dir>/ai-docs)"
    )

    # Caching
    cache_ttl: float = Field(default=300, ge=0, description="Seconds parsed documents stay cached; 0 disables")

    # HTTP API
    http_host: str = Field(default="127.0.0.1")
    http_port: int = Field(default=3000, ge=1, le=65535)

    # Static site
    site_url: str = Field(default="http://localhost:3000", description="Public base URL used in sitemap.xml")

    # MCP transport
    mcp_transport: Literal["stdio", "http", "sse"] = Field(default="stdio")
    mcp_host: str = Field(default="127.0.0.1")
    mcp_port: int = Field(default=3000, ge=1, le=65535)

    log_level: str = Field(default="INFO")
    max_depth: int = Field(default=64, ge=1, description="Deepest nesting accepted in data trees")

    datasets: dict[str, DatasetShape] = Field(default_factory=_default_datasets)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def resolved_pages_dir(self) -> Path:
        return self.pages_dir if self.pages_dir is not None else self.output_dir / "ai-docs"

    def shape_for(self, data_type: str) -> DatasetShape:
        """Return the configured shape of a data type, or the default shape."""
        return self.datasets.get(data_type, DatasetShape())


def load_config(env_file: Path | None = None) -> LoreConfig:
    """Build a LoreConfig from the environment.

    Args:
        env_file: Optional ``.env`` file; the default search is used otherwise

    Returns:
        Validated configuration
    """
    if env_file is not None:
        load_dotenv(env_file)
    elif not load_dotenv():
        logger.debug("No .env file found, using process environment only")

    values: dict = {}
    env_map = {
        "data_dir": "AETHERIA_DATA_DIR",
        "docs_dir": "AETHERIA_DOCS_DIR",
        "templates_dir": "AETHERIA_TEMPLATES_DIR",
        "output_dir": "AETHERIA_OUTPUT_DIR",
        "pages_dir": "AETHERIA_PAGES_DIR",
        "cache_ttl": "AETHERIA_CACHE_TTL",
        "http_host": "AETHERIA_HTTP_HOST",
        "http_port": "AETHERIA_HTTP_PORT",
        "site_url": "AETHERIA_SITE_URL",
        "mcp_host": "MCP_HOST",
        "mcp_port": "MCP_PORT",
        "log_level": "AETHERIA_LOG_LEVEL",
        "max_depth": "AETHERIA_MAX_DEPTH",
    }
    for field_name, env_name in env_map.items():
        value = os.getenv(env_name)
        if value:
            values[field_name] = value

    transport = os.getenv("MCP_TRANSPORT")
    if transport:
        values["mcp_transport"] = transport.lower()
    elif os.getenv("MCP_HOST") or os.getenv("MCP_PORT"):
        values["mcp_transport"] = "http"

    datasets_file = os.getenv("AETHERIA_DATASETS_FILE")
    if datasets_file:
        datasets = _default_datasets()
        datasets.update(load_dataset_shapes(Path(datasets_file)))
        values["datasets"] = datasets

    config = LoreConfig(**values)
    logger.debug(f"📂 Data dir: {config.data_dir.resolve()}")
    return config


def load_dataset_shapes(path: Path) -> dict[str, DatasetShape]:
    """Load per-dataset shapes from a YAML file.

    Expected format:
        regions:
          children_key: regions
          root_key: regions
        magic_schools:
          children_key: children

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a mapping of data type -> shape
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Dataset shapes file {path} must contain a mapping")

    return {str(name): DatasetShape(**(shape or {})) for name, shape in data.items()}


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = [
    "DatasetShape",
    "LoreConfig",
    "load_config",
    "load_dataset_shapes",
    "configure_logging",
]
