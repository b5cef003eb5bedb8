"""
Aetheria Lore - world documentation and data publishing for the Aetheria setting.

Serves lore to AI assistants over MCP and to browsers over HTTP, and builds a
static site plus AI-oriented Markdown from the same data files.
"""

from .alignment import format_alignment
from .config import LoreConfig, load_config
from .hierarchy import AncestorPath, EntityMatch, HierarchyResolver, TreeShape
from .storage import LoreStorage
from .text import display_name, slugify

try:
    from importlib.metadata import PackageNotFoundError, version as _get_version
    __version__ = _get_version("aetheria-lore")
except PackageNotFoundError:
    __version__ = "0.1.0"  # Fallback if metadata unavailable

__all__ = [
    "AncestorPath",
    "EntityMatch",
    "HierarchyResolver",
    "LoreConfig",
    "LoreStorage",
    "TreeShape",
    "display_name",
    "format_alignment",
    "load_config",
    "slugify",
]
