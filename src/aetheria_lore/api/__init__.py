"""
HTTP API for browsing and querying the Aetheria lore.

Public API:
- LoreHTTPServer: Starlette app over a LoreStorage
- create_server(): Build a server from configuration
"""

from .server import LoreHTTPServer, create_server

__all__ = ["LoreHTTPServer", "create_server"]
