"""
Generators that publish the lore as files.

- StaticSiteGenerator: browsable HTML site with sitemap
- AIDocsGenerator: consolidated Markdown pages for AI agents
"""

from .ai_docs import AIDocsGenerator
from .report import GenerationReport
from .site import StaticSiteGenerator

__all__ = ["AIDocsGenerator", "GenerationReport", "StaticSiteGenerator"]
