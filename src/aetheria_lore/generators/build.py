"""
Build entry point: writes the static site and the AI documentation.
"""

import logging

from ..config import configure_logging, load_config
from ..storage import LoreStorage
from ..templates import ContentRenderer
from .ai_docs import AIDocsGenerator
from .site import StaticSiteGenerator

logger = logging.getLogger("aetheria-lore.generators")


def main() -> None:
    """Generate ``<output_dir>/site`` and the AI pages from the configured content."""
    config = load_config()
    configure_logging(config.log_level)

    storage = LoreStorage(config)
    renderer = ContentRenderer(config.templates_dir)

    site = StaticSiteGenerator(
        storage,
        config.output_dir / "site",
        renderer=renderer,
        site_url=config.site_url,
    ).generate()
    ai_docs = AIDocsGenerator(storage, config.resolved_pages_dir).generate()

    for report in (site, ai_docs):
        for warning in report.warnings:
            logger.warning(f"⚠️ {warning}")
    logger.info(f"🏁 Build finished: {site.page_count} site files, {ai_docs.page_count} AI pages")


if __name__ == "__main__":
    main()
