"""
Result of a generator run.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..hierarchy import EntityMatch, NameCollision
from ..text import slugify

logger = logging.getLogger("aetheria-lore.generators")


@dataclass
class GenerationReport:
    """What a generator wrote and what it noticed along the way.

    Attributes:
        output_dir: Directory the files were written to
        pages: Written files, relative to ``output_dir``, in write order
        warnings: Problems that did not stop the run (skipped data types,
            renamed duplicate files)
        collisions: Per data type, display names shared by several entities
    """
    output_dir: Path
    pages: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    collisions: dict[str, list[NameCollision]] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def write(self, relative: str, content: str) -> Path:
        """Write a file below ``output_dir`` and record it."""
        path = self.output_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        self.pages.append(relative)
        return path


def assign_filenames(
    report: GenerationReport,
    data_type: str,
    entities: list[EntityMatch],
    suffix: str,
) -> dict[tuple[str, ...], str]:
    """Map each entity to a unique ``<slug><suffix>`` file name within its data type.

    Slugs come from the display name. When two entities produce the same
    slug, later ones get a numeric suffix and a warning is recorded.
    """
    filenames: dict[tuple[str, ...], str] = {}
    used: set[str] = {"index"}
    for match in entities:
        base = slugify(match.name) or slugify(match.key) or "entity"
        subject = f"{data_type}: '{match.name}' at {'/'.join(match.full_path)}"
        filenames[match.full_path] = unique_name(report, used, base, subject, suffix)
    return filenames


def unique_name(report: GenerationReport, used: set[str], base: str, subject: str, suffix: str) -> str:
    """Claim a file name not yet in ``used``, numbering ``base`` if needed.

    A renamed file is logged and recorded as a report warning naming
    ``subject``.
    """
    slug = base
    counter = 2
    while slug in used:
        slug = f"{base}-{counter}"
        counter += 1
    if slug != base:
        message = f"{subject} written as {slug}{suffix}"
        logger.warning(f"⚠️ {message}")
        report.warnings.append(message)
    used.add(slug)
    return f"{slug}{suffix}"
