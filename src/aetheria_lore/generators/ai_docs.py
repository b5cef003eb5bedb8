"""
AI-oriented Markdown documentation generator.

Writes the lore data as plain Markdown that language models can read in one
pass, and that the MCP ``get_aetheria_page`` tool serves:

    <output>/index.md                 master sitemap
    <output>/all-<type>.md            every entity of a data type
    <output>/<type>/<slug>.md         one page per entity
    <output>/cross-references.md      hierarchies, locations, shared names
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from ..alignment import format_alignment
from ..hierarchy import EntityMatch, HierarchyError, HierarchyResolver
from ..storage import LoreStorage, LoreStorageError
from ..text import capitalize, display_name, truncate
from .report import GenerationReport, assign_filenames

logger = logging.getLogger("aetheria-lore.generators")

# Attributes rendered in their own section rather than as basic information
SECTION_KEYS = {"name", "description", "alignment", "races", "location", "background"}


@dataclass
class _Dataset:
    data_type: str
    tree: Mapping[str, Any]
    resolver: HierarchyResolver
    entities: list[EntityMatch]
    filenames: dict[tuple[str, ...], str]

    @property
    def title(self) -> str:
        return display_name(self.data_type)

    @property
    def overview(self) -> str:
        return f"all-{self.data_type}.md"


def _as_number(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    try:
        return float(str(value).rstrip("%"))
    except ValueError:
        return 0.0


def sorted_demographics(races: Mapping[str, Any]) -> list[tuple[str, Any]]:
    """Races ordered by population share, largest first; ties keep file order."""
    return sorted(races.items(), key=lambda item: _as_number(item[1]), reverse=True)


class AIDocsGenerator:
    """
    Writes consolidated Markdown reference pages for AI agents.

    Attributes:
        storage: Lore storage
        output_dir: Directory the pages are written to
        location_type: Data type searched when an entity names a ``location``
    """

    def __init__(
        self,
        storage: LoreStorage,
        output_dir: Path,
        location_type: str = "regions",
    ) -> None:
        self.storage = storage
        self.output_dir = output_dir
        self.location_type = location_type

    def generate(self, clean: bool = True) -> GenerationReport:
        """
        Write every AI documentation page.

        Args:
            clean: Remove the output directory first

        Returns:
            GenerationReport listing the written pages
        """
        logger.info(f"🤖 Generating AI documentation in {self.output_dir}")
        if clean and self.output_dir.exists():
            shutil.rmtree(self.output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        report = GenerationReport(output_dir=self.output_dir)
        datasets = self._load_datasets(report)
        locations = next((d for d in datasets if d.data_type == self.location_type), None)

        report.write("index.md", self._master_index(datasets))
        for dataset in datasets:
            report.write(dataset.overview, self._overview(dataset))
            for match in dataset.entities:
                report.write(
                    f"{dataset.data_type}/{dataset.filenames[match.full_path]}",
                    self._entity_page(dataset, match, locations),
                )
        report.write("cross-references.md", self._cross_references(datasets, report))

        logger.info(f"✅ AI documentation complete! {report.page_count} files written to {self.output_dir}")
        return report

    def _load_datasets(self, report: GenerationReport) -> list[_Dataset]:
        datasets = []
        for data_type in self.storage.list_data_types():
            try:
                tree = self.storage.load_tree(data_type)
                if tree is None:
                    continue
                resolver = self.storage.resolver_for(data_type)
                entities = list(resolver.iter_entities(tree))
                collisions = resolver.find_collisions(tree)
            except (LoreStorageError, HierarchyError) as e:
                message = f"Skipped data type '{data_type}': {e}"
                logger.warning(f"⚠️ {message}")
                report.warnings.append(message)
                continue

            if collisions:
                report.collisions[data_type] = collisions
            datasets.append(_Dataset(
                data_type=data_type,
                tree=tree,
                resolver=resolver,
                entities=entities,
                filenames=assign_filenames(report, data_type, entities, ".md"),
            ))
        return datasets

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def _master_index(self, datasets: list[_Dataset]) -> str:
        content = (
            "# Aetheria World Reference - Master Index\n\n"
            "> **For AI Models**: This document is a complete sitemap of the Aetheria "
            "fantasy world. Use it to find which page holds the information you need.\n\n"
            "## Quick Navigation\n\n"
            "### Core Reference Documents\n"
        )
        for dataset in datasets:
            content += f"- **[All {dataset.title}]({dataset.overview})** - {len(dataset.entities)} entries\n"
        content += "- **[Cross-References](cross-references.md)** - Relationships between entities\n"

        content += "\n### Individual Topic Files\n"
        for dataset in datasets:
            content += f"\n#### {dataset.title}\n"
            for match in dataset.entities:
                summary = truncate(match.description, 100, placeholder=f"{capitalize(dataset.data_type)} details")
                link = f"{dataset.data_type}/{dataset.filenames[match.full_path]}"
                content += f"{'  ' * match.depth}- [{match.name}]({link}) - {summary}\n"
        return content

    def _overview(self, dataset: _Dataset) -> str:
        content = (
            f"# All {dataset.title}\n\n"
            f"> **Complete Reference**: every entry of {dataset.data_type.replace('_', ' ')} "
            f"in the Aetheria world ({len(dataset.entities)} entries).\n\n"
        )
        for match in dataset.entities:
            heading = "#" * min(match.depth + 2, 6)
            content += f"{heading} {match.name}\n\n"
            content += f"{match.description or 'No description available.'}\n\n"
            if "alignment" in match.data:
                content += f"- **Alignment**: {format_alignment(match.data['alignment'])}\n"
            content += f"- **Details**: [{match.name}]({dataset.data_type}/{dataset.filenames[match.full_path]})\n\n"
        return content

    def _entity_page(self, dataset: _Dataset, match: EntityMatch, locations: _Dataset | None) -> str:
        data = match.data
        children_key = dataset.resolver.children_key

        trail = [f"[All {dataset.title}](../{dataset.overview})"]
        for i in range(1, len(match.path) + 1):
            ancestor = match.path[:i]
            trail.append(f"[{self._name_at(dataset, ancestor)}]({dataset.filenames[ancestor]})")
        trail.append(match.name)

        content = (
            f"# {match.name}\n\n"
            f"> **Context**: Reference entry for {match.name} in {dataset.title.lower()} of the Aetheria world.\n\n"
            f"**Path**: {' > '.join(trail)}\n\n"
            "## Basic Information\n\n"
            f"- **ID**: {match.key}\n"
        )
        if match.path:
            parent = match.path
            content += f"- **Parent**: [{self._name_at(dataset, parent)}]({dataset.filenames[parent]})\n"
        if "alignment" in data:
            content += f"- **Alignment**: {format_alignment(data['alignment'])}\n"
        for key, value in data.items():
            if key in SECTION_KEYS or key == children_key or value is None:
                continue
            content += f"- **{capitalize(key)}**: {self._inline(value)}\n"

        content += f"\n## Description\n\n{match.description or 'No description available.'}\n\n"

        if data.get("background"):
            content += f"## Background\n\n{data['background']}\n\n"

        races = data.get("races")
        if isinstance(races, Mapping) and races:
            content += f"## Demographics\n\nThe population of {match.name} consists of:\n\n"
            for race, share in sorted_demographics(races):
                content += f"- **{race}**: {share}% of the population\n"
            content += "\n"

        location = data.get("location")
        if isinstance(location, str) and location:
            content += "## Geographic Context\n\n" + self._location_context(match.name, location, locations) + "\n\n"

        direct = dataset.resolver.children(match)
        if direct:
            content += f"## Contains\n\n{match.name} contains the following entries:\n\n"
            for child in direct:
                summary = truncate(child.description, 80, placeholder="No description available.")
                content += f"- [{child.name}]({dataset.filenames[child.full_path]}) - {summary}\n"
            content += "\n"

        content += (
            "## Related Information\n\n"
            f"- **All {dataset.title}**: [{dataset.title}](../{dataset.overview})\n"
            "- **Cross-References**: [Relationships](../cross-references.md)\n"
        )
        return content

    def _location_context(self, name: str, location: str, locations: _Dataset | None) -> str:
        found = None
        if locations is not None:
            found = locations.resolver.find(locations.tree, location)
        if found is None:
            return f"{name} is associated with {location}. Location details: Unknown."
        link = f"../{locations.data_type}/{locations.filenames[found.full_path]}"
        described = found.description or "a location in Aetheria"
        return f"{name} is associated with [{found.name}]({link}), which is {described}"

    def _cross_references(self, datasets: list[_Dataset], report: GenerationReport) -> str:
        content = (
            "# Aetheria - Cross-References and Relationships\n\n"
            "> **Relationship Mapping**: how the entities of Aetheria nest inside "
            "one another and where they are located.\n\n"
            "## Hierarchies\n\n"
        )
        for dataset in datasets:
            for match in dataset.entities:
                descendants = list(dataset.resolver.descendants(match))
                if descendants:
                    content += f"**{match.name}** ({dataset.data_type}) contains:\n"
                    content += "".join(f"- {name}\n" for name in descendants)
                    content += "\n"

        content += "## Locations\n\n"
        for dataset in datasets:
            for match in dataset.entities:
                location = match.data.get("location")
                if isinstance(location, str) and location:
                    content += f"- **{match.name}** is associated with **{location}**\n"

        content += "\n## Shared Names\n\n"
        if not report.collisions:
            content += "No names are shared between entities.\n"
        for data_type, collisions in report.collisions.items():
            for collision in collisions:
                paths = ", ".join("/".join(path) for path in collision.paths)
                content += f"- **{collision.name}** ({data_type}): {paths}\n"
        return content

    @staticmethod
    def _name_at(dataset: _Dataset, full_path: tuple[str, ...]) -> str:
        for match in dataset.entities:
            if match.full_path == full_path:
                return match.name
        return full_path[-1]

    @staticmethod
    def _inline(value: Any) -> str:
        if isinstance(value, list):
            return ", ".join(str(item) for item in value)
        if isinstance(value, Mapping):
            return ", ".join(f"{k}: {v}" for k, v in value.items())
        return str(value)


__all__ = ["AIDocsGenerator", "sorted_demographics"]
