"""
Template rendering for entity content.

Entity pages and generated content are rendered from Jinja2 templates kept
in the templates directory. When a project ships no template for a content
type, a built-in fallback is used.
"""

import logging
from pathlib import Path
from typing import Any, Mapping

import markdown
from jinja2 import (
    ChainableUndefined,
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    TemplateNotFound,
)

from .alignment import format_alignment
from .text import capitalize, display_name, slugify

logger = logging.getLogger("aetheria-lore")

BUILTIN_PREFIX = "builtin/"

MARKDOWN_EXTENSIONS = ["tables", "fenced_code", "toc"]

BUILTIN_TEMPLATES: dict[str, str] = {
    "creature_stat_block": """# {{ name }}
*{{ type_display }}*

## Description
{{ description }}
{% if challenge_rating %}
**Challenge Rating:** {{ challenge_rating }}
{% endif %}{% if alignment %}
**Alignment:** {{ alignment_display }}
{% endif %}{% if abilities %}
## Abilities
{% for ability in abilities %}- {{ ability }}
{% endfor %}{% endif %}
---
*Generated from Aetheria data*
""",
    "character_class_guide": """# {{ name }} Class Guide

## Description
{{ description }}
{% if has_alternative_names %}
**Alternative Names:**
{{ alternative_names_display }}
{% endif %}{% if weapons_armor %}
**Typical Equipment:** {{ weapons_armor }}
{% endif %}
---
*Generated from Aetheria class data*
""",
    "magic_school_description": """# {{ name }}

{{ description }}
{% if has_focus %}
## Focus
{{ focus_display }}
{% endif %}{% if opposing_element %}
**Opposing Element:** {{ opposing_element }}
{% endif %}{% if regulation %}
**Regulation:** {{ regulation }}
{% endif %}
---
*Generated from Aetheria magic data*
""",
    "character_profile": """# {{ name }}

- **Race:** {{ race or "Unknown" }}
- **Class:** {{ class or "Unknown" }}
- **Alignment:** {{ alignment_display }}
- **Location:** {{ location or "Unknown" }}

{{ description }}
{% if background %}
## Background
{{ background }}
{% endif %}""",
    "default": """# {{ name }}

{{ description }}

---
*Generated content*
""",
}


def render_markdown(text: str) -> str:
    """Convert Markdown to HTML with table and fenced-code support."""
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)


def template_context(entity: Mapping[str, Any], **extra: Any) -> dict[str, Any]:
    """Build the render context for an entity.

    Adds display helpers for list-valued fields so templates stay simple:
    ``has_<field>`` flags, ``<field>_display`` bullet lists, ``type_display``
    and ``alignment_display``.
    """
    context: dict[str, Any] = dict(entity)

    for list_field in ("alternative_names", "damage_type", "focus"):
        value = entity.get(list_field)
        is_list = isinstance(value, list) and len(value) > 0
        context[f"has_{list_field}"] = is_list
        context[f"{list_field}_display"] = "\n".join(f"- {item}" for item in value) if is_list else ""

    entity_type = entity.get("type")
    context["type_display"] = ", ".join(map(str, entity_type)) if isinstance(entity_type, list) else (entity_type or "")
    context["alignment_display"] = format_alignment(entity.get("alignment"))

    context.update(extra)
    return context


class ContentRenderer:
    """Renders lore entities through Jinja2 templates.

    Templates in ``templates_dir`` take precedence over the built-in ones.
    Missing values render as empty strings, as they would in a logic-less
    template.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        loaders = []
        if templates_dir is not None and templates_dir.is_dir():
            loaders.append(FileSystemLoader(str(templates_dir)))
        loaders.append(DictLoader({
            f"{BUILTIN_PREFIX}{name}.md": source for name, source in BUILTIN_TEMPLATES.items()
        }))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            undefined=ChainableUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self.env.filters["slugify"] = slugify
        self.env.filters["display_name"] = display_name
        self.env.filters["capitalize_key"] = capitalize
        self.env.filters["alignment"] = format_alignment

    def render(self, names: list[str], entity: Mapping[str, Any], **extra: Any) -> str:
        """Render the first template found among ``names``.

        Raises:
            TemplateNotFound: If none of the templates exist
        """
        template = self.env.select_template(names)
        logger.debug(f"Rendering template {template.name}")
        return template.render(template_context(entity, **extra))

    def render_entity(self, data_type: str, entity: Mapping[str, Any]) -> str:
        """Render an entity page body for a data type.

        Looks for ``<type>.md``, the singular ``<type minus trailing s>.md``
        and ``generic_entity.md``, in that order.

        Raises:
            TemplateNotFound: If the project has no suitable template
        """
        names = [f"{data_type}.md"]
        if data_type.endswith("s"):
            names.append(f"{data_type[:-1]}.md")
        names.append("generic_entity.md")
        return self.render(names, entity)

    def render_generation(self, content_type: str, entity: Mapping[str, Any], **extra: Any) -> str:
        """Render a content-generation type, falling back to built-in templates."""
        names = [
            f"{content_type}.md",
            f"{BUILTIN_PREFIX}{content_type}.md",
            f"{BUILTIN_PREFIX}default.md",
        ]
        return self.render(names, entity, **extra)

    def has_template(self, name: str) -> bool:
        try:
            self.env.get_template(f"{name.removesuffix('.md')}.md")
        except TemplateNotFound:
            return False
        return True


__all__ = [
    "BUILTIN_TEMPLATES",
    "ContentRenderer",
    "render_markdown",
    "template_context",
    "TemplateNotFound",
]
