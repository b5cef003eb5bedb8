"""
Name and key normalization helpers.

Both the resolver and the renderers slugify the same names independently,
so every function here is pure and must stay byte-for-byte stable.
"""

import re

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Derive a URL-safe token from a name or key.

    Lower-cases the text, collapses every run of characters outside
    ``[a-z0-9]`` to a single hyphen and strips hyphens from both ends.
    Idempotent: ``slugify(slugify(x)) == slugify(x)``.

    Args:
        text: Display name or key

    Returns:
        Slug, possibly empty if the text has no ASCII letters or digits

    Example:
        >>> slugify("Valora Iceclaw")
        'valora-iceclaw'
        >>> slugify("  Fire & Ice__Magic!  ")
        'fire-ice-magic'
    """
    return _NON_SLUG.sub("-", text.lower()).strip("-")


def display_name(slug: str) -> str:
    """Turn a key or tag into a title-cased label ("fire_magic" -> "Fire Magic")."""
    words = re.split(r"[_\-\s]+", slug.strip())
    return " ".join(word[:1].upper() + word[1:] for word in words if word)


def capitalize(text: str) -> str:
    """Upper-case the first character and replace underscores with spaces."""
    if not text:
        return text
    return text[0].upper() + text[1:].replace("_", " ")


def truncate(text: str | None, limit: int, placeholder: str = "") -> str:
    """Cut text to ``limit`` characters, appending an ellipsis when shortened."""
    if not text:
        return placeholder
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


__all__ = ["slugify", "display_name", "capitalize", "truncate"]
