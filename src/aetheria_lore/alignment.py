"""
Four-axis alignment model and formatter.

Aetheria describes characters and creatures along four axes (ideology,
morality, methodology, temperament) instead of a single good/evil label.
Each axis carries a value and an optional modifier, e.g.
``{"value": "Order", "modifier": "Stewardship"}``.
"""

from typing import Any, Mapping

from pydantic import BaseModel, Field

AXES: tuple[str, ...] = ("ideology", "morality", "methodology", "temperament")


class AlignmentAxis(BaseModel):
    """One axis of an alignment.

    Attributes:
        value: Position on the axis (e.g. "Order")
        modifier: Optional qualifier shown in parentheses (e.g. "Stewardship")
        guidance: Optional role-play guidance, not part of the formatted string
    """
    value: str = Field(..., description="Position on the axis")
    modifier: str | None = Field(default=None, description="Qualifier for the value")
    guidance: str | None = Field(default=None, description="Role-play guidance")

    @property
    def display(self) -> str:
        if self.modifier:
            return f"{self.value} ({self.modifier})"
        return self.value


class Alignment(BaseModel):
    """A four-axis alignment. Any axis may be absent."""
    ideology: AlignmentAxis | None = None
    morality: AlignmentAxis | None = None
    methodology: AlignmentAxis | None = None
    temperament: AlignmentAxis | None = None

    def present_axes(self) -> list[tuple[str, AlignmentAxis]]:
        """Return (axis name, axis) pairs for present axes, in canonical order."""
        return [
            (axis, getattr(self, axis))
            for axis in AXES
            if getattr(self, axis) is not None
        ]


def _optional_text(value: Any) -> str | None:
    return None if value is None else str(value)


def _coerce(alignment: Any) -> Alignment | None:
    """Build an Alignment from raw data, or None if it is not a mapping.

    Axes without a value are left out.
    """
    if isinstance(alignment, Alignment):
        return alignment
    if not isinstance(alignment, Mapping):
        return None
    axes = {}
    for axis in AXES:
        raw = alignment.get(axis)
        if raw is None:
            continue
        if isinstance(raw, Mapping):
            if raw.get("value") is None:
                continue
            axes[axis] = AlignmentAxis(
                value=str(raw["value"]),
                modifier=_optional_text(raw.get("modifier")),
                guidance=_optional_text(raw.get("guidance")),
            )
        else:
            axes[axis] = AlignmentAxis(value=str(raw))
    return Alignment(**axes)


def format_alignment(
    alignment: Alignment | Mapping[str, Any] | str | None,
    separator: str = ", ",
    bold_labels: bool = False,
    fallback: str = "Unknown",
) -> str:
    """Render an alignment as a single line.

    Each present axis becomes ``Label: value`` or ``Label: value (modifier)``.
    Absent axes are left out entirely rather than rendered blank.

    Args:
        alignment: Alignment model, raw mapping, legacy plain string, or None
        separator: String placed between axes
        bold_labels: Wrap labels in Markdown bold (``**Ideology**: ...``)
        fallback: Returned when there is no alignment at all

    Returns:
        Formatted alignment string

    Example:
        >>> format_alignment({"ideology": {"value": "Order", "modifier": "Stewardship"},
        ...                   "temperament": {"value": "Aether"}})
        'Ideology: Order (Stewardship), Temperament: Aether'
    """
    if alignment is None:
        return fallback
    if isinstance(alignment, str):
        return alignment or fallback

    coerced = _coerce(alignment)
    if coerced is None:
        return fallback

    parts = []
    for axis, value in coerced.present_axes():
        label = axis.capitalize()
        if bold_labels:
            label = f"**{label}**"
        parts.append(f"{label}: {value.display}")

    if not parts:
        return fallback
    return separator.join(parts)


def alignment_record(alignment: Alignment | Mapping[str, Any] | None) -> list[dict[str, Any]]:
    """Structured form of an alignment: one dict per present axis."""
    coerced = None if alignment is None else _coerce(alignment)
    if coerced is None:
        return []
    return [
        {
            "axis": axis,
            "value": value.value,
            "modifier": value.modifier,
            "guidance": value.guidance,
            "display": value.display,
        }
        for axis, value in coerced.present_axes()
    ]


__all__ = [
    "AXES",
    "AlignmentAxis",
    "Alignment",
    "format_alignment",
    "alignment_record",
]
