"""
Result types for hierarchy resolution.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, overload


class TreeShape(str, Enum):
    """Known names of the children container across lore datasets."""
    CHILDREN = "children"
    REGIONS = "regions"
    SUBTYPES = "subtypes"


@dataclass(frozen=True)
class EntityMatch:
    """An entity located inside a lore tree.

    Attributes:
        key: Mapping key the entity is stored under in its parent container.
        data: Shallow copy of the entity mapping. Nested values are shared
            with the source tree and must not be mutated.
        path: Container keys from the root down to, excluding, ``key``.
    """
    key: str
    data: dict[str, Any]
    path: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        """Display name, falling back to the key."""
        name = self.data.get("name")
        return name if isinstance(name, str) and name else self.key

    @property
    def description(self) -> str | None:
        description = self.data.get("description")
        return description if isinstance(description, str) else None

    @property
    def depth(self) -> int:
        """Number of ancestors; 0 for root-level entities."""
        return len(self.path)

    @property
    def full_path(self) -> tuple[str, ...]:
        return (*self.path, self.key)


@dataclass(frozen=True)
class AncestorPath(Sequence[str]):
    """Breadcrumb keys for a query, tagged with whether the entity was found.

    Behaves as a read-only sequence of keys. ``found`` distinguishes an
    entity that sits at the root (found, empty path) from a query that
    matched nothing (not found, empty path).
    """
    keys: tuple[str, ...] = ()
    found: bool = False

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[str, ...]: ...

    def __getitem__(self, index):
        return self.keys[index]

    def __len__(self) -> int:
        return len(self.keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys)

    @classmethod
    def not_found(cls) -> "AncestorPath":
        return cls(keys=(), found=False)


@dataclass
class NameCollision:
    """A display name shared by more than one entity in a tree.

    Attributes:
        name: The colliding name, lower-cased.
        paths: Full key path of every entity carrying the name, in
            traversal order. The first one is what ``find`` returns.
    """
    name: str
    paths: list[tuple[str, ...]] = field(default_factory=list)


__all__ = [
    "TreeShape",
    "EntityMatch",
    "AncestorPath",
    "NameCollision",
]
