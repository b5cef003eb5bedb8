"""
Hierarchical entity resolution for nested lore data.

Locates regions, creatures, organizations and other entities by key or
display name, and reconstructs their breadcrumb trails and descendants.
"""

from .errors import CycleDetectedError, HierarchyError, MalformedDataError
from .models import AncestorPath, EntityMatch, NameCollision, TreeShape
from .resolver import HierarchyResolver

__all__ = [
    "HierarchyResolver",
    "EntityMatch",
    "AncestorPath",
    "NameCollision",
    "TreeShape",
    "HierarchyError",
    "MalformedDataError",
    "CycleDetectedError",
]
