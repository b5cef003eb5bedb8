"""
Entity resolver for nested lore trees.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from ..text import slugify
from .errors import CycleDetectedError, MalformedDataError
from .models import AncestorPath, EntityMatch, NameCollision, TreeShape


class HierarchyResolver:
    """Locates entities by key or display name inside a nested lore tree.

    A tree is a mapping of key -> entity, where every entity is itself a
    mapping that may hold a children container (a mapping of the same
    shape) under ``children_key``. All traversals are depth-first,
    pre-order, following the insertion order of each mapping.

    The resolver holds no per-call state and never mutates the trees it is
    given, so a single loaded tree and a single resolver can be shared by
    concurrent callers.

    Example:
        >>> tree = {"kingdoms": {"name": "Kingdoms", "children": {
        ...     "north_reach": {"name": "North Reach"}}}}
        >>> resolver = HierarchyResolver()
        >>> resolver.find(tree, "north reach").key
        'north_reach'
        >>> list(resolver.ancestor_path(tree, "north_reach"))
        ['kingdoms']
    """

    def __init__(
        self,
        children_key: str | TreeShape = TreeShape.CHILDREN,
        max_depth: int = 64,
    ) -> None:
        """Initialize the resolver.

        Args:
            children_key: Field name of the children container for this dataset
            max_depth: Deepest nesting accepted before the tree is rejected
        """
        if isinstance(children_key, TreeShape):
            children_key = children_key.value
        if not children_key:
            raise ValueError("children_key must be a non-empty string")
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self.children_key = children_key
        self.max_depth = max_depth

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find(self, tree: Mapping[str, Any], query: str, by_slug: bool = False) -> EntityMatch | None:
        """Find the first entity whose key or name matches the query.

        Matching is case-insensitive. When several entities match, the one
        reached first in pre-order wins; no error is raised for ambiguity.

        Args:
            tree: Root mapping of key -> entity
            query: Key or display name to look for
            by_slug: Compare slugified forms instead of lower-cased forms

        Returns:
            EntityMatch for the first hit, None if nothing matches

        Raises:
            MalformedDataError: If a visited node is not a mapping
        """
        needle = self._normalize(query, by_slug)
        if not needle:
            return None
        for match in self._walk(tree, (), []):
            if self._matches(match, needle, by_slug):
                return match
        return None

    def ancestor_path(self, tree: Mapping[str, Any], query: str, by_slug: bool = False) -> AncestorPath:
        """Return the breadcrumb keys leading to the first matching entity.

        The matched entity's own key is excluded, so a root-level entity has
        an empty path. A query that matches nothing also yields an empty
        path, with ``found`` set to False.

        Args:
            tree: Root mapping of key -> entity
            query: Key or display name to look for
            by_slug: Compare slugified forms instead of lower-cased forms

        Returns:
            AncestorPath of container keys from the root
        """
        match = self.find(tree, query, by_slug=by_slug)
        if match is None:
            return AncestorPath.not_found()
        return AncestorPath(keys=match.path, found=True)

    def descendants(self, entity: EntityMatch | Mapping[str, Any]) -> Iterator[str]:
        """Yield the name of every entity nested beneath ``entity``.

        Names come from each child's ``name`` field, falling back to its
        key, in pre-order. The iterator is single-pass.

        Args:
            entity: An EntityMatch or a raw entity mapping

        Yields:
            Display names of all descendants

        Raises:
            MalformedDataError: If the entity or a nested node is not a mapping
        """
        if isinstance(entity, EntityMatch):
            data: Any = entity.data
            path = entity.full_path
        else:
            data = entity
            path = ()

        if not isinstance(data, Mapping):
            raise MalformedDataError(
                f"Expected an entity mapping, got {type(data).__name__}",
                path=list(path),
            )

        children = self._children_of(data, path)
        if children is None:
            return
        for match in self._walk(children, path, [id(data)]):
            yield match.name

    def iter_entities(self, tree: Mapping[str, Any]) -> Iterator[EntityMatch]:
        """Walk every entity of the tree in pre-order."""
        return self._walk(tree, (), [])

    def root_keys(self, tree: Mapping[str, Any]) -> list[str]:
        """Return the keys of the tree's root container in insertion order."""
        if not isinstance(tree, Mapping):
            raise MalformedDataError(
                f"Expected a mapping at the tree root, got {type(tree).__name__}"
            )
        return [str(key) for key in tree]

    def children(self, entity: EntityMatch | Mapping[str, Any]) -> list[EntityMatch]:
        """Return the direct children of an entity, without recursing."""
        if isinstance(entity, EntityMatch):
            data: Any = entity.data
            path = entity.full_path
        else:
            data = entity
            path = ()
        if not isinstance(data, Mapping):
            raise MalformedDataError(
                f"Expected an entity mapping, got {type(data).__name__}",
                path=list(path),
            )
        container = self._children_of(data, path)
        if container is None:
            return []
        result = []
        for key, value in container.items():
            child_path = (*path, str(key))
            self._check_entity(value, child_path)
            result.append(EntityMatch(key=str(key), data=dict(value), path=path))
        return result

    def find_collisions(self, tree: Mapping[str, Any]) -> list[NameCollision]:
        """Report lookup terms shared by more than one entity.

        A term is an entity's key or display name, lower-cased. Entities
        sharing a term are ambiguous for ``find``, which silently returns the
        first. This pass only reports them; it does not change lookup.

        Returns:
            One NameCollision per shared term, in order of first occurrence
        """
        seen: dict[str, list[tuple[str, ...]]] = {}
        for match in self._walk(tree, (), []):
            terms = {match.key.lower(), match.name.lower()}
            for term in sorted(terms):
                seen.setdefault(term, []).append(match.full_path)

        return [
            NameCollision(name=term, paths=paths)
            for term, paths in seen.items()
            if len(paths) > 1
        ]

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _walk(
        self,
        container: Any,
        path: tuple[str, ...],
        stack: list[int],
    ) -> Iterator[EntityMatch]:
        """Pre-order traversal of a container and everything beneath it.

        ``stack`` holds the ids of the mappings on the current path; meeting
        one of them again means the tree loops back on itself.
        """
        if not isinstance(container, Mapping):
            raise MalformedDataError(
                f"Expected a mapping of entities, got {type(container).__name__}",
                path=list(path),
            )
        if len(path) > self.max_depth:
            raise CycleDetectedError(
                f"Tree is nested deeper than {self.max_depth} levels",
                path=list(path),
                details={"max_depth": self.max_depth},
            )
        if id(container) in stack:
            raise CycleDetectedError(
                "Tree refers back to one of its own ancestors",
                path=list(path),
            )

        stack.append(id(container))
        try:
            for key, value in container.items():
                key = str(key)
                entity_path = (*path, key)
                self._check_entity(value, entity_path)

                yield EntityMatch(key=key, data=dict(value), path=path)

                children = self._children_of(value, entity_path)
                if children is not None:
                    if id(value) in stack:
                        raise CycleDetectedError(
                            "Tree refers back to one of its own ancestors",
                            path=list(entity_path),
                        )
                    stack.append(id(value))
                    try:
                        yield from self._walk(children, entity_path, stack)
                    finally:
                        stack.pop()
        finally:
            stack.pop()

    def _children_of(self, entity: Mapping[str, Any], path: tuple[str, ...]) -> Mapping[str, Any] | None:
        children = entity.get(self.children_key)
        # An empty YAML key parses to None
        if children is None:
            return None
        if not isinstance(children, Mapping):
            raise MalformedDataError(
                f"'{self.children_key}' must be a mapping, got {type(children).__name__}",
                path=list(path),
            )
        return children

    @staticmethod
    def _check_entity(value: Any, path: tuple[str, ...]) -> None:
        if not isinstance(value, Mapping):
            raise MalformedDataError(
                f"Entity '{path[-1]}' must be a mapping, got {type(value).__name__}",
                path=list(path),
            )

    @staticmethod
    def _normalize(text: str, by_slug: bool) -> str:
        if not isinstance(text, str):
            return ""
        return slugify(text) if by_slug else text.lower()

    def _matches(self, match: EntityMatch, needle: str, by_slug: bool) -> bool:
        if self._normalize(match.key, by_slug) == needle:
            return True
        name = match.data.get("name")
        return isinstance(name, str) and self._normalize(name, by_slug) == needle
