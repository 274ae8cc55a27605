"""Arena holding the favorites hierarchy.

Every entity lives in one flat table keyed by its id. Parent and child links
are ids into that table, and only this class changes them, so a child always
points back at the group listing it and no entity is reachable twice.
"""

from typing import Dict, Iterator, List, Optional, Tuple, Union

from .bookmarkable import Bookmarkable, Group, sort_bookmarkables

EntityRef = Union[Bookmarkable, str]


class BookmarkTree:
    """A forest of bookmarkables with consistent parent/child references."""

    def __init__(self):
        self.entries: Dict[str, Bookmarkable] = {}
        self.root_ids: List[str] = []

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Bookmarkable):
            return self.entries.get(item.id) is item
        return item in self.entries

    def __iter__(self) -> Iterator[Bookmarkable]:
        for entity, _ in self.walk():
            yield entity

    def get(self, entity_id: str) -> Optional[Bookmarkable]:
        return self.entries.get(entity_id)

    # ============== Navigation ==============

    def roots(self) -> List[Bookmarkable]:
        """Top-level entities in insertion order."""
        return [self.entries[entity_id] for entity_id in self.root_ids]

    def children(self, group: Optional[Group] = None) -> List[Bookmarkable]:
        """Immediate children of ``group`` (or the roots) in insertion order."""
        if group is None:
            return self.roots()
        return [self.entries[child_id] for child_id in group.child_ids]

    def parent(self, entity: Bookmarkable) -> Optional[Group]:
        if entity.parent_id is None or entity not in self:
            return None
        parent = self.entries.get(entity.parent_id)
        return parent if isinstance(parent, Group) else None

    def ancestors(self, entity: Bookmarkable) -> List[Group]:
        """Ancestor groups of ``entity``, outermost first."""
        chain = []
        current = self.parent(entity)
        while current is not None:
            chain.append(current)
            current = self.parent(current)
        chain.reverse()
        return chain

    def breadcrumb(self, entity: Bookmarkable) -> Optional[str]:
        """Ancestor labels joined by '/', or None for a root entity."""
        labels = [group.label for group in self.ancestors(entity)]
        return "/".join(labels) if labels else None

    def walk(
        self, group: Optional[Group] = None
    ) -> Iterator[Tuple[Bookmarkable, Tuple[Group, ...]]]:
        """Depth-first walk yielding each entity with its ancestor groups.

        Ancestors are relative to the walk's starting point.
        """
        stack = [(child, ()) for child in reversed(self.children(group))]
        while stack:
            entity, ancestors = stack.pop()
            yield entity, ancestors
            if isinstance(entity, Group):
                path = ancestors + (entity,)
                for child in reversed(self.children(entity)):
                    stack.append((child, path))

    def descendants(self, group: Group) -> List[Bookmarkable]:
        return [entity for entity, _ in self.walk(group)]

    def is_descendant(self, entity: Bookmarkable, ancestor: Group) -> bool:
        return any(group is ancestor for group in self.ancestors(entity))

    def bookmarks_under(self, group: Group) -> List[Bookmarkable]:
        """Every file and folder favorite below ``group``.

        Depth-first, a group's own favorites before those of its sub-groups,
        each level in display order.
        """
        bookmarks = []
        children = sort_bookmarkables(self.children(group))
        bookmarks.extend(child for child in children if not child.is_group)
        for child in children:
            if isinstance(child, Group):
                bookmarks.extend(self.bookmarks_under(child))
        return bookmarks

    # ============== Mutation ==============

    def insert(self, entity: Bookmarkable, group: Optional[Group] = None):
        """Add a new entity to the tree, at the root or under ``group``."""
        if entity.id in self.entries:
            raise ValueError(f"'{entity.label}' is already in the favorites tree")
        if isinstance(entity, Group) and entity.child_ids:
            raise ValueError(f"Group '{entity.label}' must be empty when inserted")
        self._check_parent(group)
        self.entries[entity.id] = entity
        self._link(entity, group)

    def can_move(self, entity: Bookmarkable, group: Optional[Group]) -> bool:
        """True when moving ``entity`` under ``group`` keeps the tree a forest."""
        if entity not in self:
            return False
        if group is None:
            return entity.parent_id is not None
        if group not in self or not isinstance(group, Group):
            return False
        if group.id == entity.parent_id or group is entity:
            return False
        # A group cannot move below itself
        return not (isinstance(entity, Group) and self.is_descendant(group, entity))

    def move(self, entity: Bookmarkable, group: Optional[Group] = None):
        """Re-attach ``entity`` under ``group`` (or the root) in one step."""
        if not self.can_move(entity, group):
            target = group.label if group is not None else "the top level"
            raise ValueError(f"Cannot move '{entity.label}' to {target}")
        self._unlink(entity)
        self._link(entity, group)

    def remove(self, entity: Bookmarkable) -> List[Bookmarkable]:
        """Remove ``entity`` and everything below it; returns the removed entities."""
        if entity not in self:
            return []
        removed = [entity]
        if isinstance(entity, Group):
            removed.extend(self.descendants(entity))
        self._unlink(entity)
        # Removed entities keep no links, so they can be added again
        for item in removed:
            del self.entries[item.id]
            item.parent_id = None
            if isinstance(item, Group):
                item.child_ids = []
        return removed

    def _check_parent(self, group: Optional[Group]):
        if group is None:
            return
        if not isinstance(group, Group):
            raise ValueError(f"'{group.label}' is not a group")
        if group not in self:
            raise ValueError(f"Group '{group.label}' is not in the favorites tree")

    def _link(self, entity: Bookmarkable, group: Optional[Group]):
        if group is None:
            self.root_ids.append(entity.id)
            entity.parent_id = None
        else:
            group.child_ids.append(entity.id)
            entity.parent_id = group.id

    def _unlink(self, entity: Bookmarkable):
        parent = self.parent(entity)
        siblings = parent.child_ids if parent is not None else self.root_ids
        if entity.id in siblings:
            siblings.remove(entity.id)
        entity.parent_id = None
