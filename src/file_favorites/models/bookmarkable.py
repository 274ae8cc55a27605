"""Bookmarkable entities: file favorites, folder favorites and groups."""

import functools
import locale
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, ClassVar, Iterable, List, Optional

from ..utils.file_matching import GlobMatcher, Opener, match_files

if TYPE_CHECKING:
    from .tree import BookmarkTree

logger = logging.getLogger(__name__)

OPEN_RESOURCE_COMMAND = "open_resource"


def new_id() -> str:
    """Generate a stable identifier for a new entity."""
    return uuid.uuid4().hex


class BookmarkKind(Enum):
    """Discriminant of the three bookmarkable variants."""

    GROUP = "group"
    FILE = "file"
    FOLDER = "folder"


@dataclass
class DisplayItem:
    """Everything a tree view needs to render one entity."""

    label: str
    target_id: str
    collapsible: bool = False
    icon: str = "file"
    tooltip: Optional[str] = None
    description: Optional[str] = None
    command: Optional[str] = None  # Action run when the item is activated
    context: Optional[str] = None  # Selects the context menu entries


@dataclass
class ActivationResult:
    """Outcome of activating one or more favorites."""

    opened: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def merge(self, other: "ActivationResult") -> "ActivationResult":
        self.opened.extend(other.opened)
        self.errors.extend(other.errors)
        return self


@dataclass(eq=False)
class Bookmarkable:
    """Anything that can be placed in the favorites hierarchy.

    Entities are compared by identity. ``parent_id`` is a weak reference into
    the owning ``BookmarkTree``; only the tree may change it.
    """

    kind: ClassVar[BookmarkKind]

    label: str = ""
    id: str = field(default_factory=new_id)
    parent_id: Optional[str] = None
    description: Optional[str] = None  # Ancestor breadcrumb, never persisted

    @property
    def is_group(self) -> bool:
        return self.kind is BookmarkKind.GROUP

    @property
    def detail(self) -> Optional[str]:
        """Secondary text shown under the label in pickers."""
        return None

    def default_label(self) -> str:
        """Label used when none was given: the resource's file name."""
        path = getattr(self, "resource_path", "")
        return PurePath(path).name or path or "Untitled"

    def compare_to(self, other: "Bookmarkable") -> int:
        """Compare with another entity using ``bookmarkable_comparator``."""
        return bookmarkable_comparator(self, other)

    def to_display_item(self, tree: Optional["BookmarkTree"] = None) -> DisplayItem:
        raise NotImplementedError

    def activate(
        self,
        opener: Opener,
        tree: Optional["BookmarkTree"] = None,
        matcher: GlobMatcher = match_files,
    ) -> ActivationResult:
        raise NotImplementedError

    def location(self, tree: Optional["BookmarkTree"] = None) -> List[str]:
        raise NotImplementedError


@dataclass(eq=False)
class FileBookmark(Bookmarkable):
    """A favorite pointing at a single file."""

    kind: ClassVar[BookmarkKind] = BookmarkKind.FILE

    resource_path: str = ""

    @property
    def detail(self) -> Optional[str]:
        return self.resource_path if self.label != self.resource_path else None

    def to_display_item(self, tree: Optional["BookmarkTree"] = None) -> DisplayItem:
        return DisplayItem(
            label=self.label,
            target_id=self.id,
            collapsible=False,
            icon="file",
            tooltip=self.resource_path,
            command=OPEN_RESOURCE_COMMAND,
            context="file",
        )

    def activate(
        self,
        opener: Opener,
        tree: Optional["BookmarkTree"] = None,
        matcher: GlobMatcher = match_files,
    ) -> ActivationResult:
        result = ActivationResult()
        if not Path(self.resource_path).is_file():
            result.errors.append(f"{self.label}: file not found: {self.resource_path}")
            return result
        _open_path(opener, self.resource_path, self.label, result)
        return result

    def location(self, tree: Optional["BookmarkTree"] = None) -> List[str]:
        return [self.resource_path]


@dataclass(eq=False)
class FolderBookmark(Bookmarkable):
    """A favorite pointing at a directory, opened through a glob filter."""

    kind: ClassVar[BookmarkKind] = BookmarkKind.FOLDER
    DEFAULT_FILTER: ClassVar[str] = "*"

    resource_path: str = ""
    filter: str = DEFAULT_FILTER

    @property
    def detail(self) -> Optional[str]:
        if self.label != self.resource_path:
            return f"{self.resource_path} [ {self.filter} ]"
        return f"[ {self.filter} ]"

    def to_display_item(self, tree: Optional["BookmarkTree"] = None) -> DisplayItem:
        return DisplayItem(
            label=self.label,
            target_id=self.id,
            collapsible=False,
            icon="files",
            tooltip=self.resource_path,
            description=f"[ {self.filter} ]",
            command=OPEN_RESOURCE_COMMAND,
            context="folder",
        )

    def activate(
        self,
        opener: Opener,
        tree: Optional["BookmarkTree"] = None,
        matcher: GlobMatcher = match_files,
    ) -> ActivationResult:
        result = ActivationResult()
        if not Path(self.resource_path).is_dir():
            result.errors.append(f"{self.label}: folder not found: {self.resource_path}")
            return result

        try:
            matches = matcher(self.resource_path, self.filter)
        except (ValueError, NotImplementedError, OSError) as e:
            result.errors.append(f"{self.label}: invalid filter '{self.filter}': {e}")
            return result

        if not matches:
            result.errors.append(
                f"{self.label}: no files match '{self.filter}' in {self.resource_path}"
            )
            return result

        for path in matches:
            _open_path(opener, path, self.label, result)
        return result

    def location(self, tree: Optional["BookmarkTree"] = None) -> List[str]:
        return [self.resource_path]


@dataclass(eq=False)
class Group(Bookmarkable):
    """A named container of other bookmarkables, possibly nested."""

    kind: ClassVar[BookmarkKind] = BookmarkKind.GROUP
    DEFAULT_LABEL: ClassVar[str] = "New group"

    child_ids: List[str] = field(default_factory=list)

    def default_label(self) -> str:
        return self.DEFAULT_LABEL

    def to_display_item(self, tree: Optional["BookmarkTree"] = None) -> DisplayItem:
        context = "group"
        if tree is not None and not tree.bookmarks_under(self):
            context = "group-empty"
        return DisplayItem(
            label=self.label,
            target_id=self.id,
            collapsible=True,
            icon="folder",
            context=context,
        )

    def activate(
        self,
        opener: Opener,
        tree: Optional["BookmarkTree"] = None,
        matcher: GlobMatcher = match_files,
    ) -> ActivationResult:
        result = ActivationResult()
        for bookmark in _require_tree(self, tree).bookmarks_under(self):
            result.merge(bookmark.activate(opener, tree, matcher))
        return result

    def location(self, tree: Optional["BookmarkTree"] = None) -> List[str]:
        tree = _require_tree(self, tree)
        return [path for bookmark in tree.bookmarks_under(self) for path in bookmark.location(tree)]


def _require_tree(group: Group, tree: Optional["BookmarkTree"]) -> "BookmarkTree":
    if tree is None:
        raise ValueError(f"Group '{group.label}' needs its tree to resolve its children")
    return tree


def _open_path(opener: Opener, path: str, label: str, result: ActivationResult):
    """Open one path, recording the outcome instead of raising."""
    try:
        opener(path)
    except Exception as e:
        logger.warning("Could not open %s for favorite '%s': %s", path, label, e)
        result.errors.append(f"{label}: could not open {path}: {e}")
    else:
        result.opened.append(path)


# ============== Ordering ==============


def label_comparator(a: Bookmarkable, b: Bookmarkable) -> int:
    """Compare two entities by label only, using the active collation locale."""
    key_a = locale.strxfrm(a.label)
    key_b = locale.strxfrm(b.label)
    return (key_a > key_b) - (key_a < key_b)


def bookmarkable_comparator(a: Bookmarkable, b: Bookmarkable) -> int:
    """Groups sort before everything else, then entities sort by label."""
    if a.is_group != b.is_group:
        return -1 if a.is_group else 1
    return label_comparator(a, b)


def sort_bookmarkables(items: Iterable[Bookmarkable]) -> List[Bookmarkable]:
    """Sort for display: groups first, then by label."""
    return sorted(items, key=functools.cmp_to_key(bookmarkable_comparator))


def sort_by_label(items: Iterable[Bookmarkable]) -> List[Bookmarkable]:
    return sorted(items, key=functools.cmp_to_key(label_comparator))
