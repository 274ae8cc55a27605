"""Entity models for the favorites hierarchy."""

from .bookmarkable import (
    ActivationResult,
    Bookmarkable,
    BookmarkKind,
    DisplayItem,
    FileBookmark,
    FolderBookmark,
    Group,
    bookmarkable_comparator,
    label_comparator,
    sort_bookmarkables,
    sort_by_label,
)
from .tree import BookmarkTree

__all__ = [
    "ActivationResult",
    "Bookmarkable",
    "BookmarkKind",
    "BookmarkTree",
    "DisplayItem",
    "FileBookmark",
    "FolderBookmark",
    "Group",
    "bookmarkable_comparator",
    "label_comparator",
    "sort_bookmarkables",
    "sort_by_label",
]
