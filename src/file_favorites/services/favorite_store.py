"""Store owning the favorites tree and its persistence."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from ..models.bookmarkable import (
    Bookmarkable,
    Group,
    sort_bookmarkables,
    sort_by_label,
)
from ..models.tree import BookmarkTree
from ..utils.app_paths import (
    RESTORATION_FILE_NAME,
    get_backup_dir,
    get_data_dir,
    get_favorites_path,
    get_restoration_path,
)
from .document_storage import DocumentStorage, FavoritesError
from .favorites_reconciler import FavoritesReconciler
from .restoration_point import RestorationPoint

logger = logging.getLogger(__name__)


class StoreBusyError(FavoritesError):
    """A reload was requested while another one is still running."""


class StoreEventKind(Enum):
    LOADED = "loaded"
    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass(frozen=True)
class StoreEvent:
    """One logical change to the store, covering every entity it touched."""

    kind: StoreEventKind
    entities: Tuple[Bookmarkable, ...] = ()


# Type alias for store listeners
StoreListener = Callable[[StoreEvent], None]


class FavoriteStore:
    """The single gateway for reading and changing favorites.

    Every mutation is applied to the in-memory tree, written to storage and
    announced to listeners before the call returns. If the write fails the
    in-memory change stays applied and the error propagates; the next
    successful write brings the file back in line.

    Mutations, reloads and listings are serialized by one lock, so a listing
    never observes a half-applied change. Listeners are called while that
    lock is held.
    """

    def __init__(
        self,
        storage: DocumentStorage,
        reconciler: Optional[FavoritesReconciler] = None,
        restoration: Optional[RestorationPoint] = None,
    ):
        self.storage = storage
        self.reconciler = reconciler or FavoritesReconciler()
        if restoration is None:
            restoration_path = storage.path.with_name(RESTORATION_FILE_NAME)
            restoration = RestorationPoint(DocumentStorage(restoration_path))
        self.restoration = restoration

        self.last_repairs: List[str] = []
        self._tree = BookmarkTree()
        self._listeners: List[StoreListener] = []
        self._lock = threading.RLock()
        self._reloading = False
        self._synced_data: Optional[bytes] = None  # Content last read or written

    @classmethod
    def from_data_dir(cls, data_dir: Optional[Path] = None) -> "FavoriteStore":
        """Create a store using the standard file locations."""
        data_dir = data_dir or get_data_dir()
        storage = DocumentStorage(get_favorites_path(data_dir), get_backup_dir(data_dir))
        restoration = RestorationPoint(DocumentStorage(get_restoration_path(data_dir)))
        return cls(storage, restoration=restoration)

    @property
    def storage_path(self) -> Path:
        return self.storage.path

    @property
    def tree(self) -> BookmarkTree:
        return self._tree

    # ============== Notifications ==============

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener and return a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: StoreEventKind, entities: Iterable[Bookmarkable] = ()):
        event = StoreEvent(kind, tuple(entities))
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Favorites listener %r failed on %s", listener, kind.value)

    # ============== Loading ==============

    def load(self) -> List[str]:
        """Replace the in-memory tree with the content of the favorites file.

        A missing file loads as an empty tree. When the file needed repairs it
        is backed up and rewritten in the current shape before listeners hear
        about the load.

        Returns:
            Descriptions of the repairs made while loading

        Raises:
            FavoritesParseError: The file is unreadable; the previous tree is kept
            FavoritesStorageError: The file could not be read or rewritten
            StoreBusyError: Called again while a reload is running
        """
        with self._lock:
            if self._reloading:
                raise StoreBusyError("The favorites are already being reloaded")
            self._reloading = True
            try:
                data = self.storage.read() or b""
                result = self.reconciler.parse(data)

                self._tree = result.tree
                self._synced_data = data
                self.last_repairs = list(result.repairs)
                try:
                    if result.needs_save:
                        logger.info(
                            "Normalizing %s after %d repairs",
                            self.storage.path,
                            len(result.repairs),
                        )
                        self.storage.create_backup()
                        self._persist()
                finally:
                    self._notify(StoreEventKind.LOADED)
            finally:
                self._reloading = False

        logger.info("Loaded %d favorites from %s", len(self._tree), self.storage.path)
        return self.last_repairs

    def reload(self) -> List[str]:
        """Reload the favorites file, e.g. after it was edited by hand."""
        return self.load()

    def reload_if_changed(self) -> bool:
        """Reload only when the file differs from what the store last saw.

        Returns:
            True if a reload happened
        """
        with self._lock:
            data = self.storage.read() or b""
            if data == self._synced_data:
                return False
            self.load()
            return True

    # ============== Mutations ==============

    def add(self, *entities: Bookmarkable, group: Optional[Group] = None) -> List[Bookmarkable]:
        """Attach new entities at the top level, or under ``group``.

        Entities already in the tree, and groups that still list children, are
        skipped. A blank label is replaced by the entity's default label. No
        duplicate check is made on resource paths.

        Returns:
            The entities that were added
        """
        with self._lock:
            if group is not None and (not isinstance(group, Group) or group not in self._tree):
                logger.warning("Cannot add to '%s': not a group in the favorites tree", group.label)
                return []

            added = []
            for entity in entities:
                if entity.id in self._tree:
                    logger.warning("Skipping '%s': already in the favorites tree", entity.label)
                    continue
                if isinstance(entity, Group) and entity.child_ids:
                    logger.warning("Skipping group '%s': it already lists children", entity.label)
                    continue
                _ensure_label(entity)
                self._tree.insert(entity, group)
                added.append(entity)

            if added:
                self._commit(StoreEventKind.ADDED, added)
            return added

    def update(self, *entities: Bookmarkable) -> List[Bookmarkable]:
        """Save entities the caller has already changed in place.

        Entities that are not in the tree are ignored. Called without
        arguments it rewrites the favorites file from the current tree.

        Returns:
            The entities that were saved
        """
        with self._lock:
            updated = [entity for entity in entities if entity in self._tree]
            if entities and not updated:
                logger.debug("Ignoring update: no entity is in the favorites tree")
                return []

            for entity in updated:
                _ensure_label(entity)
            self._commit(StoreEventKind.UPDATED, updated)
            return updated

    def rename(self, entity: Bookmarkable, label: str) -> bool:
        """Change an entity's label.

        Returns:
            False if the entity is not in the tree
        """
        if not label or not label.strip():
            raise ValueError("A favorite's label cannot be empty")

        with self._lock:
            if entity not in self._tree:
                logger.warning("Cannot rename '%s': not in the favorites tree", entity.label)
                return False
            entity.label = label
            self._commit(StoreEventKind.UPDATED, [entity])
            return True

    def delete(self, *entities: Bookmarkable) -> List[Bookmarkable]:
        """Remove entities (and, for groups, everything below them).

        Entities that are not in the tree are ignored.

        Returns:
            The entities passed in that were removed
        """
        with self._lock:
            removed = []
            for entity in entities:
                if entity not in self._tree:
                    logger.debug("Ignoring delete of '%s': not in the favorites tree", entity.label)
                    continue
                self._tree.remove(entity)
                removed.append(entity)

            if removed:
                self._commit(StoreEventKind.DELETED, removed)
            return removed

    def move(self, entity: Bookmarkable, group: Optional[Group] = None) -> bool:
        """Move an entity under ``group``, or to the top level when None.

        Moves that would leave the tree inconsistent (target not in the tree,
        already the parent, or the entity itself or one of its descendants)
        are ignored.

        Returns:
            True if the entity moved
        """
        with self._lock:
            if not self._tree.can_move(entity, group):
                target = group.label if group is not None else "the top level"
                logger.warning("Ignoring move of '%s' to %s", entity.label, target)
                return False

            self._tree.move(entity, group)
            self._commit(StoreEventKind.MOVED, [entity])
            return True

    def _commit(self, kind: StoreEventKind, entities: Iterable[Bookmarkable]):
        """Persist the tree, then announce the change even if the write failed."""
        try:
            self._persist()
        finally:
            self._notify(kind, entities)

    def _persist(self):
        data = self.reconciler.serialize(self._tree)
        self.storage.write(data)
        self._synced_data = data

    # ============== Read views ==============

    def all(self) -> List[Bookmarkable]:
        """Top-level entities, sorted for display."""
        with self._lock:
            return sort_bookmarkables(self._tree.roots())

    root = all

    def children(self, group: Optional[Group] = None) -> List[Bookmarkable]:
        """Children of ``group`` (or the top level), sorted for display."""
        with self._lock:
            if group is not None and group not in self._tree:
                return []
            return sort_bookmarkables(self._tree.children(group))

    def favorites(self) -> List[Bookmarkable]:
        """Every file and folder favorite, sorted by label.

        Each one's description is set to the labels of its ancestor groups.
        """
        with self._lock:
            found = []
            for entity, ancestors in self._tree.walk():
                if entity.is_group:
                    continue
                entity.description = _breadcrumb(ancestors)
                found.append(entity)
            return sort_by_label(found)

    def groups(self) -> List[Group]:
        """Every group at any depth, sorted by label, with ancestor descriptions."""
        with self._lock:
            found = []
            for entity, ancestors in self._tree.walk():
                if isinstance(entity, Group):
                    entity.description = _breadcrumb(ancestors)
                    found.append(entity)
            return sort_by_label(found)  # type: ignore[return-value]

    def move_targets(self, entity: Bookmarkable) -> List[Group]:
        """Groups ``entity`` can be moved to."""
        with self._lock:
            return [group for group in self.groups() if self._tree.can_move(entity, group)]

    def get_parent(self, entity: Bookmarkable) -> Optional[Group]:
        with self._lock:
            return self._tree.parent(entity)

    def find(self, entity_id: str) -> Optional[Bookmarkable]:
        with self._lock:
            return self._tree.get(entity_id)

    def __contains__(self, entity: object) -> bool:
        with self._lock:
            return entity in self._tree

    # ============== Restoration point ==============

    def create_restoration_point(self, paths: Iterable[str]):
        self.restoration.create(paths)

    def load_restoration_point(self) -> List[str]:
        return self.restoration.load()


def _breadcrumb(ancestors: Tuple[Group, ...]) -> Optional[str]:
    return "/".join(group.label for group in ancestors) or None


def _ensure_label(entity: Bookmarkable):
    if not entity.label or not entity.label.strip():
        entity.label = entity.default_label()
        logger.info("Defaulted blank label to '%s'", entity.label)
