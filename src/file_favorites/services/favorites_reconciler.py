"""Service to convert between the favorites document and the live tree."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models.bookmarkable import (
    Bookmarkable,
    BookmarkKind,
    FileBookmark,
    FolderBookmark,
    Group,
    new_id,
)
from ..models.tree import BookmarkTree
from .document_storage import FavoritesError

logger = logging.getLogger(__name__)


class FavoritesParseError(FavoritesError):
    """The favorites document is not a readable list of records."""


@dataclass
class ReconciledFavorites:
    """A tree rebuilt from a document, with the corrections made on the way."""

    tree: BookmarkTree = field(default_factory=BookmarkTree)
    repairs: List[str] = field(default_factory=list)

    @property
    def needs_save(self) -> bool:
        """True when the document should be rewritten in the current shape."""
        return bool(self.repairs)


class FavoritesReconciler:
    """Parses and serializes the favorites document.

    The document is a JSON list of records. A record with "children" is a
    group, one with "filter" is a folder favorite, anything else is a file
    favorite. Hand-edited and older documents are repaired while loading.
    """

    # Records written by the first release carry a numeric "kind" and a "uuid"
    LEGACY_GROUP_KIND = 1
    LEGACY_FILE_KIND = 2

    def parse(self, data: bytes) -> ReconciledFavorites:
        """Rebuild the tree from the document's bytes.

        Args:
            data: Raw content of the favorites file

        Returns:
            ReconciledFavorites holding the tree and the repairs made

        Raises:
            FavoritesParseError: If the document as a whole is unreadable
        """
        result = ReconciledFavorites()

        if not data.strip():
            return result

        try:
            document = json.loads(data)
        except ValueError as e:
            raise FavoritesParseError(f"The favorites file is not valid JSON: {e}") from e
        except RecursionError as e:
            raise FavoritesParseError("The favorites file is nested too deeply") from e

        records = self._top_level_records(document, result)
        try:
            for index, record in enumerate(records):
                self._restore(record, None, result, f"[{index}]")
        except RecursionError as e:
            raise FavoritesParseError("The favorites file has too many nested groups") from e

        for repair in result.repairs:
            logger.info("Repaired favorites record %s", repair)
        return result

    def serialize(self, tree: BookmarkTree) -> bytes:
        """Convert the tree into the document's bytes.

        Keys are written in a fixed order so an unchanged tree always
        produces identical bytes.
        """
        document = [self.to_record(entity, tree) for entity in tree.roots()]
        return (json.dumps(document, indent=4, ensure_ascii=False) + "\n").encode("utf-8")

    def to_record(self, entity: Bookmarkable, tree: BookmarkTree) -> Dict[str, Any]:
        """Minimal persisted shape of one entity."""
        if isinstance(entity, Group):
            return {
                "id": entity.id,
                "label": entity.label,
                "children": [self.to_record(child, tree) for child in tree.children(entity)],
            }
        if isinstance(entity, FolderBookmark):
            return {
                "id": entity.id,
                "label": entity.label,
                "resourcePath": entity.resource_path,
                "filter": entity.filter,
            }
        if isinstance(entity, FileBookmark):
            return {
                "id": entity.id,
                "label": entity.label,
                "resourcePath": entity.resource_path,
            }
        raise TypeError(f"Cannot serialize {type(entity).__name__}")

    def _top_level_records(self, document: Any, result: ReconciledFavorites) -> List[Any]:
        if isinstance(document, list):
            return document
        if isinstance(document, dict) and isinstance(document.get("favorites"), list):
            result.repairs.append("(document): unwrapped the 'favorites' list")
            return document["favorites"]
        raise FavoritesParseError(
            "The favorites file must contain a list of favorites, "
            f"found {type(document).__name__}"
        )

    def _restore(
        self,
        record: Any,
        parent: Optional[Group],
        result: ReconciledFavorites,
        where: str,
    ):
        """Rebuild one record and, for groups, its children."""
        if not isinstance(record, dict):
            result.repairs.append(f"{where}: dropped an entry that is not an object")
            return

        kind = self._classify(record, result, where)
        entity_id = self._restore_id(record, result, where)

        if kind is BookmarkKind.GROUP:
            entity: Bookmarkable = Group(id=entity_id)
        elif kind is BookmarkKind.FOLDER:
            entity = FolderBookmark(
                id=entity_id,
                resource_path=self._restore_path(record, result, where),
                filter=self._restore_filter(record, result, where),
            )
        else:
            entity = FileBookmark(
                id=entity_id,
                resource_path=self._restore_path(record, result, where),
            )

        entity.label = self._restore_label(record, entity, result, where)
        result.tree.insert(entity, parent)

        if isinstance(entity, Group):
            children = record.get("children")
            if not isinstance(children, list):
                result.repairs.append(f"{where}: replaced invalid 'children' with an empty list")
                children = []
            for index, child in enumerate(children):
                self._restore(child, entity, result, f"{where}.children[{index}]")

    def _classify(self, record: Dict[str, Any], result: ReconciledFavorites, where: str) -> BookmarkKind:
        legacy_kind = record.get("kind")
        if legacy_kind in (self.LEGACY_GROUP_KIND, self.LEGACY_FILE_KIND) and not isinstance(
            legacy_kind, bool
        ):
            # Legacy files stored an empty "children" list on plain favorites
            result.repairs.append(f"{where}: migrated legacy 'kind' field")
            if legacy_kind == self.LEGACY_GROUP_KIND:
                return BookmarkKind.GROUP
            return BookmarkKind.FILE

        if "children" in record:
            return BookmarkKind.GROUP
        if "filter" in record:
            return BookmarkKind.FOLDER
        return BookmarkKind.FILE

    def _restore_id(self, record: Dict[str, Any], result: ReconciledFavorites, where: str) -> str:
        entity_id = record.get("id")
        if entity_id is None and "uuid" in record:
            entity_id = record.get("uuid")
            result.repairs.append(f"{where}: migrated legacy 'uuid' field")

        if not isinstance(entity_id, str) or not entity_id.strip():
            result.repairs.append(f"{where}: assigned a missing id")
            return new_id()
        if entity_id in result.tree:
            result.repairs.append(f"{where}: replaced duplicate id {entity_id}")
            return new_id()
        return entity_id

    def _restore_label(
        self,
        record: Dict[str, Any],
        entity: Bookmarkable,
        result: ReconciledFavorites,
        where: str,
    ) -> str:
        label = record.get("label")
        if isinstance(label, str) and label.strip():
            return label

        default = entity.default_label()
        result.repairs.append(f"{where}: defaulted missing label to '{default}'")
        return default

    def _restore_path(self, record: Dict[str, Any], result: ReconciledFavorites, where: str) -> str:
        path = record.get("resourcePath")
        if isinstance(path, str):
            return path
        result.repairs.append(f"{where}: replaced missing 'resourcePath' with an empty path")
        return ""

    def _restore_filter(self, record: Dict[str, Any], result: ReconciledFavorites, where: str) -> str:
        pattern = record.get("filter")
        if isinstance(pattern, str) and pattern.strip():
            return pattern
        result.repairs.append(f"{where}: defaulted empty filter to '{FolderBookmark.DEFAULT_FILTER}'")
        return FolderBookmark.DEFAULT_FILTER
