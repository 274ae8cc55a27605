"""Main application window for File Favorites."""

import logging
import subprocess
import sys
from typing import Dict, List, Optional, Set

from PyQt6.QtCore import QFileSystemWatcher, QObject, Qt, QUrl, pyqtSignal
from PyQt6.QtGui import QAction, QDesktopServices
from PyQt6.QtWidgets import (
    QInputDialog,
    QLineEdit,
    QMainWindow,
    QMenu,
    QMessageBox,
    QStatusBar,
    QStyle,
    QTreeWidget,
    QTreeWidgetItem,
)

from ..models.bookmarkable import ActivationResult, Bookmarkable, Group
from ..services.document_storage import FavoritesError
from ..services.favorite_store import FavoriteStore, StoreEvent, StoreEventKind
from .favorite_dialog import TOP_LEVEL_LABEL, FavoriteDialog

logger = logging.getLogger(__name__)

MAX_ERRORS_SHOWN = 10


def open_in_desktop(path: str):
    """Open a local file with the desktop's default application."""
    if not QDesktopServices.openUrl(QUrl.fromLocalFile(path)):
        raise OSError(f"No application available to open {path}")


class StoreSignals(QObject):
    """Relays store events to the GUI thread."""

    changed = pyqtSignal(object)  # StoreEvent


class FavoritesWindow(QMainWindow):
    """Tree of favorites with commands to add, organize and open them."""

    def __init__(self, store: FavoriteStore, opener=open_in_desktop):
        super().__init__()
        self.store = store
        self.opener = opener

        self.signals = StoreSignals()
        self.signals.changed.connect(self.on_store_changed)
        self._unsubscribe = self.store.subscribe(self.signals.changed.emit)

        # Reload when the favorites file is edited outside the application
        self.watcher = QFileSystemWatcher(self)
        self.watcher.fileChanged.connect(self.on_storage_changed)
        self.watcher.directoryChanged.connect(self.on_storage_changed)
        self._watch_storage()

        self.setup_ui()
        self.refresh_tree()

    def setup_ui(self):
        """Set up the user interface."""
        self.setWindowTitle("File Favorites")
        self.setMinimumSize(420, 600)

        self.tree_widget = QTreeWidget()
        self.tree_widget.setHeaderLabels(["Favorite", ""])
        self.tree_widget.setColumnWidth(0, 280)
        self.tree_widget.itemActivated.connect(self.on_item_activated)
        self.tree_widget.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.tree_widget.customContextMenuRequested.connect(self.show_context_menu)
        self.setCentralWidget(self.tree_widget)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self.create_menu_bar()

    def create_menu_bar(self):
        """Create the menu bar."""
        menu_bar = self.menuBar()

        # Favorites menu
        favorites_menu = menu_bar.addMenu("&Favorites")

        add_file_action = QAction("Add &File...", self)
        add_file_action.setShortcut("Ctrl+N")
        add_file_action.triggered.connect(lambda: self.add_favorite(folder=False))
        favorites_menu.addAction(add_file_action)

        add_folder_action = QAction("Add F&older...", self)
        add_folder_action.setShortcut("Ctrl+Shift+N")
        add_folder_action.triggered.connect(lambda: self.add_favorite(folder=True))
        favorites_menu.addAction(add_folder_action)

        create_group_action = QAction("New &Group...", self)
        create_group_action.setShortcut("Ctrl+G")
        create_group_action.triggered.connect(lambda: self.create_group())
        favorites_menu.addAction(create_group_action)

        favorites_menu.addSeparator()

        open_favorite_action = QAction("&Open Favorite...", self)
        open_favorite_action.setShortcut("Ctrl+P")
        open_favorite_action.triggered.connect(self.open_favorite)
        favorites_menu.addAction(open_favorite_action)

        open_group_action = QAction("Open G&roup...", self)
        open_group_action.setShortcut("Ctrl+Shift+P")
        open_group_action.triggered.connect(lambda: self.open_group())
        favorites_menu.addAction(open_group_action)

        favorites_menu.addSeparator()

        edit_action = QAction("&Edit Favorites File", self)
        edit_action.triggered.connect(self.edit_favorites)
        favorites_menu.addAction(edit_action)

        reload_action = QAction("&Reload", self)
        reload_action.setShortcut("F5")
        reload_action.triggered.connect(self.reload_favorites)
        favorites_menu.addAction(reload_action)

        favorites_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut("Alt+F4")
        exit_action.triggered.connect(self.close)
        favorites_menu.addAction(exit_action)

        # Help menu
        help_menu = menu_bar.addMenu("&Help")

        about_action = QAction("&About", self)
        about_action.triggered.connect(self.show_about)
        help_menu.addAction(about_action)

    # ============== Tree ==============

    def refresh_tree(self, select: Optional[Bookmarkable] = None):
        """Rebuild the tree, keeping expanded groups expanded."""
        expanded = self._expanded_ids()
        self.tree_widget.clear()
        self._items: Dict[str, QTreeWidgetItem] = {}

        for entity in self.store.children():
            self.tree_widget.addTopLevelItem(self._build_item(entity, expanded))

        if select is not None and select.id in self._items:
            item = self._items[select.id]
            parent = item.parent()
            while parent is not None:
                parent.setExpanded(True)
                parent = parent.parent()
            self.tree_widget.setCurrentItem(item)
            self.tree_widget.scrollToItem(item)

        self.update_status_bar()

    def _build_item(self, entity: Bookmarkable, expanded: Set[str]) -> QTreeWidgetItem:
        display = entity.to_display_item(self.store.tree)

        item = QTreeWidgetItem([display.label, display.description or ""])
        item.setData(0, Qt.ItemDataRole.UserRole, display.target_id)
        item.setIcon(0, self._icon(display.icon))
        if display.tooltip:
            item.setToolTip(0, display.tooltip)
        self._items[display.target_id] = item

        if isinstance(entity, Group):
            for child in self.store.children(entity):
                item.addChild(self._build_item(child, expanded))
            item.setExpanded(entity.id in expanded)
        return item

    def _icon(self, name: str):
        pixmaps = {
            "folder": QStyle.StandardPixmap.SP_DirIcon,
            "files": QStyle.StandardPixmap.SP_DirLinkIcon,
            "file": QStyle.StandardPixmap.SP_FileIcon,
        }
        return self.style().standardIcon(pixmaps.get(name, QStyle.StandardPixmap.SP_FileIcon))

    def _expanded_ids(self) -> Set[str]:
        items = getattr(self, "_items", {})
        return {entity_id for entity_id, item in items.items() if item.isExpanded()}

    def selected_entity(self) -> Optional[Bookmarkable]:
        item = self.tree_widget.currentItem()
        return self._entity_for(item) if item is not None else None

    def _entity_for(self, item: QTreeWidgetItem) -> Optional[Bookmarkable]:
        return self.store.find(item.data(0, Qt.ItemDataRole.UserRole))

    def update_status_bar(self):
        """Update the status bar with current stats."""
        favorites = len(self.store.favorites())
        groups = len(self.store.groups())
        self.status_bar.showMessage(f"{favorites} favorites in {groups} groups")

    def on_store_changed(self, event: StoreEvent):
        """Refresh the tree after any store change, revealing new entries."""
        select = None
        if event.kind in (StoreEventKind.ADDED, StoreEventKind.MOVED, StoreEventKind.UPDATED):
            select = event.entities[-1] if event.entities else None
        self.refresh_tree(select)

    def show_context_menu(self, position):
        """Show the context menu for a favorite, or for the empty area."""
        item = self.tree_widget.itemAt(position)
        entity = self._entity_for(item) if item is not None else None
        menu = QMenu(self)

        if entity is None:
            menu.addAction("New Group...", lambda: self.create_group())
            menu.addAction("Add File...", lambda: self.add_favorite(folder=False))
            menu.addAction("Add Folder...", lambda: self.add_favorite(folder=True))
        else:
            context = entity.to_display_item(self.store.tree).context
            if context == "group":
                menu.addAction("Open Group", lambda: self.activate(entity))
                menu.addAction("Open in New Window", lambda: self.open_in_new_window(entity))
            elif context in ("file", "folder"):
                menu.addAction("Open", lambda: self.activate(entity))
                if context == "folder":
                    menu.addAction("Open in New Window", lambda: self.open_in_new_window(entity))

            if isinstance(entity, Group):
                menu.addSeparator()
                menu.addAction("New Group Here...", lambda: self.create_group(entity))
                menu.addAction("Add File Here...", lambda: self.add_favorite(False, entity))
                menu.addAction("Add Folder Here...", lambda: self.add_favorite(True, entity))

            menu.addSeparator()
            menu.addAction("Rename...", lambda: self.rename_favorite(entity))
            menu.addAction("Move to Group...", lambda: self.move_favorite(entity))
            menu.addAction("Remove", lambda: self.remove_favorite(entity))

        menu.exec(self.tree_widget.viewport().mapToGlobal(position))

    # ============== Commands ==============

    def add_favorite(self, folder: bool, group: Optional[Group] = None):
        """Collect a new file or folder favorite from the user and store it."""
        dialog = FavoriteDialog(folder, self.store.groups(), group=group, parent=self)
        if not dialog.exec():
            return

        bookmark = dialog.create_bookmark()
        self._run_store_command(lambda: self.store.add(bookmark, group=dialog.selected_group()))

    def create_group(self, parent: Optional[Group] = None):
        """Add a new group at the top level or under ``parent``."""
        label, ok = QInputDialog.getText(
            self, "New Group", "New favorite group name:", QLineEdit.EchoMode.Normal, Group.DEFAULT_LABEL
        )
        if not ok or not label.strip():
            return

        group = Group(label=label.strip())
        self._run_store_command(lambda: self.store.add(group, group=parent))

    def rename_favorite(self, entity: Bookmarkable):
        label, ok = QInputDialog.getText(
            self, "Rename", "Rename to:", QLineEdit.EchoMode.Normal, entity.label
        )
        if ok and label.strip():
            self._run_store_command(lambda: self.store.rename(entity, label.strip()))

    def move_favorite(self, entity: Bookmarkable):
        """Prompt for a group to move the favorite to."""
        targets: List[Optional[Group]] = list(self.store.move_targets(entity))
        if self.store.get_parent(entity) is not None:
            targets.insert(0, None)

        if not targets:
            QMessageBox.warning(
                self, "No Groups", "No favorite groups found, please define a group first."
            )
            return

        choices = [self._group_choice(group) for group in targets]
        choice, ok = QInputDialog.getItem(self, "Move to Group", "Move to:", choices, 0, False)
        if ok:
            target = targets[choices.index(choice)]
            self._run_store_command(lambda: self.store.move(entity, target))

    def remove_favorite(self, entity: Bookmarkable):
        reply = QMessageBox.question(
            self,
            "Remove Favorite",
            f"Remove '{entity.label}' from your favorites?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        if reply == QMessageBox.StandardButton.Yes:
            self._run_store_command(lambda: self.store.delete(entity))

    def open_favorite(self):
        """Let the user pick any favorite and open it."""
        favorites = self.store.favorites()
        if not favorites:
            QMessageBox.information(self, "No Favorites", "You have no favorites yet.")
            return

        choices = []
        for favorite in favorites:
            text = favorite.label
            if favorite.description:
                text += f"  ({favorite.description})"
            if favorite.detail:
                text += f"  {favorite.detail}"
            choices.append(text)

        choice, ok = QInputDialog.getItem(self, "Open Favorite", "Favorite:", choices, 0, False)
        if ok:
            self.activate(favorites[choices.index(choice)])

    def open_group(self, group: Optional[Group] = None):
        """Open every favorite of a group, prompting for the group if needed."""
        if group is None:
            groups = self.store.groups()
            if not groups:
                QMessageBox.warning(
                    self, "No Groups", "No favorite groups found, please define a group first."
                )
                return
            choices = [self._group_choice(g) for g in groups]
            choice, ok = QInputDialog.getItem(self, "Open Group", "Group:", choices, 0, False)
            if not ok:
                return
            group = groups[choices.index(choice)]

        self.activate(group)

    def activate(self, entity: Bookmarkable):
        """Open a favorite, or every favorite below a group."""
        result = entity.activate(self.opener, self.store.tree)
        self.report_activation(result)

    def open_paths(self, paths: List[str]):
        """Open paths saved in a restoration point."""
        result = ActivationResult()
        for path in paths:
            try:
                self.opener(path)
            except OSError as e:
                result.errors.append(f"Could not reopen {path}: {e}")
            else:
                result.opened.append(path)
        self.report_activation(result)

    def open_in_new_window(self, entity: Bookmarkable):
        """Start another window that reopens this favorite's files."""
        paths = entity.location(self.store.tree)
        try:
            self.store.create_restoration_point(paths)
            subprocess.Popen([sys.executable, "-m", "file_favorites.gui"], close_fds=True)
        except (FavoritesError, OSError) as e:
            QMessageBox.critical(self, "Open in New Window", f"Could not open a new window:\n{e}")

    def report_activation(self, result: ActivationResult):
        if result.opened:
            self.status_bar.showMessage(f"Opened {len(result.opened)} files", 5000)
        if result.errors:
            lines = result.errors[:MAX_ERRORS_SHOWN]
            if len(result.errors) > MAX_ERRORS_SHOWN:
                lines.append(f"... and {len(result.errors) - MAX_ERRORS_SHOWN} more")
            QMessageBox.warning(self, "Some Favorites Could Not Be Opened", "\n".join(lines))

    def edit_favorites(self):
        """Open the favorites file in the default editor."""
        if not self.store.storage.exists():
            self._run_store_command(lambda: self.store.update())
        QDesktopServices.openUrl(QUrl.fromLocalFile(str(self.store.storage_path)))
        self._watch_storage()
        QMessageBox.warning(
            self, "Edit Favorites", "Please be careful when manually editing your favorites."
        )

    def reload_favorites(self):
        """Reload the favorites file, reporting errors and repairs."""
        try:
            repairs = self.store.reload()
        except FavoritesError as e:
            self.show_store_error("Could not reload favorites", e)
            return

        if repairs:
            self.status_bar.showMessage(
                f"Favorites file repaired ({len(repairs)} fixes); a backup was kept", 10000
            )

    def on_storage_changed(self, path: str):
        """Handle an external change to the favorites file."""
        self._watch_storage()
        try:
            self.store.reload_if_changed()
        except FavoritesError as e:
            self.show_store_error("Could not reload favorites", e)

    def show_store_error(self, title: str, error: Exception):
        logger.error("%s: %s", title, error)
        QMessageBox.critical(self, title, str(error))

    def show_about(self):
        """Show about dialog."""
        QMessageBox.about(
            self,
            "About File Favorites",
            "File Favorites v0.1\n\n"
            "Bookmark files and folders and organize them in groups.\n\n"
            f"Favorites are stored in:\n{self.store.storage_path}",
        )

    def closeEvent(self, event):
        self._unsubscribe()
        super().closeEvent(event)

    def _run_store_command(self, command):
        """Run a store mutation, reporting write failures."""
        try:
            command()
        except FavoritesError as e:
            self.show_store_error("Could not save favorites", e)
            self.refresh_tree()

    def _group_choice(self, group: Optional[Group]) -> str:
        if group is None:
            return TOP_LEVEL_LABEL
        return f"{group.description}/{group.label}" if group.description else group.label

    def _watch_storage(self):
        # Atomic saves replace the file, which drops it from the watcher
        path = str(self.store.storage_path)
        directory = str(self.store.storage_path.parent)
        if self.store.storage.exists() and path not in self.watcher.files():
            self.watcher.addPath(path)
        if self.store.storage_path.parent.exists() and directory not in self.watcher.directories():
            self.watcher.addPath(directory)
